"""Coarse error categories from validator message text.

Classification is coupled to the validator's wording. When the wording
changes, messages fall through to ``SYNTAX_ERROR_GENERIC`` instead of
failing. A structured ``reason`` code, when the collaborator sends one, wins
over substring matching.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    UNEXPECTED_EOF = "UnexpectedEof"
    COMMA_ERROR = "CommaError"
    BRACKET_MISMATCH = "BracketMismatch"
    QUOTE_MISMATCH = "QuoteMismatch"
    KEY_ERROR = "KeyError"
    VALUE_ERROR = "ValueError"
    SYNTAX_ERROR_GENERIC = "SyntaxErrorGeneric"


# Priority order matters: EOF, comma, bracket, quote, key, value.
# Keywords cover Python json, serde-style and localized validator wording.
CATEGORY_KEYWORDS: tuple[tuple[ErrorCategory, tuple[str, ...]], ...] = (
    (ErrorCategory.UNEXPECTED_EOF, ("eof", "unexpected end", "end of input", "end of data", "结束")),
    (ErrorCategory.COMMA_ERROR, ("comma", "',' delimiter", "逗号")),
    (ErrorCategory.BRACKET_MISMATCH, ("bracket", "brace", "expecting '}'", "expecting ']'", "括号")),
    (ErrorCategory.QUOTE_MISMATCH, ("quote", "unterminated string", "引号")),
    (ErrorCategory.KEY_ERROR, ("key", "property name", "键")),
    (ErrorCategory.VALUE_ERROR, ("value", "literal", "值")),
)

CATEGORY_LABELS = {
    ErrorCategory.UNEXPECTED_EOF: "Unexpected end of input",
    ErrorCategory.COMMA_ERROR: "Comma error",
    ErrorCategory.BRACKET_MISMATCH: "Bracket mismatch",
    ErrorCategory.QUOTE_MISMATCH: "Quote mismatch",
    ErrorCategory.KEY_ERROR: "Object key error",
    ErrorCategory.VALUE_ERROR: "Value format error",
    ErrorCategory.SYNTAX_ERROR_GENERIC: "Syntax error",
}

# Structured reason codes accepted from the collaborator.
REASON_CATEGORIES = {
    "eof": ErrorCategory.UNEXPECTED_EOF,
    "unexpected_eof": ErrorCategory.UNEXPECTED_EOF,
    "comma": ErrorCategory.COMMA_ERROR,
    "missing_comma": ErrorCategory.COMMA_ERROR,
    "trailing_comma": ErrorCategory.COMMA_ERROR,
    "bracket": ErrorCategory.BRACKET_MISMATCH,
    "bracket_mismatch": ErrorCategory.BRACKET_MISMATCH,
    "quote": ErrorCategory.QUOTE_MISMATCH,
    "unterminated_string": ErrorCategory.QUOTE_MISMATCH,
    "key": ErrorCategory.KEY_ERROR,
    "invalid_key": ErrorCategory.KEY_ERROR,
    "value": ErrorCategory.VALUE_ERROR,
    "invalid_value": ErrorCategory.VALUE_ERROR,
    "syntax": ErrorCategory.SYNTAX_ERROR_GENERIC,
}

_POSITION_PATTERNS = (
    re.compile(r":?\s*line \d+ column \d+ \(char \d+\)", re.IGNORECASE),
    re.compile(r"\s*at line \d+ column \d+", re.IGNORECASE),
)


def category_from_reason(reason: Optional[str]) -> Optional[ErrorCategory]:
    key = str(reason or "").strip().lower()
    if not key:
        return None
    if key in REASON_CATEGORIES:
        return REASON_CATEGORIES[key]
    for category in ErrorCategory:
        if category.value.lower() == key:
            return category
    return None


def classify(message: str, reason: Optional[str] = None) -> ErrorCategory:
    """Map a validator message (and optional reason code) to a category."""
    structured = category_from_reason(reason)
    if structured is not None:
        return structured
    text = str(message or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(word in text for word in keywords):
            return category
    return ErrorCategory.SYNTAX_ERROR_GENERIC


def category_label(category: ErrorCategory) -> str:
    return CATEGORY_LABELS.get(category, CATEGORY_LABELS[ErrorCategory.SYNTAX_ERROR_GENERIC])


def format_error_message(message: str, line: Optional[int] = None, column: Optional[int] = None) -> str:
    """Strip embedded position text and append a uniform location suffix."""
    formatted = str(message or "")
    for pattern in _POSITION_PATTERNS:
        formatted = pattern.sub("", formatted)
    formatted = formatted.strip()
    if line:
        suffix = f"line {int(line)}"
        if column:
            suffix += f", column {int(column)}"
        formatted = f"{formatted} ({suffix})" if formatted else f"({suffix})"
    return formatted
