"""Error context window and best-effort repair suggestions.

Everything here is plain pattern matching over literal text. The suggestion
table is not grammar-aware and can disagree with the validator's real
failure cause; it only ever returns a hint string or ``None``.

Columns and ``error_char`` index Python code points (1-based).
"""

import difflib
import re
from typing import Callable, Optional, Sequence

from jsonlens.core import constants as app_constants
from jsonlens.core.json_models import ErrorContext


JSON_LITERALS = ("true", "false", "null")

_MEMBER_STRING_RE = re.compile(r'^"[^"]+"\s*:\s*"[^"]*"$')
_STANDALONE_STRING_RE = re.compile(r'^"[^"]*"$')
_UNQUOTED_KEY_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$-]*\s*:")
_SINGLE_QUOTED_RE = re.compile(r"(^|[\s:\[{,])'[^']*'")
_BAREWORD_MEMBER_RE = re.compile(
    r'^(?P<head>\s*"[^"]+"\s*:\s*)(?P<token>[A-Za-z_][A-Za-z0-9_]*)(?P<tail>\s*,?\s*)$'
)


def expected_closer_before_position(lines: Sequence[str], line_index: int, col_index: int) -> Optional[str]:
    """Return the closer the open-bracket stack expects at a 0-based position."""
    stack = []
    in_string = False
    escape = False
    last = min(max(int(line_index), 0), len(lines) - 1) if lines else -1
    for ln in range(0, last + 1):
        raw = str(lines[ln] or "")
        limit = max(int(col_index), 0) if ln == last else len(raw)
        for ch in raw[:limit]:
            if escape:
                escape = False
                continue
            if in_string:
                if ch == "\\":
                    escape = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch in "{[":
                stack.append(ch)
            elif ch in "}]":
                if stack and ((stack[-1] == "{" and ch == "}") or (stack[-1] == "[" and ch == "]")):
                    stack.pop()
                # Mismatched closers leave the stack intact so the active
                # container still decides what is expected.
        # Strings never span lines in JSON; reset so one bad line cannot
        # poison the rest of the scan.
        in_string = False
        escape = False
    if not stack:
        return None
    return "}" if stack[-1] == "{" else "]"


def suggest_json_literal_from_token(token) -> Optional[str]:
    token_l = str(token or "").strip().lower()
    if not token_l:
        return None
    if token_l in JSON_LITERALS:
        return token_l
    # Direct close-match typo recovery (e.g. "flase" -> "false").
    close = difflib.get_close_matches(token_l, JSON_LITERALS, n=1, cutoff=0.62)
    if close:
        return close[0]
    # Missing-leading-char style typo (e.g. "rue" -> "true").
    for lit in JSON_LITERALS:
        if lit.endswith(token_l) and (len(lit) - len(token_l)) <= 2:
            return lit
    return None


def _first_non_blank_col(raw: str) -> Optional[int]:
    for idx, ch in enumerate(raw):
        if not ch.isspace():
            return idx
    return None


def _rule_mismatched_closer(lines, index, trimmed, error_char):
    raw = lines[index]
    col = _first_non_blank_col(raw)
    if col is None or raw[col] not in "}]":
        return None
    expected = expected_closer_before_position(lines, index, col)
    if not expected or expected == raw[col]:
        return None
    kind = "object" if expected == "}" else "array"
    return f"Expected `{expected}` here to close the open {kind}, found `{raw[col]}`."


def _rule_literal_typo(lines, index, trimmed, error_char):
    match = _BAREWORD_MEMBER_RE.match(lines[index].rstrip())
    if not match:
        return None
    token = match.group("token")
    suggested = suggest_json_literal_from_token(token)
    if not suggested:
        return f"`{token}` is not a JSON value; quote it if it is meant to be a string."
    if token == suggested:
        return None
    return f"Did you mean `{suggested}`? JSON literals are lowercase true, false and null."


def _rule_unquoted_key(lines, index, trimmed, error_char):
    if _UNQUOTED_KEY_RE.match(trimmed):
        return "Property names must be enclosed in double quotes."
    return None


def _rule_single_quotes(lines, index, trimmed, error_char):
    if _SINGLE_QUOTED_RE.search(trimmed):
        return "JSON strings must use double quotes, not single quotes."
    return None


def _rule_member_without_comma(lines, index, trimmed, error_char):
    if _MEMBER_STRING_RE.match(trimmed):
        return "Object members need a trailing comma (except the last one)."
    return None


def _rule_standalone_string(lines, index, trimmed, error_char):
    if _STANDALONE_STRING_RE.match(trimmed):
        return "This string value may be missing a trailing comma."
    return None


def _rule_quote_at_line_end(lines, index, trimmed, error_char):
    if trimmed.endswith('"'):
        return "Likely missing a comma after the closing quote."
    return None


def _rule_closer_at_column(lines, index, trimmed, error_char):
    if error_char in ("}", "]"):
        return "Check for a missing or extra comma before this bracket."
    return None


SuggestionRule = Callable[[Sequence[str], int, str, Optional[str]], Optional[str]]

# Ordered: first match wins.
SUGGESTION_RULES: tuple[tuple[str, SuggestionRule], ...] = (
    ("mismatched_closer", _rule_mismatched_closer),
    ("literal_typo", _rule_literal_typo),
    ("unquoted_key", _rule_unquoted_key),
    ("single_quotes", _rule_single_quotes),
    ("member_without_comma", _rule_member_without_comma),
    ("standalone_string", _rule_standalone_string),
    ("quote_at_line_end", _rule_quote_at_line_end),
    ("closer_at_column", _rule_closer_at_column),
)


def suggest_fix(lines: Sequence[str], index: int, error_char: Optional[str] = None) -> Optional[str]:
    """Run the suggestion table against a 0-based line index."""
    if not lines or index < 0 or index >= len(lines):
        return None
    trimmed = str(lines[index] or "").strip()
    for _name, rule in SUGGESTION_RULES:
        hint = rule(lines, index, trimmed, error_char)
        if hint:
            return hint
    return None


def extract_context(
    text: str,
    line: Optional[int] = None,
    column: Optional[int] = None,
    context_lines: int = app_constants.ERROR_CONTEXT_LINES_DEFAULT,
) -> Optional[ErrorContext]:
    """Slice a window of lines around a 1-based ``line``.

    Returns ``None`` when ``line`` is missing or outside the text.
    """
    if not line:
        return None
    lines = str(text or "").split("\n")
    index = int(line) - 1
    if index < 0 or index >= len(lines):
        return None

    span = max(int(context_lines or 0), 0)
    start = max(0, index - span)
    end = min(len(lines) - 1, index + span)
    error_line = lines[index]

    error_char = None
    if column and 0 < int(column) <= len(error_line):
        error_char = error_line[int(column) - 1]

    return ErrorContext(
        before_lines=tuple(lines[start:index]),
        error_line=error_line,
        after_lines=tuple(lines[index + 1 : end + 1]),
        error_char=error_char,
        suggestion=suggest_fix(lines, index, error_char),
    )
