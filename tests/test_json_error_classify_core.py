import pytest

from jsonlens.core.json_error_classify_core import (
    ErrorCategory,
    category_from_reason,
    category_label,
    classify,
    format_error_message,
)


@pytest.mark.parametrize(
    "message, expected",
    [
        ("Unexpected end of input", ErrorCategory.UNEXPECTED_EOF),
        ("EOF while parsing an object", ErrorCategory.UNEXPECTED_EOF),
        ("Expecting ',' delimiter", ErrorCategory.COMMA_ERROR),
        ("missing closing brace", ErrorCategory.BRACKET_MISMATCH),
        ("Unterminated string starting at", ErrorCategory.QUOTE_MISMATCH),
        ("Expecting property name", ErrorCategory.KEY_ERROR),
        ("Expecting value", ErrorCategory.VALUE_ERROR),
        ("意外的结束", ErrorCategory.UNEXPECTED_EOF),
        ("totally unknown", ErrorCategory.SYNTAX_ERROR_GENERIC),
        ("", ErrorCategory.SYNTAX_ERROR_GENERIC),
    ],
)
def test_keyword_classification(message, expected):
    assert classify(message) is expected


def test_priority_prefers_eof_over_comma():
    assert classify("unexpected end of input, expecting comma") is ErrorCategory.UNEXPECTED_EOF


def test_reason_overrides_message():
    assert classify("Expecting value", reason="missing_comma") is ErrorCategory.COMMA_ERROR
    assert classify("Expecting value", reason="CommaError") is ErrorCategory.COMMA_ERROR
    assert classify("Expecting value", reason="bogus") is ErrorCategory.VALUE_ERROR


def test_category_from_reason_blank():
    assert category_from_reason(None) is None
    assert category_from_reason("  ") is None


def test_categories_compare_as_strings():
    assert ErrorCategory.COMMA_ERROR == "CommaError"
    assert category_label(ErrorCategory.SYNTAX_ERROR_GENERIC) == "Syntax error"
    assert category_label(ErrorCategory.UNEXPECTED_EOF) == "Unexpected end of input"


def test_format_error_message_strips_decoder_position():
    msg = format_error_message("Expecting value: line 1 column 5 (char 4)", 1, 5)
    assert msg == "Expecting value (line 1, column 5)"


def test_format_error_message_line_only():
    assert format_error_message("Bad thing at line 3 column 2", 3) == "Bad thing (line 3)"
    assert format_error_message("Plain", None, None) == "Plain"
