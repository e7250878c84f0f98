"""In-process reference validator collaborator.

Answers the ``validate_json``/``format_json``/``minify_json`` commands with
the same tagged dict payloads a remote validator sends, using the standard
library ``json`` decoder. Hosts with their own validator pass a different
``invoke`` callable to ``JsonValidationService``.
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable

from jsonlens.core import constants as app_constants
from jsonlens.core.exceptions import BackendError
from jsonlens.core.json_metrics_core import utf8_size
from jsonlens.core.json_models import FormattingOptions

# Decoder wording -> (reason code, friendly message).
_REASONS = (
    ("Illegal trailing comma", "trailing_comma", "Trailing comma in JSON"),
    ("Expecting ',' delimiter", "missing_comma", "Missing comma separator"),
    ("Expecting ':' delimiter", "syntax", "Missing ':' after property name"),
    ("Expecting property name", "invalid_key", "Object keys must be strings in double quotes"),
    ("Unterminated string", "unterminated_string", "Unterminated string; check for a missing quote"),
    ("Invalid control character", "syntax", "Invalid control character in string"),
    ("Invalid \\escape", "syntax", "Invalid escape sequence"),
    ("Extra data", "syntax", "Unexpected data after the JSON value"),
)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000.0, 3)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Invalid literal {token}")


def _is_eof_error(exc: json.JSONDecodeError) -> bool:
    # The decoder reports truncated input at the end position.
    return exc.pos >= len(exc.doc.rstrip())


def describe_decode_error(exc: json.JSONDecodeError) -> tuple[str, str]:
    """Return (reason, message) for a decoder error."""
    raw = str(exc.msg or "")
    if _is_eof_error(exc) and not raw.startswith("Extra data"):
        return "unexpected_eof", "Unexpected end of input; the JSON structure may be missing a bracket"
    for needle, reason, friendly in _REASONS:
        if raw.startswith(needle):
            return reason, friendly
    if raw.startswith("Expecting value"):
        return "invalid_value", "Missing value or incomplete string"
    return "syntax", f"JSON parse error: {raw}"


def _parse(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def _error(message: str, **extra: Any) -> dict:
    payload = {"type": "Error", "message": message}
    payload.update(extra)
    return payload


def _precheck(text: Any) -> dict | None:
    if not isinstance(text, str):
        return _error("Input must be a string")
    size = utf8_size(text)
    if size > app_constants.VALIDATOR_MAX_INPUT_BYTES:
        limit_mb = app_constants.VALIDATOR_MAX_INPUT_BYTES / (1024 * 1024)
        return _error(f"Input size ({size / (1024 * 1024):.2f} MB) exceeds the {limit_mb:.0f} MB limit")
    if not text.strip():
        return _error("Input is empty; provide some JSON")
    return None


def validate_json(text: str) -> dict:
    started = time.perf_counter()
    problem = _precheck(text)
    if problem is not None:
        problem.update({"line": None, "column": None})
        return problem
    try:
        data = _parse(text)
    except json.JSONDecodeError as exc:
        reason, message = describe_decode_error(exc)
        return _error(
            message,
            line=exc.lineno,
            column=exc.colno,
            reason=reason,
            processing_time_ms=_elapsed_ms(started),
        )
    except (ValueError, RecursionError) as exc:
        return _error(str(exc), line=None, column=None, reason="invalid_value")
    return {
        "type": "Success",
        "data": data,
        "size": utf8_size(text),
        "processing_time_ms": _elapsed_ms(started),
    }


def _render(text: str, dump: Callable[[Any], str]) -> dict:
    started = time.perf_counter()
    problem = _precheck(text)
    if problem is not None:
        return problem
    try:
        data = _parse(text)
    except json.JSONDecodeError as exc:
        _reason, message = describe_decode_error(exc)
        return _error(f"{message} (line {exc.lineno}, column {exc.colno})")
    except (ValueError, RecursionError) as exc:
        return _error(str(exc))
    formatted = dump(data)
    return {
        "type": "Success",
        "formatted": formatted,
        "size": utf8_size(formatted),
        "processing_time_ms": _elapsed_ms(started),
    }


def format_json(text: str, options: Any = None) -> dict:
    opts = options if isinstance(options, FormattingOptions) else FormattingOptions.from_wire(options)
    raw_indent = options.get("indent", opts.indent_width) if isinstance(options, dict) else opts.indent_width
    if raw_indent not in app_constants.FORMAT_INDENT_CHOICES:
        return _error(f"Unsupported indent {raw_indent!r}; use 2 or 4")

    def dump(data: Any) -> str:
        out = json.dumps(data, indent=opts.indent_width, ensure_ascii=False)
        return out + "\n" if opts.trailing_newline else out

    return _render(text, dump)


def minify_json(text: str) -> dict:
    return _render(text, lambda data: json.dumps(data, separators=(",", ":"), ensure_ascii=False))


def local_invoke(command: str, payload: dict) -> dict:
    """Dispatch a collaborator command; unknown commands raise ``BackendError``."""
    data = payload if isinstance(payload, dict) else {}
    match command:
        case "validate_json":
            return validate_json(data.get("input"))
        case "format_json":
            return format_json(data.get("input"), data.get("options"))
        case "minify_json":
            return minify_json(data.get("input"))
        case _:
            raise BackendError(f"Unknown command: {command}")
