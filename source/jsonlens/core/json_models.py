"""Value types shared by the metrics, diagnostic and highlight cores.

All types are immutable and owned by whoever asked for them; nothing here
holds back-references or shared state. The collaborator result types mirror
the validator's tagged wire format (``{"type": "Success" | "Error", ...}``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Union

from jsonlens.core import constants as app_constants


@dataclass(frozen=True, slots=True)
class JsonMetrics:
    """Size and structure counts for a text snapshot.

    ``chars`` counts Python code points (an astral character counts once,
    not twice as in UTF-16 hosts). ``bytes`` is the UTF-8 length.
    """

    lines: int = 0
    chars: int = 0
    bytes: int = 0
    depth: int = 0
    objects: int = 0
    arrays: int = 0
    keys: int = 0
    processing_time_ms: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        payload = {
            "lines": self.lines,
            "chars": self.chars,
            "bytes": self.bytes,
            "depth": self.depth,
            "objects": self.objects,
            "arrays": self.arrays,
            "keys": self.keys,
        }
        if self.processing_time_ms is not None:
            payload["processing_time_ms"] = self.processing_time_ms
        return payload


EMPTY_METRICS = JsonMetrics()


@dataclass(frozen=True, slots=True)
class ErrorLocation:
    """1-based line and optional 1-based column reported by the validator."""

    line: int
    column: Optional[int] = None


@dataclass(frozen=True, slots=True)
class ErrorContext:
    before_lines: tuple[str, ...]
    error_line: str
    after_lines: tuple[str, ...]
    error_char: Optional[str] = None
    suggestion: Optional[str] = None


@dataclass(frozen=True, slots=True)
class HighlightRegion:
    top_offset_px: float
    height_px: float


IndentWidth = Literal[2, 4]


@dataclass(frozen=True, slots=True)
class FormattingOptions:
    """Formatter options passed through to the collaborator verbatim."""

    indent_width: IndentWidth = app_constants.FORMAT_INDENT_DEFAULT
    trailing_newline: bool = app_constants.FORMAT_TRAILING_NEWLINE_DEFAULT

    def to_wire(self) -> dict[str, Any]:
        return {"indent": int(self.indent_width), "trailing_newline": bool(self.trailing_newline)}

    @classmethod
    def from_wire(cls, payload: Any) -> "FormattingOptions":
        data = payload if isinstance(payload, dict) else {}
        indent = data.get("indent", data.get("indent_width"))
        if indent not in app_constants.FORMAT_INDENT_CHOICES or isinstance(indent, bool):
            indent = app_constants.FORMAT_INDENT_DEFAULT
        trailing = data.get("trailing_newline")
        if not isinstance(trailing, bool):
            trailing = app_constants.FORMAT_TRAILING_NEWLINE_DEFAULT
        return cls(indent_width=int(indent), trailing_newline=trailing)


@dataclass(frozen=True, slots=True)
class ValidationSuccess:
    data: Any
    size_bytes: int
    processing_time_ms: Optional[float] = None
    kind: str = field(default="Success", init=False)


@dataclass(frozen=True, slots=True)
class ValidationFailure:
    message: str
    line: Optional[int] = None
    column: Optional[int] = None
    # Optional enum-tagged reason; preferred over message text when present.
    reason: Optional[str] = None
    processing_time_ms: Optional[float] = None
    kind: str = field(default="Error", init=False)

    @property
    def location(self) -> Optional[ErrorLocation]:
        if not self.line:
            return None
        return ErrorLocation(line=self.line, column=self.column or None)


@dataclass(frozen=True, slots=True)
class FormattingSuccess:
    formatted: str
    size_bytes: int
    processing_time_ms: Optional[float] = None
    kind: str = field(default="Success", init=False)


@dataclass(frozen=True, slots=True)
class FormattingFailure:
    message: str
    processing_time_ms: Optional[float] = None
    kind: str = field(default="Error", init=False)


ValidationResult = Union[ValidationSuccess, ValidationFailure]
FormattingResult = Union[FormattingSuccess, FormattingFailure]


def _opt_positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _opt_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _size(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def parse_validation_response(payload: Any) -> ValidationResult:
    """Convert a validator wire response into a result value.

    Anything that is not a recognizable ``Success`` payload becomes a
    failure so the UI always has something to show.
    """
    if not isinstance(payload, dict):
        return ValidationFailure(message=f"Malformed validator response: {payload!r}")
    kind = str(payload.get("type", payload.get("kind", ""))).strip()
    elapsed = _opt_float(payload.get("processing_time_ms", payload.get("processingTimeMs")))
    if kind == "Success":
        return ValidationSuccess(
            data=payload.get("data"),
            size_bytes=_size(payload.get("size", payload.get("size_bytes"))),
            processing_time_ms=elapsed,
        )
    reason = payload.get("reason")
    return ValidationFailure(
        message=str(payload.get("message") or "Unknown validation error"),
        line=_opt_positive_int(payload.get("line")),
        column=_opt_positive_int(payload.get("column")),
        reason=str(reason) if reason else None,
        processing_time_ms=elapsed,
    )


def parse_formatting_response(payload: Any) -> FormattingResult:
    if not isinstance(payload, dict):
        return FormattingFailure(message=f"Malformed formatter response: {payload!r}")
    kind = str(payload.get("type", payload.get("kind", ""))).strip()
    elapsed = _opt_float(payload.get("processing_time_ms", payload.get("processingTimeMs")))
    if kind == "Success" and isinstance(payload.get("formatted"), str):
        return FormattingSuccess(
            formatted=payload["formatted"],
            size_bytes=_size(payload.get("size", payload.get("size_bytes"))),
            processing_time_ms=elapsed,
        )
    return FormattingFailure(
        message=str(payload.get("message") or "Unknown formatting error"),
        processing_time_ms=elapsed,
    )


def is_success(result: Any) -> bool:
    return getattr(result, "kind", "") == "Success"
