"""Diagnostic panel composition and the debounced editor refresh loop."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from jsonlens.core import constants as app_constants
from jsonlens.core.json_error_classify_core import (
    ErrorCategory,
    category_label,
    classify,
    format_error_message,
)
from jsonlens.core.json_error_context_core import extract_context
from jsonlens.core.json_error_highlight_core import compute_highlight
from jsonlens.core.json_metrics_core import compute_metrics, with_processing_time
from jsonlens.core.json_models import (
    ErrorContext,
    ErrorLocation,
    FormattingResult,
    HighlightRegion,
    JsonMetrics,
    ValidationFailure,
    ValidationResult,
    is_success,
)
from jsonlens.core.preferences import DEFAULT_PREFERENCES, AppPreferences
from jsonlens.services.debounce_service import Debouncer
from jsonlens.services.json_error_diag_service import log_json_error
from jsonlens.services.json_service import JsonValidationService
from jsonlens.services.operation_log_service import (
    OperationLogger,
    OperationResult,
    OperationType,
)

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class JsonDiagnostic:
    message: str
    display_message: str
    category: ErrorCategory
    label: str
    location: Optional[ErrorLocation] = None
    context: Optional[ErrorContext] = None
    highlight: Optional[HighlightRegion] = None


def build_diagnostic(
    text: str,
    failure: ValidationFailure,
    context_lines: int = app_constants.ERROR_CONTEXT_LINES_DEFAULT,
    line_height_px: Optional[float] = None,
    padding_top_px: float = 0.0,
    wrap_columns: Optional[int] = None,
) -> JsonDiagnostic:
    """Combine classifier, context extractor and highlight mapper output.

    ``context`` and ``highlight`` stay ``None`` when the location is missing
    or out of range; the host then shows the bare message.
    """
    location = failure.location
    category = classify(failure.message, reason=failure.reason)
    context = None
    highlight = None
    if location is not None:
        context = extract_context(text, location.line, location.column, context_lines)
        if line_height_px:
            highlight = compute_highlight(
                text,
                location.line,
                line_height_px,
                padding_top_px,
                wrap_columns=wrap_columns,
            )
    return JsonDiagnostic(
        message=failure.message,
        display_message=format_error_message(failure.message, failure.line, failure.column),
        category=category,
        label=category_label(category),
        location=location,
        context=context,
        highlight=highlight,
    )


def _noop(*_args: Any, **_kwargs: Any) -> None:
    return None


class DiagnosticsController:
    """Owns one pane's text snapshot and publishes metrics/diagnostics.

    Text changes are debounced; ``refresh`` runs synchronously on the
    calling thread. Callbacks receive fresh values each time.

    Without a ``scheduler`` the debounce uses ``TimerScheduler``, so the
    debounced refresh and both callbacks run on a background timer thread.
    Tk hosts must pass ``TkScheduler(widget)`` to keep them on the UI thread.
    """

    def __init__(
        self,
        service: Optional[JsonValidationService] = None,
        preferences: AppPreferences = DEFAULT_PREFERENCES,
        on_metrics: Optional[Callable[[JsonMetrics], Any]] = None,
        on_diagnostic: Optional[Callable[[Optional[JsonDiagnostic]], Any]] = None,
        operation_logger: Optional[OperationLogger] = None,
        diag_log_path: Optional[str] = None,
        scheduler: Optional[Any] = None,
    ):
        self.service = service or JsonValidationService()
        self.preferences = preferences
        self.on_metrics = on_metrics or _noop
        self.on_diagnostic = on_diagnostic or _noop
        self.operation_logger = operation_logger
        self.diag_log_path = diag_log_path
        self.text = ""
        self.metrics = compute_metrics("")
        self.diagnostic: Optional[JsonDiagnostic] = None
        self.last_result: Optional[ValidationResult] = None
        self._debouncer = Debouncer(self._apply_text, preferences.debounce_ms, scheduler=scheduler)

    def on_text_changed(self, text: str) -> None:
        self._debouncer.call(text)

    def flush(self) -> bool:
        return self._debouncer.flush()

    def _apply_text(self, text: str) -> None:
        self.text = str(text or "")
        self.refresh(validate=self.preferences.auto_validate)

    def refresh(self, validate: bool = True) -> Optional[ValidationResult]:
        self.metrics = compute_metrics(self.text)
        result = None
        if validate and self.text.strip():
            result = self.validate_now()
        elif self.diagnostic is not None:
            # The old location no longer describes this text.
            self._publish_diagnostic(None)
        self.on_metrics(self.metrics)
        return result

    def validate_now(self) -> ValidationResult:
        started = time.perf_counter()
        result = self.service.validate(self.text)
        self.last_result = result
        self._log_operation(OperationType.VALIDATE, result, started)
        elapsed = getattr(result, "processing_time_ms", None)
        self.metrics = with_processing_time(compute_metrics(self.text), elapsed)
        if is_success(result):
            self._publish_diagnostic(None)
            return result
        diagnostic = build_diagnostic(self.text, result)
        if self.diag_log_path and self.preferences.enable_logging:
            log_json_error(
                self.diag_log_path,
                self.text,
                result.message,
                result.line,
                column=result.column,
                category=diagnostic.category,
                note="validate",
            )
        self._publish_diagnostic(diagnostic)
        return result

    def format_text(self) -> FormattingResult:
        started = time.perf_counter()
        result = self.service.format(self.text, self.preferences.formatting)
        self._log_operation(OperationType.FORMAT, result, started)
        return result

    def minify_text(self) -> FormattingResult:
        started = time.perf_counter()
        result = self.service.minify(self.text)
        self._log_operation(OperationType.MINIFY, result, started)
        return result

    def _publish_diagnostic(self, diagnostic: Optional[JsonDiagnostic]) -> None:
        self.diagnostic = diagnostic
        self.on_diagnostic(diagnostic)

    def _log_operation(self, operation: OperationType, result: Any, started: float) -> None:
        if self.operation_logger is None or not self.preferences.enable_logging:
            return
        elapsed = getattr(result, "processing_time_ms", None)
        if elapsed is None:
            elapsed = (time.perf_counter() - started) * 1000.0
        ok = is_success(result)
        self.operation_logger.log_operation(
            operation,
            OperationResult.SUCCESS if ok else OperationResult.ERROR,
            input_size=self.service.size_of(self.text),
            processing_time_ms=elapsed,
            error_message=None if ok else getattr(result, "message", None),
        )
