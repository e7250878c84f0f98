"""Validator collaborator adapter.

Wraps any ``invoke(command, payload) -> dict`` transport and turns its
responses into result values. Transport failures never reach the UI: they
are logged and reported as ``Error`` results.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from jsonlens.core.exceptions import EXPECTED_ERRORS
from jsonlens.core.json_metrics_core import utf8_size
from jsonlens.core.json_models import (
    FormattingFailure,
    FormattingOptions,
    FormattingResult,
    ValidationFailure,
    ValidationResult,
    is_success,
    parse_formatting_response,
    parse_validation_response,
)
from jsonlens.services.local_backend_service import local_invoke

_LOG = logging.getLogger(__name__)

Invoke = Callable[[str, dict], Any]

SYSTEM_ERROR_PREFIX = "System error"


def _system_error_text(exc: BaseException) -> str:
    detail = str(exc).strip() or type(exc).__name__
    return f"{SYSTEM_ERROR_PREFIX}: {detail}"


class JsonValidationService:
    def __init__(self, invoke: Optional[Invoke] = None):
        self.invoke = invoke if invoke is not None else local_invoke

    def _call(self, command: str, payload: dict) -> tuple[Any, Optional[str]]:
        try:
            return self.invoke(command, payload), None
        except EXPECTED_ERRORS as exc:
            _LOG.warning("Validator command %s failed: %s", command, exc)
            return None, _system_error_text(exc)

    def validate(self, text: str) -> ValidationResult:
        response, failure = self._call("validate_json", {"input": text})
        if failure:
            return ValidationFailure(message=failure)
        return parse_validation_response(response)

    def is_valid(self, text: str) -> bool:
        return is_success(self.validate(text))

    def format(self, text: str, options: Optional[FormattingOptions] = None) -> FormattingResult:
        opts = options or FormattingOptions()
        response, failure = self._call("format_json", {"input": text, "options": opts.to_wire()})
        if failure:
            return FormattingFailure(message=failure)
        return parse_formatting_response(response)

    def minify(self, text: str) -> FormattingResult:
        response, failure = self._call("minify_json", {"input": text})
        if failure:
            return FormattingFailure(message=failure)
        return parse_formatting_response(response)

    @staticmethod
    def size_of(text: str) -> int:
        return utf8_size(text)
