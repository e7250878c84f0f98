"""Shared exception classes and expected-error tuple for services/core."""

from __future__ import annotations

from typing import TypeAlias


class AppError(Exception):
    """Base class for expected application-layer failures."""


class AppRuntimeError(RuntimeError, AppError):
    """Raised for runtime operation failures with user-facing context."""


class BackendError(AppRuntimeError):
    """Raised when the validator collaborator cannot be reached or answers garbage."""


class PreferencesError(ValueError, AppError):
    """Raised when a preferences payload cannot be read in strict mode."""


EXPECTED_ERRORS: TypeAlias = (
    OSError,
    ValueError,
    TypeError,
    RuntimeError,
    AttributeError,
    KeyError,
    IndexError,
    ImportError,
)

