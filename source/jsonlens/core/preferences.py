"""Versioned user preferences.

Preferences are an explicit value handed to the application root at startup;
nothing here is a module-level singleton. Older payloads are upgraded on
read by ``migrate_preferences``, a pure ``(old_version, old_data) -> data``
function.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import math
import os
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from jsonlens.core import constants as app_constants
from jsonlens.core.exceptions import EXPECTED_ERRORS, PreferencesError
from jsonlens.core.json_models import FormattingOptions

_LOG = logging.getLogger(__name__)

LEGACY_VERSION = "0"


@dataclass(frozen=True, slots=True)
class AppPreferences:
    version: str = app_constants.PREFERENCES_VERSION
    theme: str = app_constants.THEME_DEFAULT
    auto_validate: bool = False
    formatting: FormattingOptions = field(default_factory=FormattingOptions)
    font_size: int = app_constants.FONT_SIZE_DEFAULT
    debounce_ms: int = app_constants.LIVE_FEEDBACK_DELAY_MS_DEFAULT
    enable_logging: bool = True
    max_file_size: int = app_constants.VALIDATOR_MAX_INPUT_BYTES

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "theme": self.theme,
            "auto_validate": self.auto_validate,
            "formatting": self.formatting.to_wire(),
            "font_size": self.font_size,
            "debounce_ms": self.debounce_ms,
            "advanced": {
                "enable_logging": self.enable_logging,
                "max_file_size": self.max_file_size,
            },
        }

    def with_changes(self, **changes: Any) -> "AppPreferences":
        return dataclasses.replace(self, **changes)


DEFAULT_PREFERENCES = AppPreferences()


def _coerce_bool(value: Any, default: bool) -> bool:
    # Accept bool/int or 0/1-style text.
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and not math.isfinite(value):
        return default
    if isinstance(value, (int, float)):
        return bool(int(value))
    if isinstance(value, str):
        token = value.strip().lower()
        if token in ("1", "true", "yes", "on"):
            return True
        if token in ("0", "false", "no", "off"):
            return False
    return default


def _coerce_int(value: Any, default: int, minimum: int, maximum: Optional[int] = None) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    # json.load accepts NaN and Infinity.
    if isinstance(value, float) and not math.isfinite(value):
        return default
    number = int(value)
    if number < minimum or (maximum is not None and number > maximum):
        return default
    return number


def _coerce_theme(value: Any) -> str:
    token = str(value or "").strip().lower()
    return token if token in app_constants.THEME_CHOICES else app_constants.THEME_DEFAULT


def _detect_version(data: dict) -> str:
    version = data.get("version")
    if isinstance(version, str) and version.strip():
        return version.strip()
    return LEGACY_VERSION


def _migrate_legacy(data: dict) -> dict:
    # Unversioned shape: camelCase flags plus a nested "formattingOptions".
    legacy_formatting = data.get("formattingOptions")
    if not isinstance(legacy_formatting, dict):
        legacy_formatting = data.get("formatting") if isinstance(data.get("formatting"), dict) else {}
    return {
        "version": "1.0.0",
        "theme": data.get("theme"),
        "auto_validate": data.get("autoValidate", data.get("auto_validate")),
        "formatting": dict(legacy_formatting),
        "font_size": data.get("font_size", data.get("fontSize")),
    }


_MIGRATIONS = {
    LEGACY_VERSION: _migrate_legacy,
}


def migrate_preferences(old_version: str, old_data: Any) -> dict:
    """Upgrade a stored payload to the current layout; never mutates ``old_data``."""
    data = dict(old_data) if isinstance(old_data, dict) else {}
    version = str(old_version or LEGACY_VERSION)
    seen = set()
    while version in _MIGRATIONS and version not in seen:
        seen.add(version)
        data = _MIGRATIONS[version](data)
        version = str(data.get("version") or app_constants.PREFERENCES_VERSION)
    data["version"] = app_constants.PREFERENCES_VERSION
    return data


def preferences_from_dict(data: Any) -> AppPreferences:
    """Build preferences from a payload of any known version; bad values use defaults."""
    raw = data if isinstance(data, dict) else {}
    current = migrate_preferences(_detect_version(raw), raw)
    advanced = current.get("advanced") if isinstance(current.get("advanced"), dict) else {}
    defaults = DEFAULT_PREFERENCES
    return AppPreferences(
        version=app_constants.PREFERENCES_VERSION,
        theme=_coerce_theme(current.get("theme")),
        auto_validate=_coerce_bool(current.get("auto_validate"), defaults.auto_validate),
        formatting=FormattingOptions.from_wire(current.get("formatting")),
        font_size=_coerce_int(
            current.get("font_size"),
            defaults.font_size,
            app_constants.FONT_SIZE_MIN,
            app_constants.FONT_SIZE_MAX,
        ),
        debounce_ms=_coerce_int(current.get("debounce_ms"), defaults.debounce_ms, 0, 10_000),
        enable_logging=_coerce_bool(advanced.get("enable_logging"), defaults.enable_logging),
        max_file_size=_coerce_int(advanced.get("max_file_size"), defaults.max_file_size, 1),
    )


def load_preferences(paths: Iterable[str], strict: bool = False) -> AppPreferences:
    """Load the first readable preferences file among ``paths``.

    Unreadable files are skipped (or raise ``PreferencesError`` when
    ``strict``); with nothing readable the defaults are returned.
    """
    for path in paths:
        if not path or not os.path.isfile(path):
            continue
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except EXPECTED_ERRORS as exc:
            if strict:
                raise PreferencesError(f"Unreadable preferences file: {path}") from exc
            _LOG.debug("expected_error", exc_info=exc)
            continue
        if not isinstance(data, dict):
            if strict:
                raise PreferencesError(f"Preferences file is not an object: {path}")
            continue
        return preferences_from_dict(data)
    return DEFAULT_PREFERENCES


def save_preferences(path: str, prefs: AppPreferences) -> bool:
    """Write preferences via temp file + replace; returns False on I/O failure."""
    payload = json.dumps(prefs.to_dict(), ensure_ascii=False, indent=2)
    tmp_path = f"{path}.tmp"
    try:
        parent = os.path.dirname(str(path))
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as fh:
            fh.write(payload)
        os.replace(tmp_path, path)
    except EXPECTED_ERRORS as exc:
        _LOG.warning("Could not save preferences to %s: %s", path, exc)
        return False
    return True
