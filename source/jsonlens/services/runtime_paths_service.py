"""Runtime data path resolution helpers."""

import os
import sys
from typing import Any, Mapping, Optional

from jsonlens.core import constants as app_constants
from jsonlens.core.exceptions import EXPECTED_ERRORS


def _normalized_home() -> str:
    try:
        return os.path.abspath(os.path.expanduser("~"))
    except EXPECTED_ERRORS:
        return os.path.abspath(os.getcwd())


def _safe_windows_base(base: Any) -> str:
    # Keep env-derived base rooted under user home; otherwise fall back to home.
    home = _normalized_home()
    raw = str(base or "").strip()
    if not raw:
        return home
    try:
        candidate = os.path.abspath(raw)
    except EXPECTED_ERRORS:
        return home
    try:
        if os.path.commonpath([home, candidate]) == home:
            return candidate
    except EXPECTED_ERRORS:
        return home
    return home


def runtime_data_dir(
    create: bool = False,
    runtime_dir_name: str = app_constants.RUNTIME_DIR_NAME,
    platform_name: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> str:
    """Resolve runtime data directory path with platform-aware base fallback."""
    platform_name = sys.platform if platform_name is None else platform_name
    env = os.environ if env is None else env
    base = None
    match platform_name:
        case "win32":
            env_base = str(env.get("LOCALAPPDATA", "")).strip() or str(env.get("APPDATA", "")).strip()
            base = _safe_windows_base(env_base)
        case _:
            state_home = str(env.get("XDG_STATE_HOME", "")).strip()
            base = state_home or None
    if not base:
        try:
            home = os.path.expanduser("~")
            match platform_name:
                case "win32":
                    base = home
                case _:
                    base = os.path.join(home, ".local", "state")
        except EXPECTED_ERRORS:
            base = os.getcwd()
    target = os.path.join(base, runtime_dir_name)
    if create:
        try:
            os.makedirs(target, exist_ok=True)
        except EXPECTED_ERRORS:
            return os.getcwd()
    return target


def preferences_paths(runtime_dir: Optional[str] = None) -> list[str]:
    """Current preferences file first, then the legacy home-dir file."""
    base = runtime_dir or runtime_data_dir(create=False)
    paths = [os.path.join(base, app_constants.PREFERENCES_FILENAME)]
    paths.append(os.path.join(_normalized_home(), app_constants.LEGACY_PREFERENCES_FILENAME))
    return paths
