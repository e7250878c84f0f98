"""Size-bounded text log helpers shared by the diagnostics and operation logs."""

import logging
import os
from typing import Any

from jsonlens.core.exceptions import EXPECTED_ERRORS

_LOG = logging.getLogger(__name__)

TRUNCATION_MARKER = b"\n--- log truncated ---\n"


def trim_text_file_for_append(path: Any, max_bytes: int, keep_bytes: int) -> bool:
    """Keep only the newest ``keep_bytes`` once ``path`` grows past ``max_bytes``.

    Returns True when the file was trimmed.
    """
    if not os.path.isfile(path):
        return False
    if max_bytes <= 0 or keep_bytes <= 0:
        return False
    try:
        size = os.path.getsize(path)
    except EXPECTED_ERRORS as exc:
        _LOG.debug("expected_error", exc_info=exc)
        return False
    if size <= max_bytes:
        return False
    keep_bytes = min(int(keep_bytes), int(size))
    try:
        with open(path, "rb") as src:
            src.seek(size - keep_bytes)
            tail = src.read()
        with open(path, "wb") as dst:
            dst.write(TRUNCATION_MARKER)
            dst.write(tail)
    except EXPECTED_ERRORS as exc:
        _LOG.debug("expected_error", exc_info=exc)
        return False
    return True


def read_text_file_tail(path: Any, max_chars: Any) -> str:
    if not os.path.isfile(path):
        return ""
    limit = max(0, int(max_chars))
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as fh:
            text = fh.read()
    except EXPECTED_ERRORS as exc:
        _LOG.debug("expected_error", exc_info=exc)
        return ""
    if limit <= 0 or len(text) <= limit:
        return text
    return text[-limit:]


def read_latest_block(text: Any, max_chars: Any, marker: Any = "\n---\n") -> str:
    source = str(text or "")
    if not source.strip():
        return ""
    idx = source.rfind(marker)
    if idx >= 0:
        block = source[idx + len(marker) :]
    else:
        block = source
    block = str(block or "").strip()
    if not block:
        return ""
    limit = max(0, int(max_chars))
    if limit > 0 and len(block) > limit:
        return block[-limit:]
    return block
