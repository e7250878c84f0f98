"""JSON diagnostic category mapping and log writer service."""

import logging
import os
from datetime import datetime
from typing import Optional

from jsonlens.core import constants as app_constants
from jsonlens.core.exceptions import EXPECTED_ERRORS
from jsonlens.core.json_error_classify_core import ErrorCategory
from jsonlens.services.log_file_service import trim_text_file_for_append

_LOG = logging.getLogger(__name__)

_CATEGORY_SYSTEMS = {
    ErrorCategory.UNEXPECTED_EOF: "structure",
    ErrorCategory.BRACKET_MISMATCH: "structure",
    ErrorCategory.COMMA_ERROR: "separator",
    ErrorCategory.QUOTE_MISMATCH: "string",
    ErrorCategory.KEY_ERROR: "member",
    ErrorCategory.VALUE_ERROR: "value",
}


def diag_system_for_category(category: Optional[ErrorCategory]) -> str:
    """Map an error category to a stable log system bucket."""
    if category is None:
        return "json_highlight"
    return _CATEGORY_SYSTEMS.get(category, "json_highlight")


def build_log_entry(
    text: str,
    message: str,
    line: Optional[int],
    column: Optional[int] = None,
    category: Optional[ErrorCategory] = None,
    note: str = "",
    now: Optional[datetime] = None,
) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    lines = str(text or "").split("\n")
    try:
        target_line = max(1, int(line or 1))
    except (TypeError, ValueError):
        target_line = 1
    span = app_constants.DIAG_LOG_CONTEXT_LINES
    context = []
    for ln in range(max(target_line - span, 1), min(target_line + span, len(lines)) + 1):
        context.append(f"{ln}: {lines[ln - 1]}")
    category_name = category.value if category is not None else "-"
    return (
        "\n---\n"
        f"time={stamp}\n"
        f"msg={message} line={line} col={column} category={category_name} note={note}\n"
        f"system={diag_system_for_category(category)}\n"
        + "\n".join(context).rstrip()
        + "\n"
    )


def log_json_error(
    log_path: str,
    text: str,
    message: str,
    line: Optional[int],
    column: Optional[int] = None,
    category: Optional[ErrorCategory] = None,
    note: str = "",
) -> bool:
    """Append a normalized diagnostics entry; returns False when the write fails."""
    entry = build_log_entry(text, message, line, column=column, category=category, note=note)
    try:
        log_dir = os.path.dirname(str(log_path or ""))
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        trim_text_file_for_append(
            log_path,
            app_constants.DIAG_LOG_MAX_BYTES,
            app_constants.DIAG_LOG_KEEP_BYTES,
        )
        with open(log_path, "a", encoding="utf-8") as handle:
            handle.write(entry)
    except EXPECTED_ERRORS as exc:
        _LOG.debug("expected_error", exc_info=exc)
        return False
    return True
