"""Validate/format/minify operation history as JSON Lines."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from jsonlens.core import constants as app_constants
from jsonlens.core.exceptions import EXPECTED_ERRORS
from jsonlens.services.log_file_service import trim_text_file_for_append

_LOG = logging.getLogger(__name__)


class OperationType(str, Enum):
    VALIDATE = "validate"
    FORMAT = "format"
    MINIFY = "minify"


class OperationResult(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class LogEntry:
    timestamp: str
    operation: OperationType
    result: OperationResult
    input_size: int
    processing_time_ms: float
    error_message: Optional[str] = None
    app_version: str = app_constants.APP_VERSION

    def to_json(self) -> str:
        payload = asdict(self)
        payload["operation"] = self.operation.value
        payload["result"] = self.result.value
        return json.dumps(payload, ensure_ascii=False)

    @classmethod
    def from_json(cls, line: str) -> "LogEntry":
        data = json.loads(line)
        if not isinstance(data, dict):
            raise ValueError("log line is not an object")
        return cls(
            timestamp=str(data["timestamp"]),
            operation=OperationType(data["operation"]),
            result=OperationResult(data["result"]),
            input_size=int(data.get("input_size", 0)),
            processing_time_ms=float(data.get("processing_time_ms", 0.0)),
            error_message=data.get("error_message"),
            app_version=str(data.get("app_version", "")),
        )


@dataclass(frozen=True, slots=True)
class LogStatistics:
    total_operations: int = 0
    success_count: int = 0
    error_count: int = 0
    success_rate: float = 0.0
    validate_count: int = 0
    format_count: int = 0
    minify_count: int = 0
    avg_processing_time_ms: float = 0.0
    earliest_log: Optional[str] = None
    latest_log: Optional[str] = None


class OperationLogger:
    """Append-only operation log; one JSON object per line."""

    def __init__(self, log_dir: str, enabled: bool = True):
        self.log_path = os.path.join(str(log_dir), app_constants.OPERATION_LOG_FILENAME)
        self.enabled = bool(enabled)

    def log_operation(
        self,
        operation: OperationType,
        result: OperationResult,
        input_size: int,
        processing_time_ms: Optional[float] = None,
        error_message: Optional[str] = None,
    ) -> Optional[LogEntry]:
        if not self.enabled:
            return None
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            operation=OperationType(operation),
            result=OperationResult(result),
            input_size=max(0, int(input_size)),
            processing_time_ms=float(processing_time_ms or 0.0),
            error_message=error_message,
        )
        try:
            os.makedirs(os.path.dirname(self.log_path) or ".", exist_ok=True)
            trim_text_file_for_append(
                self.log_path,
                app_constants.OPERATION_LOG_MAX_BYTES,
                app_constants.OPERATION_LOG_KEEP_BYTES,
            )
            with open(self.log_path, "a", encoding="utf-8") as handle:
                handle.write(entry.to_json() + "\n")
        except EXPECTED_ERRORS as exc:
            _LOG.warning("Could not write operation log %s: %s", self.log_path, exc)
            return None
        return entry

    def read_logs(self, limit: Optional[int] = None) -> list[LogEntry]:
        """Entries newest first; malformed lines are skipped."""
        if not os.path.isfile(self.log_path):
            return []
        entries = []
        with open(self.log_path, "r", encoding="utf-8", errors="replace") as handle:
            for raw in handle:
                line = raw.strip()
                if not line or not line.startswith("{"):
                    continue
                try:
                    entries.append(LogEntry.from_json(line))
                except (ValueError, KeyError, TypeError) as exc:
                    _LOG.debug("Skipping invalid log line: %s", exc)
        entries.reverse()
        if limit is not None:
            entries = entries[: max(0, int(limit))]
        return entries

    def statistics(self) -> LogStatistics:
        entries = self.read_logs()
        if not entries:
            return LogStatistics()
        total = len(entries)
        success = sum(1 for e in entries if e.result is OperationResult.SUCCESS)
        return LogStatistics(
            total_operations=total,
            success_count=success,
            error_count=total - success,
            success_rate=success / total * 100.0,
            validate_count=sum(1 for e in entries if e.operation is OperationType.VALIDATE),
            format_count=sum(1 for e in entries if e.operation is OperationType.FORMAT),
            minify_count=sum(1 for e in entries if e.operation is OperationType.MINIFY),
            avg_processing_time_ms=sum(e.processing_time_ms for e in entries) / total,
            earliest_log=entries[-1].timestamp,
            latest_log=entries[0].timestamp,
        )

    def clear(self) -> None:
        try:
            os.remove(self.log_path)
        except FileNotFoundError:
            return
