import json
from datetime import datetime

from jsonlens.core.json_error_classify_core import ErrorCategory
from jsonlens.services.json_error_diag_service import build_log_entry, diag_system_for_category, log_json_error
from jsonlens.services.log_file_service import (
    TRUNCATION_MARKER,
    read_latest_block,
    read_text_file_tail,
    trim_text_file_for_append,
)
from jsonlens.services.operation_log_service import (
    LogEntry,
    OperationLogger,
    OperationResult,
    OperationType,
)

TEXT = "l1\nl2\nl3\nl4\nl5\nl6"


def test_diag_system_buckets():
    assert diag_system_for_category(ErrorCategory.UNEXPECTED_EOF) == "structure"
    assert diag_system_for_category(ErrorCategory.COMMA_ERROR) == "separator"
    assert diag_system_for_category(ErrorCategory.SYNTAX_ERROR_GENERIC) == "json_highlight"
    assert diag_system_for_category(None) == "json_highlight"


def test_build_log_entry_layout():
    entry = build_log_entry(
        TEXT, "Missing comma", 3, column=2, category=ErrorCategory.COMMA_ERROR, note="t", now=datetime(2024, 1, 2, 3, 4, 5)
    )
    assert entry.startswith("\n---\ntime=2024-01-02 03:04:05\n")
    assert "msg=Missing comma line=3 col=2 category=CommaError note=t\n" in entry
    assert "system=separator\n" in entry
    assert entry.endswith("1: l1\n2: l2\n3: l3\n4: l4\n5: l5\n")


def test_build_log_entry_without_category():
    entry = build_log_entry(TEXT, "boom", None)
    assert "category=- " in entry
    assert "system=json_highlight" in entry
    assert "1: l1\n2: l2\n3: l3\n" in entry


def test_log_json_error_creates_directory(tmp_path):
    path = tmp_path / "logs" / "diag.log"
    assert log_json_error(str(path), TEXT, "first", 1)
    assert log_json_error(str(path), TEXT, "second", 2)
    content = path.read_text(encoding="utf-8")
    assert content.count("\n---\n") == 2
    assert read_latest_block(content, 1000).startswith("time=")
    assert "msg=second" in read_latest_block(content, 1000)


def test_trim_keeps_newest_bytes(tmp_path):
    path = tmp_path / "big.log"
    path.write_bytes(b"a" * 150 + b"b" * 50)
    assert trim_text_file_for_append(str(path), 100, 40)
    data = path.read_bytes()
    assert data == TRUNCATION_MARKER + b"b" * 40
    assert not trim_text_file_for_append(str(path), 100, 40)
    assert not trim_text_file_for_append(str(tmp_path / "absent.log"), 100, 40)


def test_tail_and_latest_block(tmp_path):
    path = tmp_path / "t.log"
    path.write_text("0123456789", encoding="utf-8")
    assert read_text_file_tail(str(path), 4) == "6789"
    assert read_text_file_tail(str(path), 0) == "0123456789"
    assert read_text_file_tail(str(tmp_path / "none.log"), 4) == ""
    assert read_latest_block("x\n---\nfirst\n---\nsecond\n", 100) == "second"
    assert read_latest_block("no marker here", 4) == "here"
    assert read_latest_block("   ", 10) == ""


def test_operation_log_newest_first(tmp_path):
    logger = OperationLogger(str(tmp_path))
    logger.log_operation(OperationType.VALIDATE, OperationResult.SUCCESS, 10, 1.0)
    logger.log_operation(OperationType.FORMAT, OperationResult.ERROR, 20, 3.0, "bad")
    logger.log_operation("minify", "success", 30)
    entries = logger.read_logs()
    assert [e.operation for e in entries] == [OperationType.MINIFY, OperationType.FORMAT, OperationType.VALIDATE]
    assert entries[1].error_message == "bad"
    assert len(logger.read_logs(limit=1)) == 1


def test_operation_log_skips_corrupt_lines(tmp_path):
    logger = OperationLogger(str(tmp_path))
    logger.log_operation(OperationType.VALIDATE, OperationResult.SUCCESS, 1)
    with open(logger.log_path, "a", encoding="utf-8") as handle:
        handle.write("garbage\n{\"timestamp\": 1}\n[1]\n")
    assert len(logger.read_logs()) == 1


def test_statistics(tmp_path):
    logger = OperationLogger(str(tmp_path))
    assert logger.statistics().total_operations == 0
    logger.log_operation(OperationType.VALIDATE, OperationResult.SUCCESS, 1, 2.0)
    logger.log_operation(OperationType.VALIDATE, OperationResult.ERROR, 1, 4.0, "x")
    stats = logger.statistics()
    assert (stats.total_operations, stats.success_count, stats.error_count) == (2, 1, 1)
    assert stats.success_rate == 50.0
    assert stats.validate_count == 2
    assert stats.avg_processing_time_ms == 3.0
    assert stats.earliest_log <= stats.latest_log


def test_clear_and_disabled(tmp_path):
    logger = OperationLogger(str(tmp_path))
    logger.log_operation(OperationType.VALIDATE, OperationResult.SUCCESS, 1)
    logger.clear()
    assert logger.read_logs() == []
    logger.clear()
    assert OperationLogger(str(tmp_path), enabled=False).log_operation(
        OperationType.VALIDATE, OperationResult.SUCCESS, 1
    ) is None


def test_log_entry_json_shape():
    entry = LogEntry("2024-01-01T00:00:00+00:00", OperationType.FORMAT, OperationResult.SUCCESS, 5, 1.25)
    payload = json.loads(entry.to_json())
    assert payload["operation"] == "format"
    assert payload["result"] == "success"
    assert LogEntry.from_json(entry.to_json()) == entry
