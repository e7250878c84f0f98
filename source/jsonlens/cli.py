"""Command-line host: check, measure, format and minify JSON files."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from jsonlens.core import constants as app_constants
from jsonlens.core.json_metrics_core import (
    compression_ratio,
    compute_metrics,
    format_bytes,
    format_number,
    with_processing_time,
)
from jsonlens.core.json_models import FormattingOptions, JsonMetrics, is_success
from jsonlens.core.preferences import AppPreferences, load_preferences
from jsonlens.services.json_diagnostic_service import JsonDiagnostic, build_diagnostic
from jsonlens.services.json_error_diag_service import log_json_error
from jsonlens.services.json_service import JsonValidationService
from jsonlens.services.log_file_service import read_latest_block, read_text_file_tail
from jsonlens.services.operation_log_service import OperationLogger, OperationResult, OperationType
from jsonlens.services.runtime_paths_service import preferences_paths, runtime_data_dir
from jsonlens.services.snippet_image_service import save_error_snippet

_LOG = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _write_output(text: str, output: Optional[str]) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")


def render_metrics(metrics: JsonMetrics) -> str:
    rows = [
        ("Lines", format_number(metrics.lines)),
        ("Chars", format_number(metrics.chars)),
        ("Size", format_bytes(metrics.bytes)),
        ("Depth", str(metrics.depth)),
        ("Objects", format_number(metrics.objects)),
        ("Arrays", format_number(metrics.arrays)),
        ("Keys", format_number(metrics.keys)),
    ]
    if metrics.processing_time_ms is not None:
        rows.append(("Time", f"{metrics.processing_time_ms:.2f} ms"))
    return "\n".join(f"{name:<8} {value}" for name, value in rows)


def render_diagnostic(diagnostic: JsonDiagnostic) -> str:
    out = [f"{diagnostic.label}: {diagnostic.display_message}"]
    ctx = diagnostic.context
    if ctx is not None and diagnostic.location is not None:
        line_no = diagnostic.location.line
        start = line_no - len(ctx.before_lines)
        width = len(str(line_no + len(ctx.after_lines)))
        for idx, text in enumerate(ctx.before_lines):
            out.append(f"  {start + idx:>{width}} | {text}")
        out.append(f"> {line_no:>{width}} | {ctx.error_line}")
        if diagnostic.location.column:
            out.append(f"  {'':>{width}} | {' ' * (diagnostic.location.column - 1)}^")
        for idx, text in enumerate(ctx.after_lines):
            out.append(f"  {line_no + idx + 1:>{width}} | {text}")
        if ctx.suggestion:
            out.append(f"hint: {ctx.suggestion}")
    return "\n".join(out)


class _Session:
    def __init__(self, args: argparse.Namespace):
        self.runtime_dir = args.runtime_dir or runtime_data_dir(create=False)
        self.preferences: AppPreferences = load_preferences(preferences_paths(self.runtime_dir))
        self.service = JsonValidationService()
        self.logger = None
        if self.preferences.enable_logging and not args.no_log:
            self.logger = OperationLogger(self.runtime_dir)

    def read_input(self, path: str) -> Optional[str]:
        """Read ``path``; ``None`` (after a message) when it exceeds ``max_file_size``."""
        text = _read_input(path)
        size = self.service.size_of(text)
        if size > self.preferences.max_file_size:
            print(
                f"jsonlens: {path} is {format_bytes(size)}, over the "
                f"{format_bytes(self.preferences.max_file_size)} limit",
                file=sys.stderr,
            )
            return None
        return text

    def log(self, operation: OperationType, result, text: str) -> None:
        if self.logger is None:
            return
        ok = is_success(result)
        self.logger.log_operation(
            operation,
            OperationResult.SUCCESS if ok else OperationResult.ERROR,
            input_size=self.service.size_of(text),
            processing_time_ms=getattr(result, "processing_time_ms", None),
            error_message=None if ok else result.message,
        )


def cmd_check(args: argparse.Namespace, session: _Session) -> int:
    text = session.read_input(args.file)
    if text is None:
        return EXIT_INVALID
    result = session.service.validate(text)
    session.log(OperationType.VALIDATE, result, text)
    if is_success(result):
        metrics = with_processing_time(compute_metrics(text), result.processing_time_ms)
        print("Valid JSON")
        if args.metrics:
            print(render_metrics(metrics))
        return EXIT_OK
    diagnostic = build_diagnostic(text, result, context_lines=args.context)
    print(render_diagnostic(diagnostic))
    if session.logger is not None:
        log_json_error(
            os.path.join(session.runtime_dir, app_constants.DIAG_LOG_FILENAME),
            text,
            result.message,
            result.line,
            column=result.column,
            category=diagnostic.category,
            note="cli_check",
        )
    if args.snippet and diagnostic.context is not None and diagnostic.location is not None:
        save_error_snippet(diagnostic.context, diagnostic.location.line, args.snippet)
        print(f"snippet: {args.snippet}")
    return EXIT_INVALID


def cmd_metrics(args: argparse.Namespace, session: _Session) -> int:
    text = _read_input(args.file)
    metrics = compute_metrics(text, skip_structure=args.skip_structure, max_depth=args.max_depth)
    if args.json:
        print(json.dumps(metrics.to_dict()))
    else:
        print(render_metrics(metrics))
    return EXIT_OK


def _formatting_options(args: argparse.Namespace, prefs: AppPreferences) -> FormattingOptions:
    indent = args.indent if args.indent is not None else prefs.formatting.indent_width
    trailing = prefs.formatting.trailing_newline if args.trailing_newline is None else args.trailing_newline
    return FormattingOptions(indent_width=indent, trailing_newline=trailing)


def cmd_format(args: argparse.Namespace, session: _Session) -> int:
    text = session.read_input(args.file)
    if text is None:
        return EXIT_INVALID
    result = session.service.format(text, _formatting_options(args, session.preferences))
    session.log(OperationType.FORMAT, result, text)
    if not is_success(result):
        print(result.message, file=sys.stderr)
        return EXIT_INVALID
    _write_output(result.formatted, args.output)
    return EXIT_OK


def cmd_minify(args: argparse.Namespace, session: _Session) -> int:
    text = session.read_input(args.file)
    if text is None:
        return EXIT_INVALID
    result = session.service.minify(text)
    session.log(OperationType.MINIFY, result, text)
    if not is_success(result):
        print(result.message, file=sys.stderr)
        return EXIT_INVALID
    _write_output(result.formatted, args.output)
    if args.stats:
        print(
            f"{format_bytes(session.service.size_of(text))} -> {format_bytes(result.size_bytes)} "
            f"({compression_ratio(text, result.formatted):.1f}% saved)",
            file=sys.stderr,
        )
    return EXIT_OK


def cmd_logs(args: argparse.Namespace, session: _Session) -> int:
    logger = session.logger or OperationLogger(session.runtime_dir)
    if args.clear:
        logger.clear()
        print("operation log cleared")
        return EXIT_OK
    if args.diag:
        diag_path = os.path.join(session.runtime_dir, app_constants.DIAG_LOG_FILENAME)
        block = read_latest_block(read_text_file_tail(diag_path, 64 * 1024), 8000)
        print(block or "no diagnostics recorded")
        return EXIT_OK
    for entry in logger.read_logs(limit=args.limit):
        status = entry.result.value
        detail = f" {entry.error_message}" if entry.error_message else ""
        print(
            f"{entry.timestamp} {entry.operation.value:<8} {status:<7} "
            f"{format_bytes(entry.input_size):>9} {entry.processing_time_ms:8.2f} ms{detail}"
        )
    return EXIT_OK


def cmd_stats(args: argparse.Namespace, session: _Session) -> int:
    logger = session.logger or OperationLogger(session.runtime_dir)
    stats = logger.statistics()
    print(f"operations  {stats.total_operations}")
    print(f"success     {stats.success_count} ({stats.success_rate:.1f}%)")
    print(f"errors      {stats.error_count}")
    print(f"validate    {stats.validate_count}")
    print(f"format      {stats.format_count}")
    print(f"minify      {stats.minify_count}")
    print(f"avg time    {stats.avg_processing_time_ms:.2f} ms")
    if stats.earliest_log:
        print(f"first       {stats.earliest_log}")
        print(f"last        {stats.latest_log}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jsonlens", description="Validate, measure and reformat JSON text.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {app_constants.APP_VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--runtime-dir", help="Directory for preferences and logs.")
    parser.add_argument("--no-log", action="store_true", help="Do not record this operation.")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Validate a file and explain the first error.")
    check.add_argument("file", help="Path to a JSON file, or - for stdin.")
    check.add_argument("--context", type=int, default=app_constants.ERROR_CONTEXT_LINES_DEFAULT)
    check.add_argument("--metrics", action="store_true", help="Print metrics for valid input.")
    check.add_argument("--snippet", help="Write a PNG of the error context to this path.")
    check.set_defaults(handler=cmd_check)

    metrics = sub.add_parser("metrics", help="Print size and structure metrics.")
    metrics.add_argument("file")
    metrics.add_argument("--skip-structure", action="store_true")
    metrics.add_argument("--max-depth", type=int, default=None)
    metrics.add_argument("--json", action="store_true", help="Emit metrics as JSON.")
    metrics.set_defaults(handler=cmd_metrics)

    fmt = sub.add_parser("format", help="Pretty-print JSON.")
    fmt.add_argument("file")
    fmt.add_argument("--indent", type=int, choices=app_constants.FORMAT_INDENT_CHOICES, default=None)
    fmt.add_argument("--trailing-newline", dest="trailing_newline", action="store_true", default=None)
    fmt.add_argument("--no-trailing-newline", dest="trailing_newline", action="store_false")
    fmt.add_argument("-o", "--output")
    fmt.set_defaults(handler=cmd_format)

    mini = sub.add_parser("minify", help="Strip insignificant whitespace.")
    mini.add_argument("file")
    mini.add_argument("-o", "--output")
    mini.add_argument("--stats", action="store_true", help="Report the size saved on stderr.")
    mini.set_defaults(handler=cmd_minify)

    logs = sub.add_parser("logs", help="Show recent operations, newest first.")
    logs.add_argument("--limit", type=int, default=20)
    logs.add_argument("--diag", action="store_true", help="Show the latest diagnostics log entry.")
    logs.add_argument("--clear", action="store_true", help="Delete the operation log.")
    logs.set_defaults(handler=cmd_logs)

    stats = sub.add_parser("stats", help="Summarize the operation log.")
    stats.set_defaults(handler=cmd_stats)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    session = _Session(args)
    try:
        return args.handler(args, session)
    except OSError as exc:
        print(f"jsonlens: {exc}", file=sys.stderr)
        return EXIT_USAGE
    except UnicodeDecodeError as exc:
        print(f"jsonlens: input is not UTF-8 text ({exc.reason})", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    raise SystemExit(main())
