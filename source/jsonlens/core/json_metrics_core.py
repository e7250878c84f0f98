"""Size and structure metrics for raw JSON-like text.

Works on any text, valid or not: raw counts (lines/chars/bytes) are always
filled, structural counts only when the text parses as strict JSON and is
small enough to walk without stalling the UI thread.
"""

from __future__ import annotations

import dataclasses
import json
import math
import re
from json.decoder import scanstring
from json.scanner import NUMBER_RE
from typing import Any, Optional

from jsonlens.core import constants as app_constants
from jsonlens.core.json_models import EMPTY_METRICS, JsonMetrics

_WHITESPACE_RE = re.compile(r"[ \t\n\r]*")
_LITERALS_AT = {"t": "true", "f": "false", "n": "null"}


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant {token!r}")


def utf8_size(text: str) -> int:
    # surrogatepass keeps lone surrogates countable (3 bytes each) instead of raising.
    return len(str(text or "").encode("utf-8", errors="surrogatepass"))


def _skip_ws(text: str, pos: int) -> int:
    return _WHITESPACE_RE.match(text, pos).end()


def _scan_key(text: str, pos: int) -> int:
    # Member name plus its colon; returns the position of the value.
    if pos >= len(text) or text[pos] != '"':
        raise ValueError(f"expected property name at {pos}")
    _key, pos = scanstring(text, pos + 1, True)
    pos = _skip_ws(text, pos)
    if pos >= len(text) or text[pos] != ":":
        raise ValueError(f"expected ':' at {pos}")
    return _skip_ws(text, pos + 1)


def scan_structure(text: str, max_depth: int) -> tuple[int, int, int, int]:
    """Validate strict JSON and count (depth, objects, arrays, keys) in one flat pass.

    Used for documents nested past the decoder's recursion limit. Raises
    ``ValueError`` on any grammar error. Containers deeper than
    ``max_depth`` are validated but not counted. Duplicate keys count once
    per occurrence.
    """
    depth = 0
    objects = 0
    arrays = 0
    keys = 0
    stack = []
    end = len(text)
    pos = _skip_ws(text, 0)
    expect_value = True
    while True:
        if expect_value:
            if pos >= end:
                raise ValueError("unexpected end of input")
            ch = text[pos]
            if ch in "{[":
                stack.append(ch)
                level = len(stack)
                counted = level <= max_depth
                if counted:
                    depth = max(depth, level)
                    if ch == "{":
                        objects += 1
                    else:
                        arrays += 1
                pos = _skip_ws(text, pos + 1)
                closer = "}" if ch == "{" else "]"
                if pos < end and text[pos] == closer:
                    stack.pop()
                    pos += 1
                    expect_value = False
                elif ch == "{":
                    pos = _scan_key(text, pos)
                    if counted:
                        keys += 1
                continue
            if ch == '"':
                _value, pos = scanstring(text, pos + 1, True)
            elif ch in _LITERALS_AT and text.startswith(_LITERALS_AT[ch], pos):
                pos += len(_LITERALS_AT[ch])
            else:
                match = NUMBER_RE.match(text, pos)
                if match is None:
                    raise ValueError(f"expected value at {pos}")
                pos = match.end()
            expect_value = False
            continue

        pos = _skip_ws(text, pos)
        if not stack:
            if pos != end:
                raise ValueError(f"extra data at {pos}")
            return depth, objects, arrays, keys
        if pos >= end:
            raise ValueError("unexpected end of input")
        ch = text[pos]
        top = stack[-1]
        if ch == ",":
            pos = _skip_ws(text, pos + 1)
            if top == "{":
                pos = _scan_key(text, pos)
                if len(stack) <= max_depth:
                    keys += 1
            expect_value = True
        elif ch == ("}" if top == "{" else "]"):
            stack.pop()
            pos += 1
        else:
            raise ValueError(f"expected ',' or closer at {pos}")


def _structure_counts(text: str, max_depth: int) -> tuple[int, int, int, int]:
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except RecursionError:
        # Valid JSON can nest past the decoder's recursion limit.
        return scan_structure(text, max_depth)
    return _walk_structure(data, max_depth)


def _walk_structure(root: Any, max_depth: int) -> tuple[int, int, int, int]:
    # Explicit stack: bounded memory, no recursion limit on deep payloads.
    depth = 0
    objects = 0
    arrays = 0
    keys = 0
    if not isinstance(root, (dict, list)):
        return depth, objects, arrays, keys

    stack = [(root, 1)]
    while stack:
        node, current = stack.pop()
        # Nodes past the cap are silently not counted.
        if current > max_depth:
            continue
        if current > depth:
            depth = current
        if isinstance(node, list):
            arrays += 1
            children = node
        else:
            objects += 1
            keys += len(node)
            children = node.values()
        for child in children:
            if isinstance(child, (dict, list)):
                stack.append((child, current + 1))
    return depth, objects, arrays, keys


def compute_metrics(
    text: str,
    skip_structure: bool = False,
    max_depth: Optional[int] = None,
) -> JsonMetrics:
    """Return size/structure metrics for ``text``; never raises.

    Empty text yields all-zero metrics (``lines`` included). Otherwise
    ``lines`` is the number of ``\\n``-delimited segments. Structural fields
    stay 0 when ``skip_structure`` is set, the UTF-8 size exceeds
    ``METRICS_STRUCTURE_MAX_BYTES``, or the text is not strict JSON.
    """
    if not text:
        return EMPTY_METRICS

    text = str(text)
    lines = text.count("\n") + 1
    chars = len(text)
    size = utf8_size(text)

    is_large = size > app_constants.METRICS_STRUCTURE_MAX_BYTES
    if skip_structure or is_large:
        return JsonMetrics(lines=lines, chars=chars, bytes=size)

    limit = int(max_depth or app_constants.METRICS_DEFAULT_MAX_DEPTH)
    try:
        depth, objects, arrays, keys = _structure_counts(text, limit)
    except ValueError:
        # Parse failures are the normal case while typing.
        return JsonMetrics(lines=lines, chars=chars, bytes=size)
    return JsonMetrics(
        lines=lines,
        chars=chars,
        bytes=size,
        depth=depth,
        objects=objects,
        arrays=arrays,
        keys=keys,
    )


def with_processing_time(metrics: JsonMetrics, processing_time_ms: Optional[float]) -> JsonMetrics:
    """Attach a collaborator-reported processing time for display."""
    if processing_time_ms is None:
        return metrics
    try:
        elapsed = float(processing_time_ms)
    except (TypeError, ValueError):
        return metrics
    return dataclasses.replace(metrics, processing_time_ms=elapsed)


def format_bytes(num_bytes: int) -> str:
    """Human-readable size, e.g. ``1.23 KB``."""
    try:
        value = float(num_bytes)
    except (TypeError, ValueError):
        return "0 B"
    if value <= 0:
        return "0 B"
    sizes = ("B", "KB", "MB", "GB")
    idx = int(math.floor(math.log(value) / math.log(1024)))
    idx = max(0, min(idx, len(sizes) - 1))
    scaled = value / (1024 ** idx)
    decimals = 2 if scaled < 10 else 1
    return f"{scaled:.{decimals}f} {sizes[idx]}"


def format_number(num: int) -> str:
    return f"{int(num):,}"


def compression_ratio(formatted: str, minified: str) -> float:
    """Percent of bytes saved by minifying ``formatted`` into ``minified``."""
    if not formatted or not minified:
        return 0.0
    formatted_size = utf8_size(formatted)
    if formatted_size == 0:
        return 0.0
    return (formatted_size - utf8_size(minified)) / formatted_size * 100.0
