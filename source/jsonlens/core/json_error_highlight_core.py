"""Core JSON highlight geometry.

Maps a logical line number onto a pixel band of a monospaced text surface.
Rendering is left to the caller so UI layers remain swappable. Results are
never cached: font metrics change with theme and DPI.

Without ``wrap_columns`` every logical line is one visual row (constant
stride). With it, an explicit row-counting pass measures how many rows each
logical line wraps onto; tabs and double-width glyphs are counted as one
column, so wrapped mapping stays an approximation.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from jsonlens.core.json_models import HighlightRegion


def _split_lines(text: str) -> list[str]:
    return str(text or "").split("\n")


def _line_in_range(lines: Sequence[str], line) -> bool:
    try:
        number = int(line)
    except (TypeError, ValueError):
        return False
    return 1 <= number <= len(lines)


def visual_row_counts(lines: Sequence[str], wrap_columns: Optional[int] = None) -> list[int]:
    """Visual rows per logical line (always >= 1)."""
    if not wrap_columns or int(wrap_columns) <= 0:
        return [1] * len(lines)
    width = int(wrap_columns)
    return [max(1, math.ceil(len(raw) / width)) for raw in lines]


def _row_span(lines: Sequence[str], line: int, wrap_columns: Optional[int]) -> tuple[int, int]:
    # (rows before the target line, rows occupied by it)
    if not wrap_columns:
        return line - 1, 1
    counts = visual_row_counts(lines[:line], wrap_columns)
    return sum(counts[:-1]), counts[-1]


def compute_highlight(
    text: str,
    line: int,
    line_height_px: float,
    padding_top_px: float = 0.0,
    wrap_columns: Optional[int] = None,
) -> Optional[HighlightRegion]:
    """Return the pixel band for a 1-based ``line`` or ``None`` when out of range."""
    lines = _split_lines(text)
    if not _line_in_range(lines, line):
        return None
    rows_before, rows = _row_span(lines, int(line), wrap_columns)
    line_height = float(line_height_px)
    return HighlightRegion(
        top_offset_px=float(padding_top_px) + rows_before * line_height,
        height_px=rows * line_height,
    )


def scroll_target_for(
    text: str,
    line: int,
    line_height_px: float,
    viewport_height_px: float,
    wrap_columns: Optional[int] = None,
) -> Optional[float]:
    """Scroll offset that centres ``line`` in the viewport (clamped at 0)."""
    lines = _split_lines(text)
    if not _line_in_range(lines, line):
        return None
    rows_before, rows = _row_span(lines, int(line), wrap_columns)
    line_height = float(line_height_px)
    target = rows_before * line_height - float(viewport_height_px) / 2 + (rows * line_height) / 2
    return max(0.0, target)
