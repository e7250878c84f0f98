"""Tk text-widget bridge for error-line highlight and jump-to-error.

Reads rendering metrics from a live ``tk.Text`` and feeds them to the
highlight core. Metrics are re-read on every call; font size and theme can
change between renders.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from jsonlens.core import constants as app_constants
from jsonlens.core.exceptions import EXPECTED_ERRORS
from jsonlens.core.json_error_highlight_core import (
    compute_highlight,
    scroll_target_for,
    visual_row_counts,
)
from jsonlens.core.json_models import HighlightRegion

_LOG = logging.getLogger(__name__)

# (font spec) -> (linespace px, average char width px)
FontMetricsFn = Callable[[Any], tuple[float, float]]


@dataclass(frozen=True, slots=True)
class SurfaceMetrics:
    line_height_px: float
    padding_top_px: float
    viewport_height_px: float
    wrap_columns: Optional[int] = None


def tk_font_metrics(font_spec: Any) -> tuple[float, float]:
    import tkinter.font as tkfont

    font = tkfont.Font(font=font_spec)
    return float(font.metrics("linespace")), float(max(1, font.measure("0")))


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except EXPECTED_ERRORS:
        return float(default)


def widget_text(widget: Any) -> str:
    return str(widget.get("1.0", "end-1c"))


def surface_metrics(widget: Any, font_metrics_fn: Optional[FontMetricsFn] = None) -> SurfaceMetrics:
    """Line height, top padding, viewport height and wrap width of ``widget``."""
    measure = font_metrics_fn or tk_font_metrics
    line_height, char_width = measure(widget.cget("font"))
    padding_top = _to_float(widget.cget("pady")) + _to_float(widget.cget("borderwidth"))
    viewport = _to_float(widget.winfo_height())
    wrap_columns = None
    if str(widget.cget("wrap") or "none") != "none" and char_width > 0:
        usable = _to_float(widget.winfo_width()) - 2 * (_to_float(widget.cget("padx")) + _to_float(widget.cget("borderwidth")))
        wrap_columns = max(1, int(usable // char_width))
    return SurfaceMetrics(
        line_height_px=line_height,
        padding_top_px=padding_top,
        viewport_height_px=viewport,
        wrap_columns=wrap_columns,
    )


def clear_error_highlight(widget: Any) -> None:
    try:
        widget.tag_remove(app_constants.ERROR_LINE_TAG, "1.0", "end")
    except EXPECTED_ERRORS as exc:
        _LOG.debug("expected_error", exc_info=exc)


def highlight_error_line(
    widget: Any,
    line: int,
    font_metrics_fn: Optional[FontMetricsFn] = None,
) -> Optional[HighlightRegion]:
    """Tag the error line and return its pixel band (``None`` when out of range)."""
    clear_error_highlight(widget)
    text = widget_text(widget)
    metrics = surface_metrics(widget, font_metrics_fn)
    region = compute_highlight(
        text,
        line,
        metrics.line_height_px,
        metrics.padding_top_px,
        wrap_columns=metrics.wrap_columns,
    )
    if region is None:
        return None
    widget.tag_add(app_constants.ERROR_LINE_TAG, f"{int(line)}.0", f"{int(line)}.0 lineend +1c")
    return region


def jump_to_error(
    widget: Any,
    line: int,
    font_metrics_fn: Optional[FontMetricsFn] = None,
) -> Optional[float]:
    """Scroll so ``line`` is centred; returns the target offset in pixels."""
    text = widget_text(widget)
    metrics = surface_metrics(widget, font_metrics_fn)
    target = scroll_target_for(
        text,
        line,
        metrics.line_height_px,
        metrics.viewport_height_px,
        wrap_columns=metrics.wrap_columns,
    )
    if target is None:
        return None
    total_rows = sum(visual_row_counts(text.split("\n"), metrics.wrap_columns))
    content_height = max(1.0, total_rows * metrics.line_height_px)
    widget.yview_moveto(min(1.0, target / content_height))
    widget.mark_set("insert", f"{int(line)}.0")
    widget.focus_set()
    return target
