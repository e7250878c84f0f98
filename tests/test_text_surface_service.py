from conftest import FakeTextWidget

from jsonlens.core import constants as app_constants
from jsonlens.core.json_models import HighlightRegion
from jsonlens.services.text_surface_service import (
    SurfaceMetrics,
    clear_error_highlight,
    highlight_error_line,
    jump_to_error,
    surface_metrics,
)


def test_surface_metrics_without_wrap(font_metrics):
    widget = FakeTextWidget("a\nb")
    assert surface_metrics(widget, font_metrics) == SurfaceMetrics(20.0, 3.0, 200.0, None)


def test_surface_metrics_with_wrap(font_metrics):
    widget = FakeTextWidget("a\nb", wrap="word")
    # (400 - 2 * (0 + 1)) // 10
    assert surface_metrics(widget, font_metrics).wrap_columns == 39


def test_highlight_tags_error_line(font_metrics):
    widget = FakeTextWidget("a\nb\nc")
    region = highlight_error_line(widget, 2, font_metrics)
    assert region == HighlightRegion(top_offset_px=23.0, height_px=20.0)
    assert widget.tags == [(app_constants.ERROR_LINE_TAG, "2.0", "2.0 lineend +1c")]
    assert widget.removed == [app_constants.ERROR_LINE_TAG]


def test_highlight_out_of_range_only_clears(font_metrics):
    widget = FakeTextWidget("a")
    assert highlight_error_line(widget, 5, font_metrics) is None
    assert widget.tags == []
    assert widget.removed == [app_constants.ERROR_LINE_TAG]


def test_jump_to_error_centres_line(font_metrics):
    widget = FakeTextWidget("\n".join(["x"] * 30))
    target = jump_to_error(widget, 20, font_metrics)
    assert target == 290.0
    assert widget.yview_fraction == 290.0 / 600.0
    assert widget.marks["insert"] == "20.0"
    assert widget.focused


def test_jump_out_of_range(font_metrics):
    widget = FakeTextWidget("x")
    assert jump_to_error(widget, 3, font_metrics) is None
    assert widget.yview_fraction is None


class _BrokenWidget:
    def tag_remove(self, *args):
        raise RuntimeError("widget destroyed")


def test_clear_on_destroyed_widget():
    clear_error_highlight(_BrokenWidget())
