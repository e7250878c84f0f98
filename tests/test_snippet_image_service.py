from PIL import Image

from jsonlens.core import constants as app_constants
from jsonlens.core.json_models import ErrorContext
from jsonlens.services.snippet_image_service import render_error_snippet, save_error_snippet, snippet_rows

CONTEXT = ErrorContext(before_lines=("{",), error_line='  "a": 1', after_lines=('  "b": 2', "}"))


def test_rows_are_numbered_from_context():
    assert snippet_rows(CONTEXT, 2) == [
        (1, "{", False),
        (2, '  "a": 1', True),
        (3, '  "b": 2', False),
        (4, "}", False),
    ]


def test_render_tints_error_row():
    image = render_error_snippet(CONTEXT, 2, theme="light")
    palette = app_constants.SNIPPET_PALETTES["light"]
    assert image.mode == "RGBA"
    assert image.getpixel((0, 0))[:3] == palette["bg"]
    column = [image.getpixel((0, y))[:3] for y in range(image.height)]
    assert palette["error_bg"] in column


def test_unknown_theme_falls_back_to_dark():
    image = render_error_snippet(CONTEXT, 2, theme="neon")
    assert image.getpixel((0, 0))[:3] == app_constants.SNIPPET_PALETTES["dark"]["bg"]


def test_save_png(tmp_path):
    path = tmp_path / "snippet.png"
    assert save_error_snippet(CONTEXT, 2, str(path)) == str(path)
    with Image.open(path) as image:
        assert image.format == "PNG"
