"""Render an error context window to an image for issue reports."""

from __future__ import annotations

import logging
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from jsonlens.core import constants as app_constants
from jsonlens.core.json_models import ErrorContext

_LOG = logging.getLogger(__name__)

PAD_X = 10
PAD_Y = 8
GUTTER_GAP = 12
MARKER_TEXT = "<- error here"


def _rgba(rgb, alpha=255):
    return (int(rgb[0]), int(rgb[1]), int(rgb[2]), int(alpha))


def _load_font(font_path: Optional[str], size: int):
    if font_path:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError as exc:
            _LOG.debug("expected_error", exc_info=exc)
    return ImageFont.load_default()


def snippet_rows(context: ErrorContext, error_line_number: int) -> list[tuple[int, str, bool]]:
    """(line number, text, is_error) rows in display order."""
    start = int(error_line_number) - len(context.before_lines)
    rows = [(start + idx, text, False) for idx, text in enumerate(context.before_lines)]
    rows.append((int(error_line_number), context.error_line, True))
    rows.extend(
        (int(error_line_number) + idx + 1, text, False) for idx, text in enumerate(context.after_lines)
    )
    return rows


def render_error_snippet(
    context: ErrorContext,
    error_line_number: int,
    theme: str = "dark",
    font_path: Optional[str] = None,
    font_size: int = 14,
) -> Image.Image:
    """Draw numbered context lines with the error line tinted."""
    palette = app_constants.SNIPPET_PALETTES.get(theme, app_constants.SNIPPET_PALETTES["dark"])
    font = _load_font(font_path, font_size)
    rows = snippet_rows(context, error_line_number)

    measure = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
    gutter_width = max(measure.textlength(str(number), font=font) for number, _, _ in rows)
    bbox = measure.textbbox((0, 0), "Ag|", font=font)
    row_height = max(1, bbox[3] - bbox[1]) + 6
    text_width = max(measure.textlength(text or " ", font=font) for _, text, _ in rows)
    marker_width = measure.textlength(f"  {MARKER_TEXT}", font=font)

    width = int(PAD_X * 2 + gutter_width + GUTTER_GAP + text_width + marker_width) + 1
    height = int(PAD_Y * 2 + row_height * len(rows))
    image = Image.new("RGBA", (width, height), _rgba(palette["bg"]))
    draw = ImageDraw.Draw(image)

    text_x = PAD_X + gutter_width + GUTTER_GAP
    for idx, (number, text, is_error) in enumerate(rows):
        y = PAD_Y + idx * row_height
        if is_error:
            draw.rectangle((0, y, width - 1, y + row_height - 1), fill=_rgba(palette["error_bg"]))
        label = str(number)
        label_x = PAD_X + gutter_width - measure.textlength(label, font=font)
        draw.text((label_x, y + 3), label, fill=_rgba(palette["gutter_fg"]), font=font)
        fg = palette["error_fg"] if is_error else palette["fg"]
        draw.text((text_x, y + 3), text or " ", fill=_rgba(fg), font=font)
        if is_error:
            marker_x = text_x + measure.textlength(text or " ", font=font)
            draw.text((marker_x, y + 3), f"  {MARKER_TEXT}", fill=_rgba(palette["marker_fg"]), font=font)
    return image


def save_error_snippet(
    context: ErrorContext,
    error_line_number: int,
    path: str,
    theme: str = "dark",
) -> str:
    image = render_error_snippet(context, error_line_number, theme=theme)
    image.save(path, format="PNG")
    return path
