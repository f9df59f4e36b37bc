"""Centered, rotated, semi-transparent text watermark."""

import fitz

from pdfcore import document
from pdfcore.errors import EmptyTextError

# Helvetica-Bold (PDF Base-14); text width comes from its glyph metrics
FONT_NAME = "hebo"
TEXT_COLOR = (0.5, 0.5, 0.5)

DEFAULT_FONT_SIZE = 48
DEFAULT_OPACITY = 0.3
DEFAULT_ROTATION = -45


def text_width(text, font_size=DEFAULT_FONT_SIZE):
    return fitz.get_text_length(text, fontname=FONT_NAME, fontsize=font_size)


def anchor_point(page_width, page_height, width):
    """Baseline origin of the text: horizontally centered, at half height."""
    return (page_width - width) / 2, page_height / 2


def _draw(page, text, font_size, opacity, rotation):
    page_width, page_height = document.page_size(page)
    width = text_width(text, font_size)
    x, y = anchor_point(page_width, page_height, width)
    origin = fitz.Point(x, y)
    # positive angles turn counter-clockwise; fitz has y pointing down
    page.insert_text(
        origin, text,
        fontname=FONT_NAME,
        fontsize=font_size,
        color=TEXT_COLOR,
        fill_opacity=opacity,
        stroke_opacity=opacity,
        morph=(origin, fitz.Matrix(-rotation)),
        overlay=True,
    )


def add_watermark(data, text, font_size=DEFAULT_FONT_SIZE,
                  opacity=DEFAULT_OPACITY, rotation=DEFAULT_ROTATION):
    """Stamp ``text`` on every page with identical placement.

    The Base-14 font is registered once per document and referenced from every
    page.
    """
    if not text or not text.strip():
        raise EmptyTextError("Watermark text must not be empty")
    if font_size <= 0:
        raise ValueError(f"font_size must be positive, got {font_size!r}")
    opacity = max(0.0, min(1.0, float(opacity)))

    doc = document.load(data)
    try:
        for page in doc:
            _draw(page, text, font_size, opacity, float(rotation))
        return document.save(doc)
    finally:
        doc.close()
