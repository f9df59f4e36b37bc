"""HTML → PDF through a raster: sanitize, render one tall image, slice into pages.

Rendering is delegated to a ``dom_to_raster(html, scale)`` callable returning
a Pillow image. The default lays the HTML out with ``fitz.Story`` and renders
the filled area.
"""

import functools
import io
import re

import bleach
import fitz
from PIL import Image

from pdfcore import document
from pdfcore.errors import ContentTooLarge

MAX_HTML_CHARS = 500_000
MAX_RASTER_HEIGHT = 16_000

# standard page sizes in points (72 pt per inch)
PAGE_FORMATS = {
    'a4': (595.28, 841.89),
    'letter': (612, 792),
}

ALLOWED_TAGS = frozenset({
    'a', 'abbr', 'b', 'blockquote', 'br', 'caption', 'code', 'dd', 'div', 'dl',
    'dt', 'em', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'hr', 'i', 'img', 'li',
    'ol', 'p', 'pre', 'small', 'span', 'strong', 'sub', 'sup', 'table',
    'tbody', 'td', 'tfoot', 'th', 'thead', 'tr', 'u', 'ul',
})
ALLOWED_ATTRIBUTES = frozenset({
    'align', 'alt', 'class', 'colspan', 'height', 'href', 'id', 'rowspan',
    'src', 'title', 'width',
})
ALLOWED_PROTOCOLS = frozenset({'http', 'https', 'mailto', 'data'})

# removed together with their content; bleach alone strips the tag but keeps the text
_FORBIDDEN_BLOCKS = re.compile(
    r"<(script|style|iframe|object|embed)\b.*?</\1\s*>", re.IGNORECASE | re.DOTALL)


def _allow_attribute(tag, name, value):
    if name.startswith('on') or name not in ALLOWED_ATTRIBUTES:
        return False
    return 'javascript:' not in (value or '').lower().replace(' ', '')


def sanitize_html(raw_html):
    """Drop active content: scripts, frames, embeds, event handlers, js: URLs."""
    text = _FORBIDDEN_BLOCKS.sub('', raw_html)
    return bleach.clean(
        text,
        tags=ALLOWED_TAGS,
        attributes=_allow_attribute,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )


def story_to_raster(html, scale, width=PAGE_FORMATS['a4'][0],
                    max_height=MAX_RASTER_HEIGHT):
    """Lay ``html`` out at ``width`` points and render the used area."""
    mediabox = fitz.Rect(0, 0, width, max_height / scale)
    buf = io.BytesIO()
    story = fitz.Story(html=html)
    writer = fitz.DocumentWriter(buf)
    device = writer.begin_page(mediabox)
    more, filled = story.place(mediabox)
    story.draw(device)
    writer.end_page()
    writer.close()
    if more:
        raise ContentTooLarge("Rendered document too tall")

    doc = fitz.open("pdf", buf.getvalue())
    try:
        # place() reports the filled area as a plain (x0, y0, x1, y1) tuple
        clip = fitz.Rect(0, 0, width, max(fitz.Rect(filled).y1, 1))
        pix = doc[0].get_pixmap(matrix=fitz.Matrix(scale, scale), clip=clip, alpha=False)
        return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
    finally:
        doc.close()


def page_dimensions(page_format='a4', orientation='portrait'):
    if page_format not in PAGE_FORMATS:
        raise ValueError(f"Unsupported page format: {page_format}")
    if orientation not in ('portrait', 'landscape'):
        raise ValueError(f"Unsupported orientation: {orientation}")
    width, height = PAGE_FORMATS[page_format]
    if orientation == 'landscape':
        width, height = height, width
    return width, height


def slice_raster(image, page_width, slice_height):
    """Cut ``image`` into strips that fill ``page_width`` × ``slice_height`` points.

    The last strip is padded with white.
    """
    total_height = image.height * page_width / image.width
    strip_px = max(1, int(slice_height / total_height * image.height))
    strips = []
    top = 0
    while top < image.height:
        strip = Image.new("RGB", (image.width, strip_px), (255, 255, 255))
        strip.paste(image.crop((0, top, image.width, min(top + strip_px, image.height))))
        strips.append(strip)
        top += strip_px
    return strips


def html_to_pdf(raw_html, page_format='a4', orientation='portrait',
                max_height_per_page=None, scale=2.0, dom_to_raster=None,
                max_chars=MAX_HTML_CHARS, max_raster_height=MAX_RASTER_HEIGHT):
    """Render HTML to a paginated PDF of raster slices."""
    if len(raw_html) > max_chars:
        raise ContentTooLarge("HTML content too large")

    page_width, page_height = page_dimensions(page_format, orientation)
    html = sanitize_html(raw_html)
    if dom_to_raster is None:
        dom_to_raster = functools.partial(story_to_raster, width=page_width,
                                          max_height=max_raster_height)
    image = dom_to_raster(html, scale).convert("RGB")
    if image.height > max_raster_height:
        raise ContentTooLarge("Rendered document too tall")

    slice_height = page_height
    if max_height_per_page and max_height_per_page > 0:
        slice_height = min(max_height_per_page, page_height)

    doc = document.create_empty()
    try:
        for strip in slice_raster(image, page_width, slice_height):
            buf = io.BytesIO()
            strip.save(buf, format="PNG")
            page = doc.new_page(width=page_width, height=page_height)
            page.insert_image(fitz.Rect(0, 0, page_width, slice_height),
                              stream=buf.getvalue(), keep_proportion=False)
        return document.save(doc)
    finally:
        doc.close()
