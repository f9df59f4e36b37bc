"""Rasterization bridge: page → pixels, pixels → page.

Multi-page loops are lazy generators that render one page per step, so only
one raster buffer is alive at a time. A ``CancelToken`` is checked before
each page.
"""

import io
import threading
from dataclasses import dataclass

import fitz
from PIL import Image

from pdfcore import document
from pdfcore.errors import OperationCancelled

DEFAULT_SCALE = 2.0
IMAGE_FORMATS = ('PNG', 'JPEG')


class CancelToken:
    """Thread-safe flag a caller sets to stop a running page loop."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self):
        return self._event.is_set()

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise OperationCancelled("Operation cancelled")

    def reset(self):
        """Re-arm the token so the next run starts uncancelled."""
        self._event.clear()


@dataclass
class Raster:
    page_index: int
    width: int
    height: int
    data: bytes
    image_format: str = 'PNG'

    @property
    def media_type(self):
        return 'image/png' if self.image_format == 'PNG' else 'image/jpeg'

    @property
    def extension(self):
        return '.png' if self.image_format == 'PNG' else '.jpg'


def _encode(pix, image_format, jpeg_quality):
    if image_format == 'PNG':
        return pix.tobytes("png")
    img = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
    buf = io.BytesIO()
    img.save(buf, format='JPEG', quality=jpeg_quality)
    return buf.getvalue()


def render_page_to_raster(doc, page_index, scale=DEFAULT_SCALE,
                          image_format='PNG', jpeg_quality=95):
    """Render one page of an open document into an encoded RGB image."""
    if image_format not in IMAGE_FORMATS:
        raise ValueError(f"Unsupported image format: {image_format}")
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale!r}")
    document.check_index(doc, page_index)

    pix = doc[page_index].get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
    return Raster(
        page_index=page_index,
        width=pix.width,
        height=pix.height,
        data=_encode(pix, image_format, jpeg_quality),
        image_format=image_format,
    )


def iter_page_rasters(doc, scale=DEFAULT_SCALE, indices=None, cancel=None,
                      image_format='PNG', jpeg_quality=95):
    """Yield a ``Raster`` per page, strictly in order, one page at a time."""
    targets = range(doc.page_count) if indices is None else list(indices)
    for index in targets:
        if cancel is not None:
            cancel.raise_if_cancelled()
        yield render_page_to_raster(doc, index, scale=scale,
                                    image_format=image_format,
                                    jpeg_quality=jpeg_quality)


def raster_to_page(doc, raster, width=None, height=None):
    """Append a page showing ``raster`` over its whole area.

    Without explicit dimensions the page takes the raster's pixel size.
    """
    width = raster.width if width is None else width
    height = raster.height if height is None else height
    page = doc.new_page(width=width, height=height)
    page.insert_image(page.rect, stream=raster.data)
    return page


def pdf_to_images(data, scale=DEFAULT_SCALE, image_format='PNG', indices=None,
                  cancel=None, password=None, jpeg_quality=95):
    """Lazily render PDF bytes to images.

    Nothing is loaded until the first item is requested; iterating again
    starts over from the source bytes.
    """
    doc = document.load(data, password=password)
    try:
        yield from iter_page_rasters(doc, scale=scale, indices=indices,
                                     cancel=cancel, image_format=image_format,
                                     jpeg_quality=jpeg_quality)
    finally:
        doc.close()
