import io

import pytest
from PIL import Image

from pdfcore import document, raster
from pdfcore.errors import (
    IndexOutOfRange, LoadError, OperationCancelled, PasswordRequiredError,
)

from conftest import make_pdf


def test_render_at_scale(three_page_pdf):
    doc = document.load(three_page_pdf)
    try:
        image = raster.render_page_to_raster(doc, 0, scale=2.0)
    finally:
        doc.close()
    assert (image.width, image.height) == (1224, 1584)
    assert image.media_type == 'image/png'
    with Image.open(io.BytesIO(image.data)) as img:
        assert img.format == 'PNG'
        assert img.size == (1224, 1584)


def test_render_jpeg(three_page_pdf):
    doc = document.load(three_page_pdf)
    try:
        image = raster.render_page_to_raster(doc, 1, scale=1.0, image_format='JPEG')
    finally:
        doc.close()
    assert image.extension == '.jpg'
    with Image.open(io.BytesIO(image.data)) as img:
        assert img.format == 'JPEG'


def test_render_bad_index(three_page_pdf):
    doc = document.load(three_page_pdf)
    try:
        with pytest.raises(IndexOutOfRange):
            raster.render_page_to_raster(doc, 3)
        with pytest.raises(ValueError):
            raster.render_page_to_raster(doc, 0, image_format='BMP')
    finally:
        doc.close()


def test_pdf_to_images_is_lazy_and_ordered(three_page_pdf):
    images = raster.pdf_to_images(three_page_pdf, scale=0.5)
    first = next(images)
    assert first.page_index == 0
    rest = list(images)
    assert [r.page_index for r in rest] == [1, 2]


def test_pdf_to_images_defers_loading():
    images = raster.pdf_to_images(b"not a pdf")
    with pytest.raises(LoadError):
        next(images)


def test_pdf_to_images_subset():
    data = make_pdf(5)
    assert [r.page_index for r in raster.pdf_to_images(data, scale=0.25, indices=[4, 1])] == [4, 1]


def test_pdf_to_images_needs_password(encrypted_pdf):
    with pytest.raises(PasswordRequiredError):
        list(raster.pdf_to_images(encrypted_pdf))
    assert len(list(raster.pdf_to_images(encrypted_pdf, scale=0.25, password="user-secret"))) == 3


def test_cancel_between_pages(three_page_pdf):
    token = raster.CancelToken()
    seen = []
    with pytest.raises(OperationCancelled):
        for image in raster.pdf_to_images(three_page_pdf, scale=0.25, cancel=token):
            seen.append(image.page_index)
            token.cancel()
    assert seen == [0]
    assert token.cancelled


def test_raster_to_page_uses_pixel_size_by_default(three_page_pdf):
    src = document.load(three_page_pdf)
    out = document.create_empty()
    try:
        image = raster.render_page_to_raster(src, 0, scale=0.5)
        page = raster.raster_to_page(out, image)
        assert (page.rect.width, page.rect.height) == pytest.approx((306, 396))
        page = raster.raster_to_page(out, image, 612, 792)
        assert (page.rect.width, page.rect.height) == pytest.approx((612, 792))
    finally:
        out.close()
        src.close()
