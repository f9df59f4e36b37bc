"""Shared fixtures: PDFs authored with reportlab, images with Pillow, all in memory."""

import io

import fitz
import pytest
from PIL import Image
from reportlab.lib.pagesizes import A4, letter
from reportlab.pdfgen import canvas

from pdfcore import security

METADATA = {
    'title': "Quarterly Report",
    'author': "Jane Tester",
    'subject': "Testing",
    'keywords': "pdf test",
    'creator': "pytest",
}


def make_pdf(page_count=3, label="Doc", pagesizes=None, metadata=METADATA):
    """One line of text per page: '<label> page <n>'."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    if metadata:
        c.setTitle(metadata.get('title', ''))
        c.setAuthor(metadata.get('author', ''))
        c.setSubject(metadata.get('subject', ''))
        c.setKeywords(metadata.get('keywords', ''))
        c.setCreator(metadata.get('creator', ''))
    for i in range(page_count):
        size = pagesizes[i] if pagesizes else letter
        c.setPageSize(size)
        c.setFont("Helvetica", 24)
        c.drawString(72, size[1] - 72, f"{label} page {i + 1}")
        c.rect(72, 72, size[0] - 144, 200, stroke=1, fill=0)
        c.showPage()
    c.save()
    return buf.getvalue()


def make_image(width=40, height=30, fmt="PNG", color=(200, 30, 30)):
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format=fmt)
    return buf.getvalue()


def page_texts(data, password=None):
    doc = fitz.open(stream=data, filetype="pdf")
    if password is not None:
        doc.authenticate(password)
    try:
        return [page.get_text().strip() for page in doc]
    finally:
        doc.close()


def page_rotations(data):
    doc = fitz.open(stream=data, filetype="pdf")
    try:
        return [page.rotation for page in doc]
    finally:
        doc.close()


def open_pdf(data):
    return fitz.open(stream=data, filetype="pdf")


@pytest.fixture
def three_page_pdf():
    return make_pdf(3, label="Alpha")


@pytest.fixture
def two_page_pdf():
    return make_pdf(2, label="Beta", pagesizes=[A4, A4])


@pytest.fixture
def png_bytes():
    return make_image(40, 30, "PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image(64, 48, "JPEG", color=(30, 30, 200))


@pytest.fixture
def encrypted_pdf(three_page_pdf):
    return security.encrypt(three_page_pdf, "user-secret", "owner-secret")
