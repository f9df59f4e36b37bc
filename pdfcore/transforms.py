"""Page transform engine: merge, extract, rotate, organize, images → PDF.

Every transform loads its inputs fresh, builds the output page sequence in
full and returns new PDF bytes. Pages are addressed by position only.
"""

import io
from dataclasses import dataclass, field

from PIL import Image, UnidentifiedImageError

from pdfcore import document
from pdfcore.errors import (
    EmptySelectionError, InvalidRotationError, NoConvertibleImagesError,
    UnsupportedMediaType,
)

VALID_ROTATIONS = (90, 180, 270)

# declared media type → format Pillow must detect
SUPPORTED_MEDIA_TYPES = {
    'image/png': 'PNG',
    'image/jpeg': 'JPEG',
    'image/jpg': 'JPEG',
    'image/pjpeg': 'JPEG',
}

# Pillow reports multi-picture JPEGs from phone cameras as MPO
PAYLOAD_FORMATS = {
    'PNG': {'PNG'},
    'JPEG': {'JPEG', 'MPO'},
}


def _check_delta(delta):
    if not isinstance(delta, int) or delta % 90 != 0:
        raise InvalidRotationError(f"Rotation must be a multiple of 90 degrees, got {delta!r}")
    return delta % 360


def merge(documents):
    """Concatenate every page of every document, in input order.

    Args:
        documents: iterable of PDF bytes

    Returns:
        bytes of the merged PDF
    """
    sources = list(documents)
    if not sources:
        raise EmptySelectionError("Select at least one PDF to merge")

    out = document.create_empty()
    try:
        for data in sources:
            src = document.load(data)
            try:
                document.copy_pages(src, range(src.page_count), out)
            finally:
                src.close()
        return document.save(out)
    finally:
        out.close()


def extract_pages(data, indices):
    """New document holding ``indices`` (0-based) in the given order."""
    indices = list(indices)
    if not indices:
        raise EmptySelectionError("Select at least one page")

    src = document.load(data)
    out = document.create_empty()
    try:
        document.copy_pages(src, indices, out)
        return document.save(out)
    finally:
        out.close()
        src.close()


def rotate(data, angle, indices=None):
    """Add ``angle`` to the rotation of the targeted pages (default: all).

    Indices outside the document are skipped without error.
    """
    if angle not in VALID_ROTATIONS:
        raise InvalidRotationError(f"Rotate angle must be 90 / 180 / 270, got {angle!r}")

    doc = document.load(data)
    try:
        targets = range(doc.page_count) if indices is None else indices
        for index in targets:
            if isinstance(index, int) and 0 <= index < doc.page_count:
                document.rotate_page(doc[index], angle)
        return document.save(doc)
    finally:
        doc.close()


@dataclass
class PageOrderEntry:
    """One source page in the organize list.

    ``original_index`` is the page's identity and never changes; the entry's
    position in the list is its output position.
    """

    original_index: int
    rotation: int = 0
    deleted: bool = False

    @classmethod
    def coerce(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return cls(
                original_index=value.get('original_index', value.get('originalIndex')),
                rotation=value.get('rotation', 0),
                deleted=bool(value.get('deleted', False)),
            )
        raise TypeError(f"Cannot build a page order entry from {value!r}")


class PageOrder:
    """Editable page list for one source document.

    Usage::

        order = PageOrder(page_count=4)
        order.move(3, 'up')
        order.rotate(0)
        order.delete(2)
        pdf = organize(data, order.active_entries())
    """

    def __init__(self, page_count):
        self.entries = [PageOrderEntry(original_index=i) for i in range(page_count)]

    @classmethod
    def from_pdf(cls, data):
        doc = document.load(data)
        try:
            return cls(doc.page_count)
        finally:
            doc.close()

    def __len__(self):
        return len(self.entries)

    def position_of(self, original_index):
        for pos, entry in enumerate(self.entries):
            if entry.original_index == original_index:
                return pos
        raise KeyError(original_index)

    def entry(self, original_index):
        return self.entries[self.position_of(original_index)]

    def move(self, original_index, direction):
        """Swap the entry with its neighbour. Moving past either end is a no-op."""
        if direction not in ('up', 'down'):
            raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")
        pos = self.position_of(original_index)
        new_pos = pos - 1 if direction == 'up' else pos + 1
        if 0 <= new_pos < len(self.entries):
            self.entries[pos], self.entries[new_pos] = self.entries[new_pos], self.entries[pos]

    def move_to(self, original_index, new_position):
        entry = self.entries.pop(self.position_of(original_index))
        new_position = max(0, min(int(new_position), len(self.entries)))
        self.entries.insert(new_position, entry)

    def rotate(self, original_index, delta=90):
        entry = self.entry(original_index)
        entry.rotation = (entry.rotation + _check_delta(delta)) % 360

    def delete(self, original_index):
        self.entry(original_index).deleted = True

    def restore(self, original_index):
        self.entry(original_index).deleted = False

    def reverse(self):
        self.entries.reverse()

    def active_entries(self):
        return [e for e in self.entries if not e.deleted]


def organize(data, entries):
    """Rebuild the document from ``entries`` in list order.

    Deleted entries are dropped; each remaining page gets its entry's rotation
    added on top of its own.
    """
    active = [e for e in map(PageOrderEntry.coerce, entries) if not e.deleted]
    if not active:
        raise EmptySelectionError("At least one page must remain")
    deltas = [_check_delta(e.rotation) for e in active]

    src = document.load(data)
    out = document.create_empty()
    try:
        pages = document.copy_pages(src, [e.original_index for e in active], out)
        for page, delta in zip(pages, deltas):
            if delta:
                document.rotate_page(page, delta)
        return document.save(out)
    finally:
        out.close()
        src.close()


def reverse(data):
    src = document.load(data)
    try:
        count = src.page_count
    finally:
        src.close()
    return organize(data, [PageOrderEntry(i) for i in range(count - 1, -1, -1)])


@dataclass
class ImageInput:
    name: str
    data: bytes
    media_type: str


@dataclass
class ImagesToPdfResult:
    pdf: bytes
    page_count: int
    skipped: list = field(default_factory=list)
    skip_records: list = field(default_factory=list)


def _probe_image(image):
    """Return (width, height) in pixels, or an UnsupportedMediaType record."""
    media_type = (image.media_type or '').lower().strip()
    expected = SUPPORTED_MEDIA_TYPES.get(media_type)
    if expected is None:
        return UnsupportedMediaType(image.name, media_type)
    try:
        with Image.open(io.BytesIO(image.data)) as img:
            actual = img.format
            size = img.size
    except (UnidentifiedImageError, OSError):
        return UnsupportedMediaType(image.name, media_type, "unreadable image data")
    if actual not in PAYLOAD_FORMATS[expected]:
        return UnsupportedMediaType(image.name, media_type,
                                    f"content is {actual}, not {expected}")
    return size


def images_to_pdf(images):
    """One page per PNG/JPEG image, sized to the image's pixel dimensions.

    Unsupported images are skipped and reported; only an input with no
    convertible image at all raises.
    """
    doc = document.create_empty()
    skip_records = []
    try:
        for image in images:
            probe = _probe_image(image)
            if isinstance(probe, UnsupportedMediaType):
                skip_records.append(probe)
                continue
            width, height = probe
            page = doc.new_page(width=width, height=height)
            page.insert_image(page.rect, stream=image.data)

        if doc.page_count == 0:
            raise NoConvertibleImagesError([r.name for r in skip_records])

        return ImagesToPdfResult(
            pdf=document.save(doc),
            page_count=doc.page_count,
            skipped=[r.name for r in skip_records],
            skip_records=skip_records,
        )
    finally:
        doc.close()
