"""Document model adapter over PyMuPDF.

Every engine operation loads a fresh ``fitz.Document`` from bytes, mutates
it, serializes it back to bytes and closes it. Nothing is shared between
calls.
"""

import enum
from dataclasses import dataclass, field

import fitz

from pdfcore.errors import (
    IncorrectPasswordError, IndexOutOfRange, LoadError, PasswordRequiredError,
)

METADATA_FIELDS = ('title', 'author', 'subject', 'keywords', 'creator', 'producer')


class LoadStatus(enum.Enum):
    OK = 'ok'
    NEEDS_PASSWORD = 'needs_password'
    WRONG_PASSWORD = 'wrong_password'
    MALFORMED = 'malformed'


@dataclass
class LoadOutcome:
    """Tagged result of an open attempt. ``document`` is set only for OK."""

    status: LoadStatus
    document: object = None
    message: str = ''

    @property
    def ok(self):
        return self.status is LoadStatus.OK


@dataclass
class PageInfo:
    index: int
    width: float
    height: float
    rotation: int


@dataclass
class DocumentInfo:
    page_count: int
    pages: list = field(default_factory=list)
    metadata: dict = field(default_factory=dict)
    encrypted: bool = False


def try_load(data, password=None):
    """Open ``data`` and classify the result without raising.

    Classification uses the library's structured state (``needs_pass`` and the
    return value of ``authenticate``), never the text of an error message.
    """
    if not data:
        return LoadOutcome(LoadStatus.MALFORMED, message="Empty input")
    try:
        doc = fitz.open(stream=bytes(data), filetype="pdf")
    except (RuntimeError, ValueError) as e:
        # fitz.FileDataError / EmptyFileError derive from RuntimeError
        return LoadOutcome(LoadStatus.MALFORMED, message=str(e))

    if doc.needs_pass:
        if password is None:
            doc.close()
            return LoadOutcome(LoadStatus.NEEDS_PASSWORD,
                               message="Document is password protected")
        if not doc.authenticate(password):
            doc.close()
            return LoadOutcome(LoadStatus.WRONG_PASSWORD,
                               message="Incorrect password")

    if doc.page_count == 0:
        doc.close()
        return LoadOutcome(LoadStatus.MALFORMED, message="Document has no pages")

    return LoadOutcome(LoadStatus.OK, document=doc)


def load(data, password=None):
    """Open PDF bytes, raising the matching engine error on failure."""
    outcome = try_load(data, password=password)
    if outcome.status is LoadStatus.NEEDS_PASSWORD:
        raise PasswordRequiredError(outcome.message)
    if outcome.status is LoadStatus.WRONG_PASSWORD:
        raise IncorrectPasswordError(outcome.message)
    if outcome.status is LoadStatus.MALFORMED:
        raise LoadError(f"Not a valid PDF: {outcome.message}")
    return outcome.document


def create_empty():
    return fitz.open()


def check_index(doc, index):
    if not isinstance(index, int) or not 0 <= index < doc.page_count:
        raise IndexOutOfRange(index, doc.page_count)


def copy_pages(source, indices, target):
    """Append deep copies of ``source`` pages to ``target`` in the given order.

    All indices are validated before anything is copied, so a bad index leaves
    ``target`` untouched. Duplicates produce duplicate pages.

    Returns:
        list of the new ``fitz.Page`` objects in ``target``
    """
    indices = list(indices)
    for index in indices:
        check_index(source, index)

    start = target.page_count
    for index in indices:
        target.insert_pdf(source, from_page=index, to_page=index)
    return [target[i] for i in range(start, target.page_count)]


def rotate_page(page, delta):
    """Add ``delta`` degrees to the page's cumulative rotation."""
    page.set_rotation((page.rotation + delta) % 360)


def page_size(page):
    rect = page.rect
    return rect.width, rect.height


def get_metadata(doc):
    meta = doc.metadata or {}
    return {key: meta.get(key) or '' for key in METADATA_FIELDS}


def set_metadata(doc, **fields):
    """Update the given metadata fields, keeping the others."""
    unknown = set(fields) - set(METADATA_FIELDS)
    if unknown:
        raise ValueError(f"Unknown metadata fields: {', '.join(sorted(unknown))}")
    meta = get_metadata(doc)
    meta.update({k: v or '' for k, v in fields.items()})
    doc.set_metadata(meta)


def clear_metadata(doc):
    doc.set_metadata({key: '' for key in METADATA_FIELDS})
    doc.del_xml_metadata()


def save(doc, compact=False):
    """Serialize ``doc`` to bytes.

    ``compact`` collects unused objects, deflates streams and writes objects
    into object streams with a cross-reference stream.
    """
    if compact:
        return doc.tobytes(garbage=3, deflate=True, use_objstms=1)
    return doc.tobytes()


def describe(doc):
    pages = []
    for page in doc:
        width, height = page_size(page)
        pages.append(PageInfo(index=page.number, width=width, height=height,
                              rotation=page.rotation))
    return DocumentInfo(
        page_count=doc.page_count,
        pages=pages,
        metadata=get_metadata(doc),
        encrypted=bool((doc.metadata or {}).get('encryption')),
    )


def inspect(data, password=None):
    """Page sizes, rotations, metadata and encryption state of PDF bytes."""
    doc = load(data, password=password)
    try:
        return describe(doc)
    finally:
        doc.close()


def page_count(data, password=None):
    doc = load(data, password=password)
    try:
        return doc.page_count
    finally:
        doc.close()
