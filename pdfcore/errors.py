"""Error taxonomy shared by every engine operation.

Structural errors abort the whole operation; no partial document is returned.
Per-item problems in batch operations are collected instead of raised.
"""

from dataclasses import dataclass


class PDFToolError(Exception):
    """Base class for all engine errors."""


class LoadError(PDFToolError):
    """The bytes are not a well-formed PDF container."""


class PasswordRequiredError(PDFToolError):
    """The container is encrypted and no password was supplied."""


class IncorrectPasswordError(PDFToolError):
    """The supplied password did not authenticate."""


class IndexOutOfRange(PDFToolError, IndexError):
    """A page reference points outside the document."""

    def __init__(self, index, page_count):
        super().__init__(f"Page index {index} out of range (document has {page_count} pages)")
        self.index = index
        self.page_count = page_count


class EmptySelectionError(PDFToolError, ValueError):
    """At least one page must be selected."""


class EmptyTextError(PDFToolError, ValueError):
    """Watermark text is empty."""


class InvalidRotationError(PDFToolError, ValueError):
    """Rotation is not a multiple of 90 degrees."""


class NoConvertibleImagesError(PDFToolError):
    """None of the supplied images could be converted."""

    def __init__(self, skipped=()):
        super().__init__("No convertible images")
        self.skipped = list(skipped)


class EncryptionError(PDFToolError):
    pass


class DecryptionError(PDFToolError):
    pass


class NotEncryptedError(DecryptionError):
    """Decrypt was asked to open a document that has no security handler."""


class ContentTooLarge(PDFToolError):
    """HTML input or its rendered raster exceeds the configured guard."""


class OperationCancelled(PDFToolError):
    pass


@dataclass(frozen=True)
class UnsupportedMediaType:
    """Skip record for an image that cannot become a page. Never raised."""

    name: str
    media_type: str
    reason: str = "unsupported media type"
