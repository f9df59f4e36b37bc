"""Metadata stripping and structural compaction.

Image streams, fonts and page content are left as they are.
"""

from dataclasses import dataclass

from pdfcore import document


@dataclass
class CompressResult:
    pdf: bytes
    original_size: int
    compressed_size: int

    @property
    def ratio(self):
        """Size reduction in percent, relative to the input."""
        if self.original_size <= 0:
            return 0.0
        return round((1 - self.compressed_size / self.original_size) * 100, 1)


def compress_document(data):
    """Clear the info dictionary fields and save with object streams.

    The compacted save is compared against a plain save of the same stripped
    document and the smaller one is returned.
    """
    doc = document.load(data)
    try:
        document.clear_metadata(doc)
        plain = document.save(doc)
        compacted = document.save(doc, compact=True)
    finally:
        doc.close()
    return compacted if len(compacted) <= len(plain) else plain


def compress(data):
    pdf = compress_document(data)
    return CompressResult(pdf=pdf, original_size=len(data), compressed_size=len(pdf))
