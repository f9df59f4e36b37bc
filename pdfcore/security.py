"""Standard security handler: encrypt, decrypt and encryption detection.

Passwords only live for the duration of a call; nothing here stores them.
"""

import enum

import fitz

from pdfcore import document
from pdfcore.document import LoadStatus
from pdfcore.errors import (
    DecryptionError, EncryptionError, IncorrectPasswordError, NotEncryptedError,
    PDFToolError,
)
from pdfcore.raster import DEFAULT_SCALE, iter_page_rasters, raster_to_page

# fitz permission bits
PERM_PRINT = fitz.PDF_PERM_PRINT
PERM_MODIFY = fitz.PDF_PERM_MODIFY
PERM_COPY = fitz.PDF_PERM_COPY
PERM_ANNOTATE = fitz.PDF_PERM_ANNOTATE
PERM_ALL = PERM_PRINT | PERM_MODIFY | PERM_COPY | PERM_ANNOTATE

ENCRYPTION_METHODS = {
    'aes-256': fitz.PDF_ENCRYPT_AES_256,
    'aes-128': fitz.PDF_ENCRYPT_AES_128,
    'rc4-128': fitz.PDF_ENCRYPT_RC4_128,
}

DECRYPT_MODES = ('raster', 'structural')


class EncryptionState(enum.Enum):
    NOT_ENCRYPTED = 'not_encrypted'
    ENCRYPTED = 'encrypted'
    UNKNOWN = 'unknown'


def permissions_mask(allow_print=True, allow_copy=True,
                     allow_modify=True, allow_annotate=True):
    perm = 0
    if allow_print:
        perm |= PERM_PRINT
    if allow_copy:
        perm |= PERM_COPY
    if allow_modify:
        perm |= PERM_MODIFY
    if allow_annotate:
        perm |= PERM_ANNOTATE
    return perm


def detect_encryption(data):
    """Open without a password and classify the outcome."""
    outcome = document.try_load(data)
    if outcome.ok:
        outcome.document.close()
        return EncryptionState.NOT_ENCRYPTED
    if outcome.status is LoadStatus.NEEDS_PASSWORD:
        return EncryptionState.ENCRYPTED
    return EncryptionState.UNKNOWN


def encrypt(data, user_password, owner_password=None,
            permissions=PERM_ALL, method='aes-256'):
    """Return ``data`` re-serialized behind the standard security handler.

    ``user_password`` opens the document for viewing; ``owner_password``
    (defaults to the user password) lifts the permission restrictions.
    """
    if not user_password:
        raise EncryptionError("A user password is required")
    if method not in ENCRYPTION_METHODS:
        raise EncryptionError(f"Unknown encryption method: {method}")
    owner_password = owner_password or user_password

    doc = document.load(data)
    try:
        out = doc.tobytes(
            encryption=ENCRYPTION_METHODS[method],
            user_pw=user_password,
            owner_pw=owner_password,
            permissions=permissions,
        )
    except RuntimeError as e:
        raise EncryptionError(f"Encryption failed: {e}") from e
    finally:
        doc.close()

    if not out:
        raise EncryptionError("Encryption produced an empty document")
    return out


def _open_encrypted(data, password):
    outcome = document.try_load(data, password=password or '')
    if outcome.status is LoadStatus.WRONG_PASSWORD:
        raise IncorrectPasswordError("Incorrect password")
    if not outcome.ok:
        raise DecryptionError(outcome.message)

    doc = outcome.document
    if not (doc.metadata or {}).get('encryption'):
        doc.close()
        raise NotEncryptedError("This PDF is not encrypted")
    return doc


def _rebuild_from_rasters(doc, scale, cancel):
    out = document.create_empty()
    try:
        for raster in iter_page_rasters(doc, scale=scale, cancel=cancel):
            width, height = document.page_size(doc[raster.page_index])
            raster_to_page(out, raster, width, height)
        return document.save(out)
    finally:
        out.close()


def decrypt(data, password, mode='raster', scale=DEFAULT_SCALE, cancel=None):
    """Authenticate with ``password`` and return an unencrypted document.

    ``mode='raster'`` renders every page at ``scale`` and re-embeds it as a
    full-page image in a new document: visually faithful, but text, vectors
    and metadata are not carried over. ``mode='structural'`` re-saves the
    authenticated document without its encryption dictionary, keeping the
    original content.
    """
    if mode not in DECRYPT_MODES:
        raise ValueError(f"mode must be one of {DECRYPT_MODES}, got {mode!r}")

    doc = _open_encrypted(data, password)
    try:
        if mode == 'structural':
            out = doc.tobytes(encryption=fitz.PDF_ENCRYPT_NONE)
        else:
            out = _rebuild_from_rasters(doc, scale, cancel)
    except PDFToolError:
        raise
    except RuntimeError as e:
        raise DecryptionError(f"Decryption failed: {e}") from e
    finally:
        doc.close()

    if not out:
        raise DecryptionError("Decryption produced an empty document")
    return out
