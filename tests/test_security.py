import pytest

from pdfcore import document, security
from pdfcore.errors import (
    DecryptionError, EncryptionError, IncorrectPasswordError, NotEncryptedError,
    OperationCancelled, PasswordRequiredError,
)
from pdfcore.raster import CancelToken
from pdfcore.security import EncryptionState

from conftest import open_pdf, page_texts


class TestEncrypt:

    def test_requires_user_password_to_open(self, three_page_pdf):
        out = security.encrypt(three_page_pdf, "s3cret")
        assert out
        with pytest.raises(PasswordRequiredError):
            document.load(out)
        doc = document.load(out, password="s3cret")
        try:
            assert doc.page_count == 3
        finally:
            doc.close()

    def test_content_is_preserved(self, three_page_pdf):
        out = security.encrypt(three_page_pdf, "s3cret")
        assert page_texts(out, password="s3cret") == page_texts(three_page_pdf)

    def test_owner_password_defaults_to_user_password(self, three_page_pdf):
        out = security.encrypt(three_page_pdf, "s3cret")
        doc = open_pdf(out)
        try:
            # bit 4 means authenticated as owner
            assert doc.authenticate("s3cret") & 4
        finally:
            doc.close()

    def test_separate_owner_password(self, encrypted_pdf):
        doc = open_pdf(encrypted_pdf)
        try:
            assert doc.authenticate("owner-secret")
        finally:
            doc.close()
        document.load(encrypted_pdf, password="user-secret").close()

    @pytest.mark.parametrize("method", sorted(security.ENCRYPTION_METHODS))
    def test_methods(self, three_page_pdf, method):
        out = security.encrypt(three_page_pdf, "pw", method=method)
        assert security.detect_encryption(out) is EncryptionState.ENCRYPTED

    def test_empty_user_password(self, three_page_pdf):
        with pytest.raises(EncryptionError):
            security.encrypt(three_page_pdf, "")

    def test_unknown_method(self, three_page_pdf):
        with pytest.raises(EncryptionError):
            security.encrypt(three_page_pdf, "pw", method="rot13")

    def test_permissions(self, three_page_pdf):
        perm = security.permissions_mask(allow_print=True, allow_copy=False,
                                         allow_modify=False, allow_annotate=False)
        assert perm == security.PERM_PRINT
        out = security.encrypt(three_page_pdf, "pw", "owner", permissions=perm)
        doc = open_pdf(out)
        try:
            doc.authenticate("pw")
            assert doc.permissions & security.PERM_PRINT
            assert not doc.permissions & security.PERM_COPY
        finally:
            doc.close()


class TestDetect:

    def test_states(self, three_page_pdf, encrypted_pdf):
        assert security.detect_encryption(three_page_pdf) is EncryptionState.NOT_ENCRYPTED
        assert security.detect_encryption(encrypted_pdf) is EncryptionState.ENCRYPTED
        assert security.detect_encryption(b"garbage") is EncryptionState.UNKNOWN


class TestDecrypt:

    def test_round_trip_rasterizes_pages(self, three_page_pdf, encrypted_pdf):
        out = security.decrypt(encrypted_pdf, "user-secret")
        assert security.detect_encryption(out) is EncryptionState.NOT_ENCRYPTED
        doc = open_pdf(out)
        try:
            assert doc.page_count == 3
            for page in doc:
                assert len(page.get_images()) == 1
                assert page.get_text().strip() == ""
                assert (page.rect.width, page.rect.height) == pytest.approx((612, 792))
        finally:
            doc.close()

    def test_metadata_is_not_carried_over(self, encrypted_pdf):
        out = security.decrypt(encrypted_pdf, "user-secret")
        assert document.inspect(out).metadata['title'] == ""

    def test_wrong_password(self, encrypted_pdf):
        with pytest.raises(IncorrectPasswordError):
            security.decrypt(encrypted_pdf, "wrong")

    def test_empty_password(self, encrypted_pdf):
        with pytest.raises(IncorrectPasswordError):
            security.decrypt(encrypted_pdf, "")

    def test_structural_mode_keeps_text(self, three_page_pdf, encrypted_pdf):
        out = security.decrypt(encrypted_pdf, "user-secret", mode="structural")
        assert security.detect_encryption(out) is EncryptionState.NOT_ENCRYPTED
        assert page_texts(out) == page_texts(three_page_pdf)

    def test_not_encrypted(self, three_page_pdf):
        with pytest.raises(NotEncryptedError):
            security.decrypt(three_page_pdf, "anything")

    def test_malformed(self):
        with pytest.raises(DecryptionError):
            security.decrypt(b"nope", "pw")

    def test_bad_mode(self, encrypted_pdf):
        with pytest.raises(ValueError):
            security.decrypt(encrypted_pdf, "user-secret", mode="magic")

    def test_cancelled_before_first_page(self, encrypted_pdf):
        token = CancelToken()
        token.cancel()
        with pytest.raises(OperationCancelled):
            security.decrypt(encrypted_pdf, "user-secret", cancel=token)
