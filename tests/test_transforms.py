import io

import pytest
from PIL import Image

from pdfcore import document, transforms
from pdfcore.errors import (
    EmptySelectionError, IndexOutOfRange, InvalidRotationError, LoadError,
    NoConvertibleImagesError,
)
from pdfcore.transforms import ImageInput, PageOrder, PageOrderEntry

from conftest import make_image, make_pdf, open_pdf, page_rotations, page_texts


class TestMerge:

    def test_concatenates_in_input_order(self, three_page_pdf, two_page_pdf):
        merged = transforms.merge([three_page_pdf, two_page_pdf])
        texts = page_texts(merged)
        assert len(texts) == 3 + 2
        assert texts[:3] == page_texts(three_page_pdf)
        assert texts[3:] == page_texts(two_page_pdf)

    def test_keeps_each_page_rotation(self, three_page_pdf, two_page_pdf):
        rotated = transforms.rotate(two_page_pdf, 90, [1])
        merged = transforms.merge([three_page_pdf, rotated])
        assert page_rotations(merged) == [0, 0, 0, 0, 90]

    def test_reverse_order(self, three_page_pdf, two_page_pdf):
        merged = transforms.merge([two_page_pdf, three_page_pdf])
        assert page_texts(merged)[0] == "Beta page 1"

    def test_any_bad_source_fails(self, three_page_pdf):
        with pytest.raises(LoadError):
            transforms.merge([three_page_pdf, b"not a pdf"])

    def test_requires_input(self):
        with pytest.raises(EmptySelectionError):
            transforms.merge([])


class TestExtract:

    def test_given_order_with_duplicates(self, three_page_pdf):
        out = transforms.extract_pages(three_page_pdf, [2, 0, 0])
        src = page_texts(three_page_pdf)
        assert page_texts(out) == [src[2], src[0], src[0]]

    def test_empty_selection_fails(self, three_page_pdf):
        with pytest.raises(EmptySelectionError):
            transforms.extract_pages(three_page_pdf, [])

    def test_out_of_range_fails(self, three_page_pdf):
        with pytest.raises(IndexOutOfRange):
            transforms.extract_pages(three_page_pdf, [0, 3])

    def test_negative_index_fails(self, three_page_pdf):
        with pytest.raises(IndexOutOfRange):
            transforms.extract_pages(three_page_pdf, [-1])


class TestRotate:

    def test_all_pages_by_default(self, three_page_pdf):
        assert page_rotations(transforms.rotate(three_page_pdf, 90)) == [90, 90, 90]

    def test_subset(self, three_page_pdf):
        assert page_rotations(transforms.rotate(three_page_pdf, 180, [0, 2])) == [180, 0, 180]

    def test_out_of_range_indices_are_skipped(self, three_page_pdf):
        out = transforms.rotate(three_page_pdf, 270, [1, 7, -2])
        assert page_rotations(out) == [0, 270, 0]

    @pytest.mark.parametrize("sequence", [
        (90, 90, 90, 90),
        (270, 180),
        (90, 180, 270, 90, 180),
    ])
    def test_rotations_are_additive(self, three_page_pdf, sequence):
        data = three_page_pdf
        for angle in sequence:
            data = transforms.rotate(data, angle, [0])
        assert page_rotations(data)[0] == sum(sequence) % 360

    def test_grouping_does_not_matter(self, three_page_pdf):
        a = transforms.rotate(transforms.rotate(three_page_pdf, 90), 270)
        b = transforms.rotate(transforms.rotate(three_page_pdf, 270), 90)
        assert page_rotations(a) == page_rotations(b) == [0, 0, 0]

    @pytest.mark.parametrize("angle", [0, 45, 360, -90])
    def test_invalid_angle(self, three_page_pdf, angle):
        with pytest.raises(InvalidRotationError):
            transforms.rotate(three_page_pdf, angle)


class TestOrganize:

    def test_identity_reproduces_document(self, three_page_pdf):
        rotated = transforms.rotate(three_page_pdf, 90, [1])
        entries = [PageOrderEntry(i) for i in range(3)]
        out = transforms.organize(rotated, entries)
        assert page_texts(out) == page_texts(rotated)
        assert page_rotations(out) == page_rotations(rotated) == [0, 90, 0]

    def test_reorder_rotate_delete(self, three_page_pdf):
        src = page_texts(three_page_pdf)
        entries = [
            PageOrderEntry(2, rotation=90),
            PageOrderEntry(1, deleted=True),
            PageOrderEntry(0, rotation=180),
        ]
        out = transforms.organize(three_page_pdf, entries)
        assert page_texts(out) == [src[2], src[0]]
        assert page_rotations(out) == [90, 180]

    def test_entry_rotation_adds_to_page_rotation(self, three_page_pdf):
        rotated = transforms.rotate(three_page_pdf, 270, [0])
        out = transforms.organize(rotated, [PageOrderEntry(0, rotation=180)])
        assert page_rotations(out) == [(270 + 180) % 360]

    def test_accepts_dicts(self, three_page_pdf):
        out = transforms.organize(three_page_pdf, [
            {'originalIndex': 1, 'rotation': 90},
            {'original_index': 0},
        ])
        assert page_rotations(out) == [90, 0]

    def test_out_of_range_entry_fails(self, three_page_pdf):
        with pytest.raises(IndexOutOfRange):
            transforms.organize(three_page_pdf, [PageOrderEntry(0), PageOrderEntry(3)])

    def test_all_deleted_fails(self, three_page_pdf):
        with pytest.raises(EmptySelectionError):
            transforms.organize(three_page_pdf, [PageOrderEntry(0, deleted=True)])

    def test_bad_rotation_fails(self, three_page_pdf):
        with pytest.raises(InvalidRotationError):
            transforms.organize(three_page_pdf, [PageOrderEntry(0, rotation=45)])

    def test_reverse(self, three_page_pdf):
        assert page_texts(transforms.reverse(three_page_pdf)) == page_texts(three_page_pdf)[::-1]


class TestPageOrder:

    def test_move_swaps_positions_not_identity(self):
        order = PageOrder(3)
        order.move(2, 'up')
        assert [e.original_index for e in order.entries] == [0, 2, 1]
        order.move(0, 'up')
        assert [e.original_index for e in order.entries] == [0, 2, 1]
        order.move(1, 'down')
        assert [e.original_index for e in order.entries] == [0, 2, 1]

    def test_delete_does_not_shift_identity(self):
        order = PageOrder(4)
        order.delete(1)
        order.rotate(2)
        assert order.entry(2).rotation == 90
        assert [e.original_index for e in order.active_entries()] == [0, 2, 3]
        order.restore(1)
        assert len(order.active_entries()) == 4

    def test_rotate_wraps(self):
        order = PageOrder(1)
        for _ in range(5):
            order.rotate(0)
        assert order.entry(0).rotation == 90

    def test_move_to(self):
        order = PageOrder(4)
        order.move_to(3, 0)
        assert [e.original_index for e in order.entries] == [3, 0, 1, 2]

    def test_unknown_page(self):
        with pytest.raises(KeyError):
            PageOrder(2).delete(5)

    def test_bad_direction(self):
        with pytest.raises(ValueError):
            PageOrder(2).move(0, 'left')

    def test_apply(self, three_page_pdf):
        order = PageOrder.from_pdf(three_page_pdf)
        order.move(2, 'up')
        order.move(2, 'up')
        order.rotate(1, 270)
        order.delete(0)
        out = transforms.organize(three_page_pdf, order.active_entries())
        src = page_texts(three_page_pdf)
        assert page_texts(out) == [src[2], src[1]]
        assert page_rotations(out) == [0, 270]


class TestImagesToPdf:

    def test_png_and_unsupported(self, png_bytes):
        result = transforms.images_to_pdf([
            ImageInput("photo.png", png_bytes, "image/png"),
            ImageInput("notes.png", b"just some text", "text/plain"),
        ])
        assert result.page_count == 1
        assert result.skipped == ["notes.png"]
        assert document.page_count(result.pdf) == 1

    def test_page_matches_pixel_size(self, png_bytes, jpeg_bytes):
        result = transforms.images_to_pdf([
            ImageInput("a.png", png_bytes, "image/png"),
            ImageInput("b.jpg", jpeg_bytes, "image/jpeg"),
        ])
        doc = open_pdf(result.pdf)
        try:
            assert (doc[0].rect.width, doc[0].rect.height) == pytest.approx((40, 30))
            assert (doc[1].rect.width, doc[1].rect.height) == pytest.approx((64, 48))
            assert len(doc[0].get_images()) == 1
        finally:
            doc.close()
        assert result.skipped == []

    def test_content_not_matching_declared_type_is_skipped(self, jpeg_bytes, png_bytes):
        result = transforms.images_to_pdf([
            ImageInput("fake.png", jpeg_bytes, "image/png"),
            ImageInput("real.png", png_bytes, "image/png"),
        ])
        assert result.page_count == 1
        assert result.skipped == ["fake.png"]
        assert "JPEG" in result.skip_records[0].reason

    def test_multi_picture_jpeg_is_accepted(self, png_bytes):
        first = Image.new("RGB", (50, 20), (10, 120, 10))
        second = Image.new("RGB", (50, 20), (120, 10, 10))
        buf = io.BytesIO()
        first.save(buf, format="MPO", save_all=True, append_images=[second])
        with Image.open(io.BytesIO(buf.getvalue())) as img:
            assert img.format == "MPO"

        result = transforms.images_to_pdf([
            ImageInput("phone.jpg", buf.getvalue(), "image/jpeg"),
            ImageInput("a.png", png_bytes, "image/png"),
        ])
        assert result.skipped == []
        assert result.page_count == 2
        doc = open_pdf(result.pdf)
        try:
            assert (doc[0].rect.width, doc[0].rect.height) == pytest.approx((50, 20))
        finally:
            doc.close()

    def test_other_image_types_are_skipped(self, png_bytes):
        gif = make_image(10, 10, "GIF")
        result = transforms.images_to_pdf([
            ImageInput("anim.gif", gif, "image/gif"),
            ImageInput("a.png", png_bytes, "image/png"),
        ])
        assert result.skipped == ["anim.gif"]

    def test_nothing_convertible(self):
        with pytest.raises(NoConvertibleImagesError) as excinfo:
            transforms.images_to_pdf([ImageInput("a.txt", b"hello", "text/plain")])
        assert excinfo.value.skipped == ["a.txt"]

    def test_order_is_kept(self):
        small = make_image(10, 20)
        large = make_image(30, 40)
        result = transforms.images_to_pdf([
            ImageInput("large.png", large, "image/png"),
            ImageInput("small.png", small, "image/png"),
        ])
        info = document.inspect(result.pdf)
        assert [(p.width, p.height) for p in info.pages] == [(30, 40), (10, 20)]


def test_page_content_survives_transforms():
    data = make_pdf(4, label="Gamma")
    out = transforms.extract_pages(transforms.merge([data, data]), [7, 0])
    assert page_texts(out) == ["Gamma page 4", "Gamma page 1"]
