"""Source document reading and image lookup tests."""

import fitz
import pikepdf
import pytest

from conftest import rewrite_pdf
from pdf_cover.errors import ImageExtractionError
from pdf_cover.services import first_page_geometry, locate_first_image, open_source, read_metadata


def test_metadata_absent_on_fresh_document(pdf_factory):
    with open_source(pdf_factory(pages=3, images=0)) as source:
        metadata = read_metadata(source)

    assert metadata.title is None
    assert metadata.language is None
    assert metadata.page_count == 3


def test_metadata_reads_title_and_language(cover_pdf):
    with open_source(cover_pdf) as source:
        metadata = read_metadata(source)

    assert metadata.title == "Moby Dick"
    assert metadata.language == "fr-FR"
    assert metadata.page_count == 1


def test_metadata_resolves_indirect_language(pdf_factory):
    def indirect_lang(pdf):
        pdf.Root.Lang = pdf.make_indirect(pikepdf.String("de-DE"))

    data = rewrite_pdf(pdf_factory(), indirect_lang)

    with open_source(data) as source:
        assert read_metadata(source).language == "de-DE"


def test_non_string_language_is_absent(pdf_factory):
    def name_lang(pdf):
        pdf.Root.Lang = pikepdf.Name("/en")

    with open_source(rewrite_pdf(pdf_factory(), name_lang)) as source:
        assert read_metadata(source).language is None


def test_blank_title_is_absent(pdf_factory):
    with open_source(pdf_factory(title="   ")) as source:
        assert read_metadata(source).title is None


def test_source_closed_after_context(cover_pdf):
    with open_source(cover_pdf) as source:
        pass
    assert source.document.is_closed


def test_source_closed_when_body_raises(cover_pdf):
    with pytest.raises(RuntimeError):
        with open_source(cover_pdf) as source:
            raise RuntimeError("boom")
    assert source.document.is_closed


def test_invalid_pdf_raises():
    with pytest.raises(Exception):
        with open_source(b"this is not a pdf"):
            pass


def test_first_page_geometry(pdf_factory):
    with open_source(pdf_factory(width=432.5, height=648)) as source:
        geometry = first_page_geometry(source)

    assert geometry.width == pytest.approx(432.5)
    assert geometry.height == pytest.approx(648)


def test_locate_first_image(cover_pdf):
    with open_source(cover_pdf) as source:
        image = locate_first_image(source)

        assert image.xref > 0
        assert image.name
        assert (image.width, image.height) == (20, 30)
        assert image.to_png().startswith(b"\x89PNG")


def test_locate_first_image_picks_first_in_resource_order(pdf_factory):
    with open_source(pdf_factory(images=2)) as source:
        first_listed = source.document[0].get_images(full=True)[0]
        image = locate_first_image(source)

    assert image.xref == first_listed[0]
    assert image.name == first_listed[7]


def test_no_image_raises(text_only_pdf):
    with open_source(text_only_pdf) as source:
        with pytest.raises(ImageExtractionError) as exc_info:
            locate_first_image(source)

    assert str(exc_info.value) == "No image found on the first page"


def test_no_image_error_names_source(text_only_pdf):
    with open_source(text_only_pdf, name="books/empty.pdf") as source:
        with pytest.raises(ImageExtractionError) as exc_info:
            locate_first_image(source)

    assert exc_info.value.source == "books/empty.pdf"
    assert str(exc_info.value) == "No image found on the first page: books/empty.pdf"


def test_image_on_later_page_is_ignored():
    doc = fitz.open()
    doc.new_page(width=300, height=300)
    second = doc.new_page(width=300, height=300)
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, 10, 10), False)
    pix.set_rect(pix.irect, (0, 0, 255))
    second.insert_image(fitz.Rect(0, 0, 100, 100), pixmap=pix)
    data = doc.tobytes()
    doc.close()

    with open_source(data) as source:
        with pytest.raises(ImageExtractionError):
            locate_first_image(source)
