"""Source document access using PyMuPDF and pikepdf."""

import io
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import fitz  # PyMuPDF
import pikepdf

from ..errors import ImageExtractionError
from ..models import DocumentMetadata, PageGeometry, SourceDocument

logger = logging.getLogger(__name__)


@contextmanager
def open_source(data: bytes, name: Optional[str] = None) -> Iterator[SourceDocument]:
    """Open PDF bytes as a read-only source document.

    Both handles are closed when the context exits, whether or not the
    body raised.

    Args:
        data: Raw PDF bytes.
        name: Optional identifier (file path) used in error messages.

    Yields:
        SourceDocument wrapping the opened PDF.
    """
    document = fitz.open(stream=data, filetype="pdf")
    try:
        with pikepdf.open(io.BytesIO(data)) as pdf:
            yield SourceDocument(document=document, pdf=pdf, name=name)
    finally:
        document.close()


@contextmanager
def open_source_file(path: Path) -> Iterator[SourceDocument]:
    """Open a PDF file on disk as a source document."""
    with open_source(path.read_bytes(), name=str(path)) as source:
        yield source


def read_metadata(source: SourceDocument) -> DocumentMetadata:
    """Read the document title, language and page count.

    Blank title or language values are reported as absent.
    """
    document = source.document
    title = _non_blank((document.metadata or {}).get("title"))
    language = _read_language(source.pdf)

    return DocumentMetadata(
        title=title,
        language=language,
        page_count=document.page_count,
    )


def first_page_geometry(source: SourceDocument) -> PageGeometry:
    """Return the MediaBox size of the first page."""
    page = first_page(source)
    mediabox = page.mediabox
    return PageGeometry(width=mediabox.width, height=mediabox.height)


def first_page(source: SourceDocument) -> fitz.Page:
    """Return the first page, failing when the document is empty."""
    if source.document.page_count == 0:
        raise ImageExtractionError(source.name, reason="Document has no pages")
    return source.document[0]


def _read_language(pdf: pikepdf.Pdf) -> Optional[str]:
    """Read /Lang from the document catalog, following indirect references."""
    language = pdf.Root.get("/Lang")
    if not isinstance(language, pikepdf.String):
        return None
    return _non_blank(str(language))


def _non_blank(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value
