"""Pydantic models for request/response and internal data structures."""

from dataclasses import dataclass, field
from typing import Optional

import fitz  # PyMuPDF
import pikepdf
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TITLE = "Book Cover"
DEFAULT_LANGUAGE = "en-US"
FALLBACK_CAPTION = "Book cover image"


# ============================================================
# API Response Models
# ============================================================

class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    message: str = "PDF Cover Service is running"


class ErrorResponse(BaseModel):
    """Error envelope returned for every failed request."""

    status: str = "error"
    error: str


class MetadataResponse(BaseModel):
    """Metadata extracted from an uploaded PDF."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = "ok"
    title: Optional[str] = None
    language: Optional[str] = None
    page_count: int = Field(alias="pageCount", ge=0)


# ============================================================
# Source Document Models
# ============================================================

@dataclass
class SourceDocument:
    """An opened, read-only uploaded PDF.

    Holds a PyMuPDF handle for reading and a pikepdf handle for copying
    objects out. Only valid inside ``open_source``; both are closed when
    the context exits.
    """

    document: fitz.Document = field(repr=False)
    pdf: pikepdf.Pdf = field(repr=False)
    name: Optional[str] = None


@dataclass(frozen=True)
class DocumentMetadata:
    """Title, language and page count read from a source document."""

    title: Optional[str]
    language: Optional[str]
    page_count: int


@dataclass(frozen=True)
class PageGeometry:
    """Width and height of a page in PDF points."""

    width: float
    height: float


@dataclass(frozen=True)
class ExtractedImage:
    """An image XObject found on the first page of a source document."""

    xref: int
    name: str
    width: int
    height: int
    document: fitz.Document = field(repr=False, compare=False)

    def to_png(self) -> bytes:
        """Render the image as PNG bytes, converted to RGB if needed."""
        pix = fitz.Pixmap(self.document, self.xref)
        if pix.alpha:
            pix = fitz.Pixmap(pix, 0)
        if pix.colorspace is not None and pix.colorspace.n > 3:
            pix = fitz.Pixmap(fitz.csRGB, pix)
        return pix.tobytes("png")


# ============================================================
# Cover Request Models
# ============================================================

@dataclass(frozen=True)
class CoverRequest:
    """Optional overrides supplied with a cover creation request."""

    title: Optional[str] = None
    language: Optional[str] = None
