"""Shared fixtures: in-memory sample PDFs and settings isolation."""

import io
from types import SimpleNamespace

import fitz
import pikepdf
import pytest

from pdf_cover.config import get_settings


def make_png(width: int = 20, height: int = 30, color=(200, 30, 30)) -> bytes:
    """Create a solid-color PNG."""
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.set_rect(pix.irect, color)
    return pix.tobytes("png")


def make_pdf(
    pages: int = 1,
    width: float = 400,
    height: float = 600,
    images: int = 1,
    title: str = None,
    language: str = None,
) -> bytes:
    """Create a PDF whose first page carries ``images`` small images."""
    doc = fitz.open()
    for page_num in range(pages):
        page = doc.new_page(width=width, height=height)
        if page_num == 0:
            page.insert_text((72, 72), "Sample text")
            for index in range(images):
                offset = 40 * index
                page.insert_image(
                    fitz.Rect(50 + offset, 100, 150 + offset, 250),
                    stream=make_png(20 + index, 30, (200, 30 + 50 * index, 30)),
                )
    if title:
        doc.set_metadata({"title": title})
    if language:
        doc.xref_set_key(doc.pdf_catalog(), "Lang", fitz.get_pdf_str(language))

    data = doc.tobytes()
    doc.close()
    return data


def rewrite_pdf(data: bytes, edit) -> bytes:
    """Apply ``edit(pdf)`` to a PDF with pikepdf and return the saved bytes."""
    with pikepdf.open(io.BytesIO(data)) as pdf:
        edit(pdf)
        buffer = io.BytesIO()
        pdf.save(buffer)
    return buffer.getvalue()


class StubCompletions:
    """Records chat completion calls and returns a canned response."""

    def __init__(self, response=None, error: Exception = None):
        self.response = response
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def stub_client(response=None, error: Exception = None):
    """Create an object shaped like ``openai.OpenAI`` for ``chat.completions``."""
    completions = StubCompletions(response=response, error=error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def chat_response(content):
    """Create a minimal chat completion response."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep tests independent of a developer's OpenAI key."""
    monkeypatch.setenv("OPENAI_API_KEY", "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def pdf_factory():
    """Factory building sample PDFs."""
    return make_pdf


@pytest.fixture
def cover_pdf():
    """Titled PDF with one image on the first page."""
    return make_pdf(title="Moby Dick", language="fr-FR")


@pytest.fixture
def text_only_pdf():
    """PDF without any image on the first page."""
    return make_pdf(images=0)
