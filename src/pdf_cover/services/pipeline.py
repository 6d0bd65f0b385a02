"""Cover creation pipeline tying the services together."""

import logging
from pathlib import Path
from typing import Optional

from ..config import Settings
from ..models import (
    DEFAULT_LANGUAGE,
    DEFAULT_TITLE,
    CoverRequest,
    DocumentMetadata,
    SourceDocument,
)
from ..utils import cover_filename
from .caption import CaptionGenerator
from .cover import build_cover
from .images import locate_first_image
from .source import first_page_geometry, open_source, open_source_file, read_metadata

logger = logging.getLogger(__name__)


class CoverService:
    """Creates accessible cover PDFs and reads PDF metadata.

    Holds no per-request state, so one instance can serve concurrent
    requests.
    """

    def __init__(
        self,
        captioner: Optional[CaptionGenerator] = None,
        default_title: str = DEFAULT_TITLE,
        default_language: str = DEFAULT_LANGUAGE,
    ):
        self.captioner = captioner or CaptionGenerator()
        self.default_title = default_title
        self.default_language = default_language

    @classmethod
    def from_settings(cls, settings: Settings) -> "CoverService":
        """Build a service from application settings."""
        return cls(
            captioner=CaptionGenerator.from_settings(settings),
            default_title=settings.default_title,
            default_language=settings.default_language,
        )

    def create_cover(
        self,
        data: bytes,
        request: Optional[CoverRequest] = None,
        source_name: Optional[str] = None,
    ) -> bytes:
        """Create a cover PDF from uploaded PDF bytes.

        Args:
            data: Source PDF bytes.
            request: Optional title/language overrides.
            source_name: Identifier reported in image extraction errors.

        Returns:
            Bytes of the single-page accessible cover PDF.

        Raises:
            ImageExtractionError: If the first page has no image.
        """
        with open_source(data, name=source_name) as source:
            return self._create_cover(source, request or CoverRequest())

    def create_cover_file(
        self,
        source_path: Path,
        dest_path: Path,
        request: Optional[CoverRequest] = None,
    ) -> Path:
        """Create a cover PDF for a file on disk and write it to ``dest_path``."""
        with open_source_file(source_path) as source:
            cover = self._create_cover(source, request or CoverRequest())

        dest_path.write_bytes(cover)
        return dest_path

    def extract_metadata(self, data: bytes) -> DocumentMetadata:
        """Read title, language and page count from PDF bytes."""
        with open_source(data) as source:
            return read_metadata(source)

    def _create_cover(self, source: SourceDocument, request: CoverRequest) -> bytes:
        metadata = read_metadata(source)
        title = _first_non_blank(request.title, metadata.title, self.default_title)
        language = _first_non_blank(request.language, metadata.language, self.default_language)

        geometry = first_page_geometry(source)
        image = locate_first_image(source)
        caption = self.captioner.generate(image, title)

        logger.info(
            f"Building cover {geometry.width:g}x{geometry.height:g} "
            f"(title={title!r}, language={language!r})"
        )
        return build_cover(
            source_pdf=source.pdf,
            geometry=geometry,
            image=image,
            title=title,
            language=language,
            caption=caption,
        )


def find_pdf_files(directory: Path) -> list[Path]:
    """List the PDF files directly inside ``directory``, sorted by name.

    Raises:
        NotADirectoryError: If ``directory`` does not exist or is not a directory.
    """
    if not directory.is_dir():
        raise NotADirectoryError(f"Directory does not exist or is not a directory: {directory}")

    return sorted(
        path for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() == ".pdf"
    )


def cover_path_for(source_path: Path, dest_dir: Path) -> Path:
    """Return the output path of the cover for ``source_path``."""
    return dest_dir / cover_filename(source_path.name)


def _first_non_blank(*values: Optional[str]) -> str:
    for value in values:
        if value is not None and value.strip():
            return value.strip()
    return ""
