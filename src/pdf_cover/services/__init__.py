"""Services for cover PDF creation."""

from .source import open_source, read_metadata, first_page_geometry
from .images import locate_first_image
from .caption import CaptionGenerator
from .cover import build_cover
from .pipeline import CoverService, find_pdf_files

__all__ = [
    "open_source",
    "read_metadata",
    "first_page_geometry",
    "locate_first_image",
    "CaptionGenerator",
    "build_cover",
    "CoverService",
    "find_pdf_files",
]
