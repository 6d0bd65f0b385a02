"""Utility functions for pdf_cover."""

from .helpers import attachment_header, cover_filename, sanitize_filename, truncate_text

__all__ = ["attachment_header", "cover_filename", "sanitize_filename", "truncate_text"]
