"""Utility helper functions."""

import re
import unicodedata
from pathlib import Path
from typing import Optional
from urllib.parse import quote

COVER_SUFFIX = "_cover.pdf"


def cover_filename(original: Optional[str]) -> str:
    """Derive the download name of a cover from the uploaded file name.

    Args:
        original: Uploaded file name, may be empty.

    Returns:
        ``<stem>_cover.pdf``, or ``cover.pdf`` when no name was given.
    """
    if not original or not original.strip():
        return "cover.pdf"

    name = Path(original.strip()).name
    if name.lower().endswith(".pdf"):
        name = name[:-4]

    return sanitize_filename(name + COVER_SUFFIX)


def attachment_header(filename: str) -> str:
    """Build a Content-Disposition value for downloading ``filename``.

    Header values must be Latin-1, so non-ASCII names get an ASCII
    ``filename`` fallback plus an RFC 5987 ``filename*`` parameter.

    Args:
        filename: Sanitized download name.

    Returns:
        Header value, e.g. ``attachment; filename="book_cover.pdf"``.
    """
    if filename.isascii():
        return f'attachment; filename="{filename}"'

    fallback = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    fallback = re.sub(r"[^\x20-\x7e]|[\"\\]", "_", fallback)
    if not fallback.lower().endswith(".pdf") or len(fallback) <= len(".pdf"):
        fallback = "cover.pdf"

    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def sanitize_filename(filename: str) -> str:
    """Sanitize a filename to be filesystem-safe.

    Args:
        filename: Original filename.

    Returns:
        Sanitized filename.
    """
    # Remove or replace unsafe characters
    sanitized = re.sub(r'[<>:"/\\|?*\x00-\x1f]', "_", filename)

    # Remove leading/trailing whitespace and dots
    sanitized = sanitized.strip(". ")

    # Limit length
    max_length = 255
    if len(sanitized) > max_length:
        # Preserve extension if present
        path = Path(sanitized)
        ext = path.suffix
        name = path.stem[: max_length - len(ext) - 1]
        sanitized = name + ext

    return sanitized or "unnamed"


def truncate_text(text: str, max_length: int = 500, suffix: str = "...") -> str:
    """Truncate text to a maximum length.

    Args:
        text: Text to truncate.
        max_length: Maximum length including suffix.
        suffix: Suffix to add if truncated.

    Returns:
        Truncated text.
    """
    if len(text) <= max_length:
        return text

    # Try to truncate at a word boundary
    truncated = text[: max_length - len(suffix)]
    last_space = truncated.rfind(" ")

    if last_space > max_length // 2:
        truncated = truncated[:last_space]

    return truncated.rstrip() + suffix
