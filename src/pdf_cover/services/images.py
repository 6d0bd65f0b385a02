"""Image lookup on the first page of a source document."""

import logging

from ..errors import ImageExtractionError
from ..models import ExtractedImage, SourceDocument
from .source import first_page

logger = logging.getLogger(__name__)


def locate_first_image(source: SourceDocument) -> ExtractedImage:
    """Return the first image XObject of the first page.

    Resources are scanned in the order they are stored in the page's
    /XObject dictionary; the first image wins regardless of size.
    Images nested inside form XObjects are not considered.

    Args:
        source: Opened source document.

    Returns:
        ExtractedImage referencing the image stream.

    Raises:
        ImageExtractionError: If the first page has no image resource.
    """
    page = first_page(source)

    # (xref, smask, width, height, bpc, colorspace, alt_colorspace, name, filter, referencer)
    for img_info in page.get_images(full=True):
        xref, width, height, name, referencer = (
            img_info[0],
            img_info[2],
            img_info[3],
            img_info[7],
            img_info[9],
        )
        if referencer != 0:
            continue

        logger.debug(f"Using image /{name} (xref {xref}, {width}x{height})")
        return ExtractedImage(
            xref=xref,
            name=name,
            width=width,
            height=height,
            document=source.document,
        )

    raise ImageExtractionError(source.name)
