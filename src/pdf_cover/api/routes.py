"""API routes for cover creation and metadata extraction."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from ..config import get_settings
from ..errors import ImageExtractionError
from ..models import CoverRequest, ErrorResponse, HealthResponse, MetadataResponse
from ..services.pipeline import CoverService
from ..utils import attachment_header, cover_filename

logger = logging.getLogger(__name__)

router = APIRouter()

PDF_MEDIA_TYPE = "application/pdf"

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    413: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_cover_service() -> CoverService:
    """Dependency providing the cover service."""
    return CoverService.from_settings(get_settings())


def _read_upload(file: Optional[UploadFile]) -> bytes:
    """Validate presence and size of an upload and return its bytes."""
    if file is None:
        raise HTTPException(
            status_code=400,
            detail="No file uploaded. Use multipart/form-data with field name 'file'",
        )

    settings = get_settings()
    contents = file.file.read()
    if len(contents) > settings.max_file_size_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File size exceeds maximum of {settings.max_file_size_mb}MB",
        )
    return contents


def _is_pdf(file: UploadFile) -> bool:
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    return content_type == PDF_MEDIA_TYPE


@router.get("/", response_model=HealthResponse, include_in_schema=False)
@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse()


@router.post(
    "/cover",
    response_class=Response,
    responses={
        200: {"content": {PDF_MEDIA_TYPE: {}}},
        422: {"model": ErrorResponse},
        **ERROR_RESPONSES,
    },
)
def create_cover(
    service: Annotated[CoverService, Depends(get_cover_service)],
    file: Annotated[Optional[UploadFile], File(description="PDF file to take the cover from")] = None,
    title: Annotated[Optional[str], Form(description="Title override")] = None,
    language: Annotated[Optional[str], Form(description="Language override, e.g. en-US")] = None,
) -> Response:
    """Create an accessible single-page cover PDF from the first page's image.

    Returns the cover as a PDF attachment named ``<name>_cover.pdf``.
    """
    if file is not None and not _is_pdf(file):
        raise HTTPException(status_code=400, detail="File must be a PDF")

    contents = _read_upload(file)

    try:
        cover = service.create_cover(
            contents,
            CoverRequest(title=title, language=language),
        )
    except ImageExtractionError as e:
        logger.info(f"No cover image in {file.filename}: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception(f"Cover creation failed for {file.filename}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {e}")

    filename = cover_filename(file.filename)
    logger.info(f"Created cover {filename} ({len(cover)} bytes)")

    return Response(
        content=cover,
        media_type=PDF_MEDIA_TYPE,
        headers={"Content-Disposition": attachment_header(filename)},
    )


@router.post("/metadata", response_model=MetadataResponse, responses=ERROR_RESPONSES)
def extract_metadata(
    service: Annotated[CoverService, Depends(get_cover_service)],
    file: Annotated[Optional[UploadFile], File(description="PDF file to inspect")] = None,
) -> MetadataResponse:
    """Return the title, language and page count of an uploaded PDF."""
    contents = _read_upload(file)

    try:
        metadata = service.extract_metadata(contents)
    except Exception as e:
        logger.exception(f"Metadata extraction failed for {file.filename}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {e}")

    return MetadataResponse(
        title=metadata.title,
        language=metadata.language,
        page_count=metadata.page_count,
    )
