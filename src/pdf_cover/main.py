"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.routes import router
from .config import get_settings
from .models import ErrorResponse

# Configure logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    # Startup
    logger.info("Starting PDF Cover service")

    if not settings.captioning_available:
        logger.warning("OPENAI_API_KEY not set or captioning disabled - using default alt text")
    else:
        logger.info(f"Alt text model: {settings.openai_model}")

    yield

    # Shutdown
    logger.info("Shutting down PDF Cover service")


# Create FastAPI app
app = FastAPI(
    title="PDF Cover",
    description="Accessible (PDF/UA) cover pages with AI-generated alt text",
    version="0.1.0",
    lifespan=lifespan,
)

# Include API routes
app.include_router(router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as the service's error envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation errors as the service's error envelope."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)

    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error="; ".join(messages) or "Invalid request").model_dump(),
    )


def run(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )
