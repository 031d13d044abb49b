# src/booru_stage/main.py
"""Main entry point for the Booru Stage application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from booru_stage.api.v1 import posts_router, system_router
from booru_stage.api.v1.dependencies import get_fetcher
from booru_stage.core.logging_config import buffered_logging, configure_logging, flush_logs
from booru_stage.core.settings import settings
from booru_stage.services.errors import (
    ConcurrentModificationError,
    ConflictingWriteError,
    ContentTooLargeError,
    DuplicateContentError,
    EmptyContentError,
    FetchError,
    InvalidUrlError,
    NoContentSpecifiedError,
    NotFoundError,
    PostServiceError,
    RelatedPostNotFoundError,
    ThumbnailTooLargeError,
    UniqueNameExhaustedError,
    UnsupportedContentKindError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[PostServiceError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    RelatedPostNotFoundError: status.HTTP_404_NOT_FOUND,
    EmptyContentError: status.HTTP_400_BAD_REQUEST,
    InvalidUrlError: status.HTTP_400_BAD_REQUEST,
    NoContentSpecifiedError: status.HTTP_400_BAD_REQUEST,
    ContentTooLargeError: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    ThumbnailTooLargeError: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    UnsupportedContentKindError: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    DuplicateContentError: status.HTTP_409_CONFLICT,
    ConcurrentModificationError: status.HTTP_409_CONFLICT,
    ConflictingWriteError: status.HTTP_409_CONFLICT,
    UniqueNameExhaustedError: status.HTTP_503_SERVICE_UNAVAILABLE,
    FetchError: status.HTTP_502_BAD_GATEWAY,
}

# Initialize FastAPI app
app = FastAPI(
    title="Booru Stage API",
    description="Media post ingestion and revision API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)


@app.middleware("http")
async def buffer_request_logs(request: Request, call_next):
    """Write a request's file log records together once it completes."""
    with buffered_logging():
        return await call_next(request)


# Include API routers
app.include_router(posts_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.exception_handler(PostServiceError)
async def post_service_error_handler(request: Request, exc: PostServiceError) -> JSONResponse:
    """Render service errors as JSON with a matching status code."""
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    body: dict[str, object] = {"detail": str(exc)}
    if isinstance(exc, ValidationError):
        body["fields"] = exc.fields
    if isinstance(exc, DuplicateContentError):
        body["post_id"] = exc.post_id
    logger.info("%s %s -> %d: %s", request.method, request.url.path, status_code, exc)
    return JSONResponse(status_code=status_code, content=body)


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging(settings)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    get_fetcher().close()
    flush_logs()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Media post ingestion and revision API",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("booru_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
