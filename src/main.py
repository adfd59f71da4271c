from __future__ import annotations

from fastapi import FastAPI

from src.application.dtos.common_dto import HealthResponse, RootResponse
from src.infrastructure.api.errors import register_error_handlers
from src.infrastructure.api.middlewares import add_default_middlewares
from src.infrastructure.api.routes.storage_routes import router as storage_router
from src.infrastructure.api.routes.tool_routes import router as tool_router
from src.infrastructure.logging_config import setup_logging


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(
        title="Image Tools Backend",
        version="0.1.0",
        description="""
        ## Image Tools Backend API

        FastAPI backend that turns uploaded images into resized, compressed,
        converted and icon/favicon derivatives using Pillow, and stores every
        result in Supabase Storage.

        ### Tools
        - **Resize**: pixels, percentage or aspect-preserving ratio (signed URL returned)
        - **Bulk Resize**: many files into one bounding box (signed URLs returned)
        - **Compress**: WebP re-encode at a chosen quality
        - **Convert**: PNG, JPEG or WebP
        - **Icon Converter**: PNG per size plus an `.ico`
        - **Icon Editor**: square PNG icon over a background color
        - **Favicon Generator**: full favicon set from an image or from text

        All tool endpoints take `multipart/form-data`. Signed URLs are valid for one hour.

        ### Error Responses
        Errors use the body `{"error": "<message>"}`:
        - **400 Bad Request**: Missing or malformed form fields
        - **500 Internal Server Error**: The image could not be processed or stored
        """,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )
    add_default_middlewares(app)
    register_error_handlers(app)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the Image Tools API",
        response_description="API information including status and version",
    )
    def root():
        """Get API root information."""
        return {"status": "ok", "service": "image-tools-backend", "version": app.version}

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the API service is running and healthy",
        response_description="Health status of the API service",
    )
    def health():
        """Check API health status."""
        return {"status": "healthy"}

    app.include_router(tool_router)
    app.include_router(storage_router)
    return app


app = create_app()
