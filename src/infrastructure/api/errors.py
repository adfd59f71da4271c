from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.domain.exceptions import InvalidRequestError
from src.infrastructure.api.forms import MISSING_FIELDS

logger = logging.getLogger(__name__)

PROCESSING_FAILED = "Error processing image"
PROCESSING_FAILED_BULK = "Error processing images"


class ToolFailedError(Exception):
    """Raised by a route once the underlying failure has been logged.

    Only ``public_message`` reaches the caller.
    """

    def __init__(self, public_message: str = PROCESSING_FAILED) -> None:
        super().__init__(public_message)
        self.public_message = public_message


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _invalid_request(request: Request, exc: InvalidRequestError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return error_response(status.HTTP_400_BAD_REQUEST, MISSING_FIELDS)


async def _tool_failed(request: Request, exc: ToolFailedError) -> JSONResponse:
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.public_message)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidRequestError, _invalid_request)
    app.add_exception_handler(RequestValidationError, _request_validation)
    app.add_exception_handler(ToolFailedError, _tool_failed)
