"""
Exception handlers mapping typed service errors to HTTP responses.

Unhandled errors are left to FastAPI (500) so the dispatcher redelivers the event.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from artmarket.core.errors import InvalidDocumentError, SearchServiceError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: str, **content_extras) -> JSONResponse:
    """Build JSONResponse for errors: {"error": ...}."""
    content: dict = {"error": error, **content_extras}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected request to {request.url.path}: {len(exc.errors())} validation error(s)")
    return _error_response(422, "invalid_request", detail=exc.errors())


async def invalid_document_handler(request: Request, exc: InvalidDocumentError) -> JSONResponse:
    logger.info(f"Rejected document at {request.url.path}: {exc}")
    return _error_response(422, "invalid_request", detail=exc.errors)


async def search_service_handler(request: Request, exc: SearchServiceError) -> JSONResponse:
    logger.error(f"Search engine failure at {request.url.path}: {exc}")
    return _error_response(502, "search_unavailable")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(InvalidDocumentError, invalid_document_handler)
    app.add_exception_handler(SearchServiceError, search_service_handler)
