"""Exception handlers mapping failures to `{error: message}` responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from sclscore.gate import GateUnavailableError
from sclscore.scoring import InternalError, ValidationError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal error occurred while analysing your results."
UNAVAILABLE_MESSAGE = "The credential service is temporarily unavailable. Please try again later."


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Rejected malformed request body", extra={"path": request.url.path})
    return error_response(HTTP_400_BAD_REQUEST, "The submitted data is malformed.")


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return error_response(HTTP_400_BAD_REQUEST, str(exc))


async def internal_error_handler(request: Request, exc: InternalError) -> JSONResponse:
    logger.error(
        "Internal error while scoring submission",
        exc_info=exc,
        extra={"path": request.url.path},
    )
    return error_response(HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


async def gate_unavailable_handler(request: Request, exc: GateUnavailableError) -> JSONResponse:
    logger.warning("Credential store unavailable", extra={"path": request.url.path})
    return error_response(HTTP_503_SERVICE_UNAVAILABLE, UNAVAILABLE_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the application."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(InternalError, internal_error_handler)
    app.add_exception_handler(GateUnavailableError, gate_unavailable_handler)
