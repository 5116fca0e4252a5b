"""
Error taxonomy and the handlers that turn it into HTTP responses.

Every failure leaves the API as ``{"message": "..."}`` with a status code;
no structured error codes are exposed.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class FastFeastError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(FastFeastError):
    """Malformed or missing input."""
    status_code = 400


class InvalidTransitionError(ValidationError):
    """An order or payment status change that the lifecycle does not allow."""


class NotFoundError(FastFeastError):
    status_code = 404


class AuthError(FastFeastError):
    """401 when no token was sent, 403 when the token is unusable."""
    status_code = 401


class ProcessorError(FastFeastError):
    """The external payment processor call failed."""
    status_code = 500


class StorageError(FastFeastError):
    status_code = 500


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        # First loc element is the source ("body", "query", "path")
        field = ".".join(str(p) for p in error.get("loc", ())[1:])
        parts.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(FastFeastError)
    async def handle_fastfeast_error(request: Request, exc: FastFeastError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return _error_response(400, _describe_validation_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def handle_storage_error(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage failure on %s %s", request.method, request.url.path)
        error = StorageError(f"Storage error: {exc.__class__.__name__}")
        return _error_response(error.status_code, error.message)
