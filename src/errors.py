from typing import Any, Callable, Optional
import logging

from fastapi.requests import Request
from fastapi.responses import JSONResponse
from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError

logger = logging.getLogger("docrelay.errors")


class RelayError(Exception):
    """Base class for all relay-related exceptions."""
    def __init__(self, message: str = "An error occurred", error_code: str = "error"):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


# ========================================== Export service errors
class TransportError(RelayError):
    """Raised when the export service or storage backend cannot be reached or answers with a bad status."""
    def __init__(self, message: str = "Transport error", status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message=message, error_code="transport_error")


class UnsupportedFormatError(RelayError):
    """Raised when a filename's extension has no fetch strategy."""
    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(
            message=f"Unsupported file type: {extension}",
            error_code="unsupported_file_type",
        )


class EmptyResponseError(RelayError):
    """Raised when the export service returns zero bytes where a body was expected."""
    def __init__(self, message: str = "Received an empty response from the server"):
        super().__init__(message=message, error_code="empty_response")


class ArchiveParseError(RelayError):
    """Raised when a zip container cannot be parsed."""
    def __init__(self, message: str = "Failed to parse archive"):
        super().__init__(message=message, error_code="archive_parse_error")


# ========================================== Storage errors
class UploadStepError(RelayError):
    """Raised when any step of the chunked upload fails."""
    def __init__(self, step: str, message: str, status_code: Optional[int] = None):
        self.step = step
        self.status_code = status_code
        super().__init__(message=message, error_code="upload_step_error")


def failure_response(message: str) -> JSONResponse:
    return JSONResponse(
        content={"status": "failure", "error": message},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def create_exception_handler() -> Callable[[Request, Exception], Any]:

    async def exception_handler(request: Request, exc: RelayError):
        logger.error(f"{exc.error_code} at {request.method} {request.url.path}: {exc.message}")
        return failure_response(exc.message)

    return exception_handler


def register_all_errors(app: FastAPI):
    app.add_exception_handler(RelayError, create_exception_handler())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.error(f"Validation error at {request.method} {request.url.path}: {errors}")
        message = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
            for err in errors
        )
        return failure_response(message or "Malformed request")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception at {request.method} {request.url.path}: {exc}")
        return failure_response(str(exc))
