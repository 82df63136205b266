"""Error taxonomy for the blob service and the FastAPI handlers that map it to status codes.

Error responses carry only a status code: no JSON body is returned to the
client, the context goes to the log instead.
"""

from typing import Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from blob_service.logger_config import get_logger, structured_log


class BlobServiceError(Exception):
    """Base class for blob service errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, blob_id: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.blob_id = blob_id
        self.operation = operation


class ClientInputError(BlobServiceError):
    """Malformed multipart body or missing/empty file part."""

    status_code = status.HTTP_400_BAD_REQUEST


class BlobNotFoundError(BlobServiceError):
    """No blob is stored under the identifier (or the identifier is malformed)."""

    status_code = status.HTTP_404_NOT_FOUND


class StorageIOError(BlobServiceError):
    """Filesystem failure after the request's preconditions passed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class BlobClientError(BlobServiceError):
    """Unexpected response or transport failure seen by BlobClient."""


async def blob_service_exception_handler(request: Request, exc: BlobServiceError) -> Response:
    logger = get_logger()
    server_error = exc.status_code >= 500
    log = logger.error if server_error else logger.info
    log(structured_log(
        exc.message,
        event="request_failed",
        error=type(exc).__name__,
        operation=exc.operation,
        blob_id=exc.blob_id,
        status_code=exc.status_code,
    ), exc_info=exc if server_error else None)
    return Response(status_code=exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> Response:
    get_logger().info(structured_log(
        "Request validation failed",
        event="request_invalid",
        path=request.url.path,
        errors=len(exc.errors()),
    ))
    return Response(status_code=status.HTTP_400_BAD_REQUEST)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    get_logger().debug(structured_log(
        "HTTP error",
        event="http_error",
        path=request.url.path,
        status_code=exc.status_code,
    ))
    return Response(status_code=exc.status_code, headers=getattr(exc, "headers", None))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BlobServiceError, blob_service_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
