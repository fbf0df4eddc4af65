"""
HTTP Error Translation
======================
Turns credential errors into JSON responses for FastAPI.

Known errors carry their own status and caller-actionable details. Anything
else is logged with its traceback and answered with an opaque 500.

CRITICAL: Never expose internal error details to end users.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

from .exceptions import CredgateError, InternalError, ValidationError

logger = structlog.get_logger(__name__)


def error_response(error: CredgateError) -> JSONResponse:
    """Create a JSONResponse for a known error."""
    body = {"error": type(error).__name__, **error.to_dict()}
    headers = None
    retry_after = error.details.get("retry_after")
    if retry_after is not None:
        headers = {"Retry-After": str(retry_after)}
    return JSONResponse(status_code=error.status_code, content=body, headers=headers)


async def handle_credgate_error(request: Request, exc: CredgateError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("Request failed", path=request.url.path, code=exc.code)
    else:
        logger.info("Request rejected", path=request.url.path, code=exc.code)
    return error_response(exc)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return error_response(InternalError())


def _clean_message(message: str) -> str:
    return message.split("Value error, ", 1)[-1]


async def handle_request_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Answer malformed request bodies with the same shape as ValidationError."""
    fields = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]),
            "message": _clean_message(error.get("msg", "")),
        }
        for error in exc.errors()
    ]
    message = fields[0]["message"] if fields else None
    logger.info("Request body rejected", path=request.url.path, fields=[f["field"] for f in fields])
    return error_response(ValidationError(message, details={"fields": fields}))


def install_error_handlers(app: FastAPI) -> None:
    """Register the credential error handlers on an app."""
    app.add_exception_handler(CredgateError, handle_credgate_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
