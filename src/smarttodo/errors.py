"""Error taxonomy and the handlers that render it.

Learn: Every failure a client can see is one of five typed errors.
Handlers raise them for the checks they own (bad input, wrong owner,
missing task). Failures coming out of collaborators (the store, the
token codec) are converted into one of these at the service boundary,
so the exception handlers below never have to guess what kind of error
they are looking at.

All responses share one envelope:
    {"success": bool, "message": str, "data": ..., "errors": [...]}
Keys that would be null are left out.
"""

import traceback
from contextlib import contextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from smarttodo.db.store import StoreError

logger = structlog.get_logger()


class AppError(Exception):
    """Base for every error that maps onto an HTTP status."""

    status_code = 500

    def __init__(
        self,
        message: str,
        errors: Optional[list[str]] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.errors = errors
        self.headers = headers


class ValidationFailed(AppError):
    """Bad input shape or content."""

    status_code = 400


class Unauthorized(AppError):
    """Missing, malformed, expired or forged credentials."""

    status_code = 401

    def __init__(self, message: str):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(AppError):
    """Valid identity, but not the owner of the resource."""

    status_code = 403


class NotFound(AppError):
    status_code = 404


class InternalError(AppError):
    """Unexpected failure in a collaborator.

    `detail` holds the underlying cause; it only reaches the client
    outside production.
    """

    status_code = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


@contextmanager
def store_failures(message: str):
    """Normalize StoreError raised inside the block into InternalError(message)."""
    try:
        yield
    except StoreError as e:
        logger.error("store.failure", message=message, error=str(e))
        raise InternalError(message, detail=str(e)) from e


def envelope(
    message: str,
    success: bool = True,
    data=None,
    errors: Optional[list[str]] = None,
    **extra,
) -> dict:
    """Build the shared response body, omitting empty keys."""
    body = {"success": success, "message": message}
    if data is not None:
        body["data"] = data
    if errors:
        body["errors"] = errors
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


def _expose_internals(request: Request) -> bool:
    return not request.app.state.settings.is_production


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    extra = {}
    if isinstance(exc, InternalError) and _expose_internals(request):
        extra["error"] = exc.detail
        if exc.__cause__ is not None:
            extra["stack"] = "".join(traceback.format_exception(exc.__cause__))
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(exc.message, success=False, errors=exc.errors, **extra),
        headers=exc.headers,
    )


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return JSONResponse(
        status_code=400,
        content=envelope("Validation error.", success=False, errors=messages),
    )


async def _http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = "Route not found." if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(message, success=False),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_response(request: Request, exc: Exception) -> JSONResponse:
    """500 envelope for an exception no other handler claimed."""
    logger.exception("request.unhandled_error", path=request.url.path)
    extra = {}
    if _expose_internals(request):
        extra["error"] = str(exc)
        extra["stack"] = "".join(traceback.format_exception(exc))
    return JSONResponse(
        status_code=500,
        content=envelope("Internal server error.", success=False, **extra),
    )


def install_error_handlers(app: FastAPI) -> None:
    """Register the envelope-rendering exception handlers on the app."""
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_response)
