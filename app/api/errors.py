# =============================================================================
# Exception Handlers — Uniform Error Envelope
# =============================================================================
#
# Every error leaves the API as:
#   {"success": false, "error": "<message>", ...}
#
#   RequestValidationError → 400 + details[{field, message}]
#   HTTPException          → its own status (404, 429, ...)
#   EvaluationError        → 500
#   anything else          → 500 "Internal Server Error" (produced inside the
#                            middleware chain by UnhandledErrorMiddleware)
#
# DESIGN DECISION: Stack traces only outside production. They are the
# fastest way to debug a failed local run, and must never be shown to
# production clients.
# =============================================================================

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.models.responses import ErrorResponse, ValidationErrorDetail
from app.services.evaluation import EvaluationError

logger = logging.getLogger(__name__)

# Location prefixes FastAPI adds to validation errors ("body", "query", ...)
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def _error_response(
    status_code: int,
    body: ErrorResponse,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def _stack(exc: BaseException) -> str | None:
    if settings.is_production:
        return None
    return "".join(traceback.format_exception(exc))


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        details.append(ValidationErrorDetail(
            field=".".join(loc),
            message=err.get("msg", "Invalid value"),
        ))

    return _error_response(
        400,
        ErrorResponse(error="Validation failed", details=details),
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    message = str(exc.detail)
    # Starlette raises a bare 404 "Not Found" when no route matched
    if exc.status_code == 404 and message == "Not Found":
        message = f"Route {request.url.path} not found"

    return _error_response(
        exc.status_code,
        ErrorResponse(error=message),
        headers=getattr(exc, "headers", None),
    )


async def evaluation_exception_handler(
    request: Request,
    exc: EvaluationError,
) -> JSONResponse:
    logger.error(
        "Evaluation error on %s %s: %s", request.method, request.url.path, exc,
    )
    return _error_response(
        500,
        ErrorResponse(error=str(exc), stack=_stack(exc)),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path,
    )
    return _error_response(
        500,
        ErrorResponse(error="Internal Server Error", stack=_stack(exc)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(EvaluationError, evaluation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
