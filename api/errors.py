"""
api/errors.py -- The ErrorResponse envelope and the handlers that produce it.

Every non-2xx response body is {"error": {"code", "message", "detail"}}.

  code                status  raised when
  invalid_document    400     the document does not bind to CSAF 2.0 / 2.1
  document_too_large  413     Content-Length is above MAX_DOCUMENT_SIZE
  validation_error    422     the request body or query string is malformed
  rate_limited        429     VALIDATE_RATE_LIMIT is used up (sets Retry-After)
  internal_error      500     anything unexpected; details go to the log only
  http_<status>       any     other HTTP errors, e.g. unknown route or method
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorDetail, ErrorResponse

logger = logging.getLogger("csafvalidator.api.errors")


class ApiError(Exception):
    """A request the validator refuses, mapped 1:1 onto an error code."""

    def __init__(self, status_code: int, code: str, message: str, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error = ErrorDetail(code=code, message=message, detail=detail)

    @classmethod
    def invalid_document(cls, reason: str) -> "ApiError":
        return cls(400, "invalid_document", "The document could not be parsed as CSAF.", reason)

    @classmethod
    def document_too_large(cls, limit: int) -> "ApiError":
        return cls(413, "document_too_large", "Document exceeds the maximum size.", f"Limit is {limit} bytes.")


def error_response(
    status_code: int,
    error: ErrorDetail,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=error).model_dump(), headers=headers)


def _field_errors(exc: RequestValidationError) -> str:
    """'body.document: Input should be a valid dictionary; ...'"""
    return "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    logger.info("%s %s refused: %s", request.method, request.url.path, exc.error.code)
    return error_response(exc.status_code, exc.error)


async def handle_rate_limited(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    window = exc.limit.limit.get_expiry()
    error = ErrorDetail(code="rate_limited", message="Too many validation requests.", detail=f"Limit: {exc.detail}")
    return error_response(429, error, headers={"Retry-After": str(window)})


async def handle_malformed_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ErrorDetail(code="validation_error", message="Request validation failed.", detail=_field_errors(exc))
    return error_response(422, error)


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error = ErrorDetail(code=f"http_{exc.status_code}", message=str(exc.detail))
    return error_response(exc.status_code, error, headers=getattr(exc, "headers", None))


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return error_response(500, ErrorDetail(code="internal_error", message="An unexpected error occurred."))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(RateLimitExceeded, handle_rate_limited)
    app.add_exception_handler(RequestValidationError, handle_malformed_request)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected)
