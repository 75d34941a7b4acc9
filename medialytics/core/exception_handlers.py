from __future__ import annotations

"""
JSON exception handlers.

Installed by `medialytics.main.create_app`. Every error is rendered with one
stable shape:

    {"error": true, "message": "...", "code": 404, "request_id": "..."}

Internal failures never leak details to the client; the stack trace goes to
the logs only.
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from medialytics.core.exceptions import (
    AppException,
    InternalErrorException,
    RateLimitedException,
    ValidationException,
)


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def _render(exc: AppException, request: Request) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_problem(request_id=_request_id(request)),
        headers=exc.headers,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:  # type: ignore
    return _render(exc, request)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # type: ignore
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    wrapped = AppException(detail, status_code=exc.status_code, headers=getattr(exc, "headers", None))
    return _render(wrapped, request)


def _clean_errors(errors: Any) -> list[Dict[str, Any]]:
    """Keep the JSON-safe parts of pydantic error entries."""
    out: list[Dict[str, Any]] = []
    for err in errors or []:
        out.append(
            {
                "loc": [str(p) for p in err.get("loc", ())],
                "msg": str(err.get("msg", "")),
                "type": str(err.get("type", "")),
            }
        )
    return out


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # type: ignore
    errors = _clean_errors(exc.errors())
    fields = sorted({e["loc"][-1] for e in errors if e["loc"]})
    message = "Invalid or missing fields: " + ", ".join(fields) if fields else "Invalid request body"
    return _render(ValidationException(message, details=errors), request)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:  # type: ignore
    """429 with `Retry-After` / `X-RateLimit-*` headers from the limiter."""
    limit = getattr(exc, "limit", None)
    retry_after = 60
    try:
        retry_after = int(limit.limit.get_expiry())  # type: ignore[union-attr]
    except Exception:
        pass

    response = _render(
        RateLimitedException(
            "Too many views logged from this IP, please try again later.",
            retry_after=retry_after,
        ),
        request,
    )
    limiter = getattr(request.app.state, "limiter", None)
    current = getattr(request.state, "view_rate_limit", None)
    if limiter is not None and current is not None:
        try:
            response = limiter._inject_headers(response, current)  # type: ignore[attr-defined]
        except Exception:
            logger.warning("Could not inject rate limit headers")
    logger.info("[RateLimit] exceeded | path={} | limit={}", request.url.path, exc.detail)
    return response


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # type: ignore
    # Hide internals; the stack trace is logged here.
    logger.exception("Unhandled error on {} {}", request.method, request.url.path)
    return _render(InternalErrorException(), request)


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)  # type: ignore[arg-type]


__all__ = [
    "app_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "rate_limit_exceeded_handler",
    "global_exception_handler",
    "install_exception_handlers",
]
