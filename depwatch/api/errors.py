"""Unified error handling — typed errors + RequestValidationError → ``{"message": ...}``."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from depwatch.engines.dependency_resolver.errors import (
    InvalidRepositoryUrl,
    ManifestError,
    ProviderNotImplemented,
    ProviderUnavailable,
    ResolutionError,
)
from depwatch.services import NotFoundError, ServiceError, ValidationError

log = structlog.get_logger(__name__)

_STATUS_MAP: dict[type[Exception], int] = {
    NotFoundError: 400,
    ValidationError: 400,
    InvalidRepositoryUrl: 400,
    ProviderNotImplemented: 500,
    ManifestError: 502,
    ProviderUnavailable: 503,
}


def _status_for(exc: Exception) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_MAP:
            return _STATUS_MAP[cls]
    return 500


async def _typed_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    status = _status_for(exc)
    if status >= 500:
        log.warning(
            "request.resolution_failed",
            status=status,
            error_type=type(exc).__name__,
            error=str(exc),
        )
    return JSONResponse(status_code=status, content={"message": str(exc)})


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = []
    for err in exc.errors():
        loc = " → ".join(str(part) for part in err["loc"])
        messages.append(f"{loc}: {err['msg']}")
    return JSONResponse(status_code=400, content={"message": "; ".join(messages)})


async def _unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    log.exception("request.unhandled_error", error_type=type(exc).__name__)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


def register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the app."""
    app.add_exception_handler(ServiceError, _typed_error_handler)
    app.add_exception_handler(ResolutionError, _typed_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)
