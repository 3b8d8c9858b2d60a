"""Request ID middleware — tags every request's logs and echoes X-Request-ID."""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

log = structlog.get_logger("depwatch.api")

REQUEST_ID_HEADER = "X-Request-ID"


def _incoming_request_id(request: Request) -> str:
    """Reuse the caller's request id when it is a UUID, otherwise mint one."""
    raw = request.headers.get(REQUEST_ID_HEADER, "")
    try:
        return str(uuid.UUID(raw))
    except ValueError:
        return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Bind request_id/method/path into structlog contextvars for the request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _incoming_request_id(request)
        tokens = structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            log.exception("request.failed", duration_ms=_elapsed_ms(start))
            raise
        else:
            log.info(
                "request.completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(start),
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            structlog.contextvars.reset_contextvars(**tokens)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 1)
