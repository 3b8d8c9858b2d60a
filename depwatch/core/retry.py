"""Shared retry/backoff/timeout policy for outbound HTTP calls."""

from __future__ import annotations

import asyncio
import os
import time
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

log = structlog.get_logger("depwatch.http")

# Upper bound for a single rate-limit sleep inside a request.
_MAX_RATE_LIMIT_WAIT = 30


class RetryExhaustedError(Exception):
    """Raised when every attempt of a request failed with a transient error."""

    def __init__(self, url: str, attempts: int, last_exc: Exception | None) -> None:
        self.url = url
        self.attempts = attempts
        self.last_exc = last_exc
        super().__init__(f"{url}: gave up after {attempts} attempt(s): {last_exc!r}")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retries with exponential backoff and a per-call timeout.

    Transient failures are timeouts, transport errors, 5xx responses,
    429 responses and rate-limited 403 responses. Other request errors,
    such as an undecodable body, end the call at once. Any other response is
    returned to the caller untouched, so 404 handling stays with the caller.
    """

    max_retries: int = 3
    base_delay: float = 1.0
    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> RetryPolicy:
        return cls(
            max_retries=int(os.environ.get("DEPWATCH_HTTP_MAX_RETRIES", "3")),
            base_delay=float(os.environ.get("DEPWATCH_HTTP_RETRY_DELAY", "1.0")),
            timeout=float(os.environ.get("DEPWATCH_HTTP_TIMEOUT", "10.0")),
        )

    async def get(
        self,
        client: httpx.AsyncClient,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        label: str = "http",
    ) -> httpx.Response:
        """GET *url* through *client*, retrying transient failures.

        Raises :class:`RetryExhaustedError` once ``max_retries`` attempts
        have all failed.
        """
        attempts = max(self.max_retries, 1)
        last_exc: Exception | None = None
        for attempt in range(attempts):
            wait: float | None = None
            try:
                resp = await client.get(url, params=params, headers=headers, timeout=self.timeout)

                if is_rate_limited(resp):
                    wait = min(rate_limit_wait(resp), _MAX_RATE_LIMIT_WAIT)
                    log.warning(
                        f"{label}.rate_limit",
                        url=url,
                        wait_seconds=wait,
                        attempt=attempt + 1,
                        max_retries=attempts,
                    )
                    last_exc = httpx.HTTPStatusError(
                        f"{resp.status_code}", request=resp.request, response=resp
                    )
                elif resp.status_code < 500:
                    return resp
                else:
                    log.warning(
                        f"{label}.server_error",
                        url=url,
                        status=resp.status_code,
                        attempt=attempt + 1,
                        max_retries=attempts,
                    )
                    last_exc = httpx.HTTPStatusError(
                        f"{resp.status_code}", request=resp.request, response=resp
                    )
            except httpx.TimeoutException as exc:
                log.warning(f"{label}.timeout", url=url, attempt=attempt + 1, max_retries=attempts)
                last_exc = exc
            except httpx.TransportError as exc:
                log.warning(
                    f"{label}.transport_error",
                    url=url,
                    error=str(exc),
                    attempt=attempt + 1,
                    max_retries=attempts,
                )
                last_exc = exc
            except httpx.RequestError as exc:
                # Undecodable bodies and redirect loops fail the same way on every attempt.
                log.warning(f"{label}.request_error", url=url, error=str(exc), attempt=attempt + 1)
                raise RetryExhaustedError(url, attempt + 1, exc) from exc

            if attempt < attempts - 1:
                await asyncio.sleep(wait if wait is not None else self.base_delay * (2**attempt))

        raise RetryExhaustedError(url, attempts, last_exc)


def is_rate_limited(response: httpx.Response) -> bool:
    """True for 429, or a 403 carrying rate-limit headers (GitHub style)."""
    if response.status_code == 429:
        return True
    if response.status_code != 403:
        return False
    remaining = response.headers.get("X-RateLimit-Remaining")
    if remaining is not None:
        try:
            return int(remaining) == 0
        except (ValueError, TypeError):
            pass
    return "Retry-After" in response.headers


def rate_limit_wait(response: httpx.Response) -> int:
    """Seconds to wait based on ``Retry-After`` or ``X-RateLimit-Reset``."""
    retry_after = response.headers.get("Retry-After")
    if retry_after is not None:
        try:
            return max(int(retry_after), 1)
        except (ValueError, TypeError):
            pass
    reset_ts = response.headers.get("X-RateLimit-Reset")
    if reset_ts is not None:
        try:
            return max(int(reset_ts) - int(time.time()), 1)
        except (ValueError, TypeError):
            pass
    return 60
