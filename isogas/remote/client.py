"""Resilient HTTP client for the remote ISO 14912 engine.

Wraps ``httpx.AsyncClient`` with bounded retries and exponential backoff.
Only transient failures (no response, timeout, HTTP 5xx) are retried;
client errors (HTTP 4xx) surface immediately.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from isogas.errors import PermanentRemoteFailure, RemoteFailure, TransientRemoteFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 15.0  # s


def is_transient_error(exc: BaseException) -> bool:
    """Classify an exception as transient (retryable)."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    if isinstance(exc, RemoteFailure):
        return isinstance(exc, TransientRemoteFailure)
    return isinstance(exc, httpx.TransportError)


@dataclass
class RetryPolicy:
    """Retry parameters for one logical request.

    Args:
        max_attempts: Total attempts including the first one.
        base_delay: Delay before the first retry [s]; doubles each retry.
        is_transient: Predicate deciding whether an error is retryable.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    is_transient: Callable[[BaseException], bool] = field(default=is_transient_error)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")

    def delay(self, attempt: int) -> float:
        """Backoff after failed attempt number *attempt* (1-based)."""
        return self.base_delay * 2 ** (attempt - 1)


def _remote_message(exc: BaseException) -> str:
    """Prefer the message reported by the server over the transport text."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            data = exc.response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            message = data.get("message") or data.get("detail")
            if message:
                return str(message)
        return f"API call failed: HTTP {exc.response.status_code} {exc.response.reason_phrase}"
    if isinstance(exc, RemoteFailure):
        return exc.message
    return f"Network error: {str(exc) or type(exc).__name__}"


def classify_error(exc: BaseException, attempts: int, duration: float) -> RemoteFailure:
    """Map an exception to TransientRemoteFailure or PermanentRemoteFailure."""
    status_code = None
    url = None
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        url = str(exc.request.url)
    elif isinstance(exc, httpx.RequestError):
        try:
            url = str(exc.request.url)
        except RuntimeError:
            url = None
    elif isinstance(exc, RemoteFailure):
        status_code, url = exc.status_code, exc.url

    cls = TransientRemoteFailure if is_transient_error(exc) else PermanentRemoteFailure
    return cls(
        _remote_message(exc),
        status_code=status_code,
        attempts=attempts,
        duration=duration,
        url=url,
    )


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """Run *operation* with retries according to *policy*.

    Raises:
        TransientRemoteFailure: Retries exhausted on transient errors.
        PermanentRemoteFailure: A non-retryable error occurred.
    """
    policy = policy or RetryPolicy()
    start = time.monotonic()
    attempt = 1
    while True:
        try:
            return await operation()
        except (httpx.HTTPError, RemoteFailure) as exc:
            if not policy.is_transient(exc):
                logger.warning("Non-retryable remote error: %s", _remote_message(exc))
                raise classify_error(exc, attempt, time.monotonic() - start) from exc
            if attempt >= policy.max_attempts:
                failure = classify_error(exc, attempt, time.monotonic() - start)
                logger.error("Remote call failed after %d attempts: %s", failure.attempts, failure)
                raise failure from exc
            delay = policy.delay(attempt)
            logger.info(
                "Attempt %d/%d failed (%s); retrying in %.1f s",
                attempt,
                policy.max_attempts,
                _remote_message(exc),
                delay,
            )
        await sleep(delay)
        attempt += 1


class RemoteClient:
    """JSON client for the remote engine.

    Args:
        base_url: API root, e.g. ``http://localhost:8000/api/v1``.
        timeout: Per-attempt timeout [s].
        policy: Retry policy shared by all requests.
        transport: Optional httpx transport (used for testing).
        sleep: Coroutine used for backoff waits.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        policy: RetryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.base_url = base_url
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            event_hooks={"request": [self._log_request], "response": [self._log_response]},
        )

    @staticmethod
    async def _log_request(request: httpx.Request) -> None:
        logger.debug("-> %s %s", request.method, request.url)

    @staticmethod
    async def _log_response(response: httpx.Response) -> None:
        logger.debug(
            "<- %s %s %d", response.request.method, response.request.url, response.status_code
        )

    async def request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send one logical request and return the decoded JSON body."""

        async def attempt() -> Any:
            headers = {"X-Request-ID": uuid.uuid4().hex}
            response = await self._client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
            try:
                return response.json()
            except ValueError as exc:
                raise TransientRemoteFailure(
                    f"Malformed JSON response from {url}",
                    status_code=response.status_code,
                    url=str(response.request.url),
                ) from exc

        return await call_with_retry(attempt, self.policy, self._sleep)

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request_json("GET", url, params=params)

    async def post_json(self, url: str, payload: dict[str, Any]) -> Any:
        return await self.request_json("POST", url, json=payload)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RemoteClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
