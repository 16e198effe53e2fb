"""JSON-over-HTTP client shared by every catalog lookup.

Wraps an injected ``httpx.AsyncClient`` with the behaviour all catalog
lookups need and none of them should re-implement:

* **De-duplication.**  Identical concurrent GETs (same method, URL and
  params) share one network call through an :class:`InflightRequestCache`.
* **Retries.**  HTTP 5xx and 429 are retried up to ``max_retries`` times
  with exponential backoff (``backoff_base * 2**attempt``).  A numeric
  ``Retry-After`` on a 429 replaces the computed delay, capped at
  ``max_retry_after``.  Other 4xx responses are never retried.
* **Typed failures.**  Every failure surfaces as a
  :class:`~linkscout.utils.errors.LinkScoutError` subclass so the resolver
  can record it without inspecting httpx internals.
* **Rate limiting.**  An optional token bucket is acquired before each
  attempt.  Its refusal propagates unchanged.
* **Latency monitoring.**  An optional regression detector observes each
  successful request under ``http.<name>.latency_ms``.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable

import httpx
import structlog

from linkscout.providers.cache.inflight_cache import InflightRequestCache
from linkscout.utils.errors import (
    MalformedResponseError,
    ProviderRequestError,
    ProviderUnavailableError,
    RateLimitError,
    RequestTimeoutError,
)

if TYPE_CHECKING:
    from linkscout.monitoring.regression_detector import PerformanceRegressionDetector
    from linkscout.utils.rate_limiter import TokenBucketRateLimiter

logger = structlog.get_logger(logger_name=__name__)

_USER_AGENT = "linkscout/0.1.0"


class ResilientHttpClient:
    """Retrying, de-duplicating JSON client bound to one catalog base URL.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``; the caller owns its lifecycle.
    base_url:
        Prefix for relative request paths.  Absolute URLs bypass it.
    name:
        Catalog name used for log events, error ``provider_name`` and the
        latency metric.
    default_headers:
        Headers sent with every request (auth tokens live here).
    timeout:
        Default per-request timeout in seconds.
    max_retries:
        Extra attempts after the first for 5xx/429 responses.
    backoff_base:
        First retry delay in seconds; doubled on each further attempt.
    max_retry_after:
        Upper bound for a server-provided ``Retry-After``.
    rate_limiter:
        Optional token bucket acquired before each attempt.
    inflight:
        De-duplication map; a private one is created when omitted.
    regression_detector:
        Optional latency monitor.
    sleep:
        Awaitable sleep used between retries, injectable for tests.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = "",
        *,
        name: str,
        default_headers: dict[str, str] | None = None,
        timeout: float = 10.0,
        max_retries: int = 1,
        backoff_base: float = 0.5,
        max_retry_after: float = 5.0,
        rate_limiter: TokenBucketRateLimiter | None = None,
        inflight: InflightRequestCache | None = None,
        regression_detector: PerformanceRegressionDetector | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._name = name
        self._default_headers = {"User-Agent": _USER_AGENT, "Accept": "application/json"}
        self._default_headers.update(default_headers or {})
        self._timeout = timeout
        self._max_retries = max(0, max_retries)
        self._backoff_base = backoff_base
        self._max_retry_after = max_retry_after
        self._rate_limiter = rate_limiter
        self._inflight = inflight if inflight is not None else InflightRequestCache()
        self._detector = regression_detector
        self._sleep = sleep

    @property
    def name(self) -> str:
        return self._name

    @property
    def max_retry_after(self) -> float:
        return self._max_retry_after

    @property
    def latency_metric(self) -> str:
        return f"http.{self._name}.latency_ms"

    def build_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    @staticmethod
    def request_key(method: str, url: str, params: dict[str, Any] | None) -> str:
        """Build the de-duplication key: method, URL, then params sorted by name."""
        if not params:
            return f"{method} {url}"
        query = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return f"{method} {url}?{query}"

    async def request_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """GET *path* and return the decoded JSON body.

        Raises
        ------
        RequestTimeoutError
            The request exceeded its timeout.
        ProviderUnavailableError
            Network failure, or 5xx after every retry.
        RateLimitError
            HTTP 429 after every retry.
        ProviderRequestError
            Any other non-2xx status; ``status_code`` is set.
        MalformedResponseError
            The body was not valid JSON.
        RateLimiterError
            The local rate limiter refused to wait.
        """
        url = self.build_url(path)
        key = self.request_key("GET", url, params)
        return await self._inflight.run(
            key, lambda: self._get_with_retries(url, params, headers, timeout)
        )

    async def _get_with_retries(
        self,
        url: str,
        params: dict[str, Any] | None,
        headers: dict[str, str] | None,
        timeout: float | None,
    ) -> Any:
        merged_headers = dict(self._default_headers)
        merged_headers.update(headers or {})
        effective_timeout = self._timeout if timeout is None else timeout

        attempt = 0
        while True:
            if self._rate_limiter is not None:
                await self._rate_limiter.acquire()

            started = time.perf_counter()
            try:
                response = await self._http.get(
                    url, params=params, headers=merged_headers, timeout=effective_timeout
                )
            except httpx.TimeoutException as exc:
                logger.warning("http_request_failed", client=self._name, url=url, reason="timeout")
                raise RequestTimeoutError(
                    message=f"Request to {url} timed out after {effective_timeout}s",
                    provider_name=self._name,
                ) from exc
            except httpx.HTTPError as exc:
                logger.warning("http_request_failed", client=self._name, url=url, reason=str(exc))
                raise ProviderUnavailableError(
                    message=f"Request to {url} failed: {exc}",
                    provider_name=self._name,
                ) from exc

            status = response.status_code
            if 200 <= status < 300:
                self._record_latency((time.perf_counter() - started) * 1000.0)
                return self._decode(response, url)

            retryable = status == 429 or status >= 500
            if retryable and attempt < self._max_retries:
                delay = self._retry_delay(response, attempt)
                logger.info(
                    "http_request_retry",
                    client=self._name,
                    url=url,
                    status=status,
                    attempt=attempt + 1,
                    delay_seconds=delay,
                )
                await self._sleep(delay)
                attempt += 1
                continue

            logger.warning("http_request_failed", client=self._name, url=url, status=status)
            if status == 429:
                raise RateLimitError(
                    message=f"HTTP 429 from {url} after {attempt + 1} attempt(s)",
                    provider_name=self._name,
                )
            if status >= 500:
                raise ProviderUnavailableError(
                    message=f"HTTP {status} from {url} after {attempt + 1} attempt(s)",
                    provider_name=self._name,
                )
            raise ProviderRequestError(
                message=f"HTTP {status} from {url}",
                provider_name=self._name,
                status_code=status,
            )

    def _retry_delay(self, response: httpx.Response, attempt: int) -> float:
        delay = self._backoff_base * (2 ** attempt)
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            if retry_after is not None:
                try:
                    delay = float(retry_after)
                except ValueError:
                    pass
        return max(0.0, min(delay, self._max_retry_after))

    def _decode(self, response: httpx.Response, url: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("http_request_failed", client=self._name, url=url, reason="malformed_json")
            raise MalformedResponseError(
                message=f"Response from {url} is not valid JSON",
                provider_name=self._name,
            ) from exc

    def _record_latency(self, elapsed_ms: float) -> None:
        if self._detector is not None:
            self._detector.observe(self.latency_metric, elapsed_ms)
