"""Custom exception hierarchy for LinkScout.

All application exceptions inherit from :class:`LinkScoutError`, which
carries an optional ``provider_name`` so error handlers can identify which
external catalog (e.g. "deezer", "musickit", "musicfetch") caused the failure.

The hierarchy is organized by where the failure happens:

    LinkScoutError  (base -- catch-all for any LinkScout error)
    +-- ConfigurationError       (startup / missing credentials)
    +-- ProviderRequestError     (catalog answered with a non-retryable HTTP status)
    +-- ProviderUnavailableError (network failure or 5xx after retries)
    +-- RequestTimeoutError      (request exceeded its timeout)
    +-- RateLimitError           (catalog answered 429 after retries)
    +-- RateLimiterError         (local request limiter refused to wait)
    +-- MalformedResponseError   (body was not the JSON we expected)
    +-- PersistenceError         (link repository read/write failed)
    +-- DiscoveryError           (release-level orchestration failure)

"Not found" is never an exception: lookups return ``None`` and the resolver
falls back to a search URL.  Everything in this module is a transport or
infrastructure failure that the resolver and orchestrator turn into entries
of ``errors[]`` without aborting sibling work.
"""


class LinkScoutError(Exception):
    """Base exception for all LinkScout errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets for log
    scanning, e.g. ``[deezer] Deezer returned HTTP 503``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigurationError(LinkScoutError):
    """Raised when configuration is invalid or credentials are missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Transport errors raised by the resilient HTTP client
# ---------------------------------------------------------------------------

class ProviderRequestError(LinkScoutError):
    """Raised when a catalog answers with a non-retryable HTTP status.

    ``status_code`` is kept so lookups can treat 404 as a plain miss.
    """

    def __init__(
        self,
        message: str = "Catalog request was rejected",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._status_code = status_code

    @property
    def status_code(self) -> int | None:
        return self._status_code


class ProviderUnavailableError(LinkScoutError):
    """Raised when a catalog is unreachable or keeps answering 5xx."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RequestTimeoutError(LinkScoutError):
    """Raised when a request exceeds its timeout.

    Kept separate from :class:`ProviderUnavailableError` so callers can
    tell a slow catalog from a dead one.
    """

    def __init__(
        self,
        message: str = "Request timed out",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(LinkScoutError):
    """Raised when a catalog keeps answering HTTP 429 after retries."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimiterError(LinkScoutError):
    """Raised by the local request limiter when it refuses to wait for a token."""

    def __init__(
        self,
        message: str = "Local rate limiter rejected the request",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MalformedResponseError(LinkScoutError):
    """Raised when a catalog response cannot be decoded as the expected JSON."""

    def __init__(
        self,
        message: str = "Malformed response body",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Persistence / orchestration
# ---------------------------------------------------------------------------

class PersistenceError(LinkScoutError):
    """Raised when the link repository fails to read or write."""

    def __init__(
        self,
        message: str = "Link repository operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DiscoveryError(LinkScoutError):
    """Raised when release-level discovery cannot proceed."""

    def __init__(
        self,
        message: str = "Link discovery failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
