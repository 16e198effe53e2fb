"""Shared pytest fixtures for the LinkScout test suite."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from linkscout.interfaces.link_source import ILinkSource
from linkscout.models.catalog import ReleaseRecord, TrackDescriptor, TrackRecord
from linkscout.models.links import CanonicalResult
from linkscout.models.providers import ProviderKey
from linkscout.providers.http.resilient_client import ResilientHttpClient
from linkscout.providers.repository.memory_repository import MemoryLinkRepository

ISRC = "USUM72212345"


# ---------------------------------------------------------------------------
# Link source stub
# ---------------------------------------------------------------------------


class StubLinkSource(ILinkSource):
    """In-memory ILinkSource returning canned results (or raising)."""

    def __init__(
        self,
        name: str,
        display: str,
        covers: set[ProviderKey],
        results: list[CanonicalResult] | None = None,
        error: Exception | None = None,
        available: bool = True,
    ) -> None:
        self._name = name
        self._display = display
        self._covers = frozenset(covers)
        self._results = results or []
        self._error = error
        self._available = available
        self.calls: list[tuple[str, str]] = []

    def get_source_name(self) -> str:
        return self._name

    def get_display_name(self) -> str:
        return self._display

    def covers(self) -> frozenset[ProviderKey]:
        return self._covers

    def is_available(self) -> bool:
        return self._available

    async def find_links(self, isrc: str, storefront: str = "us") -> list[CanonicalResult]:
        self.calls.append((isrc, storefront))
        if self._error is not None:
            raise self._error
        return list(self._results)


@pytest.fixture
def make_source() -> Callable[..., StubLinkSource]:
    """Factory for :class:`StubLinkSource` instances."""
    return StubLinkSource


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def make_http() -> Callable[..., tuple[ResilientHttpClient, list[httpx.Request]]]:
    """Build a ResilientHttpClient over ``httpx.MockTransport``.

    ``handler`` is either a callable ``(request) -> Response`` or a list of
    responses served in order.  Returns ``(client, recorded_requests)``.
    Retries sleep through a no-op so tests never wait.
    """

    def _factory(handler: Any, name: str = "test", **kwargs: Any):
        requests: list[httpx.Request] = []
        queue = list(handler) if isinstance(handler, list) else None

        def _dispatch(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if queue is not None:
                return queue.pop(0)
            return handler(request)

        async def _no_sleep(_: float) -> None:
            return None

        kwargs.setdefault("sleep", _no_sleep)
        client = httpx.AsyncClient(transport=httpx.MockTransport(_dispatch))
        return ResilientHttpClient(client, kwargs.pop("base_url", ""), name=name, **kwargs), requests

    return _factory


# ---------------------------------------------------------------------------
# Catalog fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_track() -> TrackDescriptor:
    return TrackDescriptor(title="Strings of Life", artist_name="Rhythim Is Rhythim", isrc=ISRC)


@pytest.fixture
def sample_release() -> ReleaseRecord:
    return ReleaseRecord(
        id="rel-1",
        title="Strings of Life",
        metadata={"spotifyArtists": [{"name": "Rhythim Is Rhythim", "id": "sp-1"}]},
    )


@pytest.fixture
def memory_repository(sample_release: ReleaseRecord) -> MemoryLinkRepository:
    return MemoryLinkRepository(
        releases=[sample_release],
        tracks=[
            TrackRecord(id="t-1", release_id="rel-1", title="Strings of Life", track_number=1),
            TrackRecord(id="t-2", release_id="rel-1", title="Strings of Life (Remix)", track_number=2, isrc=ISRC),
        ],
    )
