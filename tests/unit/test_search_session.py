"""Unit tests for latest-search-wins session handling."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from deal_discovery.core.exceptions import SearchTimeoutError
from deal_discovery.services.search_service import SearchService
from deal_discovery.services.search_session import SearchSession, SearchSessionRegistry


class BlockingDealLibrary:
    """Market sizing calls block until released; everything else answers at once."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls: list[str] = []

    async def __aenter__(self) -> BlockingDealLibrary:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    async def post(
        self,
        endpoint: str,
        payload: dict[str, Any],
        timeout: float | None = None,
    ) -> dict[str, Any]:
        self.calls.append(endpoint)
        if endpoint == "/api/market-sizing":
            self.started.set()
            await self.release.wait()
            return {"marketSizing": [{"id": "stale"}]}
        return {"marketingNews": [{"id": "n1", "headline": "CTV keeps growing"}]}


class TimingOutDealLibrary:
    async def __aenter__(self) -> TimingOutDealLibrary:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    async def post(
        self,
        endpoint: str,
        payload: dict[str, Any],
        timeout: float | None = None,
    ) -> dict[str, Any]:
        raise SearchTimeoutError("Deal Library", timeout or 0)


@pytest.mark.asyncio
async def test_newer_search_supersedes_in_flight_search() -> None:
    fake = BlockingDealLibrary()
    session = SearchSession(SearchService(client_factory=lambda: fake))

    first = asyncio.create_task(session.search("market size of ctv"))
    await fake.started.wait()
    assert session.searching is True

    second = await session.search("latest marketing news")
    first_outcome = await first

    assert first_outcome.status == "superseded"
    assert first_outcome.generation == 1
    assert second.generation == 2
    assert second.status == "success"
    assert session.current == second
    assert session.current.market_sizing == []
    assert [item.id for item in session.current.marketing_news] == ["n1"]
    assert session.searching is False


@pytest.mark.asyncio
async def test_new_search_clears_previous_results() -> None:
    fake = BlockingDealLibrary()
    session = SearchSession(SearchService(client_factory=lambda: fake))

    await session.search("latest marketing news")
    assert session.current.marketing_news

    pending = asyncio.create_task(session.search("market size of ctv"))
    await fake.started.wait()

    assert session.current.marketing_news == []
    assert session.current.generation == 2

    fake.release.set()
    outcome = await pending

    assert outcome.market_sizing == [{"id": "stale"}]
    assert session.current == outcome


@pytest.mark.asyncio
async def test_timeout_clears_searching_flag() -> None:
    session = SearchSession(SearchService(client_factory=TimingOutDealLibrary))

    outcome = await session.search("market size of ctv")

    assert outcome.status == "timed_out"
    assert session.searching is False
    assert session.current == outcome


@pytest.mark.asyncio
async def test_cancelling_the_caller_propagates() -> None:
    fake = BlockingDealLibrary()
    session = SearchSession(SearchService(client_factory=lambda: fake))

    task = asyncio.create_task(session.search("market size of ctv"))
    await fake.started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert session.searching is False


def test_registry_reuses_sessions_by_id() -> None:
    registry = SearchSessionRegistry(SearchService(client_factory=TimingOutDealLibrary))

    first = registry.get("user-1")

    assert registry.get("user-1") is first
    assert registry.get("user-2") is not first
    assert len(registry) == 2


def test_registry_evicts_oldest_idle_session() -> None:
    registry = SearchSessionRegistry(
        SearchService(client_factory=TimingOutDealLibrary),
        max_sessions=2,
    )
    oldest = registry.get("a")
    registry.get("b")

    registry.get("c")

    assert len(registry) == 2
    assert registry.get("a") is not oldest


@pytest.mark.asyncio
async def test_in_flight_placeholder_reports_searching() -> None:
    fake = BlockingDealLibrary()
    session = SearchSession(SearchService(client_factory=lambda: fake))
    assert session.current.status == "idle"

    pending = asyncio.create_task(session.search("market size of ctv"))
    await fake.started.wait()

    assert session.current.status == "searching"

    fake.release.set()
    outcome = await pending

    assert outcome.status == "success"
    assert session.current.status == "success"
