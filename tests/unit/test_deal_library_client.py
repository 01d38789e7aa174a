"""Unit tests for the deal library HTTP client."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from deal_discovery.core.exceptions import (
    BackendHTTPError,
    BackendUnreachableError,
    InvalidResponseError,
    SearchTimeoutError,
)
from deal_discovery.integrations.deal_library import DealLibraryClient


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None) -> None:
        self.status_code = status_code
        self.reason_phrase = "Internal Server Error" if status_code >= 500 else "OK"
        self._body = body if body is not None else {}

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return self._body


def _install_fake_client(
    monkeypatch: pytest.MonkeyPatch,
    *,
    response: FakeResponse | None = None,
    error: Exception | None = None,
    delay: float = 0.0,
) -> dict[str, Any]:
    captured: dict[str, Any] = {"closed": False}

    class FakeAsyncClient:
        def __init__(self, *args: Any, **kwargs: Any) -> None:
            captured["init"] = kwargs

        async def post(self, url: str, json: dict[str, Any]) -> FakeResponse:
            captured["post"] = {"url": url, "json": json}
            if delay:
                await asyncio.sleep(delay)
            if error is not None:
                raise error
            return response or FakeResponse()

        async def aclose(self) -> None:
            captured["closed"] = True

    monkeypatch.setattr(
        "deal_discovery.integrations.deal_library.httpx.AsyncClient",
        FakeAsyncClient,
    )
    return captured


@pytest.mark.asyncio
async def test_post_sends_json_and_returns_body(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _install_fake_client(
        monkeypatch,
        response=FakeResponse(body={"marketSizing": [{"id": "m1"}]}),
    )

    async with DealLibraryClient(base_url="http://deals.test/") as client:
        body = await client.post("/api/market-sizing", {"query": "ctv"}, timeout=5)

    assert body == {"marketSizing": [{"id": "m1"}]}
    assert captured["init"]["base_url"] == "http://deals.test"
    assert captured["post"] == {"url": "/api/market-sizing", "json": {"query": "ctv"}}
    assert captured["closed"] is True


@pytest.mark.asyncio
async def test_error_status_raises_http_error(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_client(monkeypatch, response=FakeResponse(status_code=502))

    async with DealLibraryClient(base_url="http://deals.test") as client:
        with pytest.raises(BackendHTTPError) as exc_info:
            await client.post("/api/deals/search", {"query": "x"})

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_connect_error_raises_unreachable(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_client(monkeypatch, error=httpx.ConnectError("Connection refused"))

    async with DealLibraryClient(base_url="http://deals.test") as client:
        with pytest.raises(BackendUnreachableError):
            await client.post("/api/marketing-news", {"query": "news"})


@pytest.mark.asyncio
async def test_deadline_cancels_slow_request(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_client(monkeypatch, delay=1.0)

    async with DealLibraryClient(base_url="http://deals.test") as client:
        with pytest.raises(SearchTimeoutError) as exc_info:
            await client.post("/api/market-sizing", {"query": "tam"}, timeout=0.01)

    assert exc_info.value.timeout_seconds == 0.01


@pytest.mark.asyncio
async def test_transport_timeout_raises_search_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_client(monkeypatch, error=httpx.ReadTimeout("read timed out"))

    async with DealLibraryClient(base_url="http://deals.test") as client:
        with pytest.raises(SearchTimeoutError):
            await client.post("/api/deals/search", {"query": "x"})


@pytest.mark.asyncio
async def test_non_object_body_is_invalid(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_client(monkeypatch, response=FakeResponse(body=["not", "an", "object"]))

    async with DealLibraryClient(base_url="http://deals.test") as client:
        with pytest.raises(InvalidResponseError):
            await client.post("/api/deals/search", {"query": "x"})


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    client = DealLibraryClient(base_url="http://deals.test")

    with pytest.raises(RuntimeError):
        await client.post("/api/deals/search", {"query": "x"})


@pytest.mark.asyncio
async def test_connect_timeout_counts_as_unreachable(monkeypatch: pytest.MonkeyPatch) -> None:
    """A connection that never completes is a connectivity failure, not a deadline."""
    _install_fake_client(monkeypatch, error=httpx.ConnectTimeout("connect timed out"))

    async with DealLibraryClient(base_url="http://deals.test") as client:
        with pytest.raises(BackendUnreachableError):
            await client.post("/api/marketing-news", {"query": "news"})
