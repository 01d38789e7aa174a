"""Per-user search state: one result slot, newest invocation wins."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from deal_discovery.schemas.search import SearchOutcome
from deal_discovery.services.search_service import SearchService

logger = logging.getLogger(__name__)


class SearchSession:
    """Holds the visible search outcome for one user.

    Each call to ``search`` takes the next generation number, clears the
    visible outcome, and cancels whatever earlier invocation is still in
    flight. Completions from an older generation are returned as
    ``superseded`` and never reach ``current``.
    """

    def __init__(self, service: SearchService | None = None) -> None:
        self.service = service or SearchService()
        self.current = SearchOutcome()
        self.searching = False
        self._generation = 0
        self._pending: asyncio.Task[SearchOutcome] | None = None

    @property
    def generation(self) -> int:
        return self._generation

    async def search(
        self,
        query: str,
        card_types: Iterable[str] | None = None,
        conversation_history: list[dict[str, Any]] | None = None,
    ) -> SearchOutcome:
        self._generation += 1
        generation = self._generation

        previous = self._pending
        if previous is not None and not previous.done():
            logger.info("Cancelling superseded search", extra={"generation": generation - 1})
            previous.cancel()

        self.current = SearchOutcome(generation=generation, query=query, status="searching")
        self.searching = True

        task = asyncio.create_task(
            self.service.search(
                query,
                card_types,
                conversation_history,
                generation=generation,
            )
        )
        self._pending = task

        try:
            outcome = await task
        except asyncio.CancelledError:
            if generation == self._generation:
                # The caller itself was cancelled, not superseded
                raise
            return self._superseded(generation, query)
        finally:
            if generation == self._generation:
                self.searching = False
                self._pending = None

        if generation != self._generation:
            return self._superseded(generation, query)

        self.current = outcome
        return outcome

    @staticmethod
    def _superseded(generation: int, query: str) -> SearchOutcome:
        logger.info("Discarding stale search result", extra={"generation": generation})
        return SearchOutcome(
            generation=generation,
            query=query,
            status="superseded",
            message="A newer search replaced this one.",
        )


class SearchSessionRegistry:
    """Sessions keyed by client-provided session id."""

    def __init__(self, service: SearchService | None = None, max_sessions: int = 1000) -> None:
        self.service = service or SearchService()
        self.max_sessions = max_sessions
        self._sessions: dict[str, SearchSession] = {}

    def get(self, session_id: str) -> SearchSession:
        session = self._sessions.get(session_id)
        if session is None:
            if len(self._sessions) >= self.max_sessions:
                # Drop the oldest idle session
                for stale_id, stale in list(self._sessions.items()):
                    if not stale.searching:
                        del self._sessions[stale_id]
                        break
            session = SearchSession(self.service)
            self._sessions[session_id] = session
        return session

    def __len__(self) -> int:
        return len(self._sessions)
