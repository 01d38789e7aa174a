"""Search execution: one routed backend call turned into a SearchOutcome.

Every failure is converted here into a category-specific message, so callers
always receive an outcome and never an exception from the backend.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from deal_discovery.config import settings
from deal_discovery.core.exceptions import (
    BackendUnreachableError,
    ExternalAPIError,
    InvalidResponseError,
    SearchTimeoutError,
)
from deal_discovery.integrations.deal_library import API_NAME, DealLibraryClient
from deal_discovery.schemas.card import RESULT_SLOTS
from deal_discovery.schemas.responses import (
    RESPONSE_MODELS,
    DealSearchResponse,
    EndpointResponse,
    UnifiedSearchResponse,
)
from deal_discovery.schemas.search import SearchOutcome, SearchStatus
from deal_discovery.services.intent_router import IntentRouter, RoutingDecision
from deal_discovery.services.news_fallback import build_fallback_news
from deal_discovery.services.relevance import rank_deals

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

EMPTY_QUERY_MESSAGE = "Enter a search query to get started."
GENERAL_TIMEOUT_MESSAGE = "Search timed out. Please try a more specific query or try again."
GENERAL_FAILURE_MESSAGE = "Search failed. Please try again."
UNIFIED_LABEL = "Unified search"
OFFLINE_NEWS_MESSAGE = (
    "Live marketing news is unavailable right now. Showing recent headlines instead."
)

# Used in "<label> is temporarily unavailable" and "<label> timed out"
CARD_LABELS: dict[str, str] = {
    "deals": "Deal search",
    "personas": "Persona search",
    "audience-insights": "Audience insights",
    "market-sizing": "Market sizing analysis",
    "geographic": "Geographic insights",
    "marketing-news": "Marketing news",
    "competitive-intelligence": "Competitive intelligence",
    "content-strategy": "Content strategy",
    "brand-strategy": "Brand strategy",
    "marketing-swot": "Marketing SWOT analysis",
    "company-profile": "Company profile analysis",
}

# Used in "No <noun> found for your query."
EMPTY_NOUNS: dict[str, str] = {
    "deals": "relevant deals",
    "personas": "personas",
    "audience-insights": "audience insights",
    "market-sizing": "market sizing data",
    "geographic": "geographic insights",
    "marketing-news": "marketing news",
    "competitive-intelligence": "competitive intelligence",
    "content-strategy": "content strategy recommendations",
    "brand-strategy": "brand strategy recommendations",
    "marketing-swot": "SWOT analysis",
    "company-profile": "company profile",
}

SUCCESS_MESSAGES: dict[str, str] = {
    "audience-insights": "Here are the audience insights for your query.",
    "market-sizing": "Here is the market sizing analysis for your query.",
    "geographic": "Here are the geographic insights for your query.",
    "marketing-news": "Here are the latest marketing headlines for your query.",
    "competitive-intelligence": "Here is the competitive intelligence for your query.",
    "content-strategy": "Here is the content strategy for your query.",
    "brand-strategy": "Here is the brand strategy for your query.",
    "marketing-swot": "Here is the marketing SWOT analysis for your query.",
    "company-profile": "Here is the company profile for your query.",
}


def unavailable_message(label: str) -> str:
    return f"{label} is temporarily unavailable. Please try again later."


def timed_out_message(label: str) -> str:
    return f"{label} timed out. Please try a more specific query or try again."


def empty_message(card_type: str | None) -> str:
    if card_type is None:
        return "No results found for your query."
    return f"No {EMPTY_NOUNS[card_type]} found for your query."


def persona_message(personas: list[dict[str, Any]]) -> str:
    first = personas[0]
    if first.get("isDynamic"):
        category = first.get("category") or "your"
        return (
            f"Generated dynamic persona for {category} audience based on real "
            "commerce data and demographic insights."
        )
    return f"Found {len(personas)} relevant personas for your query."


def _decode(model: type[ModelT], body: dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(body)
    except PydanticValidationError as e:
        raise InvalidResponseError(
            API_NAME,
            f"Unexpected {model.__name__} shape",
            {"errors": e.errors(include_url=False)},
        ) from e


ClientFactory = Callable[[], DealLibraryClient]


class SearchService:
    """Run a search end to end: route, call the backend, rank, report."""

    def __init__(
        self,
        client_factory: ClientFactory | None = None,
        router: IntentRouter | None = None,
        result_limit: int | None = None,
    ) -> None:
        self._client_factory = client_factory or DealLibraryClient
        self.router = router or IntentRouter()
        self.result_limit = (
            settings.deal_result_limit if result_limit is None else result_limit
        )

    async def search(
        self,
        query: str,
        card_types: Iterable[str] | None = None,
        conversation_history: list[dict[str, Any]] | None = None,
        *,
        generation: int = 0,
    ) -> SearchOutcome:
        """Route and execute one search invocation."""
        if not query.strip():
            return SearchOutcome(
                generation=generation,
                query=query,
                status="invalid",
                message=EMPTY_QUERY_MESSAGE,
            )

        decision = self.router.route(query, card_types, conversation_history)
        return await self.execute(decision, query, generation=generation)

    async def execute(
        self,
        decision: RoutingDecision,
        query: str,
        *,
        generation: int = 0,
    ) -> SearchOutcome:
        """Perform the backend call of a routing decision."""
        try:
            async with self._client_factory() as client:
                body = await client.post(
                    decision.endpoint,
                    decision.payload,
                    timeout=decision.timeout_seconds,
                )

            if decision.action == "unified":
                outcome = self._unified_outcome(decision, query, generation, body)
            else:
                outcome = self._card_outcome(decision, query, generation, body)

        except SearchTimeoutError:
            outcome = self._failed_outcome(
                decision, query, generation, "timed_out", self._timeout_text(decision)
            )
        except BackendUnreachableError:
            if decision.card_type == "marketing-news" and decision.action != "unified":
                outcome = self._offline_news_outcome(decision, query, generation)
            else:
                outcome = self._failed_outcome(
                    decision, query, generation, "failed", self._failure_text(decision)
                )
        except ExternalAPIError as e:
            logger.warning(
                "Search branch failed",
                extra={
                    "action": decision.action,
                    "card_type": decision.card_type,
                    "error": e.message,
                },
            )
            outcome = self._failed_outcome(
                decision, query, generation, "failed", self._failure_text(decision)
            )

        logger.info(
            "Search completed",
            extra={
                "generation": generation,
                "action": decision.action,
                "card_type": decision.card_type,
                "status": outcome.status,
            },
        )
        return outcome

    def _card_outcome(
        self,
        decision: RoutingDecision,
        query: str,
        generation: int,
        body: dict[str, Any],
    ) -> SearchOutcome:
        card_type = decision.card_type or "deals"
        response: EndpointResponse = _decode(RESPONSE_MODELS[card_type], body)
        results = list(response.results)
        if card_type == "deals":
            results = rank_deals(results, query, self.result_limit)

        coaching = response.coaching if isinstance(response, DealSearchResponse) else None

        if not results:
            status: SearchStatus = "empty"
            message = empty_message(card_type)
        else:
            status = "success"
            message = self._success_text(card_type, response, results)

        return SearchOutcome(
            generation=generation,
            query=query,
            action=decision.action,
            card_types=list(decision.card_types),
            status=status,
            message=message,
            coaching=coaching,
            **{RESULT_SLOTS[card_type]: results},
        )

    def _unified_outcome(
        self,
        decision: RoutingDecision,
        query: str,
        generation: int,
        body: dict[str, Any],
    ) -> SearchOutcome:
        response = _decode(UnifiedSearchResponse, body)

        slots: dict[str, list[Any]] = {}
        for card_type in decision.card_types:
            results = list(response.results_for(card_type))
            if card_type == "deals":
                results = rank_deals(results, query, self.result_limit)
            slots[RESULT_SLOTS[card_type]] = results

        filled = sum(1 for results in slots.values() if results)
        if filled == 0:
            status: SearchStatus = "empty"
            message = empty_message(None)
        else:
            status = "success"
            message = response.ai_response or (
                f"Found results for {filled} of {len(slots)} requested card types."
            )

        return SearchOutcome(
            generation=generation,
            query=query,
            action=decision.action,
            card_types=list(decision.card_types),
            status=status,
            message=message,
            **slots,
        )

    def _offline_news_outcome(
        self,
        decision: RoutingDecision,
        query: str,
        generation: int,
    ) -> SearchOutcome:
        logger.info("Serving fallback marketing news", extra={"generation": generation})
        return SearchOutcome(
            generation=generation,
            query=query,
            action=decision.action,
            card_types=list(decision.card_types),
            status="offline_fallback",
            message=OFFLINE_NEWS_MESSAGE,
            marketing_news=build_fallback_news(),
        )

    @staticmethod
    def _failed_outcome(
        decision: RoutingDecision,
        query: str,
        generation: int,
        status: SearchStatus,
        message: str,
    ) -> SearchOutcome:
        return SearchOutcome(
            generation=generation,
            query=query,
            action=decision.action,
            card_types=list(decision.card_types),
            status=status,
            message=message,
        )

    @staticmethod
    def _success_text(
        card_type: str,
        response: EndpointResponse,
        results: list[Any],
    ) -> str:
        if card_type == "personas":
            return persona_message(results)
        if response.ai_response:
            return response.ai_response
        if card_type == "deals":
            return f"Found {len(results)} relevant deals for your query."
        return SUCCESS_MESSAGES[card_type]

    @staticmethod
    def _failure_text(decision: RoutingDecision) -> str:
        if decision.action == "general":
            return GENERAL_FAILURE_MESSAGE
        if decision.action == "unified":
            return unavailable_message(UNIFIED_LABEL)
        return unavailable_message(CARD_LABELS[decision.card_type or "deals"])

    @staticmethod
    def _timeout_text(decision: RoutingDecision) -> str:
        if decision.action == "general":
            return GENERAL_TIMEOUT_MESSAGE
        if decision.action == "unified":
            return timed_out_message(UNIFIED_LABEL)
        return timed_out_message(CARD_LABELS[decision.card_type or "deals"])
