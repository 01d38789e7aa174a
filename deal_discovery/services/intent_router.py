"""Deterministic intent routing for deal discovery searches.

Maps a query plus the card types the user picked to exactly one backend
call. Explicit card types always win; free text goes through an ordered
keyword table where the first matching rule decides.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from deal_discovery.config import Settings, settings
from deal_discovery.core.exceptions import ValidationError
from deal_discovery.schemas.card import CARD_TYPES

logger = logging.getLogger(__name__)

UNIFIED_SEARCH_PATH = "/api/unified-search"
DEAL_SEARCH_PATH = "/api/deals/search"

History = list[dict[str, Any]]


@dataclass(frozen=True, slots=True)
class KeywordRule:
    """Card type selected when the query contains one of its keywords.

    ``all_of`` holds keyword groups that only match when every term of the
    group is present.
    """

    card_type: str
    keywords: tuple[str, ...]
    all_of: tuple[tuple[str, ...], ...] = ()

    def match(self, query_lower: str) -> str | None:
        """Return the keyword that matched, or None."""
        for keyword in self.keywords:
            if keyword in query_lower:
                return keyword
        for group in self.all_of:
            if all(term in query_lower for term in group):
                return " + ".join(group)
        return None


# Order is precedence. News must stay ahead of market sizing so that
# "latest headlines and market share" is treated as a news request.
KEYWORD_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        card_type="marketing-news",
        keywords=("marketing news", "news", "headlines", "latest", "today's marketing"),
        all_of=(("share", "headlines"),),
    ),
    KeywordRule(
        card_type="market-sizing",
        keywords=(
            "market size",
            "market sizing",
            "tam",
            "total addressable market",
            "market share",
            "ad spend",
            "percentage",
            "how big",
            "market opportunity",
            "market growth",
            "market trends",
            "market analysis",
            "industry trends",
        ),
    ),
    KeywordRule(
        card_type="deals",
        keywords=(
            "request deals",
            "find deals",
            "show me deals",
            "get deals",
            "deal request",
            "provide relevant deals",
            "reach new parents",
            "reach parents",
            "target new parents",
            "target parents",
            "sports fans",
            "luxury goods",
            "targeting",
            "media director",
            "media strategy",
            "pet related",
            "pet strategy",
            "building a",
        ),
    ),
    KeywordRule(
        card_type="personas",
        keywords=("persona", "buyer", "customer profile"),
    ),
    KeywordRule(
        card_type="audience-insights",
        keywords=(
            "audience insights",
            "audience analysis",
            "demographics",
            "psychographics",
            "behavioral",
        ),
    ),
    KeywordRule(
        card_type="geographic",
        keywords=("geographic", "zip code", "city", "state", "region", "location", "geo"),
    ),
)

_COMPANY_MARKER = re.compile(r"\b(?:for|of|about|on)\s+", re.IGNORECASE)
_DOLLAR_TICKER = re.compile(r"\$([A-Za-z]{1,5})\b")
_BARE_TICKER = re.compile(r"\b([A-Z]{2,5})\b")
_NOT_TICKERS = frozenset(
    {"AI", "TV", "CTV", "OTT", "US", "USA", "SWOT", "CEO", "CMO", "ROI", "KPI", "TAM", "B2B", "B2C"}
)


def extract_company_name(query: str) -> str:
    """Company named after the last "for/of/about/on", else the whole query."""
    cleaned = query.strip()
    markers = list(_COMPANY_MARKER.finditer(cleaned))
    if markers:
        candidate = cleaned[markers[-1].end():].strip(" ?.!,")
        if candidate:
            return candidate
    return cleaned.strip(" ?.!,")


def extract_stock_symbol(query: str) -> str:
    """Ticker written as $TICKER or as a bare upper-case token."""
    dollar = _DOLLAR_TICKER.search(query)
    if dollar:
        return dollar.group(1).upper()
    for match in _BARE_TICKER.finditer(query):
        if match.group(1) not in _NOT_TICKERS:
            return match.group(1)
    return extract_company_name(query)


def _history(conversation_history: History) -> dict[str, Any]:
    return {"conversationHistory": conversation_history}


PayloadBuilder = Callable[[str, History], dict[str, Any]]


@dataclass(frozen=True, slots=True)
class CardEndpoint:
    """Fixed backend endpoint serving one card type."""

    path: str
    build_payload: PayloadBuilder
    timeout_setting: str | None = None


CARD_ENDPOINTS: dict[str, CardEndpoint] = {
    "deals": CardEndpoint(
        path=DEAL_SEARCH_PATH,
        build_payload=lambda query, history: {
            "query": query,
            **_history(history),
            "forceDeals": True,
            "cardTypes": ["deals"],
        },
    ),
    "personas": CardEndpoint(
        path=UNIFIED_SEARCH_PATH,
        build_payload=lambda query, history: {"query": query, "cardType": "personas"},
    ),
    "audience-insights": CardEndpoint(
        path="/api/audience-insights",
        build_payload=lambda query, history: {"query": query, **_history(history)},
        timeout_setting="audience_insights_timeout_seconds",
    ),
    "market-sizing": CardEndpoint(
        path="/api/market-sizing",
        build_payload=lambda query, history: {"query": query, **_history(history)},
        timeout_setting="market_sizing_timeout_seconds",
    ),
    "geographic": CardEndpoint(
        path="/api/geographic-insights",
        build_payload=lambda query, history: {
            "query": query,
            **_history(history),
            "cardTypes": ["geographic"],
        },
    ),
    "marketing-news": CardEndpoint(
        path="/api/marketing-news",
        build_payload=lambda query, history: {"query": query},
    ),
    "competitive-intelligence": CardEndpoint(
        path="/api/competitive-intelligence",
        build_payload=lambda query, history: {
            "query": query,
            "companyName": extract_company_name(query),
            **_history(history),
        },
    ),
    "content-strategy": CardEndpoint(
        path="/api/content-strategy",
        build_payload=lambda query, history: {"query": query, **_history(history)},
    ),
    "brand-strategy": CardEndpoint(
        path="/api/brand-strategy",
        build_payload=lambda query, history: {
            "query": query,
            "companyName": extract_company_name(query),
            **_history(history),
        },
    ),
    "marketing-swot": CardEndpoint(
        path="/api/marketing-swot",
        build_payload=lambda query, history: {
            "query": query,
            "companyName": extract_company_name(query),
            **_history(history),
        },
    ),
    "company-profile": CardEndpoint(
        path="/api/company-profile",
        build_payload=lambda query, history: {
            "query": query,
            "stockSymbol": extract_stock_symbol(query),
            **_history(history),
        },
    ),
}


@dataclass(frozen=True, slots=True)
class RoutingDecision:
    """The single backend call chosen for one search invocation."""

    action: str
    endpoint: str
    payload: dict[str, Any]
    card_type: str | None = None
    card_types: tuple[str, ...] = ()
    timeout_seconds: float | None = None
    matched_keyword: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize decision to JSON-compatible dict."""
        return {
            "action": self.action,
            "cardType": self.card_type,
            "cardTypes": list(self.card_types),
            "endpoint": self.endpoint,
            "payload": self.payload,
            "timeoutSeconds": self.timeout_seconds,
            "matchedKeyword": self.matched_keyword,
        }


def normalize_card_types(card_types: Iterable[str] | None) -> tuple[str, ...]:
    """Drop duplicates keeping first-seen order; reject unknown card types."""
    normalized: list[str] = []
    for card_type in card_types or ():
        if card_type not in CARD_TYPES:
            raise ValidationError(
                f"Unknown card type: {card_type}",
                {"allowed": list(CARD_TYPES)},
            )
        if card_type not in normalized:
            normalized.append(card_type)
    return tuple(normalized)


class IntentRouter:
    """Route a search to exactly one backend call.

    Precedence:
    1. Several card types: one unified request carrying all of them.
    2. One card type: that card's endpoint, keywords are not consulted.
    3. Free text: first matching rule of ``KEYWORD_RULES``.
    4. Otherwise: general deal search.
    """

    def __init__(
        self,
        app_settings: Settings | None = None,
        rules: Sequence[KeywordRule] = KEYWORD_RULES,
    ) -> None:
        self.settings = app_settings or settings
        self.rules = tuple(rules)

    def classify(self, query: str) -> tuple[str, str] | None:
        """Return ``(card_type, keyword)`` of the first matching rule."""
        query_lower = query.lower()
        for rule in self.rules:
            keyword = rule.match(query_lower)
            if keyword is not None:
                return rule.card_type, keyword
        return None

    def route(
        self,
        query: str,
        card_types: Iterable[str] | None = None,
        conversation_history: History | None = None,
    ) -> RoutingDecision:
        selected = normalize_card_types(card_types)
        history = list(conversation_history or [])

        if len(selected) > 1:
            decision = RoutingDecision(
                action="unified",
                endpoint=UNIFIED_SEARCH_PATH,
                payload={"query": query, "cardTypes": list(selected)},
                card_types=selected,
            )
        elif len(selected) == 1:
            decision = self._card_decision("card_type", selected[0], query, history, selected)
        else:
            matched = self.classify(query)
            if matched is not None:
                card_type, keyword = matched
                decision = self._card_decision(
                    "keyword", card_type, query, history, selected, matched_keyword=keyword
                )
            else:
                decision = RoutingDecision(
                    action="general",
                    endpoint=DEAL_SEARCH_PATH,
                    payload={
                        "query": query,
                        "conversationHistory": history,
                        "cardTypes": list(selected),
                    },
                    card_type="deals",
                    card_types=selected,
                    timeout_seconds=self.settings.general_search_timeout_seconds,
                )

        logger.info(
            "Search routed",
            extra={
                "action": decision.action,
                "card_type": decision.card_type,
                "card_types": list(decision.card_types),
                "endpoint": decision.endpoint,
                "matched_keyword": decision.matched_keyword,
            },
        )
        return decision

    def _card_decision(
        self,
        action: str,
        card_type: str,
        query: str,
        history: History,
        selected: tuple[str, ...],
        matched_keyword: str | None = None,
    ) -> RoutingDecision:
        endpoint = CARD_ENDPOINTS[card_type]
        timeout = None
        if endpoint.timeout_setting:
            timeout = getattr(self.settings, endpoint.timeout_setting)
        return RoutingDecision(
            action=action,
            endpoint=endpoint.path,
            payload=endpoint.build_payload(query, history),
            card_type=card_type,
            card_types=selected,
            timeout_seconds=timeout,
            matched_keyword=matched_keyword,
        )
