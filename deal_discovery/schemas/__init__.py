"""Pydantic schemas for requests, backend responses and search outcomes."""

from deal_discovery.schemas.card import CARD_TYPES, RESULT_SLOTS, CardResults, CardType
from deal_discovery.schemas.deal import Deal, RankedDeal, RankRequest, RankResponse
from deal_discovery.schemas.news import MarketingNews
from deal_discovery.schemas.search import (
    ConversationTurn,
    RoutingDecisionResponse,
    SearchAction,
    SearchOutcome,
    SearchRequest,
    SearchStatus,
)

__all__ = [
    "CARD_TYPES",
    "RESULT_SLOTS",
    "CardResults",
    "CardType",
    "ConversationTurn",
    "Deal",
    "MarketingNews",
    "RankRequest",
    "RankResponse",
    "RankedDeal",
    "RoutingDecisionResponse",
    "SearchAction",
    "SearchOutcome",
    "SearchRequest",
    "SearchStatus",
]
