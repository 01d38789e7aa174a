"""Textual relevance scoring and ranking for deal search results."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from deal_discovery.config import settings
from deal_discovery.schemas.deal import Deal

EXACT_NAME_POINTS = 100
NAME_WORD_POINTS = 20
DESCRIPTION_POINTS = 30
MEDIA_TYPE_POINTS = 20


@dataclass(slots=True)
class DealScore:
    """Deal paired with its relevance score for one query."""

    deal: Deal
    score: int = 0
    reasons: list[str] = field(default_factory=list)


def _words_overlap(query_word: str, name_word: str) -> bool:
    return query_word in name_word or name_word in query_word


def score_deal(deal: Deal, query: str) -> DealScore:
    """Score a deal against a free-text query.

    Rules are cumulative and case-insensitive:
    - full query inside the deal name: +100
    - each query word that overlaps a deal-name word: +20
    - full query inside the description: +30
    - full query inside the media type: +20
    """
    query_lower = query.lower()
    name_lower = deal.deal_name.lower()
    description_lower = deal.description.lower()
    media_type_lower = deal.media_type.lower()

    result = DealScore(deal=deal)

    if query_lower in name_lower:
        result.score += EXACT_NAME_POINTS
        result.reasons.append("Exact deal name match")

    name_words = name_lower.split()
    matching_words = [
        word
        for word in query_lower.split()
        if any(_words_overlap(word, name_word) for name_word in name_words)
    ]
    if matching_words:
        result.score += len(matching_words) * NAME_WORD_POINTS
        result.reasons.append(f"{len(matching_words)} word(s) match in deal name")

    if query_lower in description_lower:
        result.score += DESCRIPTION_POINTS
        result.reasons.append("Description contains search terms")

    if query_lower in media_type_lower:
        result.score += MEDIA_TYPE_POINTS
        result.reasons.append("Media type match")

    return result


def rank_deal_scores(
    deals: Sequence[Deal],
    query: str,
    limit: int | None = None,
) -> list[DealScore]:
    """Score, filter and order deals, keeping the scores.

    Blank queries skip scoring and keep the first ``limit`` deals in input
    order with a score of 0.
    """
    limit = settings.deal_result_limit if limit is None else limit
    if limit <= 0:
        return []

    if not query.strip():
        return [DealScore(deal=deal) for deal in deals[:limit]]

    scored = [score_deal(deal, query) for deal in deals]
    kept = [result for result in scored if result.score > 0]
    # sorted() is stable: equal scores keep their input order
    kept = sorted(kept, key=lambda result: -result.score)
    return kept[:limit]


def rank_deals(
    deals: Sequence[Deal],
    query: str,
    limit: int | None = None,
) -> list[Deal]:
    """Return the ``limit`` most relevant deals for a query."""
    return [result.deal for result in rank_deal_scores(deals, query, limit)]
