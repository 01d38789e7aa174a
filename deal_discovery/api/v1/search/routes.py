"""Search API endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Request, status

from deal_discovery.core.exceptions import ValidationError
from deal_discovery.schemas.deal import RankedDeal, RankRequest, RankResponse
from deal_discovery.schemas.search import (
    RoutingDecisionResponse,
    SearchOutcome,
    SearchRequest,
)
from deal_discovery.services.relevance import rank_deal_scores
from deal_discovery.services.search_service import SearchService
from deal_discovery.services.search_session import SearchSessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


def _service(request: Request) -> SearchService:
    return request.app.state.search_service


def _sessions(request: Request) -> SearchSessionRegistry:
    return request.app.state.search_sessions


@router.post(
    "",
    response_model=SearchOutcome,
    summary="Run a search",
    description=(
        "Route the query to one deal library endpoint and return its results. "
        "With a sessionId, a newer search in the same session supersedes this one."
    ),
)
async def run_search(payload: SearchRequest, request: Request) -> SearchOutcome:
    """Run one search invocation."""
    history = payload.history_payload()
    if payload.session_id:
        session = _sessions(request).get(payload.session_id)
        return await session.search(payload.query, payload.card_types, history)
    return await _service(request).search(payload.query, payload.card_types, history)


@router.post(
    "/route",
    response_model=RoutingDecisionResponse,
    summary="Explain routing",
    description="Return the backend call a search would make, without making it.",
)
async def explain_route(payload: SearchRequest, request: Request) -> RoutingDecisionResponse:
    """Dry-run the intent router."""
    if not payload.query.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Query must not be blank",
        )
    try:
        decision = _service(request).router.route(
            payload.query,
            payload.card_types,
            payload.history_payload(),
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.message,
        ) from e
    return RoutingDecisionResponse.model_validate(decision.to_dict())


@router.post(
    "/rank",
    response_model=RankResponse,
    summary="Rank deals",
    description="Score deals against a query and return the most relevant ones.",
)
async def rank(payload: RankRequest, request: Request) -> RankResponse:
    """Rank a caller-supplied deal list."""
    scored = rank_deal_scores(
        payload.deals,
        payload.query,
        payload.limit or _service(request).result_limit,
    )
    return RankResponse(
        query=payload.query,
        total=len(scored),
        deals=[
            RankedDeal(deal=result.deal, score=result.score, reasons=result.reasons)
            for result in scored
        ],
    )
