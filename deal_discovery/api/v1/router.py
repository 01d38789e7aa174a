"""API v1 router aggregator."""

from fastapi import APIRouter

from deal_discovery.api.v1.search import routes as search

api_router = APIRouter()

api_router.include_router(search.router, prefix="/search", tags=["Search"])
