"""Card type vocabulary and the per-card result slots."""

from typing import Annotated, Any, Literal, get_args

from pydantic import BaseModel, BeforeValidator, Field

from deal_discovery.schemas.deal import Deal
from deal_discovery.schemas.news import MarketingNews

CardType = Literal[
    "deals",
    "personas",
    "audience-insights",
    "market-sizing",
    "geographic",
    "marketing-news",
    "competitive-intelligence",
    "content-strategy",
    "brand-strategy",
    "marketing-swot",
    "company-profile",
]

CARD_TYPES: tuple[str, ...] = get_args(CardType)

# CardResults attribute holding each card type's results
RESULT_SLOTS: dict[str, str] = {
    "deals": "deals",
    "personas": "personas",
    "audience-insights": "audience_insights",
    "market-sizing": "market_sizing",
    "geographic": "geo_cards",
    "marketing-news": "marketing_news",
    "competitive-intelligence": "competitive_intelligence",
    "content-strategy": "content_strategy",
    "brand-strategy": "brand_strategy",
    "marketing-swot": "marketing_swot",
    "company-profile": "company_profile",
}


def _as_list(value: Any) -> Any:
    """Treat null as empty and a lone object as a one-item list."""
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    return value


CardList = Annotated[list[dict[str, Any]], BeforeValidator(_as_list)]
DealList = Annotated[list[Deal], BeforeValidator(_as_list)]
NewsList = Annotated[list[MarketingNews], BeforeValidator(_as_list)]


class CardResults(BaseModel):
    """One result list per card type, keyed the way the backend names them."""

    model_config = {"populate_by_name": True}

    deals: DealList = Field(default_factory=list)
    personas: CardList = Field(default_factory=list)
    audience_insights: CardList = Field(default_factory=list, alias="audienceInsights")
    market_sizing: CardList = Field(default_factory=list, alias="marketSizing")
    geo_cards: CardList = Field(default_factory=list, alias="geoCards")
    marketing_news: NewsList = Field(default_factory=list, alias="marketingNews")
    competitive_intelligence: CardList = Field(
        default_factory=list, alias="competitiveIntelligence"
    )
    content_strategy: CardList = Field(default_factory=list, alias="contentStrategy")
    brand_strategy: CardList = Field(default_factory=list, alias="brandStrategy")
    marketing_swot: CardList = Field(default_factory=list, alias="marketingSWOT")
    company_profile: CardList = Field(default_factory=list, alias="companyProfile")

    def results_for(self, card_type: str) -> list[Any]:
        """Return the result list stored for a card type."""
        return getattr(self, RESULT_SLOTS[card_type])
