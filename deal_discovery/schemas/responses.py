"""Deal library response schemas, one per endpoint.

Responses are decoded here so branch code never sees raw JSON. Missing
result fields decode to empty lists.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, Field

from deal_discovery.schemas.card import CardList, CardResults, DealList, NewsList


class EndpointResponse(BaseModel):
    """Fields shared by every per-card endpoint."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    result_field: ClassVar[str]

    ai_response: str | None = Field(None, alias="aiResponse")

    @property
    def results(self) -> list[Any]:
        return getattr(self, self.result_field)


class DealSearchResponse(EndpointResponse):
    """POST /api/deals/search"""

    result_field: ClassVar[str] = "deals"

    deals: DealList = Field(default_factory=list)
    coaching: dict[str, Any] | None = None


class PersonaSearchResponse(EndpointResponse):
    """POST /api/unified-search with cardType=personas"""

    result_field: ClassVar[str] = "personas"

    personas: CardList = Field(default_factory=list)


class AudienceInsightsResponse(EndpointResponse):
    """POST /api/audience-insights"""

    result_field: ClassVar[str] = "audience_insights"

    audience_insights: CardList = Field(default_factory=list, alias="audienceInsights")


class MarketSizingResponse(EndpointResponse):
    """POST /api/market-sizing"""

    result_field: ClassVar[str] = "market_sizing"

    market_sizing: CardList = Field(default_factory=list, alias="marketSizing")


class GeographicInsightsResponse(EndpointResponse):
    """POST /api/geographic-insights"""

    result_field: ClassVar[str] = "geo_cards"

    geo_cards: CardList = Field(default_factory=list, alias="geoCards")


class MarketingNewsResponse(EndpointResponse):
    """POST /api/marketing-news"""

    result_field: ClassVar[str] = "marketing_news"

    marketing_news: NewsList = Field(default_factory=list, alias="marketingNews")


class CompetitiveIntelligenceResponse(EndpointResponse):
    """POST /api/competitive-intelligence"""

    result_field: ClassVar[str] = "competitive_intelligence"

    competitive_intelligence: CardList = Field(
        default_factory=list, alias="competitiveIntelligence"
    )


class ContentStrategyResponse(EndpointResponse):
    """POST /api/content-strategy"""

    result_field: ClassVar[str] = "content_strategy"

    content_strategy: CardList = Field(default_factory=list, alias="contentStrategy")


class BrandStrategyResponse(EndpointResponse):
    """POST /api/brand-strategy"""

    result_field: ClassVar[str] = "brand_strategy"

    brand_strategy: CardList = Field(default_factory=list, alias="brandStrategy")


class MarketingSWOTResponse(EndpointResponse):
    """POST /api/marketing-swot"""

    result_field: ClassVar[str] = "marketing_swot"

    marketing_swot: CardList = Field(default_factory=list, alias="marketingSWOT")


class CompanyProfileResponse(EndpointResponse):
    """POST /api/company-profile"""

    result_field: ClassVar[str] = "company_profile"

    company_profile: CardList = Field(default_factory=list, alias="companyProfile")


class UnifiedSearchResponse(CardResults):
    """POST /api/unified-search with several card types."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    ai_response: str | None = Field(None, alias="aiResponse")


RESPONSE_MODELS: dict[str, type[EndpointResponse]] = {
    "deals": DealSearchResponse,
    "personas": PersonaSearchResponse,
    "audience-insights": AudienceInsightsResponse,
    "market-sizing": MarketSizingResponse,
    "geographic": GeographicInsightsResponse,
    "marketing-news": MarketingNewsResponse,
    "competitive-intelligence": CompetitiveIntelligenceResponse,
    "content-strategy": ContentStrategyResponse,
    "brand-strategy": BrandStrategyResponse,
    "marketing-swot": MarketingSWOTResponse,
    "company-profile": CompanyProfileResponse,
}
