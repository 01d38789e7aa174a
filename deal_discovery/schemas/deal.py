"""Deal schemas."""

from pydantic import BaseModel, Field, field_validator


class Deal(BaseModel):
    """Advertising deal as returned by the deal library.

    Only the fields read by relevance scoring are declared; everything else
    (environment, bidGuidance, targeting, ...) is kept as-is.
    """

    model_config = {"extra": "allow", "frozen": True, "populate_by_name": True}

    id: str = ""
    deal_name: str = Field("", alias="dealName")
    description: str = ""
    media_type: str = Field("", alias="mediaType")

    @field_validator("id", "deal_name", "description", "media_type", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> object:
        """Missing or null text fields match as empty strings."""
        if value is None:
            return ""
        if isinstance(value, int | float):
            return str(value)
        return value


class RankRequest(BaseModel):
    """Schema for ranking an arbitrary deal list against a query."""

    query: str = ""
    deals: list[Deal] = Field(default_factory=list)
    limit: int | None = Field(None, ge=1, le=100)


class RankedDeal(BaseModel):
    """Deal with its relevance score and the reasons behind it."""

    deal: Deal
    score: int
    reasons: list[str] = Field(default_factory=list)


class RankResponse(BaseModel):
    """Schema for ranking response."""

    query: str
    total: int
    deals: list[RankedDeal]
