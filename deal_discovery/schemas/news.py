"""Marketing news schemas."""

from pydantic import BaseModel, Field, field_validator


class MarketingNews(BaseModel):
    """Marketing news headline card."""

    model_config = {"extra": "allow", "populate_by_name": True}

    id: str = ""
    headline: str = ""
    source: str = ""
    url: str = ""
    publish_date: str = Field("", alias="publishDate")
    synopsis: str = ""
    companies: list[str] = Field(default_factory=list)
    key_insights: list[str] = Field(default_factory=list, alias="keyInsights")

    @field_validator("id", "headline", "source", "url", "publish_date", "synopsis", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> object:
        """Null text fields decode as empty strings."""
        if value is None:
            return ""
        if isinstance(value, int | float):
            return str(value)
        return value

    @field_validator("companies", "key_insights", mode="before")
    @classmethod
    def _coerce_list(cls, value: object) -> object:
        if value is None:
            return []
        return value
