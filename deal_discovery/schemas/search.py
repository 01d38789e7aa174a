"""Search request and outcome schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from deal_discovery.schemas.card import CardResults, CardType

SearchAction = Literal["unified", "card_type", "keyword", "general"]

SearchStatus = Literal[
    "idle",
    "searching",
    "success",
    "empty",
    "failed",
    "timed_out",
    "offline_fallback",
    "superseded",
    "invalid",
]


class ConversationTurn(BaseModel):
    """Prior chat turn, forwarded to the backend unchanged."""

    model_config = {"extra": "allow"}

    role: str
    content: str


class SearchRequest(BaseModel):
    """Schema for a search invocation."""

    model_config = {"populate_by_name": True}

    query: str = Field(..., max_length=2000)
    card_types: list[CardType] = Field(default_factory=list, alias="cardTypes")
    conversation_history: list[ConversationTurn] = Field(
        default_factory=list, alias="conversationHistory"
    )
    session_id: str | None = Field(None, alias="sessionId", max_length=128)

    def history_payload(self) -> list[dict[str, Any]]:
        return [turn.model_dump() for turn in self.conversation_history]


class RoutingDecisionResponse(BaseModel):
    """Schema for a dry-run routing decision."""

    model_config = {"populate_by_name": True}

    action: SearchAction
    card_type: CardType | None = Field(None, alias="cardType")
    card_types: list[CardType] = Field(default_factory=list, alias="cardTypes")
    endpoint: str
    payload: dict[str, Any]
    timeout_seconds: float | None = Field(None, alias="timeoutSeconds")
    matched_keyword: str | None = Field(None, alias="matchedKeyword")


class SearchOutcome(CardResults):
    """Everything one search invocation produced.

    A new invocation always starts from an empty outcome, so slots it does not
    fill can never show results from an earlier search.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    generation: int = 0
    query: str = ""
    action: SearchAction | None = None
    card_types: list[CardType] = Field(default_factory=list, alias="cardTypes")
    status: SearchStatus = "idle"
    message: str = ""
    coaching: dict[str, Any] | None = None
