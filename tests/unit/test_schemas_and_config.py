"""Unit tests for response decoding, settings parsing and log formatting."""

from __future__ import annotations

import json
import logging

import pytest
from pydantic import ValidationError

from deal_discovery.config import Settings
from deal_discovery.core.logging import LOGGER_NAME, JSONExtrasFormatter, setup_logging
from deal_discovery.schemas.card import CARD_TYPES, RESULT_SLOTS
from deal_discovery.schemas.deal import Deal
from deal_discovery.schemas.news import MarketingNews
from deal_discovery.schemas.responses import (
    RESPONSE_MODELS,
    GeographicInsightsResponse,
    MarketingNewsResponse,
    UnifiedSearchResponse,
)
from deal_discovery.schemas.search import SearchOutcome, SearchRequest


def test_every_card_type_has_a_slot_and_response_model() -> None:
    assert set(RESULT_SLOTS) == set(CARD_TYPES)
    assert set(RESPONSE_MODELS) == set(CARD_TYPES)
    for card_type, model in RESPONSE_MODELS.items():
        assert model.result_field == RESULT_SLOTS[card_type]


def test_missing_and_null_result_fields_decode_to_empty_lists() -> None:
    assert GeographicInsightsResponse.model_validate({}).results == []
    assert GeographicInsightsResponse.model_validate({"geoCards": None}).results == []


def test_news_items_decode_camel_case_fields() -> None:
    response = MarketingNewsResponse.model_validate(
        {
            "marketingNews": [
                {
                    "id": "n1",
                    "headline": "Retail media grows",
                    "publishDate": "2026-10-01",
                    "keyInsights": ["Off-site is up"],
                }
            ]
        }
    )

    item = response.results[0]
    assert item.publish_date == "2026-10-01"
    assert item.key_insights == ["Off-site is up"]


def test_unified_response_exposes_results_per_card_type() -> None:
    response = UnifiedSearchResponse.model_validate(
        {"marketingSWOT": {"strengths": ["reach"]}, "aiResponse": "done"}
    )

    assert response.results_for("marketing-swot") == [{"strengths": ["reach"]}]
    assert response.results_for("personas") == []
    assert response.ai_response == "done"


def test_deal_keeps_unknown_backend_fields() -> None:
    deal = Deal.model_validate(
        {"id": "d1", "dealName": "CTV Premium", "environment": "ctv", "targeting": {"age": "25-54"}}
    )

    dumped = deal.model_dump(by_alias=True)
    assert dumped["dealName"] == "CTV Premium"
    assert dumped["environment"] == "ctv"
    assert dumped["targeting"] == {"age": "25-54"}


def test_search_request_accepts_camel_case_and_rejects_unknown_cards() -> None:
    request = SearchRequest.model_validate(
        {
            "query": "coffee",
            "cardTypes": ["deals", "personas"],
            "conversationHistory": [{"role": "user", "content": "hi", "id": "m1"}],
        }
    )

    assert request.card_types == ["deals", "personas"]
    assert request.history_payload() == [{"role": "user", "content": "hi", "id": "m1"}]

    with pytest.raises(ValidationError):
        SearchRequest.model_validate({"query": "coffee", "cardTypes": ["weather"]})


def test_search_outcome_is_immutable() -> None:
    outcome = SearchOutcome(query="coffee")

    with pytest.raises(ValidationError):
        outcome.query = "tea"


def test_settings_parse_comma_separated_cors_origins() -> None:
    parsed = Settings(cors_origins="http://a.test, 'http://b.test'")

    assert parsed.cors_origins == ["http://a.test", "http://b.test"]


def test_settings_parse_json_cors_origins() -> None:
    parsed = Settings(cors_origins='["http://a.test"]')

    assert parsed.cors_origins == ["http://a.test"]


def test_settings_strip_trailing_slash_from_backend_url() -> None:
    parsed = Settings(deal_library_base_url=" http://deals.test/ ")

    assert parsed.deal_library_base_url == "http://deals.test"


def test_settings_read_deadlines_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MARKET_SIZING_TIMEOUT_SECONDS", "90")
    monkeypatch.setenv("DEAL_RESULT_LIMIT", "10")

    parsed = Settings()

    assert parsed.market_sizing_timeout_seconds == 90
    assert parsed.deal_result_limit == 10


def test_log_formatter_appends_extras_as_json() -> None:
    record = logging.LogRecord(
        name="deal_discovery.services.intent_router",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Search routed",
        args=(),
        exc_info=None,
    )
    record.card_type = "market-sizing"

    line = JSONExtrasFormatter().format(record)

    head, _, extras = line.partition("Search routed ")
    assert "| INFO     | deal_discovery.services.intent_router |" in head
    assert json.loads(extras) == {"card_type": "market-sizing"}


def test_news_item_tolerates_null_and_missing_fields() -> None:
    item = MarketingNews.model_validate(
        {
            "headline": "CTV grows",
            "url": None,
            "source": None,
            "publishDate": None,
            "keyInsights": None,
        }
    )

    assert item.id == ""
    assert item.url == ""
    assert item.source == ""
    assert item.publish_date == ""
    assert item.key_insights == []


def test_log_formatter_omits_empty_extras() -> None:
    record = logging.makeLogRecord(
        {
            "name": "deal_discovery.services.intent_router",
            "levelno": logging.INFO,
            "levelname": "INFO",
            "msg": "Search routed",
            "action": "general",
            "matched_keyword": None,
        }
    )

    line = JSONExtrasFormatter().format(record)

    assert line.endswith('Search routed {"action": "general"}')


def test_settings_accept_lower_case_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "warning")

    assert Settings().log_level == "WARNING"


def test_setup_logging_applies_level_name() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    original_level = logger.level
    try:
        setup_logging("debug")
        assert logger.level == logging.DEBUG
    finally:
        logger.setLevel(original_level)
