"""Canned marketing headlines shown when the news service is unreachable."""

from __future__ import annotations

from datetime import date

from deal_discovery.schemas.news import MarketingNews

FALLBACK_SOURCE = "Deal Discovery"

_CANNED_HEADLINES: tuple[dict[str, object], ...] = (
    {
        "slug": "ctv-budgets",
        "headline": "Connected TV keeps pulling budget from linear",
        "synopsis": (
            "Advertisers continue to shift upfront dollars toward CTV and streaming "
            "inventory, with programmatic guaranteed deals leading the growth."
        ),
        "companies": ["Roku", "The Trade Desk", "Netflix"],
        "key_insights": [
            "Streaming inventory is increasingly bought through curated deals",
            "Measurement partnerships remain the main buying criterion",
        ],
    },
    {
        "slug": "retail-media",
        "headline": "Retail media networks expand off-site audiences",
        "synopsis": (
            "Retailers are packaging first-party shopper data for use across the open "
            "web, giving brands closed-loop measurement outside their own sites."
        ),
        "companies": ["Amazon", "Walmart Connect", "Instacart"],
        "key_insights": [
            "Commerce audiences are the fastest growing deal category",
            "Off-site activation needs clean-room style matching",
        ],
    },
    {
        "slug": "privacy-signals",
        "headline": "Contextual targeting returns as identifiers fade",
        "synopsis": (
            "With third-party cookies declining, buyers are leaning on contextual and "
            "curated publisher deals to reach audiences at scale."
        ),
        "companies": ["Google", "Sovrn", "IAB Tech Lab"],
        "key_insights": [
            "Contextual signals pair well with first-party publisher data",
            "Curated marketplaces simplify supply path optimization",
        ],
    },
)


def build_fallback_news(today: date | None = None) -> list[MarketingNews]:
    """Build the offline headline set dated ``today``."""
    publish_date = (today or date.today()).isoformat()
    return [
        MarketingNews(
            id=f"fallback-{item['slug']}-{publish_date}",
            headline=str(item["headline"]),
            source=FALLBACK_SOURCE,
            publish_date=publish_date,
            synopsis=str(item["synopsis"]),
            companies=list(item["companies"]),
            key_insights=list(item["key_insights"]),
        )
        for item in _CANNED_HEADLINES
    ]
