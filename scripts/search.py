"""Run a deal discovery search from the command line and print the result as JSON."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from deal_discovery.config import settings
from deal_discovery.core.logging import setup_logging
from deal_discovery.integrations.deal_library import DealLibraryClient
from deal_discovery.schemas.card import CARD_TYPES
from deal_discovery.services.search_service import SearchService

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("query", help="Free-text search query")
    parser.add_argument(
        "--card-type",
        action="append",
        dest="card_types",
        choices=CARD_TYPES,
        help="Card type to request (repeat for a unified multi-card search)",
    )
    parser.add_argument(
        "--base-url",
        default=settings.deal_library_base_url,
        help="Deal library backend URL (default: %(default)s)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=settings.deal_result_limit,
        help="Maximum deals to keep after ranking (default: %(default)s)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the routing decision without calling the backend",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> dict:
    service = SearchService(
        client_factory=lambda: DealLibraryClient(base_url=args.base_url),
        result_limit=args.limit,
    )
    if args.dry_run:
        return service.router.route(args.query, args.card_types).to_dict()

    outcome = await service.search(args.query, args.card_types)
    return outcome.model_dump(mode="json", by_alias=True)


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    setup_logging(logging.WARNING if args.quiet else logging.INFO, stream=sys.stderr)

    result = asyncio.run(run(args))
    json.dump(result, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")

    status = result.get("status")
    return 1 if status in {"failed", "timed_out", "invalid"} else 0


if __name__ == "__main__":
    raise SystemExit(main())
