"""Logging setup for the search service and CLI.

Every module logs through ``logging.getLogger(__name__)`` with structured
``extra={...}`` fields. Routing and search logs carry many optional fields
(``matched_keyword``, ``card_type``) that are None on most calls, so empty
fields are left out of the rendered line.
"""

import json
import logging
import sys
from typing import Any, TextIO

from deal_discovery.config import settings

LOGGER_NAME = "deal_discovery"

# Attributes every LogRecord has; anything else on a record came from extra=
_STANDARD_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Return the non-empty ``extra`` fields attached to a record."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_RECORD_ATTRS
        and not key.startswith("_")
        and value is not None
    }


class JSONExtrasFormatter(logging.Formatter):
    """Readable log line followed by the extras as one JSON object.

    Output format:
        2026-10-19 10:30:45 | INFO     | deal_discovery.services.intent_router | Search routed {"action": "keyword"}
    """

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        line = " | ".join(
            (
                self.formatTime(record, self.datefmt),
                f"{record.levelname:<8}",
                record.name,
                record.message,
            )
        )

        extras = record_extras(record)
        if extras:
            line = f"{line} {json.dumps(extras, default=str, ensure_ascii=False)}"

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            line = f"{line}\n{record.exc_text}"
        return line


def setup_logging(level: int | str | None = None, stream: TextIO | None = None) -> None:
    """Attach one console handler to the ``deal_discovery`` logger.

    ``level`` defaults to ``settings.log_level``. Repeated calls only adjust
    the level; the CLI passes ``sys.stderr`` so stdout stays pure JSON.
    """
    resolved = level if level is not None else settings.log_level
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.upper())

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolved)
    if logger.handlers:
        return

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONExtrasFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.propagate = False
