"""Deal library backend integration.

Thin async JSON client for the deal library API (deals, personas, market
sizing, audience insights, geographic insights, news, strategy cards).
"""

import asyncio
import logging
from typing import Any

import httpx

from deal_discovery.config import settings
from deal_discovery.core.exceptions import (
    BackendHTTPError,
    BackendUnreachableError,
    ExternalAPIError,
    InvalidResponseError,
    SearchTimeoutError,
)

logger = logging.getLogger(__name__)

API_NAME = "Deal Library"


class DealLibraryClient:
    """Client for the deal library backend.

    Every call is a JSON POST. Failures are raised as one of:
    - BackendUnreachableError: the backend could not be reached
    - BackendHTTPError: non-2xx status
    - SearchTimeoutError: the per-call deadline expired
    - InvalidResponseError: the body is not a JSON object
    """

    def __init__(
        self,
        base_url: str | None = None,
        connect_timeout: float | None = None,
    ) -> None:
        self.base_url = (base_url or settings.deal_library_base_url).rstrip("/")
        self.connect_timeout = (
            connect_timeout if connect_timeout is not None else settings.deal_library_connect_timeout
        )
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "DealLibraryClient":
        # Read/write are unbounded here; per-call deadlines are applied in post()
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(None, connect=self.connect_timeout),
            headers={"Content-Type": "application/json"},
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client must be used as async context manager")
        return self._client

    async def post(
        self,
        endpoint: str,
        payload: dict[str, Any],
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """POST a JSON payload and return the decoded JSON object.

        Args:
            endpoint: Path relative to the backend base URL
            payload: JSON body
            timeout: Deadline in seconds for the whole call, None for no deadline

        Returns:
            Decoded response body
        """
        logger.info(
            "Deal library request",
            extra={"endpoint": endpoint, "timeout_seconds": timeout},
        )

        try:
            if timeout is None:
                response = await self.client.post(endpoint, json=payload)
            else:
                response = await asyncio.wait_for(
                    self.client.post(endpoint, json=payload),
                    timeout=timeout,
                )
        except asyncio.TimeoutError as e:
            logger.warning(
                "Deal library request timed out",
                extra={"endpoint": endpoint, "timeout_seconds": timeout},
            )
            raise SearchTimeoutError(API_NAME, timeout or 0.0) from e
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            logger.warning(
                "Deal library unreachable",
                extra={"endpoint": endpoint, "base_url": self.base_url, "error": str(e)},
            )
            raise BackendUnreachableError(API_NAME, f"Failed to connect: {e}") from e
        except httpx.TimeoutException as e:
            logger.warning(
                "Deal library transport timeout",
                extra={"endpoint": endpoint, "error": str(e)},
            )
            raise SearchTimeoutError(API_NAME, timeout or self.connect_timeout) from e
        except httpx.HTTPError as e:
            logger.warning("Deal library HTTP error", extra={"endpoint": endpoint, "error": str(e)})
            raise ExternalAPIError(API_NAME, str(e)) from e

        if not response.is_success:
            logger.warning(
                "Deal library error status",
                extra={"endpoint": endpoint, "status": response.status_code},
            )
            raise BackendHTTPError(API_NAME, response.status_code, response.reason_phrase)

        try:
            body = response.json()
        except ValueError as e:
            raise InvalidResponseError(API_NAME, "Response body is not JSON") from e

        if not isinstance(body, dict):
            raise InvalidResponseError(
                API_NAME,
                f"Expected a JSON object, got {type(body).__name__}",
            )
        return body
