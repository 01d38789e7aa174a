"""Custom exception classes for the application."""

from typing import Any


class DealDiscoveryError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# External API Errors
class ExternalAPIError(DealDiscoveryError):
    """Error calling the deal library backend."""

    def __init__(
        self,
        api_name: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.api_name = api_name
        super().__init__(f"{api_name} API error: {message}", details)


class BackendUnreachableError(ExternalAPIError):
    """The backend could not be reached at all."""

    def __init__(self, api_name: str, message: str = "Failed to connect") -> None:
        super().__init__(api_name, message)


class BackendHTTPError(ExternalAPIError):
    """The backend answered with a non-success status."""

    def __init__(self, api_name: str, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        detail = f"HTTP {status_code}"
        if message:
            detail = f"{detail} - {message}"
        super().__init__(api_name, detail, {"status_code": status_code})


class SearchTimeoutError(ExternalAPIError):
    """The request did not finish before its deadline and was cancelled."""

    def __init__(self, api_name: str, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            api_name,
            f"Timed out after {timeout_seconds:g}s",
            {"timeout_seconds": timeout_seconds},
        )


class InvalidResponseError(ExternalAPIError):
    """The backend answered with a body that does not match its schema."""

    pass


# Validation Errors
class ValidationError(DealDiscoveryError):
    """Search input validation failed."""

    pass
