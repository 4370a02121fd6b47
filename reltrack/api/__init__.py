"""Client for the release-tracking service."""

from .client import ApiClient, ApiError, HttpApiClient, MockApiClient

__all__ = ["ApiClient", "ApiError", "HttpApiClient", "MockApiClient"]
