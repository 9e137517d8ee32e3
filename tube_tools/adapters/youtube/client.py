"""YouTube Data API client wrapper.

Centralized YouTube API client with error handling and API key authentication.
One instance is shared, read-only, by every tool in the process.
"""

from typing import Any

import httpx

from tube_obs.logging import get_logger
from tube_obs.metrics import upstream_calls_total

from .exceptions import (
    YouTubeAPIError,
    YouTubeAuthError,
    YouTubeNotFoundError,
    YouTubeQuotaExceededError,
)

logger = get_logger(__name__)


class YouTubeClientWrapper:
    """YouTube Data API v3 client.

    Provides:
    - API key authentication on every request
    - Error handling and exception mapping
    - search, videos/channels/playlists list, and raw endpoint access
    """

    BASE_URL = "https://www.googleapis.com/youtube/v3"

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout_seconds: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize YouTube client.

        Args:
            api_key: YouTube Data API key
            base_url: Override for the API root (tests, proxies)
            timeout_seconds: Request timeout
            http_client: Optional pre-built httpx client
        """
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.client = http_client or httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout_seconds
        )

    def _handle_error(self, response: httpx.Response) -> None:
        """Map YouTube API errors to custom exceptions."""
        status = response.status_code

        reason = ""
        try:
            error_data = response.json().get("error", {})
            message = error_data.get("message", str(response.text))
            errors = error_data.get("errors") or [{}]
            reason = errors[0].get("reason", "")
        except Exception:
            message = str(response.text)

        if status == 401:
            raise YouTubeAuthError(f"Authentication failed: {message}", status)
        elif status == 403:
            if "quota" in reason.lower() or "quota" in message.lower():
                raise YouTubeQuotaExceededError(f"Quota exceeded: {message}", status)
            raise YouTubeAuthError(f"Forbidden: {message}", status)
        elif status == 429:
            raise YouTubeQuotaExceededError(f"Rate limit exceeded: {message}", status)
        elif status == 404:
            raise YouTubeNotFoundError(f"Resource not found: {message}", status)
        else:
            raise YouTubeAPIError(f"YouTube API error ({status}): {message}", status)

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        """Issue one GET against the API and return the decoded body."""
        query = {k: v for k, v in params.items() if v is not None}
        query["key"] = self.api_key

        try:
            response = await self.client.get(f"/{path.lstrip('/')}", params=query)
        except httpx.TimeoutException as e:
            raise YouTubeAPIError(f"Request to {path} timed out after {self.timeout_seconds}s") from e
        except httpx.HTTPError as e:
            raise YouTubeAPIError(f"Request to {path} failed: {e}") from e

        upstream_calls_total.labels(operation=f"{path.strip('/')}.list").inc()

        if response.status_code != 200:
            self._handle_error(response)

        return response.json()

    # ========================================================================
    # SEARCH
    # ========================================================================

    async def search(self, params: dict[str, Any]) -> dict[str, Any]:
        """Search for videos, channels, or playlists.

        Args:
            params: Upstream search parameters (part, q, type, maxResults, ...)

        Returns:
            Search response with items, pageInfo and optional nextPageToken
        """
        return await self._get("search", params)

    # ========================================================================
    # LIST BY ID
    # ========================================================================

    async def get_videos(self, params: dict[str, Any]) -> dict[str, Any]:
        """List videos by comma-joined id batch or by chart."""
        if not params.get("id") and not params.get("chart"):
            raise ValueError("Either id or chart parameter is required")
        return await self._get("videos", params)

    async def get_channels(self, params: dict[str, Any]) -> dict[str, Any]:
        """List channels by comma-joined id batch, username, or handle."""
        if not params.get("id") and not params.get("forUsername") and not params.get("forHandle"):
            raise ValueError("One of id, forUsername, or forHandle parameter is required")
        return await self._get("channels", params)

    async def get_playlists(self, params: dict[str, Any]) -> dict[str, Any]:
        """List playlists by comma-joined id batch or owning channel."""
        if not params.get("id") and not params.get("channelId"):
            raise ValueError("One of id or channelId parameter is required")
        return await self._get("playlists", params)

    # ========================================================================
    # RAW
    # ========================================================================

    async def make_raw_request(
        self, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Call any API endpoint (e.g. playlistItems) and return the raw body.

        Paginated endpoints return nextPageToken; callers loop while present.
        """
        return await self._get(path, params or {})

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
