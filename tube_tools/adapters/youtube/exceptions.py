"""YouTube adapter exceptions.

Custom exception hierarchy for YouTube Data API errors. All of them are
upstream failures in the tool error taxonomy.
"""

from tube_tools.errors import UpstreamError


class YouTubeAPIError(UpstreamError):
    """Base exception for YouTube adapter."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class YouTubeAuthError(YouTubeAPIError):
    """Invalid API key or insufficient permissions."""

    pass


class YouTubeQuotaExceededError(YouTubeAPIError):
    """Daily quota or rate limit exceeded."""

    pass


class YouTubeNotFoundError(YouTubeAPIError):
    """Resource not found (404 response)."""

    kind = "not_found"
