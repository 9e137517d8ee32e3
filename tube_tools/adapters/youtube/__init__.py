"""YouTube adapter for Tube-Scout.

Provides tools for the YouTube Data API v3:
- Search videos, channels, playlists (plain or unified, with enrichment)
- Get video, channel and playlist details
- Get trending videos
- Keyword research workflow (chained searches)

Usage:
    from tube_tools.adapters.youtube import YouTubeClientWrapper, register_youtube_tools
    from tube_tools.registry import ToolRegistry

    registry = ToolRegistry()
    register_youtube_tools(registry, YouTubeClientWrapper(api_key="..."))
"""

from .client import YouTubeClientWrapper
from .exceptions import (
    YouTubeAPIError,
    YouTubeAuthError,
    YouTubeNotFoundError,
    YouTubeQuotaExceededError,
)
from .schemas import (
    Channel,
    Playlist,
    SearchFilters,
    SearchOutput,
    UnifiedSearchInput,
    Video,
)

__all__ = [
    # Client
    "YouTubeClientWrapper",
    # Exceptions
    "YouTubeAPIError",
    "YouTubeAuthError",
    "YouTubeNotFoundError",
    "YouTubeQuotaExceededError",
    # Schemas
    "Channel",
    "Playlist",
    "SearchFilters",
    "SearchOutput",
    "UnifiedSearchInput",
    "Video",
]


def register_youtube_tools(registry, client: YouTubeClientWrapper) -> int:
    """Register all YouTube tools with the tool registry.

    Args:
        registry: ToolRegistry instance
        client: Shared YouTube client every tool is bound to

    Returns:
        Number of registered tools
    """
    return registry.load_all_tools(client)
