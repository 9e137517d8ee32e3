"""YouTube tools package.

Exports all YouTube tools for easy importing.
"""

from .search_videos import SearchVideosTool
from .search_channels import SearchChannelsTool
from .search_playlists import SearchPlaylistsTool
from .unified_search import UnifiedSearchTool
from .get_video_details import GetVideoDetailsTool
from .get_channel_details import GetChannelDetailsTool
from .get_playlist_details import GetPlaylistDetailsTool
from .get_trending_videos import GetTrendingVideosTool
from .extract_video_comments import ExtractVideoCommentsTool
from .analyze_channel_videos import AnalyzeChannelVideosTool
from .discover_channel_network import DiscoverChannelNetworkTool
from .keyword_research import KeywordResearchWorkflowTool

__all__ = [
    "SearchVideosTool",
    "SearchChannelsTool",
    "SearchPlaylistsTool",
    "UnifiedSearchTool",
    "GetVideoDetailsTool",
    "GetChannelDetailsTool",
    "GetPlaylistDetailsTool",
    "GetTrendingVideosTool",
    "ExtractVideoCommentsTool",
    "AnalyzeChannelVideosTool",
    "DiscoverChannelNetworkTool",
    "KeywordResearchWorkflowTool",
]
