"""Tool manifest.

The explicit, ordered list of tool classes the registry loads. Adding a
tool means adding it here.
"""

from tube_tools.adapters.youtube.tools import (
    AnalyzeChannelVideosTool,
    DiscoverChannelNetworkTool,
    ExtractVideoCommentsTool,
    GetChannelDetailsTool,
    GetPlaylistDetailsTool,
    GetTrendingVideosTool,
    GetVideoDetailsTool,
    KeywordResearchWorkflowTool,
    SearchChannelsTool,
    SearchPlaylistsTool,
    SearchVideosTool,
    UnifiedSearchTool,
)

TOOL_CLASSES = (
    SearchVideosTool,
    SearchChannelsTool,
    SearchPlaylistsTool,
    UnifiedSearchTool,
    GetVideoDetailsTool,
    GetChannelDetailsTool,
    GetPlaylistDetailsTool,
    GetTrendingVideosTool,
    ExtractVideoCommentsTool,
    AnalyzeChannelVideosTool,
    DiscoverChannelNetworkTool,
    KeywordResearchWorkflowTool,
)
