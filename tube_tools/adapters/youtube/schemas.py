"""YouTube adapter Pydantic schemas.

Input schemas for all YouTube tools (published to callers as JSON Schema
with camelCase property names), typed resource records, and output schemas.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ResourceType = Literal["video", "channel", "playlist"]


class ToolInput(BaseModel):
    """Base for tool inputs: camelCase on the wire, unknown keys rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class ApiModel(BaseModel):
    """Base for upstream payloads: camelCase, unknown fields preserved."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================================
# SEARCH TOOL SCHEMAS
# ============================================================================


class SearchFilters(ToolInput):
    """High-level filter vocabulary, translated into upstream parameters."""

    duration: Literal["any", "short", "medium", "long"] | None = Field(
        None, description="Video duration bucket"
    )
    upload_date: Literal["any", "hour", "today", "week", "month", "year"] | None = Field(
        None, description="Upload date bucket (resolves to publishedAfter)"
    )
    sort_by: Literal["relevance", "upload_date", "view_count", "rating"] | None = Field(
        None, description="Sort bucket (resolves to order)"
    )


EnrichParts = dict[str, list[str]]


class UnifiedSearchInput(ToolInput):
    """Input schema for UnifiedSearchTool."""

    query: str | None = Field(None, description="Search query (required if channelId not provided)")
    channel_id: str | None = Field(None, description="Channel ID to search within")
    type: ResourceType | None = Field(None, description="Type of resource to search for (default video)")
    max_results: int | None = Field(None, ge=1, le=50, description="Maximum number of results (1-50, default 10)")
    order: Literal["date", "rating", "relevance", "title", "videoCount", "viewCount"] | None = Field(
        None, description="Sort order for results"
    )
    published_after: str | None = Field(None, description="ISO 8601 date lower bound")
    published_before: str | None = Field(None, description="ISO 8601 date upper bound")
    video_duration: Literal["any", "short", "medium", "long"] | None = Field(
        None, description="Duration filter (video searches only)"
    )
    region_code: str | None = Field(None, description="ISO 3166-1 alpha-2 country code")
    safe_search: Literal["none", "moderate", "strict"] | None = Field(None, description="Safe search level")
    page_token: str | None = Field(None, description="Token for pagination")
    filters: SearchFilters | None = Field(None, description="Advanced filtering options")
    enrich_parts: EnrichParts | None = Field(
        None,
        description="Parts to fetch per resource type; an empty list uses the configured defaults",
    )


class SearchVideosInput(ToolInput):
    """Input schema for SearchVideosTool."""

    query: str | None = Field(None, description="Search query for videos")
    channel_id: str | None = Field(None, description="Restrict search to a channel")
    max_results: int = Field(25, ge=1, le=50, description="Maximum number of results (1-50)")
    order: Literal["date", "rating", "relevance", "title", "viewCount"] | None = Field(
        None, description="Order of results"
    )
    published_after: str | None = Field(None, description="ISO 8601 date lower bound")
    published_before: str | None = Field(None, description="ISO 8601 date upper bound")
    video_duration: Literal["any", "short", "medium", "long"] | None = Field(None, description="Duration filter")
    region_code: str | None = Field(None, description="ISO 3166-1 alpha-2 country code")
    safe_search: Literal["none", "moderate", "strict"] | None = None
    page_token: str | None = None


class SearchChannelsInput(ToolInput):
    """Input schema for SearchChannelsTool."""

    query: str = Field(..., description="Search query for channels")
    max_results: int = Field(25, ge=1, le=50, description="Maximum number of results (1-50)")
    order: Literal["date", "relevance", "title", "videoCount", "viewCount"] | None = None
    region_code: str | None = Field(None, description="ISO 3166-1 alpha-2 country code")
    page_token: str | None = None
    enrich_parts: EnrichParts | None = Field(None, description="Channel parts to enrich results with")


class SearchPlaylistsInput(ToolInput):
    """Input schema for SearchPlaylistsTool."""

    query: str = Field(..., description="Search query for playlists")
    channel_id: str | None = Field(None, description="Restrict search to a channel")
    max_results: int = Field(25, ge=1, le=50, description="Maximum number of results (1-50)")
    order: Literal["date", "relevance", "title", "videoCount", "viewCount"] | None = None
    region_code: str | None = None
    page_token: str | None = None
    enrich_parts: EnrichParts | None = Field(None, description="Playlist parts to enrich results with")


class SearchOutput(ApiModel):
    """Output schema for all search tools."""

    items: list[dict[str, Any]]
    total_results: int = 0
    results_per_page: int = 0
    next_page_token: str | None = None
    prev_page_token: str | None = None
    enriched: bool = False

    @classmethod
    def from_response(cls, response: dict[str, Any], items: list[dict[str, Any]], enriched: bool = False) -> "SearchOutput":
        page_info = response.get("pageInfo") or {}
        return cls(
            items=items,
            total_results=page_info.get("totalResults", len(items)),
            results_per_page=page_info.get("resultsPerPage", len(items)),
            next_page_token=response.get("nextPageToken"),
            prev_page_token=response.get("prevPageToken"),
            enriched=enriched,
        )


# ============================================================================
# DETAIL TOOL SCHEMAS
# ============================================================================


class GetVideoDetailsInput(ToolInput):
    """Input schema for GetVideoDetailsTool."""

    video_id: str = Field(..., min_length=1, description="YouTube video ID")
    include_parts: list[str] | None = Field(None, description="Parts to include (default: configured video parts)")


class GetChannelDetailsInput(ToolInput):
    """Input schema for GetChannelDetailsTool."""

    channel_id: str = Field(..., min_length=1, description="YouTube channel ID")
    include_parts: list[str] | None = Field(None, description="Parts to include (default: configured channel parts)")


class GetPlaylistDetailsInput(ToolInput):
    """Input schema for GetPlaylistDetailsTool."""

    playlist_id: str = Field(..., min_length=1, description="YouTube playlist ID")
    include_parts: list[str] | None = Field(None, description="Parts to include (default: configured playlist parts)")
    include_items: bool = Field(False, description="Also page through the playlist's items")
    max_items: int = Field(50, ge=1, le=500, description="Cap on playlist items collected")


class PlaylistDetailsOutput(ApiModel):
    """Output schema for GetPlaylistDetailsTool."""

    playlist: dict[str, Any]
    items: list[dict[str, Any]] | None = None
    items_truncated: bool = False


class GetTrendingVideosInput(ToolInput):
    """Input schema for GetTrendingVideosTool."""

    max_results: int = Field(25, ge=1, le=50, description="Maximum number of results (1-50)")
    region_code: str = Field("US", min_length=2, max_length=2, description="ISO 3166-1 alpha-2 country code")
    video_category_id: str | None = Field(None, description="Filter by video category ID")
    include_parts: list[str] = Field(default_factory=lambda: ["snippet", "statistics"])
    page_token: str | None = None


class TrendingVideosOutput(ApiModel):
    """Output schema for GetTrendingVideosTool."""

    items: list[dict[str, Any]]
    total_results: int = 0
    next_page_token: str | None = None


# ============================================================================
# COMMENT SCHEMAS
# ============================================================================


class ExtractVideoCommentsInput(ToolInput):
    """Input schema for ExtractVideoCommentsTool."""

    video_ids: list[str] = Field(..., min_length=1, max_length=50, description="YouTube video IDs")
    max_comments_per_video: int = Field(100, ge=1, le=500, description="Comment threads collected per video")
    include_sentiment: bool = Field(False, description="Add a keyword-based positive/negative/neutral tally")


class Comment(ApiModel):
    comment_id: str | None = None
    author: str | None = None
    text: str
    like_count: int = 0
    reply_count: int = 0
    published_at: str | None = None


class SentimentTally(ApiModel):
    positive: int = 0
    negative: int = 0
    neutral: int = 0


class VideoComments(ApiModel):
    video_id: str
    comment_count: int
    comments: list[Comment]
    comments_truncated: bool = False
    sentiment: SentimentTally | None = None


class VideoCommentsOutput(ApiModel):
    """Output schema for ExtractVideoCommentsTool."""

    videos: list[VideoComments]
    errors: dict[str, str] = Field(default_factory=dict)


# ============================================================================
# CHANNEL ANALYSIS SCHEMAS
# ============================================================================


class AnalyzeChannelVideosInput(ToolInput):
    """Input schema for AnalyzeChannelVideosTool."""

    channel_id: str = Field(..., min_length=1, description="YouTube channel ID to analyze")
    max_videos: int = Field(200, ge=1, le=1000, description="Videos kept after filtering and sorting")
    video_duration_filter: Literal["any", "short", "medium", "long"] = Field(
        "any", description="short <= 4 min, medium 4-20 min, long > 20 min"
    )
    published_after: str | None = Field(None, description="ISO 8601 date lower bound")
    published_before: str | None = Field(None, description="ISO 8601 date upper bound")
    sort_by: Literal[
        "views", "likes", "comments", "duration", "viewsPerMonth", "daysSinceUpload", "uploadDate"
    ] = Field("uploadDate", description="Sort field (uploadDate sorts newest first)")


class VideoAnalysis(ApiModel):
    video_id: str
    video_url: str
    title: str
    channel_name: str
    channel_id: str
    upload_date: str | None = None
    views: int = 0
    likes: int = 0
    comments: int = 0
    duration: float = 0.0
    duration_range: str
    days_since_upload: int = 0
    months_since_upload: int = 1
    views_per_month: float = 0.0
    tags: list[str] = Field(default_factory=list)


class DurationBucket(ApiModel):
    range: str
    count: int
    percentage: float


class ChannelVideoStats(ApiModel):
    total_views: int
    average_views: int
    total_likes: int
    average_likes: int
    total_comments: int
    average_comments: int
    average_engagement_rate: float


class ChannelAnalysisOutput(ApiModel):
    """Output schema for AnalyzeChannelVideosTool."""

    channel_id: str
    uploads_playlist_id: str
    videos_scanned: int
    videos: list[VideoAnalysis]
    statistics: ChannelVideoStats | None = None
    duration_distribution: list[DurationBucket] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)


# ============================================================================
# CHANNEL NETWORK SCHEMAS
# ============================================================================


class DiscoverChannelNetworkInput(ToolInput):
    """Input schema for DiscoverChannelNetworkTool."""

    seed_channel_ids: list[str] = Field(..., min_length=1, max_length=10, description="Starting channel IDs")
    max_depth: int = Field(3, ge=1, le=5, description="Levels of featured channels to follow")
    max_channels_per_level: int = Field(10, ge=1, le=50, description="Channels processed per level")
    include_details: bool = Field(True, description="Fetch snippet and statistics for each channel")


class ChannelNode(ApiModel):
    channel_id: str
    channel_name: str = "Unknown"
    channel_url: str
    subscriber_count: int = 0
    view_count: int = 0
    video_count: int = 0
    published_at: str | None = None
    country: str | None = None
    description: str = ""
    featured_channels: list[str] = Field(default_factory=list)
    depth: int


class ChannelNetworkOutput(ApiModel):
    """Output schema for DiscoverChannelNetworkTool."""

    nodes: list[ChannelNode]
    depth_reached: int
    errors: dict[str, str] = Field(default_factory=dict)


# ============================================================================
# WORKFLOW SCHEMAS
# ============================================================================


class KeywordResearchInput(ToolInput):
    """Input schema for KeywordResearchWorkflowTool."""

    seed_keywords: list[str] = Field(..., min_length=1, max_length=10, description="Seed keywords to research")
    niche: str | None = Field(None, description="Niche or industry focus appended to each search")
    max_videos_per_keyword: int = Field(10, ge=1, le=50, description="Videos fetched per seed keyword")
    include_statistics: bool = Field(False, description="Enrich found videos with statistics (+1 unit per seed)")
    include_competitor_analysis: bool = Field(True, description="Rank channels that dominate the seeds")
    generate_keyword_cloud: bool = Field(True, description="Include a keyword frequency cloud")
    region_code: str | None = Field(None, description="ISO 3166-1 alpha-2 country code")


class SeedKeywordResult(ApiModel):
    keyword: str
    total_results: int
    result_count: int
    competition: float
    top_videos: list[dict[str, Any]]
    average_views: float | None = None


class KeywordFrequency(ApiModel):
    keyword: str
    frequency: int


class ChannelFrequency(ApiModel):
    channel: str
    frequency: int


class WorkflowSummary(ApiModel):
    seeds_requested: int
    seeds_succeeded: int
    failed_seeds: list[str]
    total_keywords_found: int
    top_opportunities: list[str]
    competition_level: Literal["low", "medium", "high"]


class KeywordResearchOutput(ApiModel):
    """Output schema for KeywordResearchWorkflowTool."""

    seed_analysis: list[SeedKeywordResult]
    extracted_keywords: list[KeywordFrequency]
    common_themes: list[str]
    top_channels: list[ChannelFrequency] | None = None
    keyword_cloud: list[dict[str, Any]] | None = None
    recommendations: list[str]
    summary: WorkflowSummary
    errors: dict[str, str] = Field(default_factory=dict)


# ============================================================================
# RESOURCE RECORDS
# ============================================================================
# Part fields are optional: only parts that were requested come back.


class Snippet(ApiModel):
    title: str | None = None
    description: str | None = None
    published_at: str | None = None
    channel_id: str | None = None
    channel_title: str | None = None
    tags: list[str] | None = None
    category_id: str | None = None
    thumbnails: dict[str, Any] | None = None


class VideoStatistics(ApiModel):
    view_count: int | None = None
    like_count: int | None = None
    favorite_count: int | None = None
    comment_count: int | None = None


class ChannelStatistics(ApiModel):
    view_count: int | None = None
    subscriber_count: int | None = None
    hidden_subscriber_count: bool | None = None
    video_count: int | None = None


class Video(ApiModel):
    kind: str | None = None
    etag: str | None = None
    id: str
    snippet: Snippet | None = None
    statistics: VideoStatistics | None = None
    content_details: dict[str, Any] | None = None
    status: dict[str, Any] | None = None
    topic_details: dict[str, Any] | None = None
    localizations: dict[str, Any] | None = None
    player: dict[str, Any] | None = None


class Channel(ApiModel):
    kind: str | None = None
    etag: str | None = None
    id: str
    snippet: Snippet | None = None
    statistics: ChannelStatistics | None = None
    content_details: dict[str, Any] | None = None
    branding_settings: dict[str, Any] | None = None
    status: dict[str, Any] | None = None
    topic_details: dict[str, Any] | None = None
    localizations: dict[str, Any] | None = None


class Playlist(ApiModel):
    kind: str | None = None
    etag: str | None = None
    id: str
    snippet: Snippet | None = None
    content_details: dict[str, Any] | None = None
    status: dict[str, Any] | None = None
    localizations: dict[str, Any] | None = None
    player: dict[str, Any] | None = None


RECORD_MODELS: dict[str, type[ApiModel]] = {
    "video": Video,
    "channel": Channel,
    "playlist": Playlist,
}
