"""YouTube Analyze Channel Videos Tool.

Walks a channel's uploads playlist, fetches the videos in batches through
the enrichment pipeline, and reports per-video performance plus channel-wide
statistics, a duration distribution and a few plain-language insights.
"""

import re
from datetime import datetime, timezone
from typing import Any

from tube_tools.base import BaseTool, ExecutionContext, tool_descriptor
from tube_tools.enrichment import enrich_videos
from tube_tools.validation import parse_iso8601, validate_date_range

from ..exceptions import YouTubeNotFoundError
from ..schemas import (
    AnalyzeChannelVideosInput,
    ChannelAnalysisOutput,
    ChannelVideoStats,
    DurationBucket,
    Video,
    VideoAnalysis,
)

UPLOADS_PAGE_SIZE = 50
UPLOADS_SCAN_LIMIT = 1000
VIDEO_PARTS = ["snippet", "statistics", "contentDetails"]

# (label, upper bound in minutes inclusive)
DURATION_RANGES = (
    ("0-1 min", 1),
    ("1-10 min", 10),
    ("10-30 min", 30),
    ("30+ min", float("inf")),
)

# (filter, lower bound exclusive, upper bound inclusive) in minutes
DURATION_FILTERS = {
    "short": (-1, 4),
    "medium": (4, 20),
    "long": (20, float("inf")),
}

_ISO_DURATION = re.compile(r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?)?$")


def parse_duration_minutes(value: str | None) -> float:
    """ISO 8601 duration (PT1H2M3S) in minutes; 0 when absent or malformed."""
    match = _ISO_DURATION.match(value or "")
    if not match:
        return 0.0
    days, hours, minutes, seconds = (int(g) if g else 0 for g in match.groups())
    return days * 1440 + hours * 60 + minutes + seconds / 60


def duration_range(minutes: float) -> str:
    for label, upper in DURATION_RANGES:
        if minutes <= upper:
            return label
    return DURATION_RANGES[-1][0]


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def analyze_video(video: Video, now: datetime) -> VideoAnalysis:
    """Derive the per-video performance record."""
    snippet = video.snippet
    stats = video.statistics
    views = (stats.view_count if stats else None) or 0

    uploaded = _parse_timestamp(snippet.published_at if snippet else None)
    days = max((now - uploaded).days, 0) if uploaded else 0
    months = max(1, days // 30)

    minutes = parse_duration_minutes((video.content_details or {}).get("duration"))
    channel_id = (snippet.channel_id if snippet else None) or ""

    return VideoAnalysis(
        video_id=video.id,
        video_url=f"https://www.youtube.com/watch?v={video.id}",
        title=(snippet.title if snippet else None) or "",
        channel_name=(snippet.channel_title if snippet else None) or "",
        channel_id=channel_id,
        upload_date=snippet.published_at if snippet else None,
        views=views,
        likes=(stats.like_count if stats else None) or 0,
        comments=(stats.comment_count if stats else None) or 0,
        duration=round(minutes, 2),
        duration_range=duration_range(minutes),
        days_since_upload=days,
        months_since_upload=months,
        views_per_month=round(views / months, 2),
        tags=(snippet.tags if snippet else None) or [],
    )


def matches_filters(
    analysis: VideoAnalysis,
    duration_filter: str,
    published_after: datetime | None,
    published_before: datetime | None,
) -> bool:
    if duration_filter != "any":
        low, high = DURATION_FILTERS[duration_filter]
        if not low < analysis.duration <= high:
            return False

    uploaded = _parse_timestamp(analysis.upload_date)
    if uploaded is not None:
        if published_after is not None and uploaded < published_after:
            return False
        if published_before is not None and uploaded > published_before:
            return False
    return True


def sort_analyses(videos: list[VideoAnalysis], sort_by: str) -> list[VideoAnalysis]:
    """Largest first, except daysSinceUpload (most recent first) and uploadDate (newest first)."""
    if sort_by == "uploadDate":
        oldest = datetime.min.replace(tzinfo=timezone.utc)
        return sorted(videos, key=lambda v: _parse_timestamp(v.upload_date) or oldest, reverse=True)
    if sort_by == "daysSinceUpload":
        return sorted(videos, key=lambda v: v.days_since_upload)

    field = {
        "views": "views",
        "likes": "likes",
        "comments": "comments",
        "duration": "duration",
        "viewsPerMonth": "views_per_month",
    }[sort_by]
    return sorted(videos, key=lambda v: getattr(v, field), reverse=True)


def summarize(videos: list[VideoAnalysis]) -> ChannelVideoStats:
    count = len(videos)
    total_views = sum(v.views for v in videos)
    total_likes = sum(v.likes for v in videos)
    total_comments = sum(v.comments for v in videos)
    engagement = sum((v.likes + v.comments) / v.views * 100 for v in videos if v.views > 0) / count
    return ChannelVideoStats(
        total_views=total_views,
        average_views=round(total_views / count),
        total_likes=total_likes,
        average_likes=round(total_likes / count),
        total_comments=total_comments,
        average_comments=round(total_comments / count),
        average_engagement_rate=round(engagement, 2),
    )


def duration_distribution(videos: list[VideoAnalysis]) -> list[DurationBucket]:
    """Counts per duration range, in range order, empty ranges omitted."""
    buckets = []
    for label, _ in DURATION_RANGES:
        count = sum(1 for v in videos if v.duration_range == label)
        if count:
            buckets.append(DurationBucket(range=label, count=count, percentage=round(count / len(videos) * 100, 1)))
    return buckets


def generate_insights(videos: list[VideoAnalysis], stats: ChannelVideoStats) -> list[str]:
    insights = []

    by_range: dict[str, list[int]] = {}
    for video in videos:
        by_range.setdefault(video.duration_range, []).append(video.views)
    best_range, best_views = max(
        ((label, sum(views) / len(views)) for label, views in by_range.items()),
        key=lambda pair: pair[1],
    )
    if best_views > 0:
        insights.append(f"Videos in the {best_range} range perform best with {round(best_views)} average views")

    if len(videos) >= 10:
        recent = sum(1 for v in videos if v.days_since_upload <= 30)
        insights.append(f"Upload frequency: {recent} videos in the last 30 days" if recent else "No recent uploads")

    insights.append(f"Average engagement rate: {stats.average_engagement_rate}% (likes + comments / views)")

    recent_views = [v.views for v in videos if v.months_since_upload <= 3]
    older_views = [v.views for v in videos if v.months_since_upload > 3]
    if recent_views and older_views:
        improving = sum(recent_views) / len(recent_views) > sum(older_views) / len(older_views)
        insights.append(f"Channel performance trend: {'improving' if improving else 'declining'} (recent vs older videos)")

    return insights


class AnalyzeChannelVideosTool(BaseTool):
    """Performance analysis across a channel's uploads.

    Scans at most 1000 uploads, newest first. Costs 1 unit for the channel
    lookup, 1 per page of 50 uploads and 1 per batch of 50 videos.
    """

    descriptor = tool_descriptor(
        name="analyze_channel_videos",
        description=(
            "Analyze the uploads of any channel: per-video views, engagement and views per month, "
            "channel averages, duration distribution and performance insights. Filter by duration "
            "and date; sort by views, likes, comments, duration, viewsPerMonth, daysSinceUpload or uploadDate."
        ),
        input_model=AnalyzeChannelVideosInput,
        quota_cost=2,
        capabilities=("youtube.analysis", "youtube.channel"),
    )
    input_model = AnalyzeChannelVideosInput

    async def execute(self, ctx: ExecutionContext, input_data: AnalyzeChannelVideosInput) -> ChannelAnalysisOutput:
        validate_date_range(input_data.published_after, input_data.published_before)
        published_after = (
            parse_iso8601(input_data.published_after, "publishedAfter") if input_data.published_after else None
        )
        published_before = (
            parse_iso8601(input_data.published_before, "publishedBefore") if input_data.published_before else None
        )

        uploads_id = await self._uploads_playlist(ctx, input_data.channel_id)
        video_ids = await self._upload_ids(ctx, uploads_id)

        records = await enrich_videos(self.client, video_ids, VIDEO_PARTS, ctx.ledger)
        now = datetime.now(timezone.utc)
        analyses = [
            analysis
            for analysis in (analyze_video(records[vid], now) for vid in video_ids if vid in records)
            if matches_filters(analysis, input_data.video_duration_filter, published_after, published_before)
        ]
        videos = sort_analyses(analyses, input_data.sort_by)[: input_data.max_videos]

        output = ChannelAnalysisOutput(
            channel_id=input_data.channel_id,
            uploads_playlist_id=uploads_id,
            videos_scanned=len(video_ids),
            videos=videos,
        )
        if videos:
            output.statistics = summarize(videos)
            output.duration_distribution = duration_distribution(videos)
            output.insights = generate_insights(videos, output.statistics)
        return output

    async def _uploads_playlist(self, ctx: ExecutionContext, channel_id: str) -> str:
        ctx.ledger.charge("channels.list")
        response = await self.client.get_channels({"part": "contentDetails", "id": channel_id})

        items = response.get("items") or []
        if not items:
            raise YouTubeNotFoundError(f"Channel not found: {channel_id}", 404)
        uploads = ((items[0].get("contentDetails") or {}).get("relatedPlaylists") or {}).get("uploads")
        if not uploads:
            raise YouTubeNotFoundError(f"No uploads playlist found for channel {channel_id}", 404)
        return uploads

    async def _upload_ids(self, ctx: ExecutionContext, playlist_id: str) -> list[str]:
        video_ids: list[str] = []
        page_token = None

        while len(video_ids) < UPLOADS_SCAN_LIMIT:
            ctx.ledger.charge("playlistItems.list")
            page: dict[str, Any] = await self.client.make_raw_request(
                "playlistItems",
                {
                    "part": "contentDetails",
                    "playlistId": playlist_id,
                    "maxResults": UPLOADS_PAGE_SIZE,
                    "pageToken": page_token,
                },
            )
            for item in page.get("items") or []:
                video_id = (item.get("contentDetails") or {}).get("videoId")
                if video_id:
                    video_ids.append(video_id)

            page_token = page.get("nextPageToken")
            if not page_token:
                break

        return list(dict.fromkeys(video_ids))[:UPLOADS_SCAN_LIMIT]
