"""YouTube Extract Video Comments Tool.

Pages through commentThreads for each requested video. A video whose
comments cannot be read (comments disabled, deleted video) is logged and
reported under `errors`; the call only fails when every video failed.
"""

import math
from typing import Any

from tube_obs.logging import get_logger
from tube_tools.base import BaseTool, ExecutionContext, tool_descriptor
from tube_tools.errors import ToolError, ToolValidationError, UpstreamError

from ..schemas import (
    Comment,
    ExtractVideoCommentsInput,
    SentimentTally,
    VideoComments,
    VideoCommentsOutput,
)

logger = get_logger(__name__)

COMMENT_PAGE_SIZE = 100

POSITIVE_WORDS = ("good", "great", "awesome", "amazing", "love", "excellent", "fantastic", "wonderful")
NEGATIVE_WORDS = ("bad", "terrible", "awful", "hate", "horrible", "worst", "stupid", "sucks")


def parse_comment(thread: dict[str, Any]) -> Comment:
    """Flatten a commentThread into its top-level comment."""
    snippet = thread.get("snippet") or {}
    top = (snippet.get("topLevelComment") or {}).get("snippet") or {}
    return Comment(
        comment_id=thread.get("id"),
        author=top.get("authorDisplayName"),
        text=top.get("textDisplay") or top.get("textOriginal") or "",
        like_count=top.get("likeCount") or 0,
        reply_count=snippet.get("totalReplyCount") or 0,
        published_at=top.get("publishedAt"),
    )


def tally_sentiment(texts: list[str]) -> SentimentTally:
    """Word-list tally; a comment with both or neither kind of word is neutral."""
    counts = {"positive": 0, "negative": 0, "neutral": 0}
    for text in texts:
        lowered = text.lower()
        positive = any(word in lowered for word in POSITIVE_WORDS)
        negative = any(word in lowered for word in NEGATIVE_WORDS)
        if positive and not negative:
            counts["positive"] += 1
        elif negative and not positive:
            counts["negative"] += 1
        else:
            counts["neutral"] += 1
    return SentimentTally(**counts)


class ExtractVideoCommentsTool(BaseTool):
    """Top-level comments for one or more videos.

    Costs 1 unit per page of up to 100 comment threads per video.
    """

    descriptor = tool_descriptor(
        name="extract_video_comments",
        description=(
            "Extract top-level comments from one or more videos, optionally with a basic "
            "positive/negative/neutral sentiment tally."
        ),
        input_model=ExtractVideoCommentsInput,
        quota_cost=1,
        capabilities=("youtube.read", "youtube.comments"),
    )
    input_model = ExtractVideoCommentsInput

    async def execute(self, ctx: ExecutionContext, input_data: ExtractVideoCommentsInput) -> VideoCommentsOutput:
        video_ids = list(dict.fromkeys(v.strip() for v in input_data.video_ids if v.strip()))
        if not video_ids:
            raise ToolValidationError("videoIds must contain at least one non-empty id")
        ctx.estimated_quota = len(video_ids) * math.ceil(input_data.max_comments_per_video / COMMENT_PAGE_SIZE)

        videos: list[VideoComments] = []
        errors: dict[str, str] = {}
        for video_id in video_ids:
            try:
                threads, truncated = await self._collect(ctx, video_id, input_data.max_comments_per_video)
            except ToolError as e:
                logger.warning("comments_unavailable", tool=self.name, video_id=video_id, error=e.message)
                errors[video_id] = e.message
                continue

            comments = [parse_comment(thread) for thread in threads]
            videos.append(
                VideoComments(
                    video_id=video_id,
                    comment_count=len(comments),
                    comments=comments,
                    comments_truncated=truncated,
                    sentiment=tally_sentiment([c.text for c in comments]) if input_data.include_sentiment else None,
                )
            )

        if not videos:
            detail = "; ".join(f"{video_id}: {error}" for video_id, error in errors.items())
            raise UpstreamError(f"Comments unavailable for all {len(video_ids)} videos: {detail}")

        return VideoCommentsOutput(videos=videos, errors=errors)

    async def _collect(self, ctx: ExecutionContext, video_id: str, max_comments: int) -> tuple[list[dict], bool]:
        collected: list[dict] = []
        page_token = None

        while True:
            ctx.ledger.charge("commentThreads.list")
            page = await self.client.make_raw_request(
                "commentThreads",
                {
                    "part": "snippet",
                    "videoId": video_id,
                    "maxResults": min(COMMENT_PAGE_SIZE, max_comments - len(collected)),
                    "pageToken": page_token,
                    "textFormat": "plainText",
                },
            )
            collected.extend(page.get("items") or [])

            page_token = page.get("nextPageToken")
            if len(collected) >= max_comments:
                return collected[:max_comments], bool(page_token) or len(collected) > max_comments
            if not page_token:
                return collected, False
