"""YouTube Get Video Details Tool.

Fetch one video with the requested parts (statistics, contentDetails, ...).
"""

from tube_tools.base import BaseTool, ExecutionContext, tool_descriptor
from tube_tools.enrichment import get_enrichment_parts, parse_record

from ..exceptions import YouTubeNotFoundError
from ..schemas import GetVideoDetailsInput, Video


class GetVideoDetailsTool(BaseTool):
    """Tool for fetching a single video's full record."""

    descriptor = tool_descriptor(
        name="get_video_details",
        description="Get detailed information about a YouTube video, including statistics and content details",
        input_model=GetVideoDetailsInput,
        quota_cost=1,
        capabilities=("youtube.read", "youtube.video"),
    )
    input_model = GetVideoDetailsInput

    async def execute(self, ctx: ExecutionContext, input_data: GetVideoDetailsInput) -> Video:
        parts = get_enrichment_parts({"video": input_data.include_parts or []}, "video")

        ctx.ledger.charge("videos.list")
        response = await self.client.get_videos({"part": ",".join(parts), "id": input_data.video_id})

        items = response.get("items") or []
        if not items:
            raise YouTubeNotFoundError(f"Video not found: {input_data.video_id}", 404)
        return parse_record("video", items[0])
