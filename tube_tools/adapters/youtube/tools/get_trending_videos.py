"""YouTube Get Trending Videos Tool."""

from tube_tools.base import BaseTool, ExecutionContext, tool_descriptor
from tube_tools.validation import strip_none_values, validate_parts

from ..schemas import GetTrendingVideosInput, TrendingVideosOutput


class GetTrendingVideosTool(BaseTool):
    """Most popular videos for a region, optionally within one category."""

    descriptor = tool_descriptor(
        name="get_trending_videos",
        description="Get trending (most popular) YouTube videos for a region and optional category",
        input_model=GetTrendingVideosInput,
        quota_cost=1,
        capabilities=("youtube.read", "youtube.trending"),
    )
    input_model = GetTrendingVideosInput

    async def execute(self, ctx: ExecutionContext, input_data: GetTrendingVideosInput) -> TrendingVideosOutput:
        parts = validate_parts("video", input_data.include_parts or ["snippet", "statistics"])

        params = strip_none_values(
            {
                "part": ",".join(parts),
                "chart": "mostPopular",
                "regionCode": input_data.region_code.upper(),
                "maxResults": input_data.max_results,
                "videoCategoryId": input_data.video_category_id,
                "pageToken": input_data.page_token,
            }
        )
        ctx.ledger.charge("videos.list")
        response = await self.client.get_videos(params)

        items = response.get("items") or []
        page_info = response.get("pageInfo") or {}
        return TrendingVideosOutput(
            items=items,
            total_results=page_info.get("totalResults", len(items)),
            next_page_token=response.get("nextPageToken"),
        )
