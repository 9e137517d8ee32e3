"""YouTube Search Videos Tool."""

from tube_tools.base import BaseTool, ExecutionContext, tool_descriptor
from tube_tools.validation import build_search_params

from ..schemas import SearchOutput, SearchVideosInput
from .unified_search import execute_search


class SearchVideosTool(BaseTool):
    """Tool for searching YouTube videos.

    Use Cases:
    - "Find videos about sourdough baking"
    - "Latest uploads on a channel, newest first"
    """

    descriptor = tool_descriptor(
        name="search_videos",
        description="Search for YouTube videos by query, channel, date range and duration",
        input_model=SearchVideosInput,
        quota_cost=100,
        capabilities=("youtube.search", "youtube.read"),
    )
    input_model = SearchVideosInput

    async def execute(self, ctx: ExecutionContext, input_data: SearchVideosInput) -> SearchOutput:
        params = {"type": "video", **input_data.model_dump(by_alias=True, exclude_none=True)}
        return await execute_search(ctx, self.client, build_search_params(params))
