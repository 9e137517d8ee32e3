"""YouTube Search Channels Tool."""

from tube_tools.base import BaseTool, ExecutionContext, tool_descriptor
from tube_tools.validation import build_search_params

from ..schemas import SearchChannelsInput, SearchOutput
from .unified_search import execute_search


class SearchChannelsTool(BaseTool):
    """Tool for searching YouTube channels.

    Pass enrichParts={"channel": [...]} to pull subscriber and video counts
    for the results (1 extra unit per 50 channels).
    """

    descriptor = tool_descriptor(
        name="search_channels",
        description="Search for YouTube channels, optionally enriched with channel statistics",
        input_model=SearchChannelsInput,
        quota_cost=100,
        capabilities=("youtube.search", "youtube.read"),
    )
    input_model = SearchChannelsInput

    async def execute(self, ctx: ExecutionContext, input_data: SearchChannelsInput) -> SearchOutput:
        params = {"type": "channel", **input_data.model_dump(by_alias=True, exclude_none=True)}
        return await execute_search(ctx, self.client, build_search_params(params), input_data.enrich_parts)
