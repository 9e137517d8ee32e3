"""YouTube Search Playlists Tool."""

from tube_tools.base import BaseTool, ExecutionContext, tool_descriptor
from tube_tools.validation import build_search_params

from ..schemas import SearchOutput, SearchPlaylistsInput
from .unified_search import execute_search


class SearchPlaylistsTool(BaseTool):
    """Tool for searching YouTube playlists."""

    descriptor = tool_descriptor(
        name="search_playlists",
        description="Search for YouTube playlists, optionally enriched with item counts and status",
        input_model=SearchPlaylistsInput,
        quota_cost=100,
        capabilities=("youtube.search", "youtube.read"),
    )
    input_model = SearchPlaylistsInput

    async def execute(self, ctx: ExecutionContext, input_data: SearchPlaylistsInput) -> SearchOutput:
        params = {"type": "playlist", **input_data.model_dump(by_alias=True, exclude_none=True)}
        return await execute_search(ctx, self.client, build_search_params(params), input_data.enrich_parts)
