"""YouTube Get Playlist Details Tool.

Fetch one playlist, optionally paging through its items via playlistItems.
"""

from tube_tools.base import BaseTool, ExecutionContext, tool_descriptor
from tube_tools.enrichment import get_enrichment_parts, parse_record

from ..exceptions import YouTubeNotFoundError
from ..schemas import GetPlaylistDetailsInput, PlaylistDetailsOutput

PLAYLIST_ITEMS_PAGE_SIZE = 50


class GetPlaylistDetailsTool(BaseTool):
    """Tool for fetching a playlist and, on request, its items.

    Each page of items costs 1 extra quota unit; collection stops at
    maxItems or when the upstream stops returning a nextPageToken.
    """

    descriptor = tool_descriptor(
        name="get_playlist_details",
        description="Get detailed information about a YouTube playlist, optionally including its items",
        input_model=GetPlaylistDetailsInput,
        quota_cost=1,
        capabilities=("youtube.read", "youtube.playlist"),
    )
    input_model = GetPlaylistDetailsInput

    async def execute(self, ctx: ExecutionContext, input_data: GetPlaylistDetailsInput) -> PlaylistDetailsOutput:
        parts = get_enrichment_parts({"playlist": input_data.include_parts or []}, "playlist")

        ctx.ledger.charge("playlists.list")
        response = await self.client.get_playlists({"part": ",".join(parts), "id": input_data.playlist_id})

        items = response.get("items") or []
        if not items:
            raise YouTubeNotFoundError(f"Playlist not found: {input_data.playlist_id}", 404)
        playlist = parse_record("playlist", items[0])

        if not input_data.include_items:
            return PlaylistDetailsOutput(playlist=playlist.to_api())

        playlist_items, truncated = await self._collect_items(ctx, input_data.playlist_id, input_data.max_items)
        return PlaylistDetailsOutput(
            playlist=playlist.to_api(),
            items=playlist_items,
            items_truncated=truncated,
        )

    async def _collect_items(self, ctx: ExecutionContext, playlist_id: str, max_items: int) -> tuple[list[dict], bool]:
        collected: list[dict] = []
        page_token = None

        while True:
            ctx.ledger.charge("playlistItems.list")
            page = await self.client.make_raw_request(
                "playlistItems",
                {
                    "part": "snippet,contentDetails",
                    "playlistId": playlist_id,
                    "maxResults": min(PLAYLIST_ITEMS_PAGE_SIZE, max_items - len(collected)),
                    "pageToken": page_token,
                },
            )
            collected.extend(page.get("items") or [])

            page_token = page.get("nextPageToken")
            if len(collected) >= max_items:
                return collected[:max_items], bool(page_token) or len(collected) > max_items
            if not page_token:
                return collected, False
