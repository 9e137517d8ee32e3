"""YouTube Get Channel Details Tool."""

from tube_tools.base import BaseTool, ExecutionContext, tool_descriptor
from tube_tools.enrichment import get_enrichment_parts, parse_record

from ..exceptions import YouTubeNotFoundError
from ..schemas import Channel, GetChannelDetailsInput


class GetChannelDetailsTool(BaseTool):
    """Tool for fetching a single channel's full record.

    Use Cases:
    - "How many subscribers does this channel have?"
    - "What topics does this channel cover?"
    """

    descriptor = tool_descriptor(
        name="get_channel_details",
        description="Get detailed information about a YouTube channel, including statistics and branding",
        input_model=GetChannelDetailsInput,
        quota_cost=1,
        capabilities=("youtube.read", "youtube.channel"),
    )
    input_model = GetChannelDetailsInput

    async def execute(self, ctx: ExecutionContext, input_data: GetChannelDetailsInput) -> Channel:
        parts = get_enrichment_parts({"channel": input_data.include_parts or []}, "channel")

        ctx.ledger.charge("channels.list")
        response = await self.client.get_channels({"part": ",".join(parts), "id": input_data.channel_id})

        items = response.get("items") or []
        if not items:
            raise YouTubeNotFoundError(f"Channel not found: {input_data.channel_id}", 404)
        return parse_record("channel", items[0])
