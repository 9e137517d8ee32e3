"""YouTube Discover Channel Network Tool.

Breadth-first walk over featured channels: each level's channels are looked
up in one batched channels.list call, then each channel's sections are read
for the channels it features, which form the next level.
"""

from typing import Any

from tube_obs.logging import get_logger
from tube_tools.base import BaseTool, ExecutionContext, tool_descriptor
from tube_tools.enrichment import enrich_channels
from tube_tools.errors import ToolError, ToolValidationError

from ..schemas import ChannelNetworkOutput, ChannelNode, DiscoverChannelNetworkInput

logger = get_logger(__name__)

DETAIL_PARTS = ["snippet", "statistics"]


def build_node(channel_id: str, record: Any, featured: list[str], depth: int) -> ChannelNode:
    fields = record.to_api() if record is not None else {}
    snippet = fields.get("snippet") or {}
    stats = fields.get("statistics") or {}
    return ChannelNode(
        channel_id=channel_id,
        channel_name=snippet.get("title") or "Unknown",
        channel_url=f"https://www.youtube.com/channel/{channel_id}",
        subscriber_count=stats.get("subscriberCount") or 0,
        view_count=stats.get("viewCount") or 0,
        video_count=stats.get("videoCount") or 0,
        published_at=snippet.get("publishedAt"),
        country=snippet.get("country"),
        description=snippet.get("description") or "",
        featured_channels=featured,
        depth=depth,
    )


class DiscoverChannelNetworkTool(BaseTool):
    """Map the network of channels featured by a set of seed channels.

    Each channel is visited once. A failed lookup leaves the node without
    details or without featured channels and is reported under `errors`.
    Costs 1 unit per batch of 50 channel lookups and 1 per channel visited.
    """

    descriptor = tool_descriptor(
        name="discover_channel_network",
        description=(
            "Discover the network of connected channels in a niche by following featured "
            "channels from 1-10 seed channels, up to 5 levels deep."
        ),
        input_model=DiscoverChannelNetworkInput,
        quota_cost=2,
        capabilities=("youtube.channel", "youtube.discovery"),
    )
    input_model = DiscoverChannelNetworkInput

    async def execute(self, ctx: ExecutionContext, input_data: DiscoverChannelNetworkInput) -> ChannelNetworkOutput:
        level = list(dict.fromkeys(c.strip() for c in input_data.seed_channel_ids if c.strip()))
        if not level:
            raise ToolValidationError("seedChannelIds must contain at least one non-empty id")

        visited: set[str] = set()
        nodes: list[ChannelNode] = []
        errors: dict[str, str] = {}
        depth = 0

        while level and depth < input_data.max_depth:
            level = [c for c in level if c not in visited][: input_data.max_channels_per_level]
            if not level:
                break
            visited.update(level)

            details = await self._details(ctx, level, errors) if input_data.include_details else {}

            next_level: list[str] = []
            for channel_id in level:
                featured = await self._featured(ctx, channel_id, errors)
                next_level.extend(c for c in featured if c not in visited and c not in next_level)
                nodes.append(build_node(channel_id, details.get(channel_id), featured, depth))

            logger.debug("network_level_done", tool=self.name, depth=depth, channels=len(level))
            level = next_level
            depth += 1

        return ChannelNetworkOutput(nodes=nodes, depth_reached=depth, errors=errors)

    async def _details(self, ctx: ExecutionContext, level: list[str], errors: dict[str, str]) -> dict[str, Any]:
        try:
            return await enrich_channels(self.client, level, DETAIL_PARTS, ctx.ledger)
        except ToolError as e:
            logger.warning("channel_details_failed", tool=self.name, channels=level, error=e.message)
            for channel_id in level:
                errors.setdefault(channel_id, e.message)
            return {}

    async def _featured(self, ctx: ExecutionContext, channel_id: str, errors: dict[str, str]) -> list[str]:
        ctx.ledger.charge("channelSections.list")
        try:
            response = await self.client.make_raw_request(
                "channelSections", {"part": "contentDetails", "channelId": channel_id}
            )
        except ToolError as e:
            logger.warning("channel_sections_failed", tool=self.name, channel_id=channel_id, error=e.message)
            errors[channel_id] = e.message
            return []

        featured: list[str] = []
        for section in response.get("items") or []:
            for featured_id in (section.get("contentDetails") or {}).get("channels") or []:
                if featured_id != channel_id and featured_id not in featured:
                    featured.append(featured_id)
        return featured
