"""YouTube Unified Search Tool.

One search entry point for videos, channels and playlists, with the full
filter vocabulary and optional batch enrichment of the results.
"""

from typing import Any

from tube_config.settings import get_settings
from tube_tools.base import BaseTool, ExecutionContext, tool_descriptor
from tube_tools.enrichment import get_enrichment_parts, perform_enrichment
from tube_tools.quota import calculate_search_quota
from tube_tools.validation import build_search_params

from ..schemas import SearchOutput, UnifiedSearchInput


async def execute_search(
    ctx: ExecutionContext,
    client: Any,
    search_params: dict[str, Any],
    enrich_parts: dict[str, list[str]] | None = None,
) -> SearchOutput:
    """Run one validated search and enrich the results of the searched type.

    Shared by every search tool. search_params must come from
    build_search_params, so validation has already happened.
    """
    resource_type = search_params.get("type", "video")
    ctx.estimated_quota = calculate_search_quota(
        search_params.get("maxResults"),
        enrich_parts,
        resource_type,
        batch_size=get_settings().ENRICHMENT_BATCH_SIZE,
    )

    ctx.ledger.charge("search.list")
    response = await client.search(search_params)
    items = response.get("items") or []

    enriched = False
    if items and get_enrichment_parts(enrich_parts, resource_type) is not None:
        items = await perform_enrichment(client, items, enrich_parts, resource_type, ledger=ctx.ledger)
        enriched = True

    return SearchOutput.from_response(response, items, enriched=enriched)


class UnifiedSearchTool(BaseTool):
    """Search any resource type with filters and enrichment.

    Capabilities:
    - Free-text or channel-scoped search
    - High-level filters (duration, uploadDate, sortBy) mapped to API params
    - Batched enrichment with statistics, contentDetails, ...

    Use Cases:
    - "Find Python tutorials from the past week, with view counts"
    - "List a channel's most viewed videos"
    """

    descriptor = tool_descriptor(
        name="unified_search",
        description=(
            "Search YouTube for videos, channels or playlists with advanced filters "
            "and optional enrichment of the results with full resource details."
        ),
        input_model=UnifiedSearchInput,
        quota_cost=100,
        capabilities=("youtube.search", "youtube.read"),
    )
    input_model = UnifiedSearchInput

    async def execute(self, ctx: ExecutionContext, input_data: UnifiedSearchInput) -> SearchOutput:
        search_params = build_search_params(input_data)
        return await execute_search(ctx, self.client, search_params, input_data.enrich_parts)
