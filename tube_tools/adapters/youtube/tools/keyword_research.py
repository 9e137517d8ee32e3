"""YouTube Keyword Research Workflow Tool.

Runs one unified_search per seed keyword through the registry and folds the
results into a single report: per-seed competition, keyword frequencies from
titles and tags, content themes, dominant channels and ranked opportunities.

A failed seed is logged and skipped; the workflow only fails when every
seed failed.
"""

import re
from collections import Counter
from typing import Any

from tube_obs.logging import get_logger
from tube_tools.base import BaseTool, ExecutionContext, tool_descriptor
from tube_tools.errors import InternalToolError, ToolValidationError, UpstreamError

from ..schemas import (
    ChannelFrequency,
    KeywordFrequency,
    KeywordResearchInput,
    KeywordResearchOutput,
    SeedKeywordResult,
    WorkflowSummary,
)

logger = get_logger(__name__)

SEARCH_TOOL = "unified_search"

# (substring in a lowercased title, theme tag)
THEME_PATTERNS = (
    ("tutorial", "tutorial"),
    ("review", "review"),
    ("how to", "how-to"),
    ("guide", "guide"),
    ("tips", "tips"),
)

MIN_KEYWORD_LENGTH = 4
MAX_EXTRACTED_KEYWORDS = 50
MAX_CLOUD_KEYWORDS = 100
MAX_TOP_CHANNELS = 10
MAX_TOP_VIDEOS = 5

# An opportunity has real search volume but few results competing for it.
OPPORTUNITY_MIN_RESULTS = 1000
OPPORTUNITY_MAX_COMPETITION = 50

_WORD = re.compile(r"[\w']+")


def calculate_competition(result_count: int, total_results: int) -> float:
    """Share of the result space the first page covers, scaled to 0-100."""
    return round(min(100.0, result_count / max(1, total_results) * 10000), 2)


def competition_level(distinct_channels: int) -> str:
    if distinct_channels < 20:
        return "low"
    if distinct_channels > 50:
        return "high"
    return "medium"


def _snippet(item: dict[str, Any]) -> dict[str, Any]:
    return item.get("snippet") or {}


def extract_keywords(items: list[dict[str, Any]]) -> list[str]:
    """Title words longer than 3 characters, plus whole tags, lowercased."""
    keywords = []
    for item in items:
        snippet = _snippet(item)
        title = (snippet.get("title") or "").lower()
        keywords.extend(word for word in _WORD.findall(title) if len(word) >= MIN_KEYWORD_LENGTH)
        for tag in snippet.get("tags") or []:
            if isinstance(tag, str) and tag.strip():
                keywords.append(tag.strip().lower())
    return keywords


def extract_themes(items: list[dict[str, Any]]) -> list[str]:
    themes = []
    for item in items:
        title = (_snippet(item).get("title") or "").lower()
        themes.extend(theme for pattern, theme in THEME_PATTERNS if pattern in title)
    return themes


def _view_count(item: dict[str, Any]) -> int | None:
    value = (item.get("statistics") or {}).get("viewCount")
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def analyze_seed(keyword: str, data: dict[str, Any]) -> SeedKeywordResult:
    items = data.get("items") or []
    total_results = data.get("totalResults") or len(items)

    views = [v for v in (_view_count(item) for item in items) if v is not None]
    top_videos = []
    for item in items[:MAX_TOP_VIDEOS]:
        snippet = _snippet(item)
        video = {
            "videoId": (item.get("id") or {}).get("videoId"),
            "title": snippet.get("title"),
            "channelTitle": snippet.get("channelTitle"),
            "publishedAt": snippet.get("publishedAt"),
        }
        if _view_count(item) is not None:
            video["viewCount"] = _view_count(item)
        top_videos.append(video)

    return SeedKeywordResult(
        keyword=keyword,
        total_results=total_results,
        result_count=len(items),
        competition=calculate_competition(len(items), total_results),
        top_videos=top_videos,
        average_views=round(sum(views) / len(views), 2) if views else None,
    )


def rank_opportunities(seeds: list[SeedKeywordResult]) -> list[str]:
    """Seeds with volume and low competition, least competitive first."""
    candidates = [
        s for s in seeds
        if s.total_results > OPPORTUNITY_MIN_RESULTS and s.competition < OPPORTUNITY_MAX_COMPETITION
    ]
    candidates.sort(key=lambda s: (s.competition, -s.total_results))
    return [s.keyword for s in candidates]


def _unique_seeds(seed_keywords: list[str]) -> list[str]:
    seen = []
    for seed in seed_keywords:
        seed = seed.strip()
        if seed and seed not in seen:
            seen.append(seed)
    return seen


class KeywordResearchWorkflowTool(BaseTool):
    """Keyword research across several seed keywords.

    Chains unified_search through the registry, so every stage goes through
    the same validation, enrichment and quota accounting as a direct call.
    Costs 100 units per seed, plus 1 per seed with includeStatistics.
    """

    descriptor = tool_descriptor(
        name="keyword_research_workflow",
        description=(
            "Complete keyword research workflow: search videos for each seed keyword, "
            "extract keywords and themes, analyze competing channels and rank opportunities."
        ),
        input_model=KeywordResearchInput,
        quota_cost=100,
        requires_registry=True,
        capabilities=("youtube.research", "workflow"),
    )
    input_model = KeywordResearchInput

    async def execute(self, ctx: ExecutionContext, input_data: KeywordResearchInput) -> KeywordResearchOutput:
        if self.registry is None:
            raise InternalToolError(f"{self.name} requires a tool registry")

        seeds = _unique_seeds(input_data.seed_keywords)
        if not seeds:
            raise ToolValidationError("seedKeywords must contain at least one non-empty keyword")

        ctx.estimated_quota = len(seeds) * (100 + (1 if input_data.include_statistics else 0))

        results: dict[str, dict[str, Any]] = {}
        errors: dict[str, str] = {}
        for seed in seeds:
            response = await self.registry.execute_tool(
                SEARCH_TOOL, self._search_params(seed, input_data), client=self.client
            )
            ctx.ledger.merge(SEARCH_TOOL, response.metadata)

            if not response.success:
                logger.warning(
                    "workflow_stage_failed",
                    workflow=self.name,
                    stage=SEARCH_TOOL,
                    seed=seed,
                    error=response.error,
                )
                errors[seed] = response.error
                continue
            results[seed] = response.data

        if not results:
            detail = "; ".join(f"{seed}: {error}" for seed, error in errors.items())
            raise UpstreamError(f"All {len(seeds)} keyword searches failed: {detail}")

        return self._aggregate(input_data, seeds, results, errors)

    def _search_params(self, seed: str, input_data: KeywordResearchInput) -> dict[str, Any]:
        params: dict[str, Any] = {
            "query": f"{seed} {input_data.niche}" if input_data.niche else seed,
            "type": "video",
            "maxResults": input_data.max_videos_per_keyword,
            "order": "relevance",
        }
        if input_data.region_code:
            params["regionCode"] = input_data.region_code
        if input_data.include_statistics:
            params["enrichParts"] = {"video": ["statistics"]}
        return params

    def _aggregate(
        self,
        input_data: KeywordResearchInput,
        seeds: list[str],
        results: dict[str, dict[str, Any]],
        errors: dict[str, str],
    ) -> KeywordResearchOutput:
        seed_analysis = []
        keyword_counts: Counter = Counter()
        channel_counts: Counter = Counter()
        themes: list[str] = []

        for seed in seeds:
            if seed not in results:
                continue
            data = results[seed]
            items = data.get("items") or []
            seed_analysis.append(analyze_seed(seed, data))
            keyword_counts.update(extract_keywords(items))
            for theme in extract_themes(items):
                if theme not in themes:
                    themes.append(theme)
            for item in items:
                channel = _snippet(item).get("channelTitle")
                if channel:
                    channel_counts[channel] += 1

        extracted = [
            KeywordFrequency(keyword=keyword, frequency=count)
            for keyword, count in keyword_counts.most_common(MAX_EXTRACTED_KEYWORDS)
        ]
        level = competition_level(len(channel_counts))
        opportunities = rank_opportunities(seed_analysis)

        top_channels = None
        if input_data.include_competitor_analysis:
            top_channels = [
                ChannelFrequency(channel=channel, frequency=count)
                for channel, count in channel_counts.most_common(MAX_TOP_CHANNELS)
            ]

        keyword_cloud = None
        if input_data.generate_keyword_cloud:
            cloud_counts = Counter({s.keyword.lower(): 1 for s in seed_analysis})
            cloud_counts.update(keyword_counts)
            keyword_cloud = [
                {"text": keyword, "weight": count}
                for keyword, count in cloud_counts.most_common(MAX_CLOUD_KEYWORDS)
            ]

        videos_analyzed = sum(s.result_count for s in seed_analysis)
        recommendations = [
            f"Focus on {len(opportunities)} identified low-competition opportunities",
            f"Analyze {videos_analyzed} videos to understand content patterns",
        ]
        if top_channels is not None:
            recommendations.append(f"Study top {len(top_channels)} competitor channels")
            recommendations.append(f"Competition level is {level} - adjust strategy accordingly")
        if themes:
            recommendations.append(f"Create content around common themes: {', '.join(themes)}")
        if errors:
            recommendations.append(f"Retry research for: {', '.join(errors)}")

        return KeywordResearchOutput(
            seed_analysis=seed_analysis,
            extracted_keywords=extracted,
            common_themes=themes,
            top_channels=top_channels,
            keyword_cloud=keyword_cloud,
            recommendations=recommendations,
            summary=WorkflowSummary(
                seeds_requested=len(seeds),
                seeds_succeeded=len(seed_analysis),
                failed_seeds=list(errors),
                total_keywords_found=len(extracted),
                top_opportunities=opportunities[:5],
                competition_level=level,
            ),
            errors=errors,
        )
