"""Keyword research workflow tests."""

from unittest.mock import patch

import pytest

from tube_tools.adapters.youtube.exceptions import YouTubeAPIError
from tube_tools.adapters.youtube.tools import KeywordResearchWorkflowTool
from tube_tools.adapters.youtube.tools.keyword_research import (
    calculate_competition,
    competition_level,
    extract_keywords,
    extract_themes,
    rank_opportunities,
)
from tube_tools.adapters.youtube.schemas import SeedKeywordResult

WORKFLOW = "keyword_research_workflow"


def seed_search(video_stub, failing=()):
    """search side effect: two videos per keyword, failing for some keywords."""

    async def search(params):
        keyword = params["q"].split()[0]
        if keyword in failing:
            raise YouTubeAPIError(f"YouTube API error (500): backend error for {keyword}", 500)
        return {
            "items": [
                video_stub(f"{keyword}-1", title=f"Python {keyword} tutorial for beginners", channel="Corey"),
                video_stub(f"{keyword}-2", title=f"{keyword} tips and tricks", channel=f"{keyword} channel"),
            ],
            "pageInfo": {"totalResults": 50_000, "resultsPerPage": 2},
        }

    return search


class TestKeywordResearchWorkflow:
    @pytest.mark.asyncio
    async def test_failed_seed_is_isolated(self, registry, mock_client, video_stub):
        """Second seed fails: first and third still reported, warning logged."""
        mock_client.search.side_effect = seed_search(video_stub, failing={"beta"})

        with patch("tube_tools.adapters.youtube.tools.keyword_research.logger") as logger:
            response = await registry.execute_tool(WORKFLOW, {"seedKeywords": ["alpha", "beta", "gamma"]})

        assert response.success, response.error
        data = response.data
        assert [s["keyword"] for s in data["seedAnalysis"]] == ["alpha", "gamma"]
        assert list(data["errors"]) == ["beta"]
        assert "backend error for beta" in data["errors"]["beta"]
        assert data["summary"]["failedSeeds"] == ["beta"]
        assert data["summary"]["seedsSucceeded"] == 2

        logger.warning.assert_called_once()
        assert logger.warning.call_args.kwargs["seed"] == "beta"
        assert logger.warning.call_args.kwargs["stage"] == "unified_search"

        assert mock_client.search.await_count == 3
        assert response.metadata.quota_used == 300

    @pytest.mark.asyncio
    async def test_every_seed_failing_fails_the_workflow(self, registry, mock_client, video_stub):
        mock_client.search.side_effect = seed_search(video_stub, failing={"alpha", "beta"})

        response = await registry.execute_tool(WORKFLOW, {"seedKeywords": ["alpha", "beta"]})

        assert not response.success
        assert "All 2 keyword searches failed" in response.error
        assert response.metadata.quota_used == 200

    @pytest.mark.asyncio
    async def test_aggregation(self, registry, mock_client, video_stub):
        mock_client.search.side_effect = seed_search(video_stub)

        response = await registry.execute_tool(WORKFLOW, {"seedKeywords": ["alpha", "gamma"]})

        data = response.data
        assert data["commonThemes"] == ["tutorial", "tips"]
        assert data["topChannels"][0] == {"channel": "Corey", "frequency": 2}
        keywords = {k["keyword"]: k["frequency"] for k in data["extractedKeywords"]}
        assert keywords["python"] == 2
        assert keywords["tutorial"] == 2
        assert "for" not in keywords
        assert data["summary"]["competitionLevel"] == "low"
        assert data["summary"]["topOpportunities"] == ["alpha", "gamma"]
        assert any(entry["text"] == "alpha" for entry in data["keywordCloud"])
        assert response.metadata.quota_used == 200

    @pytest.mark.asyncio
    async def test_optional_sections_disabled(self, registry, mock_client, video_stub):
        mock_client.search.side_effect = seed_search(video_stub)

        response = await registry.execute_tool(
            WORKFLOW,
            {"seedKeywords": ["alpha"], "includeCompetitorAnalysis": False, "generateKeywordCloud": False},
        )

        assert "topChannels" not in response.data
        assert "keywordCloud" not in response.data

    @pytest.mark.asyncio
    async def test_niche_and_statistics(self, registry, mock_client, video_stub, echo_records):
        mock_client.search.side_effect = seed_search(video_stub)
        mock_client.get_videos.side_effect = echo_records

        response = await registry.execute_tool(
            WORKFLOW, {"seedKeywords": ["alpha"], "niche": "cooking", "includeStatistics": True}
        )

        assert response.success
        assert mock_client.search.await_args.args[0]["q"] == "alpha cooking"
        assert mock_client.get_videos.await_count == 1
        seed = response.data["seedAnalysis"][0]
        assert seed["averageViews"] == 100.5
        assert seed["topVideos"][0]["viewCount"] == 100
        assert response.metadata.quota_used == 101

    @pytest.mark.asyncio
    async def test_substage_validation_failure(self, registry, mock_client):
        response = await registry.execute_tool(WORKFLOW, {"seedKeywords": ["alpha"], "regionCode": "USA"})
        assert not response.success
        mock_client.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_requires_registry(self, mock_client):
        response = await KeywordResearchWorkflowTool(mock_client).run({"seedKeywords": ["alpha"]})
        assert not response.success
        assert "requires a tool registry" in response.error

    @pytest.mark.asyncio
    async def test_blank_seeds_rejected(self, registry):
        response = await registry.execute_tool(WORKFLOW, {"seedKeywords": ["  "]})
        assert not response.success
        assert "seedKeywords" in response.error


class TestHeuristics:
    def test_competition(self):
        assert calculate_competition(25, 1_000_000) == 0.25
        assert calculate_competition(25, 10) == 100.0
        assert calculate_competition(0, 0) == 0.0

    @pytest.mark.parametrize("channels,level", [(0, "low"), (19, "low"), (20, "medium"), (50, "medium"), (51, "high")])
    def test_competition_level(self, channels, level):
        assert competition_level(channels) == level

    def test_keywords_from_titles_and_tags(self):
        items = [{"snippet": {"title": "How to Bake Bread", "tags": ["Sourdough", " "]}}]
        assert extract_keywords(items) == ["bake", "bread", "sourdough"]

    def test_themes(self):
        items = [{"snippet": {"title": "How to cook: a complete guide"}}, {"snippet": {}}]
        assert extract_themes(items) == ["how-to", "guide"]

    def test_opportunities_ranked_by_competition(self):
        seeds = [
            SeedKeywordResult(keyword="a", total_results=5000, result_count=10, competition=20, top_videos=[]),
            SeedKeywordResult(keyword="b", total_results=5000, result_count=10, competition=5, top_videos=[]),
            SeedKeywordResult(keyword="c", total_results=500, result_count=10, competition=1, top_videos=[]),
            SeedKeywordResult(keyword="d", total_results=9000, result_count=10, competition=80, top_videos=[]),
        ]
        assert rank_opportunities(seeds) == ["b", "a"]
