"""Tool Registry Tests."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from tube_config.settings import Settings
from tube_tools.adapters.youtube.schemas import ToolInput
from tube_tools.base import BaseTool, tool_descriptor
from tube_tools.errors import DuplicateToolError
from tube_tools.manifest import TOOL_CLASSES
from tube_tools.registry import ToolRegistry


class PingInput(ToolInput):
    pass


class PingTool(BaseTool):
    descriptor = tool_descriptor(
        name="ping", description="Ping", input_model=PingInput, quota_cost=0, capabilities=("test.mock",)
    )
    input_model = PingInput

    async def execute(self, ctx, input_data):
        return {"client": id(self.client)}


class NamelessTool(PingTool):
    descriptor = {"name": "", "description": "No name", "inputSchema": {"type": "object", "properties": {}}}


class BadSchemaTool(PingTool):
    descriptor = {
        "name": "bad_schema",
        "description": "Required key missing from properties",
        "inputSchema": {"type": "object", "properties": {}, "required": ["query"]},
    }


class NotATool:
    descriptor = PingTool.descriptor


class ExplodingTool(PingTool):
    descriptor = tool_descriptor(name="exploding", description="Constructor raises", input_model=PingInput)

    def __init__(self, client, registry=None):
        raise RuntimeError("cannot build client session")


EXPECTED_TOOLS = {
    "search_videos",
    "search_channels",
    "search_playlists",
    "unified_search",
    "get_video_details",
    "get_channel_details",
    "get_playlist_details",
    "get_trending_videos",
    "extract_video_comments",
    "analyze_channel_videos",
    "discover_channel_network",
    "keyword_research_workflow",
}


def test_load_all_tools(registry):
    """Every manifest entry is registered exactly once."""
    assert registry.tool_count == len(TOOL_CLASSES) == len(EXPECTED_TOOLS)
    assert {d.name for d in registry.list_tools()} == EXPECTED_TOOLS
    assert registry.has_tools()


def test_load_is_idempotent(registry, mock_client):
    assert registry.load_all_tools(mock_client) == len(EXPECTED_TOOLS)
    assert registry.tool_count == len(EXPECTED_TOOLS)


def test_list_tools_is_a_snapshot(registry):
    snapshot = registry.list_tools()
    assert isinstance(snapshot, tuple)
    registry.register(PingTool(client=None))
    assert len(snapshot) == len(EXPECTED_TOOLS)


def test_get_tool(registry):
    descriptor = registry.get_tool("get_video_details")
    assert descriptor.quota_cost == 1
    assert registry.get_tool("nope") is None


def test_registry_injected_only_when_requested(registry, mock_client):
    for descriptor in registry.list_tools():
        tool = registry.get(descriptor.name)
        assert tool.client is mock_client
        if descriptor.requires_registry:
            assert tool.registry is registry
        else:
            assert tool.registry is None
    assert registry.get_tool("keyword_research_workflow").requires_registry


def test_descriptors_are_well_formed(registry):
    for descriptor in registry.list_tools():
        schema = descriptor.input_schema
        assert schema["type"] == "object"
        assert set(schema.get("required", [])) <= set(schema["properties"])
        assert descriptor.quota_cost is not None and descriptor.quota_cost >= 0


def test_malformed_entries_are_skipped():
    registry = ToolRegistry()
    count = registry.load_all_tools(None, manifest=[NamelessTool, BadSchemaTool, NotATool, PingTool])
    assert count == 1
    assert registry.get_tool("ping") is not None


def test_constructor_failure_is_skipped():
    registry = ToolRegistry()
    count = registry.load_all_tools(None, manifest=[ExplodingTool, PingTool])
    assert count == 1
    assert registry.get_tool("exploding") is None
    assert registry.get_tool("ping") is not None


def test_duplicate_after_constructor_failure_still_fails():
    registry = ToolRegistry()
    with pytest.raises(DuplicateToolError):
        registry.load_all_tools(None, manifest=[PingTool, ExplodingTool, PingTool])


def test_duplicate_names_rejected():
    registry = ToolRegistry()
    with pytest.raises(DuplicateToolError, match="ping"):
        registry.load_all_tools(None, manifest=[PingTool, PingTool])


def test_filter_by_capability(registry):
    """Test capability-based filtering."""
    names = {t.name for t in registry.filter_by_capability("youtube.search")}
    assert names == {"search_videos", "search_channels", "search_playlists", "unified_search"}


class TestExecuteTool:
    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry, mock_client):
        response = await registry.execute_tool("unknown_tool", {}, mock_client)
        assert response.success is False
        assert "not found" in response.error.lower()
        assert response.metadata.quota_used == 0

    @pytest.mark.asyncio
    async def test_failures_become_envelopes(self, registry):
        response = await registry.execute_tool("search_videos", {"maxResults": 500})
        assert not response.success
        assert "Invalid parameters" in response.error

    @pytest.mark.asyncio
    async def test_client_override_builds_fresh_instance(self, registry, mock_client):
        other = MagicMock()
        other.get_videos = AsyncMock(return_value={"items": [{"id": "v1"}]})

        response = await registry.execute_tool("get_video_details", {"videoId": "v1"}, client=other)

        assert response.success
        other.get_videos.assert_awaited_once()
        mock_client.get_videos.assert_not_awaited()
        assert registry.get("get_video_details").client is mock_client

    @pytest.mark.asyncio
    async def test_default_timeout_from_settings(self, registry, mock_client, monkeypatch):
        monkeypatch.setattr("tube_tools.registry.get_settings", lambda: Settings(TOOL_TIMEOUT_SECONDS=0.01))

        async def slow(params):
            await asyncio.sleep(1)

        mock_client.get_videos.side_effect = slow
        response = await registry.execute_tool("get_video_details", {"videoId": "v1"})
        assert not response.success
        assert "timed out" in response.error


MINIMAL_INPUTS = {
    "search_videos": {"query": "python"},
    "search_channels": {"query": "python"},
    "search_playlists": {"query": "python"},
    "unified_search": {"query": "python"},
    "get_video_details": {"videoId": "v1"},
    "get_channel_details": {"channelId": "UC1"},
    "get_playlist_details": {"playlistId": "PL1"},
    "get_trending_videos": {},
    "extract_video_comments": {"videoIds": ["v1"]},
    "analyze_channel_videos": {"channelId": "UC1"},
    "discover_channel_network": {"seedChannelIds": ["UC1"]},
    "keyword_research_workflow": {"seedKeywords": ["python"]},
}


@pytest.mark.asyncio
@pytest.mark.parametrize("name", sorted(MINIMAL_INPUTS))
async def test_declared_quota_matches_minimal_call(registry, mock_client, name):
    """A minimal successful call reports exactly the declared quotaCost."""
    mock_client.get_videos.return_value = {"items": [{"id": "v1"}]}
    mock_client.get_channels.return_value = {
        "items": [{"id": "UC1", "contentDetails": {"relatedPlaylists": {"uploads": "UU1"}}}]
    }
    mock_client.get_playlists.return_value = {"items": [{"id": "PL1"}]}

    response = await registry.execute_tool(name, MINIMAL_INPUTS[name])

    assert response.success, response.error
    assert response.metadata.quota_used == registry.get_tool(name).quota_cost
