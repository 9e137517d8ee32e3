"""Pytest fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from tube_tools.registry import ToolRegistry


def _video_stub(video_id: str, title: str = "", channel: str = "Channel") -> dict:
    return {
        "kind": "youtube#searchResult",
        "id": {"kind": "youtube#video", "videoId": video_id},
        "snippet": {"title": title or f"Video {video_id}", "channelTitle": channel},
    }


@pytest.fixture
def video_stub():
    """Factory for search result stubs of type video."""
    return _video_stub


@pytest.fixture
def mock_client():
    """Fake YouTube client; every upstream call is an AsyncMock."""
    client = MagicMock(name="YouTubeClientWrapper")
    client.search = AsyncMock(return_value={"items": [], "pageInfo": {"totalResults": 0, "resultsPerPage": 0}})
    client.get_videos = AsyncMock(return_value={"items": []})
    client.get_channels = AsyncMock(return_value={"items": []})
    client.get_playlists = AsyncMock(return_value={"items": []})
    client.make_raw_request = AsyncMock(return_value={"items": []})
    return client


@pytest.fixture
def registry(mock_client):
    """Registry loaded from the real manifest against the fake client."""
    registry = ToolRegistry()
    registry.load_all_tools(mock_client)
    return registry


@pytest.fixture
def echo_records():
    """get_videos side effect returning one record per requested id."""

    async def fetch(params):
        ids = params["id"].split(",")
        return {
            "items": [
                {"kind": "youtube#video", "id": vid, "statistics": {"viewCount": str(100 + i)}}
                for i, vid in enumerate(ids)
            ]
        }

    return fetch
