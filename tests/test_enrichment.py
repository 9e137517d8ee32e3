"""Batch enrichment pipeline tests."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from tube_config.settings import get_settings
from tube_tools.adapters.youtube.exceptions import YouTubeAPIError
from tube_tools.adapters.youtube.schemas import Video
from tube_tools.enrichment import (
    batch_array,
    enrich_channels,
    enrich_videos,
    extract_resource_ids,
    get_enrichment_parts,
    merge_enriched_data,
    perform_enrichment,
)
from tube_tools.errors import ToolValidationError, UpstreamError
from tube_tools.quota import QuotaLedger


class TestGetEnrichmentParts:
    def test_no_request(self):
        assert get_enrichment_parts(None, "video") is None

    def test_type_absent(self):
        assert get_enrichment_parts({"channel": ["snippet"]}, "video") is None

    def test_empty_list_uses_defaults(self):
        assert get_enrichment_parts({"video": []}, "video") == get_settings().default_parts_for("video")

    def test_explicit_parts(self):
        assert get_enrichment_parts({"video": ["statistics"]}, "video") == ["statistics"]

    def test_unknown_part_fails_closed(self):
        with pytest.raises(ToolValidationError):
            get_enrichment_parts({"video": ["statistics", "fileDetails"]}, "video")


def test_extract_resource_ids_skips_malformed(video_stub):
    stubs = [
        video_stub("a"),
        {"id": {}},
        {"id": "b"},
        {"id": {"videoId": ""}},
        {"snippet": {}},
        video_stub("c"),
    ]
    assert extract_resource_ids(stubs, "video") == ["a", "c"]


def test_extract_channel_ids():
    stubs = [{"id": {"kind": "youtube#channel", "channelId": "UC1"}}, {"id": {"videoId": "v"}}]
    assert extract_resource_ids(stubs, "channel") == ["UC1"]


class TestBatchArray:
    def test_chunks_in_order(self):
        batches = batch_array(list(range(120)), 50)
        assert [len(b) for b in batches] == [50, 50, 20]
        assert [x for b in batches for x in b] == list(range(120))

    def test_empty(self):
        assert batch_array([], 50) == []

    @pytest.mark.parametrize("size", [0, -1])
    def test_non_positive_size(self, size):
        with pytest.raises(ValueError):
            batch_array([1, 2], size)


class TestEnrich:
    @pytest.mark.asyncio
    async def test_one_call_per_batch(self, mock_client, video_stub, echo_records):
        """120 stubs: 3 calls of 50, 50 and 20 ids, order preserved."""
        mock_client.get_videos.side_effect = echo_records
        stubs = [video_stub(f"v{i}") for i in range(120)]
        ledger = QuotaLedger()

        result = await perform_enrichment(
            mock_client, stubs, {"video": ["snippet", "statistics"]}, "video", ledger=ledger
        )

        calls = mock_client.get_videos.await_args_list
        assert [len(c.args[0]["id"].split(",")) for c in calls] == [50, 50, 20]
        assert all(c.args[0]["part"] == "snippet,statistics" for c in calls)
        assert len(result) == 120
        assert [r["id"]["videoId"] for r in result] == [f"v{i}" for i in range(120)]
        assert ledger.total == 3
        assert ledger.by_operation() == {"videos.list": 3}

    @pytest.mark.asyncio
    async def test_concurrent_batches_keep_order(self, mock_client):
        async def fetch(params):
            ids = params["id"].split(",")
            # later batches finish first
            await asyncio.sleep(0.01 if ids[0] == "v0" else 0)
            return {"items": [{"id": vid} for vid in ids]}

        mock_client.get_videos.side_effect = fetch
        ids = [f"v{i}" for i in range(25)]

        records = await enrich_videos(mock_client, ids, ["snippet"], batch_size=10, concurrency=3)

        assert list(records) == ids
        assert mock_client.get_videos.await_count == 3

    @pytest.mark.asyncio
    async def test_records_are_typed(self, mock_client, echo_records):
        mock_client.get_videos.side_effect = echo_records
        records = await enrich_videos(mock_client, ["a"], ["statistics"])
        assert isinstance(records["a"], Video)
        assert records["a"].statistics.view_count == 100

    @pytest.mark.asyncio
    async def test_missing_records_are_skipped(self, mock_client):
        mock_client.get_channels.return_value = {"items": [{"id": "UC1"}]}
        records = await enrich_channels(mock_client, ["UC1", "UC2"], ["snippet"])
        assert list(records) == ["UC1"]

    @pytest.mark.asyncio
    async def test_empty_parts_rejected(self, mock_client):
        with pytest.raises(ToolValidationError):
            await enrich_videos(mock_client, ["a"], [])

    @pytest.mark.asyncio
    async def test_failed_batch_is_still_charged(self, mock_client):
        """Batch 2 of 3 fails: batches 1 and 2 were sent, batch 3 never is."""
        mock_client.get_videos.side_effect = [
            {"items": []},
            YouTubeAPIError("YouTube API error (503): unavailable", 503),
            {"items": []},
        ]
        ledger = QuotaLedger()

        with pytest.raises(YouTubeAPIError):
            await enrich_videos(mock_client, [f"v{i}" for i in range(150)], ["snippet"], ledger)

        assert mock_client.get_videos.await_count == 2
        assert ledger.total == 2

    @pytest.mark.asyncio
    async def test_failed_concurrent_batch_cancels_the_rest(self, mock_client):
        finished = []

        async def fetch(params):
            ids = params["id"].split(",")
            if ids[0] == "v0":
                raise YouTubeAPIError("YouTube API error (500): boom", 500)
            await asyncio.sleep(0.05)
            finished.append(ids[0])
            return {"items": [{"id": vid} for vid in ids]}

        mock_client.get_videos.side_effect = fetch
        ledger = QuotaLedger()

        with pytest.raises(YouTubeAPIError):
            await enrich_videos(
                mock_client, [f"v{i}" for i in range(40)], ["snippet"], ledger, batch_size=10, concurrency=3
            )
        charged = ledger.total
        await asyncio.sleep(0.1)

        assert finished == []
        assert ledger.total == charged
        assert charged <= 3

    @pytest.mark.asyncio
    async def test_malformed_record_is_upstream_error(self, mock_client):
        mock_client.get_videos.return_value = {"items": [{"id": "a", "statistics": {"viewCount": "many"}}]}

        with pytest.raises(UpstreamError, match="videos.list returned a malformed video record"):
            await enrich_videos(mock_client, ["a"], ["statistics"])


class TestPerformEnrichmentNoOp:
    @pytest.mark.asyncio
    async def test_type_not_requested(self, mock_client, video_stub):
        stubs = [video_stub("a")]
        result = await perform_enrichment(mock_client, stubs, {"channel": []}, "video")
        assert result is stubs
        mock_client.get_videos.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_request(self, mock_client, video_stub):
        stubs = [video_stub("a")]
        assert await perform_enrichment(mock_client, stubs, None, "video") is stubs
        mock_client.get_videos.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_stubs(self, mock_client):
        assert await perform_enrichment(mock_client, [], {"video": []}, "video") == []
        mock_client.get_videos.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_ids(self, mock_client):
        stubs = [{"id": {}}]
        assert await perform_enrichment(mock_client, stubs, {"video": []}, "video") == stubs
        mock_client.get_videos.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_list_requests_default_parts(self, video_stub):
        client = AsyncMock()
        client.get_videos.return_value = {"items": []}
        await perform_enrichment(client, [video_stub("a")], {"video": []}, "video")
        sent = client.get_videos.await_args.args[0]
        assert sent["part"] == ",".join(get_settings().default_parts_for("video"))


class TestMerge:
    def test_record_supersedes_stub_but_keeps_typed_id(self, video_stub):
        stubs = [video_stub("a", title="stub title"), video_stub("b")]
        record = Video.model_validate(
            {"id": "a", "snippet": {"title": "full title"}, "statistics": {"viewCount": "42"}}
        )

        merged = merge_enriched_data(stubs, {"a": record}, "video")

        assert len(merged) == 2
        assert merged[0]["id"] == {"kind": "youtube#video", "videoId": "a"}
        assert merged[0]["snippet"]["title"] == "full title"
        assert merged[0]["statistics"]["viewCount"] == 42
        assert merged[0]["kind"] == "youtube#searchResult"
        assert merged[1] is stubs[1]

    def test_stubs_not_mutated(self, video_stub):
        stubs = [video_stub("a")]
        merge_enriched_data(stubs, {"a": {"id": "a", "statistics": {}}}, "video")
        assert "statistics" not in stubs[0]
