"""Parameter validation and query construction tests."""

from datetime import datetime, timezone

import pytest

from tube_tools.adapters.youtube.schemas import SearchFilters, UnifiedSearchInput
from tube_tools.errors import ParameterConflictError, ToolValidationError
from tube_tools.validation import (
    build_search_params,
    check_parameter_conflicts,
    map_filters_to_params,
    validate_date_range,
    validate_enrichment_parts,
    validate_max_results,
    validate_parts,
    validate_search_query,
)

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


class TestFieldValidators:
    def test_query_or_channel_required(self):
        with pytest.raises(ToolValidationError, match="Either query or channelId"):
            validate_search_query(None, None)

    def test_blank_query_rejected(self):
        with pytest.raises(ToolValidationError, match="cannot be empty"):
            validate_search_query("   ", None)

    def test_channel_only_is_enough(self):
        validate_search_query(None, "UC123")

    @pytest.mark.parametrize("value", [0, 51, True, "10", 2.5])
    def test_max_results_rejected(self, value):
        with pytest.raises(ToolValidationError):
            validate_max_results(value)

    @pytest.mark.parametrize("value", [None, 1, 50])
    def test_max_results_accepted(self, value):
        validate_max_results(value)


class TestDateRange:
    def test_after_must_precede_before(self):
        with pytest.raises(ToolValidationError, match="publishedAfter must be before publishedBefore"):
            validate_date_range("2025-01-02T00:00:00Z", "2025-01-01T00:00:00Z", now=NOW)

    def test_equal_bounds_rejected(self):
        with pytest.raises(ToolValidationError):
            validate_date_range("2024-06-01T00:00:00Z", "2024-06-01T00:00:00Z", now=NOW)

    def test_valid_range(self):
        validate_date_range("2024-01-01T00:00:00Z", "2024-06-01T12:30:00.250Z", now=NOW)

    def test_bad_format(self):
        with pytest.raises(ToolValidationError, match="ISO 8601"):
            validate_date_range("2024-01-01", None, now=NOW)

    def test_far_future_bound_rejected(self):
        with pytest.raises(ToolValidationError, match="publishedBefore cannot be more than one year"):
            validate_date_range(None, "2026-06-01T00:00:00Z", now=NOW)

    def test_each_bound_checked_independently(self):
        with pytest.raises(ToolValidationError, match="publishedAfter cannot be more than one year"):
            validate_date_range("2026-03-01T00:00:00Z", None, now=NOW)


class TestEnrichmentParts:
    def test_empty_list_means_defaults(self):
        validate_enrichment_parts({"video": []})

    def test_unknown_type_rejected(self):
        with pytest.raises(ToolValidationError, match="Invalid enrichParts keys: comment"):
            validate_enrichment_parts({"comment": ["snippet"]})

    def test_unknown_part_rejected(self):
        with pytest.raises(ToolValidationError, match="Invalid video parts: fileDetails"):
            validate_enrichment_parts({"video": ["snippet", "fileDetails"]})

    def test_part_valid_for_other_type_only(self):
        with pytest.raises(ToolValidationError):
            validate_parts("playlist", ["statistics"])

    def test_non_list_rejected(self):
        with pytest.raises(ToolValidationError, match="must be an array"):
            validate_parts("video", "snippet")


class TestFilterMapping:
    def test_upload_date_window(self):
        params = map_filters_to_params({"uploadDate": "week"}, now=NOW)
        assert params == {"publishedAfter": "2024-12-25T00:00:00.000Z"}

    def test_upload_date_hour(self):
        params = map_filters_to_params({"uploadDate": "hour"}, now=NOW)
        assert params["publishedAfter"] == "2024-12-31T23:00:00.000Z"

    def test_sort_by_and_duration(self):
        params = map_filters_to_params({"sortBy": "view_count", "duration": "long"}, now=NOW)
        assert params == {"order": "viewCount", "videoDuration": "long"}

    def test_any_means_no_constraint(self):
        assert map_filters_to_params({"uploadDate": "any", "duration": "any"}, now=NOW) == {}

    def test_model_filters(self):
        params = map_filters_to_params(SearchFilters(sort_by="upload_date"), now=NOW)
        assert params == {"order": "date"}


class TestConflicts:
    def test_published_after_with_upload_date(self):
        with pytest.raises(ParameterConflictError, match="publishedAfter"):
            build_search_params(
                {"query": "x", "publishedAfter": "2024-12-01T00:00:00Z", "filters": {"uploadDate": "week"}},
                now=NOW,
            )

    def test_published_after_with_any_upload_date(self):
        with pytest.raises(ParameterConflictError):
            build_search_params(
                {"query": "x", "publishedAfter": "2024-12-01T00:00:00Z", "filters": {"uploadDate": "any"}},
                now=NOW,
            )

    @pytest.mark.parametrize(
        "extra",
        [
            {},
            {"maxResults": 500},
            {"query": "   ", "regionCode": "USA"},
            {"query": "x", "publishedBefore": "2020-01-01T00:00:00Z"},
        ],
    )
    def test_upload_date_conflict_wins_over_other_errors(self, extra):
        params = {"publishedAfter": "2024-12-01T00:00:00Z", "filters": {"uploadDate": "week"}, **extra}
        with pytest.raises(ParameterConflictError, match="filters.uploadDate"):
            build_search_params(params, now=NOW)

    def test_order_disagrees_with_sort_by(self):
        with pytest.raises(ParameterConflictError, match="order"):
            build_search_params({"query": "x", "order": "date", "filters": {"sortBy": "view_count"}}, now=NOW)

    def test_order_agrees_with_sort_by(self):
        params = build_search_params({"query": "x", "order": "viewCount", "filters": {"sortBy": "view_count"}}, now=NOW)
        assert params["order"] == "viewCount"

    def test_duration_disagrees(self):
        with pytest.raises(ParameterConflictError):
            check_parameter_conflicts({"videoDuration": "short"}, {"videoDuration": "long"})

    def test_duration_on_channel_search(self):
        with pytest.raises(ToolValidationError) as exc_info:
            build_search_params({"query": "x", "type": "channel", "filters": {"duration": "short"}}, now=NOW)
        assert not isinstance(exc_info.value, ParameterConflictError)


class TestBuildSearchParams:
    def test_defaults(self):
        assert build_search_params({"query": "cats"}, now=NOW) == {
            "part": "snippet",
            "q": "cats",
            "type": "video",
            "maxResults": 10,
            "order": "relevance",
            "safeSearch": "moderate",
        }

    def test_filters_resolved(self):
        params = build_search_params(
            {"query": "cats", "filters": {"uploadDate": "today", "sortBy": "rating", "duration": "short"}},
            now=NOW,
        )
        assert params["publishedAfter"] == "2024-12-31T00:00:00.000Z"
        assert params["order"] == "rating"
        assert params["videoDuration"] == "short"

    def test_accepts_input_model(self):
        model = UnifiedSearchInput(channel_id="UC123", max_results=5, filters=SearchFilters(sort_by="rating"))
        params = build_search_params(model, now=NOW)
        assert params["channelId"] == "UC123"
        assert params["maxResults"] == 5
        assert params["order"] == "rating"
        assert "q" not in params

    def test_enrichment_parts_validated_before_fetch(self):
        with pytest.raises(ToolValidationError):
            build_search_params({"query": "x", "enrichParts": {"video": ["bogus"]}}, now=NOW)

    @pytest.mark.parametrize(
        "override",
        [{"type": "comment"}, {"order": "best"}, {"regionCode": "USA"}, {"safeSearch": "off"}, {"videoDuration": "epic"}],
    )
    def test_invalid_enums(self, override):
        with pytest.raises(ToolValidationError):
            build_search_params({"query": "x", **override}, now=NOW)
