"""Parameter validation and search query construction.

Everything here runs before any quota-consuming upstream call, so a request
that fails validation costs zero quota.
"""

import re
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from tube_obs.logging import get_logger
from tube_tools.errors import ParameterConflictError, ToolValidationError

logger = get_logger(__name__)

RESOURCE_TYPES = ("video", "channel", "playlist")

# Field groups the upstream list endpoints accept for enrichment.
ALLOWED_PARTS: dict[str, tuple[str, ...]] = {
    "video": ("snippet", "contentDetails", "statistics", "status", "localizations", "topicDetails", "player"),
    "channel": ("snippet", "contentDetails", "statistics", "status", "brandingSettings", "localizations", "topicDetails"),
    "playlist": ("snippet", "contentDetails", "status", "localizations", "player"),
}

VALID_ORDERS = ("date", "rating", "relevance", "title", "videoCount", "viewCount")
VALID_SAFE_SEARCH = ("none", "moderate", "strict")
VALID_DURATIONS = ("short", "medium", "long")

UPLOAD_DATE_WINDOWS = {
    "hour": timedelta(hours=1),
    "today": timedelta(days=1),
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}

SORT_BY_ORDER = {
    "relevance": "relevance",
    "upload_date": "date",
    "view_count": "viewCount",
    "rating": "rating",
}

_ISO8601 = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{3})?Z?$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Upstream timestamp format (RFC 3339, millisecond precision, Z suffix)."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_iso8601(value: str, field: str) -> datetime:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    if not isinstance(value, str) or not _ISO8601.match(value.strip()):
        raise ToolValidationError(f"{field} must be in ISO 8601 format (YYYY-MM-DDTHH:mm:ssZ)")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ToolValidationError(f"{field} is not a valid date: {value}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ============================================================================
# FIELD VALIDATORS
# ============================================================================


def validate_search_query(query: str | None, channel_id: str | None) -> None:
    """At least one of query / channelId must be a non-blank string."""
    if query is None and channel_id is None:
        raise ToolValidationError("Either query or channelId must be provided")
    if query is not None and (not isinstance(query, str) or not query.strip()):
        raise ToolValidationError("Search query cannot be empty")
    if channel_id is not None and (not isinstance(channel_id, str) or not channel_id.strip()):
        raise ToolValidationError("channelId cannot be empty")


def validate_max_results(max_results: Any) -> None:
    if max_results is None:
        return
    if isinstance(max_results, bool) or not isinstance(max_results, int):
        raise ToolValidationError("maxResults must be an integer")
    if not 1 <= max_results <= 50:
        raise ToolValidationError("maxResults must be between 1 and 50")


def validate_date_range(
    published_after: str | None,
    published_before: str | None,
    now: datetime | None = None,
) -> None:
    """Check format, ordering, and that neither bound is over a year ahead."""
    now = now or _utcnow()
    try:
        horizon = now.replace(year=now.year + 1)
    except ValueError:  # Feb 29
        horizon = now + timedelta(days=365)

    after = parse_iso8601(published_after, "publishedAfter") if published_after is not None else None
    before = parse_iso8601(published_before, "publishedBefore") if published_before is not None else None

    if after is not None and before is not None and after >= before:
        raise ToolValidationError("publishedAfter must be before publishedBefore")

    for field, value in (("publishedAfter", after), ("publishedBefore", before)):
        if value is not None and value > horizon:
            raise ToolValidationError(f"{field} cannot be more than one year in the future")


def validate_enrichment_parts(
    enrich_parts: Mapping[str, Any] | None,
    resource_type: str | None = None,
) -> None:
    """Validate an enrichment request against the per-type allow-lists.

    Unknown resource types or parts are rejected, never dropped. An empty
    list is allowed and means "configured defaults".
    """
    if enrich_parts is None:
        return
    if not isinstance(enrich_parts, Mapping):
        raise ToolValidationError("enrichParts must be an object")

    invalid_keys = [key for key in enrich_parts if key not in RESOURCE_TYPES]
    if invalid_keys:
        raise ToolValidationError(
            f"Invalid enrichParts keys: {', '.join(map(str, invalid_keys))}. "
            f"Valid keys are: {', '.join(RESOURCE_TYPES)}"
        )

    for rtype, parts in enrich_parts.items():
        validate_parts(rtype, parts)

    if resource_type:
        others = [t for t in enrich_parts if t != resource_type]
        if others:
            logger.info(
                "enrichment_parts_for_other_types",
                searched_type=resource_type,
                ignored_types=others,
            )


def validate_parts(resource_type: str, parts: Any) -> list[str]:
    """Check one type's part list against its allow-list and return it."""
    if resource_type not in ALLOWED_PARTS:
        raise ToolValidationError(
            f"Invalid resource type: {resource_type}. Must be one of: {', '.join(RESOURCE_TYPES)}"
        )
    if not isinstance(parts, (list, tuple)):
        raise ToolValidationError(f"enrichParts.{resource_type} must be an array")

    allowed = ALLOWED_PARTS[resource_type]
    invalid = [p for p in parts if not isinstance(p, str) or p not in allowed]
    if invalid:
        raise ToolValidationError(
            f"Invalid {resource_type} parts: {', '.join(map(str, invalid))}. "
            f"Valid parts are: {', '.join(allowed)}"
        )
    return list(parts)


# ============================================================================
# FILTER TRANSLATION
# ============================================================================


def _get(source: Any, key: str, alias: str | None = None) -> Any:
    """Read a field from a pydantic model or a (camelCase) mapping."""
    if source is None:
        return None
    if isinstance(source, Mapping):
        value = source.get(alias or key)
        return value if value is not None else source.get(key)
    return getattr(source, key, None)


def map_filters_to_params(filters: Any, now: datetime | None = None) -> dict[str, Any]:
    """Translate the high-level filter vocabulary into upstream parameters."""
    if filters is None:
        return {}
    params: dict[str, Any] = {}

    upload_date = _get(filters, "upload_date", "uploadDate")
    if upload_date is not None:
        if upload_date != "any" and upload_date not in UPLOAD_DATE_WINDOWS:
            raise ToolValidationError(
                f"Invalid uploadDate: {upload_date}. Valid values are: any, {', '.join(UPLOAD_DATE_WINDOWS)}"
            )
        if upload_date in UPLOAD_DATE_WINDOWS:
            params["publishedAfter"] = format_timestamp((now or _utcnow()) - UPLOAD_DATE_WINDOWS[upload_date])

    sort_by = _get(filters, "sort_by", "sortBy")
    if sort_by is not None:
        if sort_by not in SORT_BY_ORDER:
            raise ToolValidationError(
                f"Invalid sortBy: {sort_by}. Valid values are: {', '.join(SORT_BY_ORDER)}"
            )
        params["order"] = SORT_BY_ORDER[sort_by]

    duration = _get(filters, "duration")
    if duration is not None:
        if duration != "any" and duration not in VALID_DURATIONS:
            raise ToolValidationError(
                f"Invalid duration: {duration}. Valid values are: any, {', '.join(VALID_DURATIONS)}"
            )
        if duration != "any":
            params["videoDuration"] = duration

    return params


def check_parameter_conflicts(params: Any, filter_params: Mapping[str, Any]) -> None:
    """Refuse to guess when a filter and an explicit parameter disagree."""
    filters = _get(params, "filters")
    search_type = _get(params, "type")

    published_after = _get(params, "published_after", "publishedAfter")
    if published_after is not None and _get(filters, "upload_date", "uploadDate") is not None:
        raise ParameterConflictError(
            "Conflicting parameters: both 'publishedAfter' and 'filters.uploadDate' are specified"
        )

    order = _get(params, "order")
    if order is not None and "order" in filter_params and order != filter_params["order"]:
        raise ParameterConflictError(
            f"Conflicting parameters: 'order' is '{order}' but filters.sortBy implies '{filter_params['order']}'"
        )

    duration = _get(params, "video_duration", "videoDuration")
    if duration == "any":
        duration = None
    if duration is not None and "videoDuration" in filter_params and duration != filter_params["videoDuration"]:
        raise ParameterConflictError(
            f"Conflicting parameters: 'videoDuration' is '{duration}' but filters.duration is "
            f"'{filter_params['videoDuration']}'"
        )

    if search_type and search_type != "video":
        if duration is not None:
            raise ToolValidationError("videoDuration can only be used when searching for videos (type='video')")
        if "videoDuration" in filter_params:
            raise ToolValidationError("filters.duration can only be used when searching for videos (type='video')")


# ============================================================================
# QUERY BUILDER
# ============================================================================


def build_search_params(params: Any, now: datetime | None = None) -> dict[str, Any]:
    """Validate a unified search request and build the upstream query.

    Accepts a UnifiedSearchInput model or an equivalent camelCase mapping.
    Raises ToolValidationError / ParameterConflictError; nothing is fetched.
    """
    query = _get(params, "query")
    channel_id = _get(params, "channel_id", "channelId")
    search_type = _get(params, "type")
    max_results = _get(params, "max_results", "maxResults")
    order = _get(params, "order")
    video_duration = _get(params, "video_duration", "videoDuration")
    region_code = _get(params, "region_code", "regionCode")
    safe_search = _get(params, "safe_search", "safeSearch")
    page_token = _get(params, "page_token", "pageToken")

    # conflicts win over every other validation error
    filter_params = map_filters_to_params(_get(params, "filters"), now=now)
    check_parameter_conflicts(params, filter_params)

    validate_search_query(query, channel_id)
    validate_max_results(max_results)

    if search_type is not None and search_type not in RESOURCE_TYPES:
        raise ToolValidationError(
            f"Invalid type: {search_type}. Valid values are: {', '.join(RESOURCE_TYPES)}"
        )
    if order is not None and order not in VALID_ORDERS:
        raise ToolValidationError(f"Invalid order: {order}. Valid values are: {', '.join(VALID_ORDERS)}")
    if video_duration == "any":
        video_duration = None
    if video_duration is not None and video_duration not in VALID_DURATIONS:
        raise ToolValidationError(
            f"Invalid videoDuration: {video_duration}. Valid values are: {', '.join(VALID_DURATIONS)}"
        )
    if region_code is not None and (not isinstance(region_code, str) or len(region_code) != 2):
        raise ToolValidationError("regionCode must be a 2-letter ISO country code")
    if safe_search is not None and safe_search not in VALID_SAFE_SEARCH:
        raise ToolValidationError(
            f"Invalid safeSearch: {safe_search}. Valid values are: {', '.join(VALID_SAFE_SEARCH)}"
        )
    if page_token is not None and not isinstance(page_token, str):
        raise ToolValidationError("pageToken must be a string")

    published_after = _get(params, "published_after", "publishedAfter") or filter_params.get("publishedAfter")
    published_before = _get(params, "published_before", "publishedBefore")
    validate_date_range(published_after, published_before, now=now)

    validate_enrichment_parts(_get(params, "enrich_parts", "enrichParts"), search_type or "video")

    search_params = {
        "part": "snippet",
        "q": query,
        "channelId": channel_id,
        "type": search_type or "video",
        "maxResults": max_results or 10,
        "order": order or filter_params.get("order") or "relevance",
        "publishedAfter": published_after,
        "publishedBefore": published_before,
        "videoDuration": video_duration or filter_params.get("videoDuration"),
        "regionCode": region_code,
        "safeSearch": safe_search or "moderate",
        "pageToken": page_token,
    }
    return strip_none_values(search_params)


def strip_none_values(values: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}
