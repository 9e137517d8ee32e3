"""Batch enrichment of search stubs.

Search results only carry identifiers and a thin snippet. Enrichment fetches
the full records through the list-by-id endpoints, at most 50 ids per call,
and folds them back into the stubs without changing their order.
"""

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from tube_config.settings import YOUTUBE_API_BATCH_SIZE, get_settings
from tube_obs.logging import get_logger
from tube_tools.adapters.youtube.schemas import RECORD_MODELS
from tube_tools.errors import ToolValidationError, UpstreamError
from tube_tools.quota import LIST_OPERATION_BY_TYPE, QuotaLedger
from tube_tools.validation import RESOURCE_TYPES, validate_parts

logger = get_logger(__name__)

# Client coroutine per resource type.
_FETCHERS = {
    "video": "get_videos",
    "channel": "get_channels",
    "playlist": "get_playlists",
}


def _check_type(resource_type: str) -> None:
    if resource_type not in RESOURCE_TYPES:
        raise ToolValidationError(
            f"Invalid resource type: {resource_type}. Must be one of: {', '.join(RESOURCE_TYPES)}"
        )


def parse_record(resource_type: str, item: Mapping[str, Any]) -> Any:
    """Validate one upstream record; a malformed record is an upstream fault."""
    model = RECORD_MODELS[resource_type]
    try:
        return model.model_validate(item)
    except ValidationError as e:
        raise UpstreamError(
            f"{LIST_OPERATION_BY_TYPE[resource_type]} returned a malformed {resource_type} record: "
            f"{e.error_count()} invalid field(s)"
        ) from e


def get_enrichment_parts(
    enrich_parts: Mapping[str, Sequence[str]] | None,
    resource_type: str,
) -> list[str] | None:
    """Resolve which parts to request for one resource type.

    None when the type is absent (skip enrichment), the configured defaults
    when its list is empty, otherwise the requested parts after allow-list
    validation.
    """
    _check_type(resource_type)
    if enrich_parts is None or resource_type not in enrich_parts:
        return None

    requested = enrich_parts[resource_type]
    if requested is None:
        return None
    if isinstance(requested, (list, tuple)) and len(requested) == 0:
        return get_settings().default_parts_for(resource_type)

    return validate_parts(resource_type, requested)


def extract_resource_ids(stubs: Sequence[Mapping[str, Any]], resource_type: str) -> list[str]:
    """Pull ids in stub order, skipping stubs without a usable id."""
    _check_type(resource_type)
    id_key = f"{resource_type}Id"

    ids = []
    for stub in stubs:
        ref = stub.get("id") if isinstance(stub, Mapping) else None
        if not isinstance(ref, Mapping):
            continue
        value = ref.get(id_key)
        if isinstance(value, str) and value.strip():
            ids.append(value)
    return ids


def batch_array(items: Sequence[Any], batch_size: int = YOUTUBE_API_BATCH_SIZE) -> list[list[Any]]:
    """Split into contiguous chunks of at most batch_size."""
    if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size <= 0:
        raise ValueError("Batch size must be a positive integer")
    return [list(items[i:i + batch_size]) for i in range(0, len(items), batch_size)]


async def _enrich(
    client: Any,
    resource_type: str,
    ids: Sequence[str],
    parts: Sequence[str],
    ledger: QuotaLedger | None = None,
    batch_size: int | None = None,
    concurrency: int | None = None,
) -> dict[str, Any]:
    """Fetch full records for ids, one list call per batch."""
    if not parts:
        raise ToolValidationError("At least one part must be specified")
    if not ids:
        return {}

    settings = get_settings()
    batches = batch_array(list(ids), batch_size or settings.ENRICHMENT_BATCH_SIZE)
    fetch = getattr(client, _FETCHERS[resource_type])
    operation = LIST_OPERATION_BY_TYPE[resource_type]
    part = ",".join(parts)

    async def fetch_batch(batch: list[str]) -> list[Any]:
        # charged once sent, whether or not the call succeeds
        if ledger is not None:
            ledger.charge(operation)
        response = await fetch({"part": part, "id": ",".join(batch)})
        items = (response or {}).get("items") or []
        if not isinstance(items, list):
            raise UpstreamError(f"{operation} returned an invalid response: expected a list of items")
        return items

    limit = concurrency or settings.ENRICHMENT_CONCURRENCY
    if limit <= 1 or len(batches) == 1:
        results = [await fetch_batch(batch) for batch in batches]
    else:
        semaphore = asyncio.Semaphore(limit)

        async def bounded(batch: list[str]) -> list[Any]:
            async with semaphore:
                return await fetch_batch(batch)

        tasks = [asyncio.ensure_future(bounded(batch)) for batch in batches]
        try:
            # gather keeps batch order regardless of completion order
            results = await asyncio.gather(*tasks)
        except Exception:
            # no batch may outlive the call or charge the ledger afterwards
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    enriched: dict[str, Any] = {}
    for items in results:
        for item in items:
            if isinstance(item, Mapping) and item.get("id"):
                enriched[item["id"]] = parse_record(resource_type, item)

    logger.debug(
        "enrichment_fetched",
        resource_type=resource_type,
        requested=len(ids),
        found=len(enriched),
        batches=len(batches),
    )
    return enriched


async def enrich_videos(client, video_ids, parts, ledger=None, **kwargs) -> dict[str, Any]:
    return await _enrich(client, "video", video_ids, parts, ledger, **kwargs)


async def enrich_channels(client, channel_ids, parts, ledger=None, **kwargs) -> dict[str, Any]:
    return await _enrich(client, "channel", channel_ids, parts, ledger, **kwargs)


async def enrich_playlists(client, playlist_ids, parts, ledger=None, **kwargs) -> dict[str, Any]:
    return await _enrich(client, "playlist", playlist_ids, parts, ledger, **kwargs)


_ENRICHERS = {
    "video": enrich_videos,
    "channel": enrich_channels,
    "playlist": enrich_playlists,
}


def _record_fields(record: Any) -> dict[str, Any]:
    if hasattr(record, "to_api"):
        return record.to_api()
    return dict(record)


def merge_enriched_data(
    stubs: Sequence[Mapping[str, Any]],
    enriched: Mapping[str, Any],
    resource_type: str,
) -> list[Any]:
    """Fold records into matching stubs; same length, same order.

    A matched stub's fields are superseded by the record's, except the
    stub's typed id object, which is kept. Unmatched stubs pass through.
    """
    _check_type(resource_type)
    id_key = f"{resource_type}Id"

    merged = []
    for stub in stubs:
        ref = stub.get("id") if isinstance(stub, Mapping) else None
        rid = ref.get(id_key) if isinstance(ref, Mapping) else None
        if isinstance(rid, str) and rid in enriched:
            fields = _record_fields(enriched[rid])
            fields.pop("id", None)
            merged.append({**stub, **fields, "id": ref})
        else:
            merged.append(stub)
    return merged


async def perform_enrichment(
    client: Any,
    stubs: Sequence[Mapping[str, Any]],
    enrich_parts: Mapping[str, Sequence[str]] | None,
    resource_type: str,
    ledger: QuotaLedger | None = None,
) -> list[Any]:
    """Enrich stubs of one resource type according to an enrichment request.

    Makes no upstream call when the type is not requested or there is
    nothing to enrich.
    """
    parts = get_enrichment_parts(enrich_parts, resource_type)
    if parts is None or not stubs:
        return stubs if isinstance(stubs, list) else list(stubs)

    ids = extract_resource_ids(stubs, resource_type)
    if not ids:
        return stubs if isinstance(stubs, list) else list(stubs)

    enriched = await _ENRICHERS[resource_type](client, ids, parts, ledger)
    return merge_enriched_data(stubs, enriched, resource_type)
