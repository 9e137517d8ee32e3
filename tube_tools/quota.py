"""Quota accounting.

Advisory only: the ledger records what a call actually spent and the budget
report projects call volumes, but nothing here ever blocks a call.

Costs follow https://developers.google.com/youtube/v3/determine_quota_cost
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tube_config.settings import YOUTUBE_API_BATCH_SIZE

API_QUOTA_COSTS: dict[str, int] = {
    "search.list": 100,
    "videos.list": 1,
    "channels.list": 1,
    "playlists.list": 1,
    "playlistItems.list": 1,
    "commentThreads.list": 1,
    "channelSections.list": 1,
}

LIST_OPERATION_BY_TYPE = {
    "video": "videos.list",
    "channel": "channels.list",
    "playlist": "playlists.list",
}

# (tier, lower bound inclusive, upper bound inclusive)
QUOTA_TIERS: tuple[tuple[str, float, float], ...] = (
    ("free", 0, 0),
    ("low", 1, 50),
    ("medium", 51, 150),
    ("high", 151, math.inf),
)


@dataclass
class QuotaEntry:
    operation: str
    units: float


@dataclass
class QuotaLedger:
    """Per-call accumulator of quota units."""

    entries: list[QuotaEntry] = field(default_factory=list)

    def charge(self, operation: str, units: float | None = None) -> float:
        """Record one operation; units default to the operation's API cost."""
        if units is None:
            units = API_QUOTA_COSTS[operation]
        if units < 0:
            raise ValueError("Quota units cannot be negative")
        self.entries.append(QuotaEntry(operation=operation, units=units))
        return units

    def merge(self, operation: str, metadata: Any) -> float:
        """Fold a chained call's reported quotaUsed into this ledger."""
        units = getattr(metadata, "quota_used", 0) if metadata is not None else 0
        return self.charge(operation, units or 0)

    @property
    def total(self) -> float:
        return sum(entry.units for entry in self.entries)

    @property
    def call_count(self) -> int:
        return len(self.entries)

    def by_operation(self) -> dict[str, float]:
        totals: dict[str, float] = {}
        for entry in self.entries:
            totals[entry.operation] = totals.get(entry.operation, 0) + entry.units
        return totals


def calculate_search_quota(
    max_results: int | None,
    enrich_parts: Mapping[str, list[str]] | None,
    resource_type: str = "video",
    batch_size: int = YOUTUBE_API_BATCH_SIZE,
) -> int:
    """Estimate the quota of one search plus any requested enrichment.

    Enrichment costs one list call per batch of ids for the searched type.
    """
    total = API_QUOTA_COSTS["search.list"]

    if enrich_parts is not None and resource_type in enrich_parts:
        num_batches = math.ceil((max_results or 10) / batch_size)
        total += num_batches * API_QUOTA_COSTS[LIST_OPERATION_BY_TYPE[resource_type]]

    return total


def quota_tier(cost: float) -> str:
    """Bucket a declared cost into free/low/medium/high."""
    # fractional costs between tier bounds round up
    for tier, _, high in QUOTA_TIERS:
        if cost <= high:
            return tier
    return QUOTA_TIERS[-1][0]


@dataclass
class ToolBudget:
    name: str
    quota_cost: float
    tier: str
    daily_calls: int | None


@dataclass
class QuotaBudget:
    """Advisory budget report over a registered tool set."""

    daily_limit: int
    tools: list[ToolBudget]

    @classmethod
    def from_descriptors(cls, descriptors: Iterable[Any], daily_limit: int) -> "QuotaBudget":
        tools = []
        for descriptor in descriptors:
            cost = descriptor.quota_cost or 0
            daily_calls = int(daily_limit // cost) if cost > 0 else None
            tools.append(
                ToolBudget(
                    name=descriptor.name,
                    quota_cost=cost,
                    tier=quota_tier(cost),
                    daily_calls=daily_calls,
                )
            )
        tools.sort(key=lambda t: (-t.quota_cost, t.name))
        return cls(daily_limit=daily_limit, tools=tools)

    @property
    def total_declared(self) -> float:
        return sum(t.quota_cost for t in self.tools)

    def tiers(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {tier: [] for tier, _, _ in QUOTA_TIERS}
        for tool in self.tools:
            grouped[tool.tier].append(tool.name)
        return grouped

    def full_runs_per_day(self) -> int | None:
        """How many times every tool could run once within the daily limit."""
        if self.total_declared <= 0:
            return None
        return int(self.daily_limit // self.total_declared)

    def as_dict(self) -> dict[str, Any]:
        return {
            "dailyLimit": self.daily_limit,
            "totalDeclared": self.total_declared,
            "fullRunsPerDay": self.full_runs_per_day(),
            "tiers": self.tiers(),
            "tools": [
                {
                    "name": t.name,
                    "quotaCost": t.quota_cost,
                    "tier": t.tier,
                    "dailyCalls": t.daily_calls,
                }
                for t in self.tools
            ],
        }
