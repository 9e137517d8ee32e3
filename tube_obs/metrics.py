"""
Prometheus Metrics Registration.

Tool execution and upstream quota metrics.
"""

from prometheus_client import Counter, Histogram

# ============================================================================
# COUNTERS
# ============================================================================

tool_executions_total = Counter(
    "tool_executions_total",
    "Total tool executions",
    ["tool_name", "status"],  # success, failure
)

quota_units_total = Counter(
    "quota_units_total",
    "Upstream quota units reported by tool executions",
    ["tool_name"],
)

upstream_calls_total = Counter(
    "upstream_calls_total",
    "Upstream YouTube API calls",
    ["operation"],  # search.list, videos.list, ...
)

# ============================================================================
# HISTOGRAMS
# ============================================================================

tool_execution_duration = Histogram(
    "tool_execution_duration_seconds",
    "Tool execution duration",
    ["tool_name"],
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)
