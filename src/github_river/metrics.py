"""
Prometheus metrics definitions for github-river.

Counters for fetch outcomes, pages, documents and purges, plus cycle
duration and freshness. Naming: snake_case, github_river_ prefix.
"""

from prometheus_client import Counter, Gauge, Histogram

# ==============================================================================
# COUNTERS
# ==============================================================================

fetch_total = Counter(
    "github_river_fetch_total",
    "Paginated fetch calls by outcome",
    ["kind", "outcome"],
    # outcome: success, not_found, failed
)

pages_total = Counter(
    "github_river_pages_total",
    "Pages fetched from the GitHub API",
    ["kind"],
)

documents_total = Counter(
    "github_river_documents_total",
    "Documents submitted to the document store",
    ["kind", "status"],
    # status: written, skipped, failed
)

purges_total = Counter(
    "github_river_purges_total",
    "Volatile kind purges",
    ["kind", "status"],
    # status: success, failed
)

cycles_total = Counter(
    "github_river_cycles_total",
    "Completed sync cycles",
)

# ==============================================================================
# GAUGES / HISTOGRAMS
# ==============================================================================

last_cycle_timestamp = Gauge(
    "github_river_last_cycle_timestamp_seconds",
    "Unix time the last sync cycle completed",
)

cycle_duration_seconds = Histogram(
    "github_river_cycle_duration_seconds",
    "Duration of a full sync cycle",
    buckets=[1, 5, 15, 30, 60, 120, 300, 600, 1800, 3600],
)
