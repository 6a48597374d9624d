"""Prometheus metrics for storage accounting.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram, Gauge

# Recalculation runs
storage_recalculations_total = Counter(
    "studio_storage_recalculations_total",
    "Total storage recalculation runs",
    ["status"]  # status: success|not_found|cancelled|persist_error|catalog_error
)

storage_recalculation_duration_seconds = Histogram(
    "studio_storage_recalculation_duration_seconds",
    "Time spent on one storage recalculation in seconds",
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0]
)

# Blob store degradation (each failure undercounts the total)
storage_blob_failures_total = Counter(
    "studio_storage_blob_failures_total",
    "Blob store operations that failed during accounting",
    ["operation"]  # operation: list|get_size
)

# Latest computed usage per studio
storage_studio_total_bytes = Gauge(
    "studio_storage_total_bytes",
    "Total bytes used by a studio as of its last recalculation",
    ["studio_id"]
)

storage_collector_bytes = Gauge(
    "studio_storage_collector_bytes",
    "Bytes counted by one collector in the last recalculation of a studio",
    ["studio_id", "kind"]
)
