"""Observability module.

Provides structured logging, Prometheus metrics, request IDs and health checks.
"""

from .logging_config import configure_logging, get_logger
from .metrics import (
    storage_blob_failures_total,
    storage_collector_bytes,
    storage_recalculation_duration_seconds,
    storage_recalculations_total,
    storage_studio_total_bytes,
)
from .request_id import (
    request_id_var,
    get_request_id,
    set_request_id,
    generate_request_id,
    request_id_scope,
)
from .health import HealthStatus, ComponentHealth
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "storage_blob_failures_total",
    "storage_collector_bytes",
    "storage_recalculation_duration_seconds",
    "storage_recalculations_total",
    "storage_studio_total_bytes",
    # Request ID
    "request_id_var",
    "get_request_id",
    "set_request_id",
    "generate_request_id",
    "request_id_scope",
    # Health
    "HealthStatus",
    "ComponentHealth",
    # Middleware
    "RequestIDMiddleware",
]
