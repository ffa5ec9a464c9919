"""Observability for the portal backend.

Provides structured logging, job run correlation and metrics.
"""

from .logging_config import configure_logging, JSONFormatter, RunIDFilter
from .metrics import (
    retention_records_transitioned_total,
    retention_failures_total,
    retention_job_duration_seconds,
)
from .run_context import run_id_var, get_run_id, set_run_id, generate_run_id

__all__ = [
    # Logging
    "configure_logging",
    "JSONFormatter",
    "RunIDFilter",
    # Metrics
    "retention_records_transitioned_total",
    "retention_failures_total",
    "retention_job_duration_seconds",
    # Run correlation
    "run_id_var",
    "get_run_id",
    "set_run_id",
    "generate_run_id",
]
