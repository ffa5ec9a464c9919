"""Prometheus metrics for the retention engine.

Defines operational metrics for monitoring and alerting on retention jobs.
"""

from prometheus_client import Counter, Histogram

# Lifecycle transitions
retention_records_transitioned_total = Counter(
    "hoa_retention_records_transitioned_total",
    "Records moved through the retention lifecycle",
    ["category", "transition"]  # transition: soft_deleted|purged|expired
)

retention_failures_total = Counter(
    "hoa_retention_failures_total",
    "Retention operations that failed and were skipped",
    ["category", "operation"]  # operation: sweep|purge|expire|soft_delete_record|report
)

retention_job_duration_seconds = Histogram(
    "hoa_retention_job_duration_seconds",
    "Time spent running a retention job in seconds",
    ["job"],  # job: sweep|purge
    buckets=[0.1, 0.5, 1.0, 5.0, 15.0, 60.0, 300.0, 900.0]
)
