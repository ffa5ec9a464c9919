"""Data retention and staged deletion.

Records move through Active -> SoftDeleted -> Purged:
- Policy table deciding retention per category/status
- Soft-delete sweep with per-policy failure isolation
- Irreversible purge after a grace period
- Direct expiry for categories without soft delete
- Preview reports

Service and tasks are not re-exported; tasks import the database
engine at import time:
    from hoa_portal.retention.service import RetentionService
    from hoa_portal.retention.tasks import retention_sweep_task
"""

from .cutoff import calculate_cutoff, utcnow
from .exceptions import (
    ConstraintViolation,
    PartialBatchFailure,
    RetentionStoreError,
    StoreUnavailable,
)
from .policies import (
    AUDIT_LOG_RETENTION_DAYS,
    DEFAULT_PURGE_GRACE_PERIOD_DAYS,
    EXPIRY_POLICIES,
    RETENTION_POLICIES,
    ExpiryPolicy,
    RecordCategory,
    ReferenceField,
    RetentionPolicy,
    get_policy,
    validate_policy_table,
)
from .schemas import (
    ExpiryResult,
    PurgeResult,
    RetentionReport,
    RetentionStatistics,
    SweepResult,
)

__all__ = [
    "calculate_cutoff",
    "utcnow",
    "ConstraintViolation",
    "PartialBatchFailure",
    "RetentionStoreError",
    "StoreUnavailable",
    "AUDIT_LOG_RETENTION_DAYS",
    "DEFAULT_PURGE_GRACE_PERIOD_DAYS",
    "EXPIRY_POLICIES",
    "RETENTION_POLICIES",
    "ExpiryPolicy",
    "RecordCategory",
    "ReferenceField",
    "RetentionPolicy",
    "get_policy",
    "validate_policy_table",
    "ExpiryResult",
    "PurgeResult",
    "RetentionReport",
    "RetentionStatistics",
    "SweepResult",
]
