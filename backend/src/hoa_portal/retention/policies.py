"""Retention policy table.

Static, read-only mapping from record category (and, for ARB requests,
status) to a retention duration and the timestamp the record's age is
measured from.

Lifecycle:
    Active (deleted_at IS NULL) -> SoftDeleted (deleted_at set) -> Purged (row removed)

Categories without a soft-delete column are covered by the direct expiry
table instead and are hard-deleted once past retention.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from ..models.arb_request import ArbRequestStatus


class RecordCategory(str, Enum):
    """Record categories managed by the retention engine."""
    ARB_REQUEST = "arb_request"
    ARB_AUDIT_LOG = "arb_audit_log"
    AUTH_AUDIT_LOG = "auth_audit_log"
    SECURITY_EVENT = "security_event"
    CONTACT_SUBMISSION = "contact_submission"


class ReferenceField(str, Enum):
    """Timestamp a policy measures record age from."""

    CREATED = "created"
    """The category's creation timestamp."""

    DECIDED_OR_CREATED = "decided_or_created"
    """decided_at when set, otherwise the creation timestamp."""


AUDIT_LOG_RETENTION_DAYS = 7 * 365
DEFAULT_PURGE_GRACE_PERIOD_DAYS = 30

# Categories sharing the soft-delete mechanism, in purge order
SOFT_DELETE_CATEGORIES: Tuple[RecordCategory, ...] = (
    RecordCategory.ARB_REQUEST,
    RecordCategory.ARB_AUDIT_LOG,
)


@dataclass(frozen=True)
class RetentionPolicy:
    """How long an active record of one category/status is kept.

    Attributes:
        category: Record category the policy applies to
        retention_days: Maximum age in days before soft deletion
        status: Status value the policy is scoped to (None = whole category)
        reference_field: Timestamp the age is measured from
        description: Why this duration was chosen
    """
    category: RecordCategory
    retention_days: int
    status: Optional[str] = None
    reference_field: ReferenceField = ReferenceField.CREATED
    description: str = ""

    def __post_init__(self):
        if self.retention_days < 0:
            raise ValueError(
                f"retention_days must be non-negative, got {self.retention_days} for {self.name}"
            )

    @property
    def key(self) -> Tuple[RecordCategory, Optional[str]]:
        return (self.category, self.status)

    @property
    def name(self) -> str:
        if self.status is None:
            return self.category.value
        return f"{self.category.value}:{self.status}"


@dataclass(frozen=True)
class ExpiryPolicy:
    """Hard-delete policy for categories with no soft-delete stage.

    conditions are extra equality predicates (e.g. only resolved events).
    """
    category: RecordCategory
    retention_days: int
    conditions: Dict[str, Any] = field(default_factory=dict)
    description: str = ""

    def __post_init__(self):
        if self.retention_days < 0:
            raise ValueError(
                f"retention_days must be non-negative, got {self.retention_days} for {self.category.value}"
            )
        if self.category in SOFT_DELETE_CATEGORIES:
            raise ValueError(
                f"{self.category.value} uses soft deletion; use a RetentionPolicy instead"
            )

    @property
    def name(self) -> str:
        return self.category.value


def validate_policy_table(policies: Iterable[RetentionPolicy]) -> Tuple[RetentionPolicy, ...]:
    """Check that a policy table is well-formed.

    Rules:
    - exactly one policy per (category, status)
    - if any ARB request policy exists, every ArbRequestStatus is covered

    Returns:
        The policies as a tuple

    Raises:
        ValueError: On duplicate keys or uncovered ARB statuses
    """
    table = tuple(policies)
    seen = set()
    for policy in table:
        if policy.key in seen:
            raise ValueError(f"Duplicate retention policy for {policy.name}")
        seen.add(policy.key)

    arb_statuses = {
        status for category, status in seen if category == RecordCategory.ARB_REQUEST
    }
    if arb_statuses and None not in arb_statuses:
        missing = [s.value for s in ArbRequestStatus if s.value not in arb_statuses]
        if missing:
            raise ValueError(f"No retention policy for ARB request statuses: {missing}")

    return table


RETENTION_POLICIES: Tuple[RetentionPolicy, ...] = validate_policy_table([
    RetentionPolicy(
        category=RecordCategory.ARB_REQUEST,
        status=ArbRequestStatus.APPROVED.value,
        retention_days=7 * 365,
        reference_field=ReferenceField.DECIDED_OR_CREATED,
        description="Legal/audit hold, 7 years from decision",
    ),
    RetentionPolicy(
        category=RecordCategory.ARB_REQUEST,
        status=ArbRequestStatus.REJECTED.value,
        retention_days=7 * 365,
        reference_field=ReferenceField.DECIDED_OR_CREATED,
        description="Legal/audit hold, 7 years from decision",
    ),
    RetentionPolicy(
        category=RecordCategory.ARB_REQUEST,
        status=ArbRequestStatus.CANCELLED.value,
        retention_days=365,
        description="Withdrawn requests, 1 year",
    ),
    RetentionPolicy(
        category=RecordCategory.ARB_REQUEST,
        status=ArbRequestStatus.PENDING.value,
        retention_days=365,
        description="Never submitted or cancelled, 1 year",
    ),
    RetentionPolicy(
        category=RecordCategory.ARB_REQUEST,
        status=ArbRequestStatus.IN_REVIEW.value,
        retention_days=365,
        description="Never decided, 1 year",
    ),
    RetentionPolicy(
        category=RecordCategory.ARB_AUDIT_LOG,
        retention_days=AUDIT_LOG_RETENTION_DAYS,
        description="ARB audit trail, 7 years",
    ),
])


EXPIRY_POLICIES: Tuple[ExpiryPolicy, ...] = (
    ExpiryPolicy(
        category=RecordCategory.AUTH_AUDIT_LOG,
        retention_days=365,
        description="Authentication audit log, 1 year",
    ),
    ExpiryPolicy(
        category=RecordCategory.SECURITY_EVENT,
        retention_days=730,
        conditions={"resolved": True},
        description="Resolved security events, 2 years",
    ),
    ExpiryPolicy(
        category=RecordCategory.CONTACT_SUBMISSION,
        retention_days=365,
        description="Contact form submissions, 1 year (same cutoff as the board report)",
    ),
)


def get_policy(
    category: RecordCategory,
    status: Optional[str] = None,
    policies: Iterable[RetentionPolicy] = RETENTION_POLICIES,
) -> RetentionPolicy:
    """Look up the policy for a category/status.

    Raises:
        KeyError: If no policy matches
    """
    for policy in policies:
        if policy.key == (category, status):
            return policy
    raise KeyError(f"No retention policy for {category.value}:{status}")
