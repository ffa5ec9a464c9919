"""Retention service for data lifecycle operations.

This service implements the core retention logic:
- Soft-delete records that exceeded their policy's retention
- Soft-delete a single record on explicit user request
- Hard-delete soft-deleted records past the grace period (purge)
- Hard-delete expired records in categories without soft delete
- Preview reports of eligible records

Every batch operation is idempotent and can be safely retried. Failures
are isolated per policy and per store: they are logged, counted and
skipped, never raised to the caller.
"""

import logging
import time
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional

from sqlalchemy.orm import Session

from ..observability.metrics import (
    retention_failures_total,
    retention_job_duration_seconds,
    retention_records_transitioned_total,
)
from .cutoff import calculate_cutoff, utcnow
from .policies import (
    AUDIT_LOG_RETENTION_DAYS,
    DEFAULT_PURGE_GRACE_PERIOD_DAYS,
    EXPIRY_POLICIES,
    RETENTION_POLICIES,
    SOFT_DELETE_CATEGORIES,
    ExpiryPolicy,
    RecordCategory,
    RetentionPolicy,
)
from .schemas import (
    DEFAULT_ANOMALY_THRESHOLD,
    ExpiryResult,
    PurgeResult,
    RetentionReport,
    RetentionStatistics,
    SweepResult,
)
from .store import RecordFilter, RecordStorePort, SqlAlchemyRecordStore

logger = logging.getLogger(__name__)


class RetentionService:
    """Service for executing retention lifecycle operations.

    Holds no state between calls besides its collaborators: the record
    store and a clock returning naive UTC datetimes.
    """

    def __init__(
        self,
        store: RecordStorePort,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize retention service.

        Args:
            store: Record store the batches are issued against
            clock: Source of the current instant (naive UTC)
        """
        self.store = store
        self.clock = clock

    def soft_delete_expired(self, policy: RetentionPolicy, now: Optional[datetime] = None) -> int:
        """Soft-delete active records that exceeded ``policy``.

        A record matches when its reference timestamp is strictly older
        than the cutoff and deleted_at is NULL. Re-running with the same
        cutoff marks nothing further.

        Args:
            policy: Policy to apply
            now: Sweep time, stamped into deleted_at

        Returns:
            Number of records soft-deleted

        Raises:
            RetentionStoreError: If the store operation fails
        """
        now = now or self.clock()
        cutoff = calculate_cutoff(now, policy.retention_days)
        equals = {"status": policy.status} if policy.status is not None else {}

        deleted = self.store.update(
            policy.category,
            RecordFilter.active_older_than(policy.reference_field, cutoff, **equals),
            {"deleted_at": now},
        )

        if deleted:
            retention_records_transitioned_total.labels(
                category=policy.category.value, transition="soft_deleted"
            ).inc(deleted)

        logger.info(
            f"Soft-deleted {deleted} records for policy {policy.name}",
            extra={"policy": policy.name, "cutoff": cutoff.isoformat(), "deleted": deleted}
        )
        return deleted

    def soft_delete_record(
        self,
        category: RecordCategory,
        record_id: str,
        now: Optional[datetime] = None,
    ) -> bool:
        """Soft-delete one record (e.g. a homeowner withdrawing a request).

        Returns:
            True if the record was active and is now soft-deleted, False if it
            was missing, already deleted, or the store failed
        """
        now = now or self.clock()
        try:
            changed = self.store.update(
                category,
                RecordFilter.active_record(record_id),
                {"deleted_at": now},
            )
        except Exception:
            logger.error(
                f"Failed to soft delete {category.value} {record_id}",
                exc_info=True,
                extra={"category": category.value, "record_id": record_id}
            )
            retention_failures_total.labels(
                category=category.value, operation="soft_delete_record"
            ).inc()
            return False

        if changed:
            retention_records_transitioned_total.labels(
                category=category.value, transition="soft_deleted"
            ).inc(changed)
        return changed > 0

    def soft_delete_request(self, request_id: str, now: Optional[datetime] = None) -> bool:
        """Soft-delete one ARB request."""
        return self.soft_delete_record(RecordCategory.ARB_REQUEST, request_id, now=now)

    def soft_delete_old_audit_logs(
        self,
        retention_days: int = AUDIT_LOG_RETENTION_DAYS,
        now: Optional[datetime] = None,
    ) -> int:
        """Soft-delete ARB audit log entries older than ``retention_days``.

        Standalone variant of the audit log policy with an overridable
        duration. Returns 0 if the store fails.
        """
        policy = RetentionPolicy(
            category=RecordCategory.ARB_AUDIT_LOG,
            retention_days=retention_days,
        )
        try:
            return self.soft_delete_expired(policy, now=now)
        except Exception:
            logger.error(
                "Failed to soft delete old audit logs",
                exc_info=True,
                extra={"policy": policy.name}
            )
            retention_failures_total.labels(
                category=policy.category.value, operation="sweep"
            ).inc()
            return 0

    def apply_retention_policies(
        self,
        policies: Iterable[RetentionPolicy] = RETENTION_POLICIES,
        now: Optional[datetime] = None,
    ) -> SweepResult:
        """Apply every retention policy once.

        Policies run sequentially against the same sweep time. A policy
        that fails is logged and counted; later policies still run. There
        is no rollback across policies.

        Returns:
            SweepResult with total_deleted and error_count
        """
        now = now or self.clock()
        total_deleted = 0
        per_policy: Dict[str, int] = {}
        failed = []

        for policy in policies:
            try:
                deleted = self.soft_delete_expired(policy, now=now)
            except Exception:
                logger.error(
                    f"Failed to apply retention policy for {policy.name}",
                    exc_info=True,
                    extra={"policy": policy.name}
                )
                retention_failures_total.labels(
                    category=policy.category.value, operation="sweep"
                ).inc()
                failed.append(policy.name)
                continue

            per_policy[policy.name] = deleted
            total_deleted += deleted

        result = SweepResult(
            total_deleted=total_deleted,
            error_count=len(failed),
            per_policy=per_policy,
            failed_policies=failed,
        )

        logger.info(
            "Retention sweep completed",
            extra={"deleted": result.total_deleted, "errors": result.error_count}
        )
        return result

    def permanently_delete_old_records(
        self,
        grace_period_days: int = DEFAULT_PURGE_GRACE_PERIOD_DAYS,
        now: Optional[datetime] = None,
    ) -> PurgeResult:
        """Permanently delete records soft-deleted longer than the grace period.

        This is a destructive, irreversible operation. It must only be
        reached from the privileged purge job or the operator CLI.

        Each soft-delete category is purged independently; a failure in
        one does not stop the others.

        Raises:
            ValueError: If grace_period_days is negative (before any I/O)
        """
        now = now or self.clock()
        cutoff = calculate_cutoff(now, grace_period_days)
        counts = {category: 0 for category in SOFT_DELETE_CATEGORIES}
        errors = 0

        logger.warning(
            f"Purging records soft-deleted before {cutoff.isoformat()}",
            extra={"cutoff": cutoff.isoformat()}
        )

        for category in SOFT_DELETE_CATEGORIES:
            try:
                counts[category] = self.store.delete(
                    category, RecordFilter.soft_deleted_before(cutoff)
                )
            except Exception:
                logger.error(
                    f"Failed to permanently delete old {category.value} records",
                    exc_info=True,
                    extra={"category": category.value}
                )
                retention_failures_total.labels(
                    category=category.value, operation="purge"
                ).inc()
                errors += 1
                continue

            if counts[category]:
                retention_records_transitioned_total.labels(
                    category=category.value, transition="purged"
                ).inc(counts[category])

        result = PurgeResult(
            requests=counts[RecordCategory.ARB_REQUEST],
            audit_logs=counts[RecordCategory.ARB_AUDIT_LOG],
            errors=errors,
            grace_period_days=grace_period_days,
        )

        logger.warning(
            f"Purge completed: {result.requests} requests, {result.audit_logs} audit logs",
            extra={"deleted": result.total_purged, "errors": result.errors}
        )
        return result

    def delete_expired_records(
        self,
        policies: Iterable[ExpiryPolicy] = EXPIRY_POLICIES,
        now: Optional[datetime] = None,
    ) -> ExpiryResult:
        """Hard-delete expired rows in categories that have no soft-delete stage."""
        now = now or self.clock()
        deleted: Dict[str, int] = {}
        errors = 0

        for policy in policies:
            cutoff = calculate_cutoff(now, policy.retention_days)
            try:
                count = self.store.delete(
                    policy.category,
                    RecordFilter.older_than(cutoff, **policy.conditions),
                )
            except Exception:
                logger.error(
                    f"Failed to delete expired {policy.name} records",
                    exc_info=True,
                    extra={"category": policy.name}
                )
                retention_failures_total.labels(
                    category=policy.name, operation="expire"
                ).inc()
                errors += 1
                continue

            deleted[policy.name] = count
            if count:
                retention_records_transitioned_total.labels(
                    category=policy.name, transition="expired"
                ).inc(count)
            logger.info(
                f"Deleted {count} expired {policy.name} records",
                extra={"category": policy.name, "cutoff": cutoff.isoformat(), "deleted": count}
            )

        return ExpiryResult(deleted=deleted, errors=errors)

    def generate_retention_report(
        self,
        grace_period_days: int = DEFAULT_PURGE_GRACE_PERIOD_DAYS,
        policies: Iterable[RetentionPolicy] = RETENTION_POLICIES,
        expiry_policies: Iterable[ExpiryPolicy] = EXPIRY_POLICIES,
        now: Optional[datetime] = None,
    ) -> RetentionReport:
        """Count records each stage would affect, without modifying anything.

        Useful for administrators to understand impact before running cleanup.
        """
        now = now or self.clock()
        grace_cutoff = calculate_cutoff(now, grace_period_days)
        report = RetentionReport(generated_at=now, grace_period_days=grace_period_days)

        checks = []
        for policy in policies:
            cutoff = calculate_cutoff(now, policy.retention_days)
            equals = {"status": policy.status} if policy.status is not None else {}
            checks.append((
                report.eligible_for_soft_delete,
                policy.name,
                policy.category,
                RecordFilter.active_older_than(policy.reference_field, cutoff, **equals),
            ))
        for category in SOFT_DELETE_CATEGORIES:
            checks.append((
                report.eligible_for_purge,
                category.value,
                category,
                RecordFilter.soft_deleted_before(grace_cutoff),
            ))
        for policy in expiry_policies:
            cutoff = calculate_cutoff(now, policy.retention_days)
            checks.append((
                report.eligible_for_expiry,
                policy.name,
                policy.category,
                RecordFilter.older_than(cutoff, **policy.conditions),
            ))

        for bucket, name, category, record_filter in checks:
            try:
                bucket[name] = self.store.count(category, record_filter)
            except Exception:
                logger.error(
                    f"Failed to count eligible records for {name}",
                    exc_info=True,
                    extra={"category": category.value}
                )
                retention_failures_total.labels(
                    category=category.value, operation="report"
                ).inc()
                report.errors += 1

        logger.info(
            "Generated retention report",
            extra={"stats": {"total_eligible": report.total_eligible_for_deletion}}
        )
        return report

    def run_retention_job(
        self,
        include_purge: bool = False,
        grace_period_days: int = DEFAULT_PURGE_GRACE_PERIOD_DAYS,
        anomaly_threshold: int = DEFAULT_ANOMALY_THRESHOLD,
    ) -> RetentionStatistics:
        """Run a complete retention job.

        Executes in sequence:
        1. Soft-delete sweep over the policy table
        2. Direct expiry of categories without soft delete
        3. Purge of soft-deleted records past the grace period (only if include_purge)

        Returns:
            RetentionStatistics: Aggregated results and alert flags

        Raises:
            ValueError: If include_purge and grace_period_days is negative
        """
        if include_purge and grace_period_days < 0:
            raise ValueError(f"grace_period_days must be non-negative, got {grace_period_days}")

        started_at = self.clock()
        started = time.monotonic()

        sweep = self.apply_retention_policies(now=started_at)
        expiry = self.delete_expired_records(now=started_at)
        purge = None
        if include_purge:
            purge = self.permanently_delete_old_records(
                grace_period_days=grace_period_days, now=started_at
            )

        duration = time.monotonic() - started
        retention_job_duration_seconds.labels(
            job="purge" if include_purge else "sweep"
        ).observe(duration)

        statistics = RetentionStatistics(
            job_started_at=started_at,
            job_completed_at=self.clock(),
            duration_seconds=duration,
            sweep=sweep,
            expiry=expiry,
            purge=purge,
            anomaly_threshold=anomaly_threshold,
        )

        logger.info(
            "Retention job completed",
            extra={
                "duration_seconds": duration,
                "deleted": statistics.total_records_deleted,
                "errors": statistics.error_count,
            }
        )

        if statistics.is_anomaly:
            logger.warning(
                f"Retention anomaly detected: {statistics.total_records_deleted} records deleted",
                extra={"stats": statistics.model_dump(mode="json")}
            )

        if statistics.has_errors:
            logger.error(
                "Retention job completed with errors",
                extra={"errors": statistics.error_count}
            )

        return statistics


def run_retention_cleanup(
    db: Session,
    include_purge: bool = False,
    grace_period_days: int = DEFAULT_PURGE_GRACE_PERIOD_DAYS,
    anomaly_threshold: int = DEFAULT_ANOMALY_THRESHOLD,
) -> RetentionStatistics:
    """Run the retention job against a database session.

    This is the main entry point called by the scheduled Celery tasks and
    the operator CLI.
    """
    service = RetentionService(SqlAlchemyRecordStore(db))
    return service.run_retention_job(
        include_purge=include_purge,
        grace_period_days=grace_period_days,
        anomaly_threshold=anomaly_threshold,
    )
