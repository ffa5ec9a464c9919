"""Celery tasks for data retention.

Tasks:
- retention_sweep_task: Daily soft-delete sweep and direct expiry (02:00 UTC)
- retention_purge_task: Irreversible purge of soft-deleted records past the
  grace period. Runs only when RETENTION_PURGE_ENABLED is set.

Both tasks always complete: failures are returned in the result dict,
never raised, so the scheduler keeps running.
"""

import logging
from typing import Any, Dict, Optional

from celery import shared_task
from sqlalchemy.orm import Session

from ..audit.service import log_audit_event
from ..config import get_settings
from ..database import SessionLocal
from ..observability.run_context import generate_run_id, set_run_id
from .schemas import RetentionStatistics
from .service import RetentionService, run_retention_cleanup
from .store import SqlAlchemyRecordStore

logger = logging.getLogger(__name__)


def _statistics_to_dict(statistics: RetentionStatistics) -> Dict[str, Any]:
    return {
        'status': 'completed',
        'job_started_at': statistics.job_started_at.isoformat(),
        'job_completed_at': statistics.job_completed_at.isoformat(),
        'duration_seconds': statistics.duration_seconds,
        'soft_deleted': statistics.sweep.total_deleted,
        'per_policy': statistics.sweep.per_policy,
        'failed_policies': statistics.sweep.failed_policies,
        'expired': statistics.expiry.deleted,
        'total_deleted': statistics.total_records_deleted,
        'errors': statistics.error_count,
        'has_errors': statistics.has_errors,
        'is_anomaly': statistics.is_anomaly,
    }


def _record_audit_event(db: Session, event_type: str, details: Dict[str, Any]) -> None:
    """Write the job outcome to the audit trail; a failure here does not fail the job."""
    try:
        log_audit_event(
            db=db,
            event_type=event_type,
            event_category="administrative",
            severity="warning" if details.get('errors') else "info",
            details=details,
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.error(
            f"Failed to record audit event {event_type}",
            exc_info=True,
        )


@shared_task(name="retention.sweep", bind=True)
def retention_sweep_task(self) -> Dict[str, Any]:
    """Run the retention sweep and direct expiry.

    Scheduled daily via Celery Beat (see hoa_portal.worker). Idempotent:
    running twice in succession finds nothing further to delete.

    Returns:
        Dict with status, counts per policy/category, errors and alert flags.
        On a fatal error: {'status': 'failed', 'error': ..., 'errors': 1}
    """
    set_run_id(self.request.id or generate_run_id())
    settings = get_settings()
    logger.info("Retention sweep task started")

    db = SessionLocal()
    try:
        statistics = run_retention_cleanup(
            db,
            include_purge=False,
            anomaly_threshold=settings.RETENTION_ANOMALY_THRESHOLD,
        )
        result = _statistics_to_dict(statistics)
        _record_audit_event(db, "RETENTION_SWEEP_COMPLETED", result)

        logger.info(
            "Retention sweep task completed",
            extra={"stats": result}
        )
        return result

    except Exception as e:
        logger.error(
            "Retention sweep task failed",
            exc_info=True,
        )
        return {
            'status': 'failed',
            'error': str(e),
            'errors': 1,
            'total_deleted': 0,
        }

    finally:
        db.close()


@shared_task(name="retention.purge", bind=True)
def retention_purge_task(self, grace_period_days: Optional[int] = None) -> Dict[str, Any]:
    """Permanently delete soft-deleted records past the grace period.

    Destructive. Does nothing unless RETENTION_PURGE_ENABLED is true.

    Args:
        grace_period_days: Override for RETENTION_PURGE_GRACE_DAYS

    Returns:
        Dict with per-store counts and errors, or a skipped/failed status
    """
    set_run_id(self.request.id or generate_run_id())
    settings = get_settings()

    if not settings.RETENTION_PURGE_ENABLED:
        logger.warning("Retention purge requested but RETENTION_PURGE_ENABLED is false; skipping")
        return {
            'status': 'skipped',
            'reason': 'purge disabled',
            'errors': 0,
        }

    if grace_period_days is None:
        grace_period_days = settings.RETENTION_PURGE_GRACE_DAYS

    logger.warning(
        f"Retention purge task started (grace period {grace_period_days} days)"
    )

    db = SessionLocal()
    try:
        service = RetentionService(SqlAlchemyRecordStore(db))
        purge = service.permanently_delete_old_records(grace_period_days=grace_period_days)

        result = {
            'status': 'completed',
            'grace_period_days': purge.grace_period_days,
            'requests': purge.requests,
            'audit_logs': purge.audit_logs,
            'total_deleted': purge.total_purged,
            'errors': purge.errors,
        }
        _record_audit_event(db, "RETENTION_PURGE_COMPLETED", result)
        return result

    except Exception as e:
        logger.error(
            "Retention purge task failed",
            exc_info=True,
        )
        return {
            'status': 'failed',
            'error': str(e),
            'errors': 1,
            'total_deleted': 0,
        }

    finally:
        db.close()
