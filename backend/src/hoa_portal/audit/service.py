"""Audit logging service for administrative events.

This service provides a centralized interface for creating audit log
entries. Retention jobs record every completed sweep and purge here.

Audit Events:
- RETENTION_SWEEP_COMPLETED
- RETENTION_PURGE_COMPLETED
"""

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..models.audit_log import AuditLog


def log_audit_event(
    db: Session,
    event_type: str,
    event_category: str,
    severity: str = "info",
    user_id: Optional[str] = None,
    target_user_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AuditLog:
    """Create an audit log entry.

    All parameters are stored as-is. This function does not validate event
    types; callers must pass the documented names.

    Args:
        db: Database session
        event_type: Event name (e.g., "RETENTION_SWEEP_COMPLETED")
        event_category: 'authentication', 'authorization', 'administrative' or 'security'
        severity: 'info', 'warning' or 'critical'
        user_id: Email of the acting user (None for system jobs)
        target_user_id: Email of the affected user, if any
        details: Additional context as JSON
        ip_address: Client IP address
        user_agent: Client User-Agent header

    Returns:
        AuditLog: The created audit log entry

    Example:
        log_audit_event(
            db=db,
            event_type="RETENTION_PURGE_COMPLETED",
            event_category="administrative",
            severity="warning",
            details={"requests": 3, "audit_logs": 12, "errors": 0},
        )
    """
    audit_entry = AuditLog(
        event_type=event_type,
        event_category=event_category,
        severity=severity,
        user_id=user_id,
        target_user_id=target_user_id,
        details=details,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    db.add(audit_entry)
    db.flush()  # Get ID without committing transaction

    return audit_entry
