"""SQLAlchemy models for the portal backend"""

from .base import Base
from .arb_request import ArbRequest, ArbRequestStatus
from .arb_audit_log import ArbAuditLog
from .audit_log import AuditLog
from .security_event import SecurityEvent
from .contact_submission import ContactSubmission

__all__ = [
    "Base",
    "ArbRequest",
    "ArbRequestStatus",
    "ArbAuditLog",
    "AuditLog",
    "SecurityEvent",
    "ContactSubmission",
]
