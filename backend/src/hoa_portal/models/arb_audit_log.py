"""ArbAuditLog SQLAlchemy model"""

from sqlalchemy import Column, DateTime, Index, String, Text
from sqlalchemy.sql import text

from .base import Base, generate_id


class ArbAuditLog(Base):
    """Audit trail entry for an ARB request (status changes, comments, votes).

    No foreign key to arb_requests: requests and their trail are purged
    independently.
    """
    __tablename__ = "arb_audit_log"
    __table_args__ = (
        Index("idx_arb_audit_request", "request_id"),
        Index("idx_arb_audit_deleted", "deleted_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    request_id = Column(String(36), nullable=False)
    action = Column(Text, nullable=False)
    actor_email = Column(Text, nullable=True)
    details = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    deleted_at = Column(DateTime, nullable=True)
