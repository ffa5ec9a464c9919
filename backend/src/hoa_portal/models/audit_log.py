"""AuditLog SQLAlchemy model"""

from sqlalchemy import Column, DateTime, Index, String, Text
from sqlalchemy.sql import text

from .base import Base, PortableJSONB, generate_id


class AuditLog(Base):
    """AuditLog model for security and administrative event logging.

    Entries are append-only. Rows are removed only by the retention
    expiry job once they are older than the configured retention.
    """
    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("idx_audit_logs_timestamp", "timestamp"),
        Index("idx_audit_logs_event_type", "event_type"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    timestamp = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    event_type = Column(Text, nullable=False)
    event_category = Column(Text, nullable=False)
    severity = Column(Text, nullable=False, default="info")
    user_id = Column(Text, nullable=True)
    target_user_id = Column(Text, nullable=True)
    details = Column(PortableJSONB, nullable=True)
    ip_address = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)

    def to_dict(self):
        """Convert audit log entry to dictionary representation"""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "event_type": self.event_type,
            "event_category": self.event_category,
            "severity": self.severity,
            "user_id": self.user_id,
            "target_user_id": self.target_user_id,
            "details": self.details,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
        }
