"""SecurityEvent SQLAlchemy model"""

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text
from sqlalchemy.sql import text

from .base import Base, generate_id


class SecurityEvent(Base):
    """Security event (rate limit hits, lockouts, suspicious logins).

    Only resolved events are eligible for expiry.
    """
    __tablename__ = "security_events"
    __table_args__ = (
        Index("idx_security_events_timestamp", "timestamp"),
        Index("idx_security_events_resolved", "resolved"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    timestamp = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    event_type = Column(Text, nullable=False)
    severity = Column(Text, nullable=False, default="warning")
    user_id = Column(Text, nullable=True)
    ip_address = Column(Text, nullable=True)
    resolved = Column(Boolean, nullable=False, default=False)
    resolved_at = Column(DateTime, nullable=True)
