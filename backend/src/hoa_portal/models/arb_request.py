"""ArbRequest SQLAlchemy model"""

from enum import Enum

from sqlalchemy import Column, DateTime, Index, String, Text
from sqlalchemy.sql import text

from .base import Base, generate_id


class ArbRequestStatus(str, Enum):
    """Architectural review request status.

    Decided states (APPROVED, REJECTED) carry a decided_at timestamp.
    """
    PENDING = "pending"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class ArbRequest(Base):
    """Architectural review board (ARB) request submitted by a homeowner.

    Retention only ever writes deleted_at or removes the row; the business
    columns below are owned by the request workflow.
    """
    __tablename__ = "arb_requests"
    __table_args__ = (
        Index("idx_arb_requests_owner", "owner_email"),
        Index("idx_arb_requests_status", "status"),
        Index("idx_arb_requests_deleted", "deleted_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    owner_email = Column(Text, nullable=False)
    applicant_name = Column(Text, nullable=True)
    property_address = Column(Text, nullable=True)
    application_type = Column(Text, nullable=True)
    description = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default=ArbRequestStatus.PENDING.value)
    decided_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self):
        return f"<ArbRequest(id={self.id}, status='{self.status}', deleted_at={self.deleted_at})>"
