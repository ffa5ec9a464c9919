"""ContactSubmission SQLAlchemy model"""

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text
from sqlalchemy.sql import text

from .base import Base, generate_id


class ContactSubmission(Base):
    """Public contact form submission forwarded to the board."""
    __tablename__ = "contact_submissions"
    __table_args__ = (
        Index("idx_contact_submissions_created_at", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    recipient = Column(Text, nullable=False)
    email_sent = Column(Boolean, nullable=False, default=False)
    email_error = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
