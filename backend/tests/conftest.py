"""Pytest fixtures for retention testing.

Provides reusable test fixtures for:
- In-memory SQLite engine with all tables created
- Database session and record store
- A fixed "now" and a service whose clock returns it
- Factories for ARB requests and audit trail entries

Usage:
    def test_sweep(service, make_request, now):
        make_request(status="pending", created_at=now - timedelta(days=400))
        assert service.apply_retention_policies().total_deleted == 1
"""

import os
import sys
from datetime import datetime
from pathlib import Path

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RETENTION_PURGE_ENABLED", "false")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hoa_portal.models import ArbAuditLog, ArbRequest, Base
from hoa_portal.retention.service import RetentionService
from hoa_portal.retention.store import SqlAlchemyRecordStore

# 2024 is a leap year: 2025-03-01 minus 365 days is 2024-03-01
FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0)


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database per test, shared across sessions."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db_session):
    return SqlAlchemyRecordStore(db_session)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def service(store, now):
    return RetentionService(store, clock=lambda: now)


@pytest.fixture
def make_request(db_session):
    """Create an ARB request and return its id."""
    def _make(status="pending", created_at=FIXED_NOW, decided_at=None, deleted_at=None, **kwargs):
        request = ArbRequest(
            owner_email=kwargs.pop("owner_email", "owner@example.com"),
            description=kwargs.pop("description", "Replace front fence"),
            status=status,
            created_at=created_at,
            decided_at=decided_at,
            deleted_at=deleted_at,
            **kwargs,
        )
        db_session.add(request)
        db_session.commit()
        return request.id
    return _make


@pytest.fixture
def make_audit_entry(db_session):
    """Create an ARB audit trail entry and return its id."""
    def _make(created_at=FIXED_NOW, deleted_at=None, request_id="req-1", action="status_change"):
        entry = ArbAuditLog(
            request_id=request_id,
            action=action,
            created_at=created_at,
            deleted_at=deleted_at,
        )
        db_session.add(entry)
        db_session.commit()
        return entry.id
    return _make


@pytest.fixture
def deleted_at_of(db_session):
    """Read deleted_at straight from the table, bypassing the identity map."""
    def _read(model, record_id):
        return db_session.execute(
            select(model.deleted_at).where(model.id == record_id)
        ).scalar_one()
    return _read


@pytest.fixture
def remaining_ids(db_session):
    def _ids(model):
        return set(db_session.execute(select(model.id)).scalars().all())
    return _ids
