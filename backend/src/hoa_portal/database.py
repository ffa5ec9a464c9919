"""Database session factory and configuration.

Provides database connectivity and session management for the portal backend.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from .config import get_settings

DATABASE_URL = get_settings().DATABASE_URL

_engine_kwargs = {
    "pool_pre_ping": True,  # Verify connections before using
    "echo": False,
}

# Pool settings only apply to server databases (not SQLite)
if not DATABASE_URL.startswith("sqlite"):
    _engine_kwargs["pool_size"] = 5
    _engine_kwargs["max_overflow"] = 10

engine = create_engine(DATABASE_URL, **_engine_kwargs)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)
