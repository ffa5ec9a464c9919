"""Operator CLI for data retention.

Usage:
    hoa-portal-retention                 # soft-delete sweep + direct expiry
    hoa-portal-retention --dry-run       # report eligible records, change nothing
    hoa-portal-retention --purge         # also purge soft-deleted records (irreversible)
    hoa-portal-retention --purge --grace-days 60

Environment Variables:
    DATABASE_URL: SQLAlchemy connection string
    RETENTION_PURGE_GRACE_DAYS: Default grace period for --purge
    LOG_LEVEL / LOG_JSON: Logging configuration

Exit status is 0 when every policy succeeded and 1 otherwise.
"""

import argparse
import json
import sys
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from ..config import get_settings
from ..observability.logging_config import configure_logging
from ..observability.run_context import generate_run_id, set_run_id
from .service import RetentionService
from .store import SqlAlchemyRecordStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hoa-portal-retention",
        description="Apply data retention policies to the portal database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        '--dry-run',
        action='store_true',
        help='Only report how many records each stage would affect'
    )
    mode.add_argument(
        '--purge',
        action='store_true',
        help='Also permanently delete soft-deleted records past the grace period'
    )
    parser.add_argument(
        '--grace-days',
        type=int,
        default=None,
        help='Grace period in days for --purge/--dry-run (default: RETENTION_PURGE_GRACE_DAYS)'
    )
    return parser


def main(
    argv: Optional[List[str]] = None,
    session_factory: Optional[Callable[[], Session]] = None,
) -> int:
    """Run the CLI and return its exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()

    grace_days = args.grace_days
    if grace_days is None:
        grace_days = settings.RETENTION_PURGE_GRACE_DAYS
    if grace_days < 0:
        parser.error("--grace-days must be non-negative")

    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
    set_run_id(generate_run_id())

    if session_factory is None:
        from ..database import SessionLocal
        session_factory = SessionLocal

    db = session_factory()
    try:
        service = RetentionService(SqlAlchemyRecordStore(db))
        if args.dry_run:
            report = service.generate_retention_report(grace_period_days=grace_days)
            print(json.dumps(report.model_dump(mode="json"), indent=2))
            return 1 if report.errors else 0

        statistics = service.run_retention_job(
            include_purge=args.purge,
            grace_period_days=grace_days,
            anomaly_threshold=settings.RETENTION_ANOMALY_THRESHOLD,
        )
        print(json.dumps(statistics.model_dump(mode="json"), indent=2))
        return 1 if statistics.has_errors else 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
