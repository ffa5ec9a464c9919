"""Record store port and SQLAlchemy adapter.

The retention engine talks to storage only through RecordStorePort:
conditional batch update, delete and count, each scoped to one record
category. One call is one statement; atomicity per statement is the
store's responsibility.

Architecture: Hexagonal - port interface plus a SQLAlchemy adapter
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple, Type

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import (
    DataError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    ProgrammingError,
    SQLAlchemyError,
)
from sqlalchemy.orm import Session

from ..models import ArbAuditLog, ArbRequest, AuditLog, ContactSubmission, SecurityEvent
from .exceptions import ConstraintViolation, PartialBatchFailure, StoreUnavailable
from .policies import RecordCategory, ReferenceField


@dataclass(frozen=True)
class RecordFilter:
    """Conditional predicate for a batch operation.

    All clauses are ANDed together.

    Attributes:
        equals: column -> value equality predicates
        reference: Timestamp the ``before`` bound applies to
        before: Reference timestamp must be strictly older than this
        is_null: Columns that must be NULL
        not_null: Columns that must be NOT NULL
        deleted_before: deleted_at must be strictly older than this
    """
    equals: Mapping[str, Any] = field(default_factory=dict)
    reference: Optional[ReferenceField] = None
    before: Optional[datetime] = None
    is_null: Tuple[str, ...] = ()
    not_null: Tuple[str, ...] = ()
    deleted_before: Optional[datetime] = None

    @classmethod
    def active_older_than(
        cls,
        reference: ReferenceField,
        cutoff: datetime,
        **equals: Any,
    ) -> "RecordFilter":
        """Active (not soft-deleted) records older than cutoff."""
        return cls(equals=equals, reference=reference, before=cutoff, is_null=("deleted_at",))

    @classmethod
    def active_record(cls, record_id: str) -> "RecordFilter":
        """One record by id, only while it is still active."""
        return cls(equals={"id": record_id}, is_null=("deleted_at",))

    @classmethod
    def soft_deleted_before(cls, cutoff: datetime) -> "RecordFilter":
        """Soft-deleted records whose deleted_at is strictly older than cutoff."""
        return cls(not_null=("deleted_at",), deleted_before=cutoff)

    @classmethod
    def older_than(cls, cutoff: datetime, **equals: Any) -> "RecordFilter":
        """Records created strictly before cutoff, regardless of deletion state."""
        return cls(equals=equals, reference=ReferenceField.CREATED, before=cutoff)


@dataclass(frozen=True)
class CategoryTable:
    """Where a record category lives and which columns retention uses."""
    model: Type
    created_column: str
    decided_column: Optional[str] = None
    deleted_column: Optional[str] = None


CATEGORY_TABLES: Dict[RecordCategory, CategoryTable] = {
    RecordCategory.ARB_REQUEST: CategoryTable(
        model=ArbRequest,
        created_column="created_at",
        decided_column="decided_at",
        deleted_column="deleted_at",
    ),
    RecordCategory.ARB_AUDIT_LOG: CategoryTable(
        model=ArbAuditLog,
        created_column="created_at",
        deleted_column="deleted_at",
    ),
    RecordCategory.AUTH_AUDIT_LOG: CategoryTable(
        model=AuditLog,
        created_column="timestamp",
    ),
    RecordCategory.SECURITY_EVENT: CategoryTable(
        model=SecurityEvent,
        created_column="timestamp",
    ),
    RecordCategory.CONTACT_SUBMISSION: CategoryTable(
        model=ContactSubmission,
        created_column="created_at",
    ),
}


class RecordStorePort(ABC):
    """Port interface for the tabular store the retention engine acts on.

    Every method returns the number of affected (or matching) rows and
    raises a RetentionStoreError subclass on failure.
    """

    @abstractmethod
    def update(
        self,
        category: RecordCategory,
        record_filter: RecordFilter,
        values: Mapping[str, Any],
    ) -> int:
        """Set ``values`` on every row matching ``record_filter``."""

    @abstractmethod
    def delete(self, category: RecordCategory, record_filter: RecordFilter) -> int:
        """Remove every row matching ``record_filter``."""

    @abstractmethod
    def count(self, category: RecordCategory, record_filter: RecordFilter) -> int:
        """Count rows matching ``record_filter`` without modifying them."""


class SqlAlchemyRecordStore(RecordStorePort):
    """RecordStorePort backed by a SQLAlchemy session.

    Each update/delete runs as a single statement and is committed
    immediately; on failure the session is rolled back and the error is
    mapped onto the retention error taxonomy.
    """

    def __init__(self, db: Session, tables: Mapping[RecordCategory, CategoryTable] = None):
        self.db = db
        self.tables = dict(tables or CATEGORY_TABLES)

    def update(self, category, record_filter, values):
        table = self._table(category)
        if not values:
            raise ConstraintViolation("update requires at least one value", category.value)
        assignments = {
            self._column(table, name, category): value for name, value in values.items()
        }
        stmt = (
            update(table.model)
            .where(*self._criteria(table, record_filter, category))
            .values(assignments)
            .execution_options(synchronize_session=False)
        )
        return self._execute_write(stmt, category)

    def delete(self, category, record_filter):
        table = self._table(category)
        stmt = (
            delete(table.model)
            .where(*self._criteria(table, record_filter, category))
            .execution_options(synchronize_session=False)
        )
        return self._execute_write(stmt, category)

    def count(self, category, record_filter):
        table = self._table(category)
        stmt = (
            select(func.count())
            .select_from(table.model)
            .where(*self._criteria(table, record_filter, category))
        )
        try:
            return int(self.db.execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            self._rollback_and_raise(e, category)

    def _table(self, category: RecordCategory) -> CategoryTable:
        try:
            return self.tables[category]
        except KeyError:
            raise ConstraintViolation(f"Unknown record category: {category}", str(category))

    def _column(self, table: CategoryTable, name: str, category: RecordCategory):
        if name == "deleted_at":
            if table.deleted_column is None:
                raise ConstraintViolation(
                    f"{category.value} has no soft-delete column", category.value
                )
            name = table.deleted_column
        column = getattr(table.model, name, None)
        if column is None or not hasattr(column, "property"):
            raise ConstraintViolation(
                f"Unknown column '{name}' for {category.value}", category.value
            )
        return column

    def _reference(self, table: CategoryTable, reference: ReferenceField, category: RecordCategory):
        created = self._column(table, table.created_column, category)
        if reference == ReferenceField.CREATED:
            return created
        if reference == ReferenceField.DECIDED_OR_CREATED:
            if table.decided_column is None:
                raise ConstraintViolation(
                    f"{category.value} has no decision timestamp", category.value
                )
            decided = self._column(table, table.decided_column, category)
            return func.coalesce(decided, created)
        raise ConstraintViolation(f"Unsupported reference field: {reference}", category.value)

    def _criteria(self, table: CategoryTable, record_filter: RecordFilter, category: RecordCategory):
        criteria = []
        for name, value in record_filter.equals.items():
            criteria.append(self._column(table, name, category) == value)
        if record_filter.before is not None:
            reference = record_filter.reference or ReferenceField.CREATED
            criteria.append(self._reference(table, reference, category) < record_filter.before)
        for name in record_filter.is_null:
            criteria.append(self._column(table, name, category).is_(None))
        for name in record_filter.not_null:
            criteria.append(self._column(table, name, category).is_not(None))
        if record_filter.deleted_before is not None:
            criteria.append(
                self._column(table, "deleted_at", category) < record_filter.deleted_before
            )
        if not criteria:
            # An unconditional batch would touch the whole table
            raise ConstraintViolation(
                f"Refusing unconditional batch on {category.value}", category.value
            )
        return criteria

    def _execute_write(self, stmt, category: RecordCategory) -> int:
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            self._rollback_and_raise(e, category)
        return result.rowcount or 0

    def _rollback_and_raise(self, error: SQLAlchemyError, category: RecordCategory):
        self.db.rollback()
        if isinstance(error, (OperationalError, InterfaceError, DisconnectionError)):
            raise StoreUnavailable(f"Store unavailable: {error}", category.value) from error
        if isinstance(error, (IntegrityError, ProgrammingError, DataError)):
            raise ConstraintViolation(f"Statement rejected: {error}", category.value) from error
        raise PartialBatchFailure(f"Batch failed: {error}", category.value) from error
