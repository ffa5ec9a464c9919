"""Unit tests for permanently deleting soft-deleted records."""

from datetime import timedelta

import pytest

from hoa_portal.models import ArbAuditLog, ArbRequest
from hoa_portal.retention.exceptions import StoreUnavailable
from hoa_portal.retention.policies import RecordCategory
from hoa_portal.retention.service import RetentionService
from hoa_portal.retention.store import SqlAlchemyRecordStore


class PurgeFailingStore(SqlAlchemyRecordStore):

    def __init__(self, db, failing_category):
        super().__init__(db)
        self.failing_category = failing_category

    def delete(self, category, record_filter):
        if category == self.failing_category:
            raise StoreUnavailable("connection reset", category.value)
        return super().delete(category, record_filter)


class TestPermanentlyDeleteOldRecords:

    def test_grace_period_boundaries(self, service, make_request, remaining_ids, now):
        past_grace = make_request(deleted_at=now - timedelta(days=31))
        within_grace = make_request(deleted_at=now - timedelta(days=29))
        at_grace = make_request(deleted_at=now - timedelta(days=30))
        active = make_request(created_at=now - timedelta(days=5000))

        result = service.permanently_delete_old_records(grace_period_days=30)

        assert result.requests == 1
        assert result.errors == 0
        assert remaining_ids(ArbRequest) == {within_grace, at_grace, active}
        assert past_grace not in remaining_ids(ArbRequest)

    def test_purges_both_stores(self, service, make_request, make_audit_entry, remaining_ids, now):
        make_request(deleted_at=now - timedelta(days=60))
        make_audit_entry(deleted_at=now - timedelta(days=60))
        make_audit_entry(deleted_at=now - timedelta(days=45))
        kept_entry = make_audit_entry(deleted_at=None, created_at=now - timedelta(days=9000))

        result = service.permanently_delete_old_records()

        assert result.requests == 1
        assert result.audit_logs == 2
        assert result.total_purged == 3
        assert result.grace_period_days == 30
        assert remaining_ids(ArbRequest) == set()
        assert remaining_ids(ArbAuditLog) == {kept_entry}

    def test_zero_grace_purges_every_soft_deleted_record(
        self, service, make_request, remaining_ids, now
    ):
        make_request(deleted_at=now - timedelta(seconds=1))
        active = make_request()

        result = service.permanently_delete_old_records(grace_period_days=0)

        assert result.requests == 1
        assert remaining_ids(ArbRequest) == {active}

    def test_negative_grace_rejected_before_any_delete(
        self, service, make_request, remaining_ids, now
    ):
        record = make_request(deleted_at=now - timedelta(days=400))

        with pytest.raises(ValueError):
            service.permanently_delete_old_records(grace_period_days=-1)

        assert remaining_ids(ArbRequest) == {record}

    def test_huge_grace_purges_nothing(self, service, make_request, remaining_ids, now):
        record = make_request(deleted_at=now - timedelta(days=5000))

        result = service.permanently_delete_old_records(grace_period_days=99999999)

        assert result.total_purged == 0
        assert result.errors == 0
        assert remaining_ids(ArbRequest) == {record}

    def test_failing_store_does_not_block_other(
        self, db_session, make_request, make_audit_entry, remaining_ids, now
    ):
        store = PurgeFailingStore(db_session, RecordCategory.ARB_REQUEST)
        service = RetentionService(store, clock=lambda: now)
        request = make_request(deleted_at=now - timedelta(days=60))
        make_audit_entry(deleted_at=now - timedelta(days=60))

        result = service.permanently_delete_old_records()

        assert result.errors == 1
        assert result.requests == 0
        assert result.audit_logs == 1
        assert remaining_ids(ArbRequest) == {request}
        assert remaining_ids(ArbAuditLog) == set()

    def test_idempotent(self, service, make_request, now):
        make_request(deleted_at=now - timedelta(days=90))

        assert service.permanently_delete_old_records().total_purged == 1
        assert service.permanently_delete_old_records().total_purged == 0


def test_full_lifecycle(db_session, make_request, deleted_at_of, remaining_ids, now):
    """A record goes active -> soft-deleted -> purged across runs."""
    record = make_request(status="pending", created_at=now - timedelta(days=400))
    clock = {"now": now}
    service = RetentionService(SqlAlchemyRecordStore(db_session), clock=lambda: clock["now"])

    service.apply_retention_policies()
    assert deleted_at_of(ArbRequest, record) == now

    clock["now"] = now + timedelta(days=10)
    assert service.permanently_delete_old_records().requests == 0

    clock["now"] = now + timedelta(days=31)
    assert service.permanently_delete_old_records().requests == 1
    assert remaining_ids(ArbRequest) == set()
