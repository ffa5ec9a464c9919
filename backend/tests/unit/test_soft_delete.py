"""Unit tests for soft-deleting expired and individual records."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from hoa_portal.models import ArbAuditLog, ArbRequest
from hoa_portal.retention.exceptions import StoreUnavailable
from hoa_portal.retention.policies import (
    RecordCategory,
    ReferenceField,
    RetentionPolicy,
    get_policy,
)
from hoa_portal.retention.service import RetentionService


class TestSoftDeleteExpired:
    """Test soft_delete_expired for a single policy."""

    def test_marks_only_records_past_cutoff(self, service, make_request, deleted_at_of, now):
        policy = get_policy(RecordCategory.ARB_REQUEST, "pending")
        expired = make_request(status="pending", created_at=now - timedelta(days=366))
        kept = make_request(status="pending", created_at=now - timedelta(days=364))

        assert service.soft_delete_expired(policy) == 1

        assert deleted_at_of(ArbRequest, expired) == now
        assert deleted_at_of(ArbRequest, kept) is None

    def test_cutoff_is_exclusive(self, service, make_request, deleted_at_of, now):
        """A record exactly at the cutoff is retained."""
        policy = get_policy(RecordCategory.ARB_REQUEST, "cancelled")
        boundary = make_request(status="cancelled", created_at=now - timedelta(days=365))

        assert service.soft_delete_expired(policy) == 0
        assert deleted_at_of(ArbRequest, boundary) is None

    def test_second_run_marks_nothing(self, service, make_request, deleted_at_of, now):
        policy = get_policy(RecordCategory.ARB_REQUEST, "pending")
        record = make_request(status="pending", created_at=now - timedelta(days=400))

        assert service.soft_delete_expired(policy) == 1
        later = now + timedelta(hours=1)
        assert service.soft_delete_expired(policy, now=later) == 0

        # deleted_at keeps the time of the first sweep
        assert deleted_at_of(ArbRequest, record) == now

    def test_zero_day_policy_marks_everything_older_than_now(
        self, service, make_audit_entry, deleted_at_of, now
    ):
        policy = RetentionPolicy(category=RecordCategory.ARB_AUDIT_LOG, retention_days=0)
        old = make_audit_entry(created_at=now - timedelta(seconds=1))
        current = make_audit_entry(created_at=now)

        assert service.soft_delete_expired(policy) == 1
        assert deleted_at_of(ArbAuditLog, old) == now
        assert deleted_at_of(ArbAuditLog, current) is None

    def test_store_error_propagates(self, now):
        class UnavailableStore:
            def update(self, category, record_filter, values):
                raise StoreUnavailable("connection refused", category.value)

        service = RetentionService(UnavailableStore(), clock=lambda: now)
        policy = RetentionPolicy(
            category=RecordCategory.ARB_REQUEST,
            retention_days=365,
            status="pending",
            reference_field=ReferenceField.CREATED,
        )

        with pytest.raises(StoreUnavailable):
            service.soft_delete_expired(policy)


class TestSoftDeleteRecord:
    """Test soft-deleting one record on request."""

    def test_active_record(self, service, make_request, deleted_at_of, now):
        record = make_request(status="pending")

        assert service.soft_delete_request(record) is True
        assert deleted_at_of(ArbRequest, record) == now

    def test_business_columns_untouched(self, service, db_session, make_request, now):
        created = now - timedelta(days=20)
        decided = now - timedelta(days=2)
        updated = now - timedelta(days=1)
        record = make_request(
            status="rejected",
            created_at=created,
            decided_at=decided,
            updated_at=updated,
            description="Add solar panels",
        )

        assert service.soft_delete_request(record) is True

        row = db_session.execute(
            select(
                ArbRequest.status,
                ArbRequest.description,
                ArbRequest.created_at,
                ArbRequest.decided_at,
                ArbRequest.updated_at,
            ).where(ArbRequest.id == record)
        ).one()
        assert tuple(row) == ("rejected", "Add solar panels", created, decided, updated)

    def test_already_deleted_record_keeps_original_timestamp(
        self, service, make_request, deleted_at_of, now
    ):
        earlier = now - timedelta(days=3)
        record = make_request(status="pending", deleted_at=earlier)

        assert service.soft_delete_request(record) is False
        assert deleted_at_of(ArbRequest, record) == earlier

    def test_missing_record(self, service):
        assert service.soft_delete_request("does-not-exist") is False

    def test_category_without_soft_delete_returns_false(self, service):
        assert service.soft_delete_record(RecordCategory.CONTACT_SUBMISSION, "abc") is False

    def test_deleted_record_is_not_reselected_by_sweep(
        self, service, make_request, deleted_at_of, now
    ):
        record = make_request(status="pending", created_at=now - timedelta(days=400))
        service.soft_delete_request(record, now=now - timedelta(days=1))

        result = service.apply_retention_policies()

        assert result.total_deleted == 0
        assert deleted_at_of(ArbRequest, record) == now - timedelta(days=1)


class TestSoftDeleteOldAuditLogs:

    def test_default_seven_years(self, service, make_audit_entry, deleted_at_of, now):
        old = make_audit_entry(created_at=now - timedelta(days=2556))
        young = make_audit_entry(created_at=now - timedelta(days=2554))

        assert service.soft_delete_old_audit_logs() == 1
        assert deleted_at_of(ArbAuditLog, old) == now
        assert deleted_at_of(ArbAuditLog, young) is None

    def test_custom_duration(self, service, make_audit_entry):
        make_audit_entry(created_at=service.clock() - timedelta(days=40))

        assert service.soft_delete_old_audit_logs(retention_days=30) == 1

    def test_failure_returns_zero(self, now):
        class UnavailableStore:
            def update(self, category, record_filter, values):
                raise StoreUnavailable("down", category.value)

        service = RetentionService(UnavailableStore(), clock=lambda: now)

        assert service.soft_delete_old_audit_logs() == 0
