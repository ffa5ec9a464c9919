"""Unit tests for direct expiry and the retention preview report."""

from datetime import timedelta

from hoa_portal.models import (
    ArbRequest,
    AuditLog,
    ContactSubmission,
    SecurityEvent,
)
from hoa_portal.retention.exceptions import StoreUnavailable
from hoa_portal.retention.policies import RecordCategory
from hoa_portal.retention.service import RetentionService
from hoa_portal.retention.store import SqlAlchemyRecordStore


def add_auth_audit_log(db_session, timestamp):
    entry = AuditLog(event_type="login_success", event_category="auth", timestamp=timestamp)
    db_session.add(entry)
    db_session.commit()
    return entry.id


def add_security_event(db_session, timestamp, resolved):
    event = SecurityEvent(event_type="rate_limited", timestamp=timestamp, resolved=resolved)
    db_session.add(event)
    db_session.commit()
    return event.id


def add_contact_submission(db_session, created_at):
    submission = ContactSubmission(
        name="Resident",
        email="resident@example.com",
        message="Pool hours?",
        recipient="board",
        created_at=created_at,
    )
    db_session.add(submission)
    db_session.commit()
    return submission.id


class TestDeleteExpiredRecords:

    def test_auth_audit_logs_older_than_a_year(self, service, db_session, remaining_ids, now):
        add_auth_audit_log(db_session, now - timedelta(days=366))
        recent = add_auth_audit_log(db_session, now - timedelta(days=10))

        result = service.delete_expired_records()

        assert result.deleted["auth_audit_log"] == 1
        assert remaining_ids(AuditLog) == {recent}

    def test_only_resolved_security_events(self, service, db_session, remaining_ids, now):
        add_security_event(db_session, now - timedelta(days=731), resolved=True)
        unresolved = add_security_event(db_session, now - timedelta(days=731), resolved=False)
        recent = add_security_event(db_session, now - timedelta(days=700), resolved=True)

        result = service.delete_expired_records()

        assert result.deleted["security_event"] == 1
        assert remaining_ids(SecurityEvent) == {unresolved, recent}

    def test_contact_submissions(self, service, db_session, remaining_ids, now):
        add_contact_submission(db_session, now - timedelta(days=400))
        recent = add_contact_submission(db_session, now - timedelta(days=100))

        result = service.delete_expired_records()

        assert result.total_deleted == 1
        assert result.errors == 0
        assert remaining_ids(ContactSubmission) == {recent}

    def test_failure_isolated_per_category(self, db_session, remaining_ids, now):
        class FailingContactStore(SqlAlchemyRecordStore):
            def delete(self, category, record_filter):
                if category == RecordCategory.CONTACT_SUBMISSION:
                    raise StoreUnavailable("locked", category.value)
                return super().delete(category, record_filter)

        service = RetentionService(FailingContactStore(db_session), clock=lambda: now)
        add_auth_audit_log(db_session, now - timedelta(days=400))
        kept = add_contact_submission(db_session, now - timedelta(days=400))

        result = service.delete_expired_records()

        assert result.errors == 1
        assert result.deleted["auth_audit_log"] == 1
        assert "contact_submission" not in result.deleted
        assert remaining_ids(ContactSubmission) == {kept}


class TestGenerateRetentionReport:

    def test_counts_without_modifying(
        self, service, db_session, make_request, make_audit_entry, deleted_at_of, now
    ):
        expired = make_request(status="pending", created_at=now - timedelta(days=400))
        make_request(status="pending", created_at=now - timedelta(days=10))
        make_audit_entry(deleted_at=now - timedelta(days=45))
        add_contact_submission(db_session, now - timedelta(days=400))

        report = service.generate_retention_report()

        assert report.eligible_for_soft_delete["arb_request:pending"] == 1
        assert report.eligible_for_soft_delete["arb_request:approved"] == 0
        assert report.eligible_for_purge == {"arb_request": 0, "arb_audit_log": 1}
        assert report.eligible_for_expiry["contact_submission"] == 1
        assert report.total_eligible_for_deletion == 3
        assert report.errors == 0
        assert report.generated_at == now
        assert deleted_at_of(ArbRequest, expired) is None

    def test_matches_subsequent_sweep(self, service, make_request, now):
        for days in (400, 500, 600):
            make_request(status="cancelled", created_at=now - timedelta(days=days))

        report = service.generate_retention_report()
        result = service.apply_retention_policies()

        assert report.eligible_for_soft_delete["arb_request:cancelled"] == 3
        assert result.per_policy["arb_request:cancelled"] == 3

    def test_count_failure_recorded(self, db_session, now):
        class FailingCountStore(SqlAlchemyRecordStore):
            def count(self, category, record_filter):
                if category == RecordCategory.SECURITY_EVENT:
                    raise StoreUnavailable("timeout", category.value)
                return super().count(category, record_filter)

        service = RetentionService(FailingCountStore(db_session), clock=lambda: now)

        report = service.generate_retention_report()

        assert report.errors == 1
        assert "security_event" not in report.eligible_for_expiry
        assert report.eligible_for_expiry["auth_audit_log"] == 0
