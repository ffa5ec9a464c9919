"""Create tables managed by the retention engine

Revision ID: 001
Revises:
Create Date: 2026-10-16 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ARB requests with soft-delete marker
    op.create_table(
        'arb_requests',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('owner_email', sa.Text(), nullable=False),
        sa.Column('applicant_name', sa.Text(), nullable=True),
        sa.Column('property_address', sa.Text(), nullable=True),
        sa.Column('application_type', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
        sa.Column('decided_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "status IN ('pending', 'in_review', 'approved', 'rejected', 'cancelled')",
            name='ck_arb_requests_status'
        )
    )
    op.create_index('idx_arb_requests_owner', 'arb_requests', ['owner_email'])
    op.create_index('idx_arb_requests_status', 'arb_requests', ['status'])
    op.create_index('idx_arb_requests_deleted', 'arb_requests', ['deleted_at'])

    # ARB audit trail with soft-delete marker
    op.create_table(
        'arb_audit_log',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('request_id', sa.String(36), nullable=False),
        sa.Column('action', sa.Text(), nullable=False),
        sa.Column('actor_email', sa.Text(), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_arb_audit_request', 'arb_audit_log', ['request_id'])
    op.create_index('idx_arb_audit_deleted', 'arb_audit_log', ['deleted_at'])

    # Authentication / administrative audit log (direct expiry)
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('timestamp', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('event_type', sa.Text(), nullable=False),
        sa.Column('event_category', sa.Text(), nullable=False),
        sa.Column('severity', sa.Text(), server_default='info', nullable=False),
        sa.Column('user_id', sa.Text(), nullable=True),
        sa.Column('target_user_id', sa.Text(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.Text(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_audit_logs_timestamp', 'audit_logs', ['timestamp'])
    op.create_index('idx_audit_logs_event_type', 'audit_logs', ['event_type'])

    # Security events (resolved ones expire)
    op.create_table(
        'security_events',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('timestamp', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('event_type', sa.Text(), nullable=False),
        sa.Column('severity', sa.Text(), server_default='warning', nullable=False),
        sa.Column('user_id', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.Text(), nullable=True),
        sa.Column('resolved', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_security_events_timestamp', 'security_events', ['timestamp'])
    op.create_index('idx_security_events_resolved', 'security_events', ['resolved'])

    # Contact form submissions (direct expiry)
    op.create_table(
        'contact_submissions',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('recipient', sa.Text(), nullable=False),
        sa.Column('email_sent', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('email_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_contact_submissions_created_at', 'contact_submissions', ['created_at'])


def downgrade():
    op.drop_index('idx_contact_submissions_created_at', table_name='contact_submissions')
    op.drop_table('contact_submissions')

    op.drop_index('idx_security_events_resolved', table_name='security_events')
    op.drop_index('idx_security_events_timestamp', table_name='security_events')
    op.drop_table('security_events')

    op.drop_index('idx_audit_logs_event_type', table_name='audit_logs')
    op.drop_index('idx_audit_logs_timestamp', table_name='audit_logs')
    op.drop_table('audit_logs')

    op.drop_index('idx_arb_audit_deleted', table_name='arb_audit_log')
    op.drop_index('idx_arb_audit_request', table_name='arb_audit_log')
    op.drop_table('arb_audit_log')

    op.drop_index('idx_arb_requests_deleted', table_name='arb_requests')
    op.drop_index('idx_arb_requests_status', table_name='arb_requests')
    op.drop_index('idx_arb_requests_owner', table_name='arb_requests')
    op.drop_table('arb_requests')
