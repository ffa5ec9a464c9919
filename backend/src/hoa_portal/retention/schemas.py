"""Pydantic schemas for retention job results.

This module defines retention-related schemas:
- SweepResult: Outcome of one soft-delete sweep over the policy table
- PurgeResult: Outcome of one irreversible purge
- ExpiryResult: Outcome of direct expiry of categories without soft delete
- RetentionStatistics: Whole-job summary with timings and alert flags
- RetentionReport: Preview of eligible records, nothing modified
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

# Deleted-record volume above which a job run is flagged for review
DEFAULT_ANOMALY_THRESHOLD = 10000


class SweepResult(BaseModel):
    """Result of applying every retention policy once."""

    total_deleted: int = Field(
        default=0,
        ge=0,
        description="Records moved from active to soft-deleted"
    )

    error_count: int = Field(
        default=0,
        ge=0,
        description="Number of policies whose store operation failed"
    )

    per_policy: Dict[str, int] = Field(
        default_factory=dict,
        description="Soft-deleted count per policy name"
    )

    failed_policies: List[str] = Field(
        default_factory=list,
        description="Names of policies that failed"
    )

    @computed_field
    @property
    def has_errors(self) -> bool:
        return self.error_count > 0


class PurgeResult(BaseModel):
    """Result of permanently deleting soft-deleted records past the grace period.

    Each store is purged independently; a failure in one is counted in
    ``errors`` and leaves its count at zero.
    """

    requests: int = Field(
        default=0,
        ge=0,
        description="ARB requests permanently deleted"
    )

    audit_logs: int = Field(
        default=0,
        ge=0,
        description="ARB audit log entries permanently deleted"
    )

    errors: int = Field(
        default=0,
        ge=0,
        description="Number of stores whose purge failed"
    )

    grace_period_days: int = Field(
        ge=0,
        description="Grace period applied"
    )

    @computed_field
    @property
    def total_purged(self) -> int:
        return self.requests + self.audit_logs


class ExpiryResult(BaseModel):
    """Result of hard-deleting expired records that have no soft-delete stage."""

    deleted: Dict[str, int] = Field(
        default_factory=dict,
        description="Deleted count per category"
    )

    errors: int = Field(
        default=0,
        ge=0,
        description="Number of categories whose delete failed"
    )

    @computed_field
    @property
    def total_deleted(self) -> int:
        return sum(self.deleted.values())


class RetentionStatistics(BaseModel):
    """Statistics from a retention job execution.

    Used for monitoring and alerting on retention job health.
    """

    job_started_at: datetime = Field(
        description="When the retention job started"
    )

    job_completed_at: datetime = Field(
        description="When the retention job completed"
    )

    duration_seconds: float = Field(
        ge=0.0,
        description="Job execution duration in seconds"
    )

    sweep: SweepResult = Field(default_factory=SweepResult)

    expiry: ExpiryResult = Field(default_factory=ExpiryResult)

    purge: Optional[PurgeResult] = Field(
        default=None,
        description="Present only when the purge ran"
    )

    anomaly_threshold: int = Field(
        default=DEFAULT_ANOMALY_THRESHOLD,
        ge=0,
        description="Deleted-record count above which the run is an anomaly"
    )

    @computed_field
    @property
    def total_records_deleted(self) -> int:
        """Records soft-deleted, expired or purged in this run."""
        total = self.sweep.total_deleted + self.expiry.total_deleted
        if self.purge is not None:
            total += self.purge.total_purged
        return total

    @computed_field
    @property
    def error_count(self) -> int:
        errors = self.sweep.error_count + self.expiry.errors
        if self.purge is not None:
            errors += self.purge.errors
        return errors

    @computed_field
    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    @computed_field
    @property
    def is_anomaly(self) -> bool:
        """Whether deletion volume exceeds normal thresholds (alert condition)."""
        return self.total_records_deleted > self.anomaly_threshold


class RetentionReport(BaseModel):
    """Report of records eligible for retention cleanup.

    Provides counts of records that would be affected if the job ran now.
    """

    generated_at: datetime

    grace_period_days: int = Field(ge=0)

    eligible_for_soft_delete: Dict[str, int] = Field(
        default_factory=dict,
        description="Active records past retention, per policy"
    )

    eligible_for_purge: Dict[str, int] = Field(
        default_factory=dict,
        description="Soft-deleted records past the grace period, per category"
    )

    eligible_for_expiry: Dict[str, int] = Field(
        default_factory=dict,
        description="Records past retention in categories without soft delete"
    )

    errors: int = Field(
        default=0,
        ge=0,
        description="Counts that could not be computed"
    )

    @computed_field
    @property
    def total_eligible_for_deletion(self) -> int:
        return (
            sum(self.eligible_for_soft_delete.values()) +
            sum(self.eligible_for_purge.values()) +
            sum(self.eligible_for_expiry.values())
        )
