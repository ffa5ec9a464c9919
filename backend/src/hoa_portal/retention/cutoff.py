"""Cutoff calculation for retention policies."""

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, matching stored timestamps."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def calculate_cutoff(now: datetime, retention_days: int) -> datetime:
    """Return the instant ``retention_days`` calendar days before ``now``.

    Records whose reference timestamp is strictly older than the cutoff
    have exceeded their retention. Durations reaching past the earliest
    representable date clamp to ``datetime.min``, which nothing is older
    than.

    Raises:
        ValueError: If retention_days is negative
    """
    if retention_days < 0:
        raise ValueError(f"retention_days must be non-negative, got {retention_days}")
    if retention_days >= (now - datetime.min).days:
        return datetime.min
    return now - timedelta(days=retention_days)
