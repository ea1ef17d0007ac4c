"""Tracking-day arithmetic.

A tracking day is a 24 hour bucket obtained by shifting UTC by a fixed
+7 hour offset before truncating to the day. Every same-day comparison in
the system (duplicate logs, streak gaps, "tracked today", goal periods)
goes through this module so the offset is applied identically everywhere.

Timestamps are handled as naive UTC datetimes; aware values are converted
to UTC first.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Tuple

EPOCH = datetime(1970, 1, 1)
TRACKING_DAY_OFFSET = timedelta(hours=7)
DAY = timedelta(days=1)
MILLISECOND = timedelta(milliseconds=1)

OFFSET_MS = TRACKING_DAY_OFFSET // MILLISECOND
DAY_MS = DAY // MILLISECOND


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (the default service clock)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is not None:
        return timestamp.astimezone(timezone.utc).replace(tzinfo=None)
    return timestamp


def to_storage(timestamp: datetime) -> datetime:
    """Normalize to naive UTC truncated to the store's millisecond resolution."""
    ts = as_utc(timestamp)
    return ts.replace(microsecond=ts.microsecond - ts.microsecond % 1000)


def epoch_ms(timestamp: datetime) -> int:
    return (as_utc(timestamp) - EPOCH) // MILLISECOND


def day_index(timestamp: datetime) -> int:
    """floor((timestamp_ms + OFFSET_MS) / DAY_MS)."""
    return (epoch_ms(timestamp) + OFFSET_MS) // DAY_MS


def day_start(index: int) -> datetime:
    """UTC instant at which tracking day ``index`` begins."""
    return EPOCH + index * DAY - TRACKING_DAY_OFFSET


def day_bounds(timestamp: datetime) -> Tuple[datetime, datetime]:
    """Inclusive ``(start, end)`` UTC range of ``timestamp``'s tracking day."""
    start = day_start(day_index(timestamp))
    return start, start + DAY - MILLISECOND


def period_start(period: str, now: datetime) -> datetime:
    """Start of the current goal period, anchored to ``now``.

    weekly  -> most recent Monday 00:00
    monthly -> first of the month 00:00
    yearly  -> January 1 00:00

    Midnight is the tracking-day midnight, so a period always begins exactly
    where a tracking day begins.
    """
    local = as_utc(now) + TRACKING_DAY_OFFSET
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "weekly":
        # weekday(): Monday == 0, Sunday == 6
        start = midnight - timedelta(days=midnight.weekday())
    elif period == "monthly":
        start = midnight.replace(day=1)
    elif period == "yearly":
        start = midnight.replace(month=1, day=1)
    else:
        raise ValueError(f"unknown period: {period}")
    return start - TRACKING_DAY_OFFSET
