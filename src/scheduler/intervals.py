"""
Interval primitives shared by the generator, detector and scorer
"""
from datetime import datetime, timedelta
from typing import Optional

from config.settings import Config
from src.scheduler.models import ConflictSeverity, TimeInterval


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """Strict overlap: touching boundaries do not overlap."""
    return a.start < b.end and a.end > b.start


def gap(a: TimeInterval, b: TimeInterval) -> timedelta:
    """Time between two intervals (zero when they touch, negative when they overlap)."""
    if a.end <= b.start:
        return b.start - a.end
    if b.end <= a.start:
        return a.start - b.end
    return -(min(a.end, b.end) - max(a.start, b.start))


def gap_minutes(a: TimeInterval, b: TimeInterval) -> int:
    """Whole minutes of gap, floored"""
    return int(gap(a, b).total_seconds() // 60)


def overlap_interval(a: TimeInterval, b: TimeInterval) -> Optional[TimeInterval]:
    if not overlaps(a, b):
        return None
    return TimeInterval(start=max(a.start, b.start), end=min(a.end, b.end))


def classify(a: TimeInterval, b: TimeInterval,
             adjacent_gap_minutes: int = Config.ADJACENT_GAP_MINUTES) -> Optional[ConflictSeverity]:
    """
    Classify how two intervals relate.

    Overlapping intervals are OVERLAP. Non-overlapping intervals whose boundaries
    touch are BACK_TO_BACK, and those separated by at most adjacent_gap_minutes are
    ADJACENT. Anything further apart is not a conflict and returns None.
    """
    if overlaps(a, b):
        return ConflictSeverity.OVERLAP
    if a.start == b.end or a.end == b.start:
        return ConflictSeverity.BACK_TO_BACK
    if gap(a, b) <= timedelta(minutes=adjacent_gap_minutes):
        return ConflictSeverity.ADJACENT
    return None


def is_weekend(moment: datetime) -> bool:
    return moment.weekday() >= 5


def is_working_hours(moment: datetime) -> bool:
    """Mon-Fri between BUSINESS_HOURS_START and BUSINESS_HOURS_END"""
    return (not is_weekend(moment)
            and Config.BUSINESS_HOURS_START <= moment.hour < Config.BUSINESS_HOURS_END)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def from_start(start: datetime, duration_minutes: int) -> TimeInterval:
    return TimeInterval(start=start, end=start + timedelta(minutes=duration_minutes))
