"""
Shared builders and fakes for the test suite
"""
import asyncio
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

from src.calendar.availability import AvailabilityProvider
from src.scheduler.errors import AvailabilityLookupError
from src.scheduler.models import (AvailabilityRecord, MeetingStatus, PreferredWindow, ScheduledMeeting,
                                  SchedulingPreferences, TimeInterval)

# 2025-07-21 is a Monday
MONDAY = datetime(2025, 7, 21)
SATURDAY = datetime(2025, 7, 26)


def at(day: datetime, hour: int, minute: int = 0) -> datetime:
    return day.replace(hour=hour, minute=minute, second=0, microsecond=0)


def interval(start: datetime, minutes: int) -> TimeInterval:
    return TimeInterval(start=start, end=start + timedelta(minutes=minutes))


def meeting(meeting_id: str, start: datetime, minutes: int, attendees: Sequence[str],
            status: MeetingStatus = MeetingStatus.SCHEDULED, title: str = "") -> ScheduledMeeting:
    return ScheduledMeeting(
        id=meeting_id,
        interval=interval(start, minutes),
        status=status,
        attendee_ids=tuple(attendees),
        title=title,
    )


def preferences(windows=((9, 17),), **overrides) -> SchedulingPreferences:
    values = dict(
        preferred_windows=tuple(PreferredWindow(start, end) for start, end in windows),
        buffer_minutes=0,
        allow_weekends=False,
        allow_after_hours=False,
        max_conflicts=1,
        min_available_attendees=0,
    )
    values.update(overrides)
    return SchedulingPreferences(**values)


class FakeAvailabilityProvider(AvailabilityProvider):
    """Scriptable availability backend that records how it was called"""

    def __init__(self, is_available: Callable[[str, TimeInterval], bool] = None,
                 fails: Callable[[TimeInterval], bool] = None,
                 delay: Callable[[TimeInterval], float] = None,
                 omit: Callable[[str, TimeInterval], bool] = None):
        self.is_available = is_available or (lambda attendee, slot: True)
        self.fails = fails or (lambda slot: False)
        self.delay = delay or (lambda slot: 0.0)
        self.omit = omit or (lambda attendee, slot: False)
        self.calls: List[TimeInterval] = []
        self.excluded: List[Optional[str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def resolve(self, attendee_ids, slot, exclude_meeting_id=None) -> List[AvailabilityRecord]:
        self.calls.append(slot)
        self.excluded.append(exclude_meeting_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay(slot))
            if self.fails(slot):
                raise AvailabilityLookupError(f"backend down for {slot.start.isoformat()}")
            return [
                AvailabilityRecord(attendee_id=attendee, is_available=self.is_available(attendee, slot))
                for attendee in attendee_ids
                if not self.omit(attendee, slot)
            ]
        finally:
            self.in_flight -= 1
