"""
Meeting store interface consumed by the scheduling core
"""
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List

from src.scheduler.models import ScheduledMeeting

logger = logging.getLogger(__name__)

class MeetingRepository(ABC):
    """Read-only access to existing meetings"""

    @abstractmethod
    def get_meetings_in_range(self, start: datetime, end: datetime) -> List[ScheduledMeeting]:
        """Meetings that overlap or touch [start, end], in a stable order"""


class InMemoryMeetingRepository(MeetingRepository):
    """Meeting store backed by a list, seeded from code or a JSON file"""

    def __init__(self, meetings: Iterable[ScheduledMeeting] = ()):
        self._meetings: List[ScheduledMeeting] = list(meetings)

    @classmethod
    def from_json_file(cls, path: str) -> "InMemoryMeetingRepository":
        """Load meetings from a JSON list of {id, start, end, status, attendeeIds, title}"""
        with open(path, 'r') as f:
            data = json.load(f)
        meetings = [ScheduledMeeting.from_dict(item) for item in data]
        logger.info(f"📋 Loaded {len(meetings)} meetings from {path}")
        return cls(meetings)

    def add(self, meeting: ScheduledMeeting):
        self._meetings.append(meeting)

    def get_meetings_in_range(self, start: datetime, end: datetime) -> List[ScheduledMeeting]:
        return [
            meeting for meeting in self._meetings
            if meeting.interval.start <= end and meeting.interval.end >= start
        ]

    def __len__(self):
        return len(self._meetings)
