"""
Scheduling Validator - checks a single proposed meeting time against existing meetings
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from config.settings import Config
from src.calendar.repository import MeetingRepository
from src.scheduler.conflict_detector import ConflictDetector
from src.scheduler.errors import InvalidInputError
from src.scheduler.models import ConflictRecord, TimeInterval, to_naive_utc

logger = logging.getLogger(__name__)

MAX_SUGGESTED_TIMES = 5


@dataclass(frozen=True)
class ValidationResult:
    interval: TimeInterval
    conflicts: List[ConflictRecord] = field(default_factory=list)
    suggested_times: List[datetime] = field(default_factory=list)

    @property
    def blocking_conflicts(self) -> List[ConflictRecord]:
        return ConflictDetector.blocking(self.conflicts)

    @property
    def is_valid(self) -> bool:
        return not self.blocking_conflicts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "interval": self.interval.to_dict(),
            "conflicts": [conflict.to_dict() for conflict in self.conflicts],
            "suggestedTimes": [moment.isoformat() for moment in self.suggested_times],
        }


class SchedulingValidator:
    """
    Validates meeting creation and reschedules by running conflict detection on one
    fixed interval, bypassing generation, scoring and ranking.
    """

    def __init__(self, meeting_repository: MeetingRepository, detector: ConflictDetector = None):
        self.config = Config()
        self.meeting_repository = meeting_repository
        self.detector = detector or ConflictDetector()

    def validate_meeting_time(self, start: datetime, end: datetime, attendee_ids: Sequence[str],
                              meeting_id: Optional[str] = None) -> ValidationResult:
        """
        Check a proposed time for the attendees, ignoring the meeting being moved.

        When the time overlaps other meetings, up to five alternative start times are
        offered at whole-hour steps after the proposed start.
        """
        if not attendee_ids:
            raise InvalidInputError(["attendeeIds must not be empty"])
        start, end = to_naive_utc(start), to_naive_utc(end)
        if not start < end:
            raise InvalidInputError([f"start {start.isoformat()} must be before end {end.isoformat()}"])

        interval = TimeInterval(start=start, end=end)
        duration = end - start
        base = start.replace(minute=0, second=0, microsecond=0)
        horizon_end = base + timedelta(hours=MAX_SUGGESTED_TIMES) + duration

        margin = timedelta(minutes=self.config.ADJACENT_GAP_MINUTES)
        meetings = self.meeting_repository.get_meetings_in_range(start - margin, horizon_end + margin)
        conflicts = self.detector.detect(interval, attendee_ids, meetings, exclude_meeting_id=meeting_id)

        result = ValidationResult(interval=interval, conflicts=conflicts)
        if result.is_valid:
            logger.info(f"✅ {start.isoformat()} is free for all {len(attendee_ids)} attendee(s)")
            return result

        suggested_times = []
        for offset in range(1, MAX_SUGGESTED_TIMES + 1):
            alternative_start = base + timedelta(hours=offset)
            alternative = TimeInterval(start=alternative_start, end=alternative_start + duration)
            alternative_conflicts = self.detector.detect(alternative, attendee_ids, meetings,
                                                         exclude_meeting_id=meeting_id)
            if not ConflictDetector.blocking(alternative_conflicts):
                suggested_times.append(alternative_start)

        logger.info(f"⚠️  {start.isoformat()} has {len(result.blocking_conflicts)} overlapping record(s); "
                    f"{len(suggested_times)} alternative(s) offered")
        return ValidationResult(interval=interval, conflicts=conflicts, suggested_times=suggested_times)
