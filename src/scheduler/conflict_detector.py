"""
Conflict detection between a candidate interval and existing meetings
"""
import logging
from typing import Iterable, List, Optional, Sequence

from config.settings import Config
from src.scheduler.intervals import classify, gap_minutes, overlap_interval
from src.scheduler.models import ConflictRecord, ConflictSeverity, ScheduledMeeting, TimeInterval

logger = logging.getLogger(__name__)

class ConflictDetector:
    """
    Finds, for every shared attendee, the existing meetings that overlap or sit
    right next to a candidate interval.

    Cancelled meetings and the meeting being rescheduled are ignored. Output order
    follows the meeting order, then the candidate's attendee order.
    """

    def __init__(self, adjacent_gap_minutes: int = None):
        self.config = Config()
        self.adjacent_gap_minutes = (self.config.ADJACENT_GAP_MINUTES
                                     if adjacent_gap_minutes is None else adjacent_gap_minutes)

    def detect(self, candidate: TimeInterval, attendee_ids: Sequence[str],
               existing_meetings: Iterable[ScheduledMeeting],
               exclude_meeting_id: Optional[str] = None) -> List[ConflictRecord]:
        conflicts: List[ConflictRecord] = []

        for meeting in existing_meetings:
            if meeting.is_cancelled:
                continue
            if exclude_meeting_id is not None and meeting.id == exclude_meeting_id:
                continue

            severity = classify(candidate, meeting.interval, self.adjacent_gap_minutes)
            if severity is None:
                continue

            shared = [attendee for attendee in attendee_ids if attendee in meeting.attendee_ids]
            if not shared:
                continue

            if severity is ConflictSeverity.OVERLAP:
                overlap = overlap_interval(candidate, meeting.interval)
                gap = 0
            else:
                overlap = None
                gap = gap_minutes(candidate, meeting.interval)

            for attendee in shared:
                conflicts.append(ConflictRecord(
                    meeting_id=meeting.id,
                    attendee_id=attendee,
                    severity=severity,
                    overlap_interval=overlap,
                    gap_minutes=gap,
                ))

        if conflicts:
            logger.debug(f"Found {len(conflicts)} conflict record(s) for "
                         f"{candidate.start.isoformat()} - {candidate.end.isoformat()}")
        return conflicts

    @staticmethod
    def blocking(conflicts: Iterable[ConflictRecord]) -> List[ConflictRecord]:
        """Only the records that actually overlap the candidate"""
        return [conflict for conflict in conflicts if conflict.severity is ConflictSeverity.OVERLAP]
