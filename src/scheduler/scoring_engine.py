"""
Scoring of evaluated candidate slots
"""
from typing import Iterable, Sequence, Tuple

from src.scheduler.intervals import is_weekend, is_working_hours
from src.scheduler.models import (AvailabilityRecord, ConflictRecord, ConflictSeverity,
                                  SchedulingPreferences, TimeInterval)

MAX_SCORE = 100
MIN_SCORE = 0

CONFLICT_PENALTY = 20
AVAILABILITY_WEIGHT = 30
WORKING_HOURS_BONUS = 20
PREFERRED_WINDOW_BONUS = 15
WEEKEND_PENALTY = 30


class ScoringEngine:
    """Turns the evidence gathered for a candidate into a 0-100 score and a reason"""

    def score(self, candidate: TimeInterval, conflicts: Sequence[ConflictRecord],
              availability: Sequence[AvailabilityRecord], total_attendees: int,
              preferences: SchedulingPreferences) -> Tuple[int, str, bool]:
        conflict_count = self.distinct_conflicting_meetings(conflicts)
        available = len({record.attendee_id for record in availability if record.is_available})
        working_hours = is_working_hours(candidate.start)

        score = MAX_SCORE
        score -= CONFLICT_PENALTY * conflict_count
        if total_attendees > 0:
            score += AVAILABILITY_WEIGHT * available // total_attendees
        if working_hours:
            score += WORKING_HOURS_BONUS
        if preferences.is_preferred(candidate.start):
            score += PREFERRED_WINDOW_BONUS
        if is_weekend(candidate.start) and not preferences.allow_weekends:
            score -= WEEKEND_PENALTY
        score = max(MIN_SCORE, min(MAX_SCORE, score))

        reason = self.reason(score, conflict_count, available, total_attendees, working_hours)
        return score, reason, working_hours

    @staticmethod
    def distinct_conflicting_meetings(conflicts: Iterable[ConflictRecord]) -> int:
        return len({c.meeting_id for c in conflicts if c.severity is ConflictSeverity.OVERLAP})

    @staticmethod
    def reason(score: int, conflict_count: int, available: int, total: int, working_hours: bool) -> str:
        if score >= 80:
            return "excellent availability"
        if score >= 60:
            return "good, most attendees available"
        if conflict_count > 0:
            return f"{conflict_count} conflict(s) but manageable"
        if available < total:
            return f"{total - available} attendee(s) unavailable"
        if not working_hours:
            return "outside standard working hours"
        return "alternative time slot"

    @staticmethod
    def label(score: int) -> str:
        if score >= 80:
            return "Excellent"
        if score >= 60:
            return "Good"
        if score >= 40:
            return "Fair"
        return "Poor"
