"""
Domain models for the scheduling assistant.

Every object here is created fresh for a single search and never persisted.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from config.settings import Config


def to_naive_utc(moment: datetime) -> datetime:
    """Instants are compared as naive UTC; aware values are converted, naive ones kept"""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 instant (a trailing Z is accepted) into naive UTC"""
    return to_naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


class ConflictSeverity(Enum):
    """How a candidate interval relates to an existing meeting."""
    OVERLAP = "overlap"
    ADJACENT = "adjacent"          # gap of at most Config.ADJACENT_GAP_MINUTES
    BACK_TO_BACK = "back_to_back"  # boundaries touch


class MeetingStatus(Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


class SearchState(Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class SearchOutcome(Enum):
    SUGGESTIONS_FOUND = "suggestions_found"
    NO_MATCHING_SLOTS = "no_matching_slots"   # candidates evaluated, none passed the hard filters
    NO_FEASIBLE_SLOTS = "no_feasible_slots"   # every availability lookup failed
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class TimeInterval:
    start: datetime
    end: datetime

    def __post_init__(self):
        if not self.start < self.end:
            raise ValueError(f"Interval start {self.start} must be before end {self.end}")

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class ScheduledMeeting:
    """Read-only snapshot of a meeting supplied by the meeting store."""
    id: str
    interval: TimeInterval
    status: MeetingStatus = MeetingStatus.SCHEDULED
    attendee_ids: Tuple[str, ...] = ()
    title: str = ""

    @property
    def is_cancelled(self) -> bool:
        return self.status is MeetingStatus.CANCELLED

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduledMeeting":
        return cls(
            id=str(data["id"]),
            interval=TimeInterval(
                start=parse_instant(data["start"]),
                end=parse_instant(data["end"]),
            ),
            status=MeetingStatus(data.get("status", MeetingStatus.SCHEDULED.value)),
            attendee_ids=tuple(data.get("attendeeIds", [])),
            title=data.get("title", ""),
        )


@dataclass(frozen=True)
class PreferredWindow:
    start_hour: int
    end_hour: int

    def contains(self, moment: datetime) -> bool:
        minutes = moment.hour * 60 + moment.minute
        return self.start_hour * 60 <= minutes < self.end_hour * 60


@dataclass(frozen=True)
class SchedulingPreferences:
    preferred_windows: Tuple[PreferredWindow, ...]
    buffer_minutes: int = 0
    allow_weekends: bool = False
    allow_after_hours: bool = False
    max_conflicts: int = 1
    min_available_attendees: int = 0

    @classmethod
    def defaults(cls, attendee_count: int) -> "SchedulingPreferences":
        """Working hours Mon-Fri, weekends disallowed, 80% of attendees required."""
        return cls(
            preferred_windows=tuple(PreferredWindow(start, end) for start, end in Config.DEFAULT_PREFERRED_WINDOWS),
            buffer_minutes=Config.DEFAULT_BUFFER_MINUTES,
            allow_weekends=False,
            allow_after_hours=False,
            max_conflicts=Config.DEFAULT_MAX_CONFLICTS,
            min_available_attendees=math.ceil(attendee_count * Config.DEFAULT_MIN_AVAILABLE_RATIO),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any], attendee_count: int) -> "SchedulingPreferences":
        """Build preferences from a camelCase payload, falling back to defaults per field."""
        base = cls.defaults(attendee_count)
        windows = data.get("preferredWindows")
        if windows is None:
            preferred_windows = base.preferred_windows
        else:
            preferred_windows = tuple(
                PreferredWindow(int(window["startHour"]), int(window["endHour"])) for window in windows
            )
        return cls(
            preferred_windows=preferred_windows,
            buffer_minutes=int(data.get("bufferMinutes", base.buffer_minutes)),
            allow_weekends=bool(data.get("allowWeekends", base.allow_weekends)),
            allow_after_hours=bool(data.get("allowAfterHours", base.allow_after_hours)),
            max_conflicts=int(data.get("maxConflicts", base.max_conflicts)),
            min_available_attendees=int(data.get("minAvailableAttendees", base.min_available_attendees)),
        )

    def is_preferred(self, moment: datetime) -> bool:
        return any(window.contains(moment) for window in self.preferred_windows)


@dataclass(frozen=True)
class ConflictRecord:
    """
    One attendee's clash with one existing meeting.

    overlap_interval is None for BACK_TO_BACK and ADJACENT records, which describe
    meetings that sit next to the candidate rather than on top of it.
    """
    meeting_id: str
    attendee_id: str
    severity: ConflictSeverity
    overlap_interval: Optional[TimeInterval] = None
    gap_minutes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "meetingId": self.meeting_id,
            "attendeeId": self.attendee_id,
            "severity": self.severity.value,
            "overlapInterval": self.overlap_interval.to_dict() if self.overlap_interval else None,
            "gapMinutes": self.gap_minutes,
        }


@dataclass(frozen=True)
class AvailabilityRecord:
    attendee_id: str
    is_available: bool
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"attendeeId": self.attendee_id, "isAvailable": self.is_available, "reason": self.reason}


@dataclass
class CandidateSlot:
    """A generated interval together with the evidence gathered for it."""
    interval: TimeInterval
    conflicts: List[ConflictRecord] = field(default_factory=list)
    availability: List[AvailabilityRecord] = field(default_factory=list)

    @property
    def conflict_count(self) -> int:
        """Distinct existing meetings that actually overlap the candidate."""
        return len({c.meeting_id for c in self.conflicts if c.severity is ConflictSeverity.OVERLAP})

    @property
    def available_attendees(self) -> int:
        return len({a.attendee_id for a in self.availability if a.is_available})

    @property
    def total_attendees(self) -> int:
        return len({a.attendee_id for a in self.availability})


@dataclass(frozen=True)
class Suggestion:
    interval: TimeInterval
    score: int
    conflict_count: int
    available_attendees: int
    total_attendees: int
    reason: str
    is_working_hours: bool
    label: str = ""
    conflicts: Tuple[ConflictRecord, ...] = ()
    alternative_rooms: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startTime": self.interval.start.isoformat(),
            "endTime": self.interval.end.isoformat(),
            "score": self.score,
            "label": self.label,
            "conflictCount": self.conflict_count,
            "availableAttendees": self.available_attendees,
            "totalAttendees": self.total_attendees,
            "reason": self.reason,
            "isWorkingHours": self.is_working_hours,
            "conflicts": [conflict.to_dict() for conflict in self.conflicts],
            "alternativeRooms": list(self.alternative_rooms) or None,
        }


@dataclass(frozen=True)
class SearchResult:
    generation: int
    state: SearchState
    outcome: SearchOutcome
    suggestions: Tuple[Suggestion, ...] = ()
    candidates_evaluated: int = 0
    candidates_failed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generation": self.generation,
            "state": self.state.value,
            "outcome": self.outcome.value,
            "suggestions": [suggestion.to_dict() for suggestion in self.suggestions],
            "candidatesEvaluated": self.candidates_evaluated,
            "candidatesFailed": self.candidates_failed,
        }
