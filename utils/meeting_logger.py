"""
Specialized logging utilities for meeting searches and off-hours tracking
"""
import logging
from typing import Iterable, List, Sequence

from config.settings import Config
from src.scheduler.models import ScheduledMeeting, Suggestion

logger = logging.getLogger(__name__)

class MeetingLogger:
    """Specialized logger for meeting scheduling events"""

    @staticmethod
    def is_off_hours(meeting: ScheduledMeeting) -> bool:
        start = meeting.interval.start
        return (start.hour < Config.BUSINESS_HOURS_START or
                start.hour >= Config.BUSINESS_HOURS_END or
                start.weekday() >= 5)  # Weekend

    @staticmethod
    def log_existing_meetings(meetings: Sequence[ScheduledMeeting], attendee_ids: Iterable[str]):
        """Log the existing-meeting snapshot a search will be checked against"""
        attendees = set(attendee_ids)
        relevant = [m for m in meetings if not m.is_cancelled and attendees.intersection(m.attendee_ids)]
        cancelled = sum(1 for m in meetings if m.is_cancelled)

        logger.info(f"📋 EXISTING MEETINGS: {len(meetings)} in range, "
                    f"{len(relevant)} involving the attendees, {cancelled} cancelled")
        if not relevant:
            return

        off_hours = [m for m in relevant if MeetingLogger.is_off_hours(m)]
        logger.info(f"   🏢 Business hours meetings: {len(relevant) - len(off_hours)}")
        logger.info(f"   🌙 Off hours meetings: {len(off_hours)}")

        for i, meeting in enumerate(relevant, 1):
            logger.debug(f"   {i}. {meeting.title or meeting.id}")
            logger.debug(f"      Time: {meeting.interval.start.isoformat()} to {meeting.interval.end.isoformat()}")
            logger.debug(f"      Attendees: {', '.join(meeting.attendee_ids)}")

    @staticmethod
    def log_suggestions(suggestions: List[Suggestion], limit: int = 3):
        """Log a short summary of the best suggestions"""
        if not suggestions:
            logger.info("📭 No suggestions passed the hard filters")
            return

        logger.info(f"🎯 TOP SUGGESTIONS ({len(suggestions)} total):")
        for i, suggestion in enumerate(suggestions[:limit], 1):
            marker = "🏢" if suggestion.is_working_hours else "🌙"
            logger.info(f"   {i}. {marker} {suggestion.interval.start.isoformat()} "
                        f"score={suggestion.score} ({suggestion.reason}), "
                        f"{suggestion.available_attendees}/{suggestion.total_attendees} available, "
                        f"{suggestion.conflict_count} conflict(s)")
