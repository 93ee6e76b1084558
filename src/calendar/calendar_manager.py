"""
Google Calendar backed meeting store
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from concurrent.futures import ThreadPoolExecutor, as_completed
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from config.settings import Config
from src.calendar.repository import MeetingRepository
from src.scheduler.models import MeetingStatus, ScheduledMeeting, TimeInterval, parse_instant

logger = logging.getLogger(__name__)


def build_calendar_service(email: str):
    """Build Google Calendar service for a user"""
    try:
        token_path = Config.get_token_path(email)
        credentials = Credentials.from_authorized_user_file(token_path)
    except (ValueError, FileNotFoundError) as e:
        logger.error(f"❌ Calendar token not available for {email}: {e}")
        raise
    return build("calendar", "v3", credentials=credentials)


def to_rfc3339(moment: datetime) -> str:
    """Google requires an explicit offset; naive instants are sent as UTC"""
    if moment.tzinfo is None:
        return moment.isoformat() + "Z"
    return moment.isoformat()


def parse_google_datetime(value: str, reference: datetime) -> datetime:
    """Parse an API timestamp, matching the naive/aware form of the reference instant"""
    if reference.tzinfo is None:
        return parse_instant(value)
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class GoogleCalendarMeetingRepository(MeetingRepository):
    """Meeting store reading the primary calendars of configured users, with caching and parallel fetches"""

    def __init__(self, calendar_owners: Optional[List[str]] = None, service_factory=build_calendar_service):
        self.config = Config()
        self.calendar_owners = list(calendar_owners or self.config.AVAILABLE_USERS)
        self._service_factory = service_factory
        self._calendar_cache: Dict[str, List[ScheduledMeeting]] = {}
        self._cache_expiry: Dict[str, datetime] = {}
        self._cache_duration = timedelta(minutes=self.config.CALENDAR_CACHE_MINUTES)

    def _is_cache_valid(self, cache_key: str) -> bool:
        """Check if cached data is still valid"""
        if cache_key not in self._calendar_cache:
            return False

        expiry_time = self._cache_expiry.get(cache_key)
        if not expiry_time or datetime.now() > expiry_time:
            self._calendar_cache.pop(cache_key, None)
            self._cache_expiry.pop(cache_key, None)
            return False

        return True

    def _cache_meetings(self, cache_key: str, meetings: List[ScheduledMeeting]):
        self._calendar_cache[cache_key] = meetings
        self._cache_expiry[cache_key] = datetime.now() + self._cache_duration

    def _to_meeting(self, owner: str, event: Dict, reference: datetime) -> Optional[ScheduledMeeting]:
        start_time = event.get('start', {}).get('dateTime', '')
        end_time = event.get('end', {}).get('dateTime', '')
        # All-day events carry only a date and never block a slot
        if not start_time or not end_time:
            return None

        attendees = [a['email'] for a in event.get('attendees', []) if 'email' in a]
        if owner not in attendees:
            attendees.append(owner)

        status = MeetingStatus.CANCELLED if event.get('status') == 'cancelled' else MeetingStatus.SCHEDULED
        return ScheduledMeeting(
            id=event.get('id', ''),
            interval=TimeInterval(
                start=parse_google_datetime(start_time, reference),
                end=parse_google_datetime(end_time, reference),
            ),
            status=status,
            attendee_ids=tuple(dict.fromkeys(attendees)),
            title=event.get('summary', 'Untitled Event'),
        )

    def get_user_meetings(self, email: str, start: datetime, end: datetime) -> List[ScheduledMeeting]:
        """Get meetings from one user's primary calendar with caching"""
        cache_key = f"{email}_{start.isoformat()}_{end.isoformat()}"

        if self._is_cache_valid(cache_key):
            logger.info(f"Using cached events for {email}")
            return self._calendar_cache[cache_key]

        logger.info(f"📅 Fetching calendar events for {email}")
        logger.info(f"   Date range: {start.isoformat()} to {end.isoformat()}")

        try:
            calendar_service = self._service_factory(email)
            events_result = calendar_service.events().list(
                calendarId='primary',
                timeMin=to_rfc3339(start),
                timeMax=to_rfc3339(end),
                singleEvents=True,
                orderBy='startTime',
                showDeleted=True,
                maxResults=self.config.CALENDAR_MAX_RESULTS
            ).execute()
        except HttpError as e:
            logger.error(f"HTTP error getting events for {email}: {e}")
            return []
        except (ValueError, FileNotFoundError):
            return []

        meetings = []
        for event in events_result.get('items', []):
            meeting = self._to_meeting(email, event, start)
            if meeting is not None:
                meetings.append(meeting)

        self._cache_meetings(cache_key, meetings)
        logger.info(f"✅ Retrieved and cached {len(meetings)} events for {email}")
        return meetings

    def get_meetings_in_range(self, start: datetime, end: datetime) -> List[ScheduledMeeting]:
        """Merge all owners' meetings, de-duplicated by event id, in owner order"""
        if not self.calendar_owners:
            return []

        results: Dict[str, List[ScheduledMeeting]] = {}
        with ThreadPoolExecutor(max_workers=min(len(self.calendar_owners), 5)) as executor:
            future_to_email = {
                executor.submit(self.get_user_meetings, email, start, end): email
                for email in self.calendar_owners
            }
            for future in as_completed(future_to_email):
                email = future_to_email[future]
                try:
                    results[email] = future.result(timeout=30)
                except Exception as e:
                    logger.error(f"Failed to get events for {email}: {e}")
                    results[email] = []

        merged: Dict[str, ScheduledMeeting] = {}
        for email in self.calendar_owners:
            for meeting in results.get(email, []):
                existing = merged.get(meeting.id)
                if existing is None:
                    merged[meeting.id] = meeting
                elif existing.status is meeting.status:
                    # Same event seen from another attendee's calendar
                    attendees = tuple(dict.fromkeys(existing.attendee_ids + meeting.attendee_ids))
                    merged[meeting.id] = ScheduledMeeting(
                        id=existing.id, interval=existing.interval, status=existing.status,
                        attendee_ids=attendees, title=existing.title,
                    )

        logger.info(f"📊 {len(merged)} distinct meetings across {len(self.calendar_owners)} calendar(s)")
        return list(merged.values())
