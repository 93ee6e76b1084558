"""
Attendee availability providers.

The scheduling core only depends on AvailabilityProvider.resolve; the concrete
providers below adapt the meeting store, Google Calendar free/busy and an HTTP
directory service to that contract.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

import requests
from googleapiclient.errors import HttpError

from config.settings import Config
from src.calendar.calendar_manager import build_calendar_service, parse_google_datetime, to_rfc3339
from src.calendar.repository import MeetingRepository
from src.scheduler.errors import AvailabilityLookupError
from src.scheduler.intervals import overlaps
from src.scheduler.models import AvailabilityRecord, TimeInterval

logger = logging.getLogger(__name__)

class AvailabilityProvider(ABC):
    """External directory/calendar lookup"""

    @abstractmethod
    async def resolve(self, attendee_ids: Sequence[str], interval: TimeInterval,
                      exclude_meeting_id: Optional[str] = None) -> List[AvailabilityRecord]:
        """
        Availability of each attendee for the interval.

        exclude_meeting_id names the meeting being rescheduled; it never makes its
        own attendees busy. Raises AvailabilityLookupError when the backend cannot
        answer. Attendees the backend knows nothing about are left out of the result.
        """


class MeetingRepositoryAvailabilityProvider(AvailabilityProvider):
    """An attendee is available unless one of their live meetings overlaps the interval"""

    def __init__(self, repository: MeetingRepository):
        self.repository = repository

    async def resolve(self, attendee_ids: Sequence[str], interval: TimeInterval,
                      exclude_meeting_id: Optional[str] = None) -> List[AvailabilityRecord]:
        meetings = await asyncio.to_thread(self.repository.get_meetings_in_range, interval.start, interval.end)

        records = []
        for attendee in attendee_ids:
            blocking = next(
                (m for m in meetings
                 if not m.is_cancelled and m.id != exclude_meeting_id
                 and attendee in m.attendee_ids and overlaps(interval, m.interval)),
                None,
            )
            if blocking is None:
                records.append(AvailabilityRecord(attendee_id=attendee, is_available=True))
            else:
                records.append(AvailabilityRecord(
                    attendee_id=attendee,
                    is_available=False,
                    reason=f"busy: {blocking.title or blocking.id}",
                ))
        return records


class GoogleFreeBusyAvailabilityProvider(AvailabilityProvider):
    """Free/busy lookup through the Google Calendar API using the organizer's credentials"""

    def __init__(self, organizer_email: Optional[str] = None, service_factory: Callable = build_calendar_service):
        if organizer_email is None:
            if not Config.AVAILABLE_USERS:
                raise ValueError("No calendar users configured for free/busy lookups")
            organizer_email = Config.AVAILABLE_USERS[0]
        self.organizer_email = organizer_email
        self._service_factory = service_factory

    def _query(self, attendee_ids: Sequence[str], interval: TimeInterval) -> List[AvailabilityRecord]:
        body = {
            "timeMin": to_rfc3339(interval.start),
            "timeMax": to_rfc3339(interval.end),
            "items": [{"id": attendee} for attendee in attendee_ids],
        }
        try:
            service = self._service_factory(self.organizer_email)
            response = service.freebusy().query(body=body).execute()
        except HttpError as e:
            raise AvailabilityLookupError(f"Free/busy query failed: {e}") from e
        except (ValueError, FileNotFoundError) as e:
            raise AvailabilityLookupError(str(e)) from e

        calendars = response.get('calendars', {})
        records = []
        for attendee in attendee_ids:
            calendar = calendars.get(attendee)
            if calendar is None or calendar.get('errors'):
                logger.warning(f"⚠️  No free/busy data for {attendee}")
                continue

            busy = [
                TimeInterval(
                    start=parse_google_datetime(period['start'], interval.start),
                    end=parse_google_datetime(period['end'], interval.start),
                )
                for period in calendar.get('busy', [])
            ]
            if any(overlaps(interval, period) for period in busy):
                records.append(AvailabilityRecord(attendee_id=attendee, is_available=False, reason="busy"))
            else:
                records.append(AvailabilityRecord(attendee_id=attendee, is_available=True))
        return records

    async def resolve(self, attendee_ids: Sequence[str], interval: TimeInterval,
                      exclude_meeting_id: Optional[str] = None) -> List[AvailabilityRecord]:
        # Free/busy periods carry no event ids, so the excluded meeting cannot be told apart
        return await asyncio.to_thread(self._query, attendee_ids, interval)


class DirectoryAvailabilityProvider(AvailabilityProvider):
    """Availability from an HTTP directory service (POST {base_url}/availability)"""

    def __init__(self, base_url: Optional[str] = None, timeout: float = None, session: requests.Session = None):
        self.base_url = (base_url or Config.DIRECTORY_SERVICE_URL or "").rstrip("/")
        if not self.base_url:
            raise ValueError("Directory service URL is not configured")
        self.timeout = Config.DIRECTORY_TIMEOUT if timeout is None else timeout
        self.session = session or requests.Session()

    def _fetch(self, attendee_ids: Sequence[str], interval: TimeInterval,
               exclude_meeting_id: Optional[str] = None) -> List[AvailabilityRecord]:
        payload = {
            "attendeeIds": list(attendee_ids),
            "start": interval.start.isoformat(),
            "end": interval.end.isoformat(),
        }
        if exclude_meeting_id:
            payload["excludeMeetingId"] = exclude_meeting_id

        try:
            response = self.session.post(
                f"{self.base_url}/availability",
                json=payload,
                timeout=self.timeout,
                headers={'Content-Type': 'application/json'}
            )
            response.raise_for_status()
            records = [
                AvailabilityRecord(
                    attendee_id=item["attendeeId"],
                    is_available=bool(item["isAvailable"]),
                    reason=item.get("reason"),
                )
                for item in response.json().get("availability", [])
            ]
        except requests.exceptions.Timeout as e:
            raise AvailabilityLookupError("Directory service timeout") from e
        except requests.exceptions.RequestException as e:
            raise AvailabilityLookupError(f"Directory service error: {e}") from e
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise AvailabilityLookupError(f"Invalid directory response: {e}") from e

        return records

    async def resolve(self, attendee_ids: Sequence[str], interval: TimeInterval,
                      exclude_meeting_id: Optional[str] = None) -> List[AvailabilityRecord]:
        return await asyncio.to_thread(self._fetch, attendee_ids, interval, exclude_meeting_id)
