from datetime import datetime, timezone
from unittest.mock import MagicMock

from googleapiclient.errors import HttpError

from src.calendar.calendar_manager import GoogleCalendarMeetingRepository, parse_google_datetime, to_rfc3339
from src.scheduler.models import MeetingStatus
from helpers import MONDAY, at


def event(event_id, start, end, attendees=(), status="confirmed", summary="Sync"):
    return {
        "id": event_id,
        "summary": summary,
        "status": status,
        "start": {"dateTime": start},
        "end": {"dateTime": end},
        "attendees": [{"email": a} for a in attendees],
    }


def calendar_services(events_by_owner):
    services = {}
    for owner, items in events_by_owner.items():
        service = MagicMock()
        service.events.return_value.list.return_value.execute.return_value = {"items": items}
        services[owner] = service
    return services


def test_rfc3339_formatting():
    assert to_rfc3339(at(MONDAY, 9)) == "2025-07-21T09:00:00Z"
    aware = datetime(2025, 7, 21, 9, tzinfo=timezone.utc)
    assert to_rfc3339(aware) == "2025-07-21T09:00:00+00:00"


def test_parse_matches_reference_awareness():
    assert parse_google_datetime("2025-07-21T09:00:00Z", at(MONDAY, 0)) == at(MONDAY, 9)
    aware = parse_google_datetime("2025-07-21T09:00:00Z", datetime(2025, 7, 21, tzinfo=timezone.utc))
    assert aware.tzinfo is not None


def test_offsets_are_converted_to_utc_for_naive_references():
    assert parse_google_datetime("2025-07-21T10:00:00-05:00", at(MONDAY, 15)) == at(MONDAY, 15)
    assert parse_google_datetime("2025-07-22T01:30:00+02:00", at(MONDAY, 0)) == at(MONDAY, 23, 30)


def test_events_in_other_timezones_land_on_utc():
    services = calendar_services({"alice@example.com": [
        event("e1", "2025-07-21T10:00:00-05:00", "2025-07-21T11:00:00-05:00")]})
    repository = GoogleCalendarMeetingRepository(["alice@example.com"], service_factory=services.get)

    meetings = repository.get_meetings_in_range(MONDAY, at(MONDAY, 23))

    assert meetings[0].interval.start == at(MONDAY, 15)
    assert meetings[0].interval.end == at(MONDAY, 16)


def test_events_become_meetings_with_owner_as_attendee():
    services = calendar_services({"alice@example.com": [
        event("e1", "2025-07-21T10:00:00Z", "2025-07-21T11:00:00Z", ["bob@example.com"]),
        event("e2", "2025-07-21T12:00:00Z", "2025-07-21T13:00:00Z", status="cancelled"),
        {"id": "holiday", "start": {"date": "2025-07-21"}, "end": {"date": "2025-07-22"}},
    ]})
    repository = GoogleCalendarMeetingRepository(["alice@example.com"], service_factory=services.get)

    meetings = repository.get_meetings_in_range(MONDAY, at(MONDAY, 23))

    assert [m.id for m in meetings] == ["e1", "e2"]
    assert meetings[0].attendee_ids == ("bob@example.com", "alice@example.com")
    assert meetings[0].interval.start == at(MONDAY, 10)
    assert meetings[0].title == "Sync"
    assert meetings[1].status is MeetingStatus.CANCELLED

    kwargs = services["alice@example.com"].events.return_value.list.call_args.kwargs
    assert kwargs["timeMin"] == "2025-07-21T00:00:00Z"
    assert kwargs["showDeleted"] is True


def test_shared_events_are_merged_across_calendars():
    shared = ("2025-07-21T10:00:00Z", "2025-07-21T11:00:00Z")
    services = calendar_services({
        "alice@example.com": [event("e1", *shared, ["carol@example.com"])],
        "bob@example.com": [event("e1", *shared), event("e2", "2025-07-21T14:00:00Z", "2025-07-21T15:00:00Z")],
    })
    repository = GoogleCalendarMeetingRepository(["alice@example.com", "bob@example.com"],
                                                 service_factory=services.get)

    meetings = repository.get_meetings_in_range(MONDAY, at(MONDAY, 23))

    assert [m.id for m in meetings] == ["e1", "e2"]
    assert meetings[0].attendee_ids == ("carol@example.com", "alice@example.com", "bob@example.com")


def test_results_are_cached_per_owner_and_range():
    services = calendar_services({"alice@example.com": [
        event("e1", "2025-07-21T10:00:00Z", "2025-07-21T11:00:00Z")]})
    repository = GoogleCalendarMeetingRepository(["alice@example.com"], service_factory=services.get)

    repository.get_user_meetings("alice@example.com", MONDAY, at(MONDAY, 23))
    repository.get_user_meetings("alice@example.com", MONDAY, at(MONDAY, 23))

    assert services["alice@example.com"].events.return_value.list.call_count == 1


def test_failing_calendar_contributes_nothing():
    services = calendar_services({"bob@example.com": [
        event("e1", "2025-07-21T10:00:00Z", "2025-07-21T11:00:00Z")]})
    broken = MagicMock()
    broken.events.return_value.list.return_value.execute.side_effect = HttpError(
        MagicMock(status=500, reason="Server Error"), b"Server Error")
    services["alice@example.com"] = broken
    repository = GoogleCalendarMeetingRepository(["alice@example.com", "bob@example.com"],
                                                 service_factory=services.get)

    meetings = repository.get_meetings_in_range(MONDAY, at(MONDAY, 23))

    assert [m.id for m in meetings] == ["e1"]


def test_no_owners_means_no_meetings(monkeypatch):
    monkeypatch.setattr("config.settings.Config.AVAILABLE_USERS", [])

    assert GoogleCalendarMeetingRepository().get_meetings_in_range(MONDAY, at(MONDAY, 23)) == []
