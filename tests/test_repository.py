import json

from src.calendar.repository import InMemoryMeetingRepository
from src.scheduler.models import MeetingStatus
from helpers import MONDAY, at, meeting


def test_range_query_includes_touching_meetings_in_input_order():
    repository = InMemoryMeetingRepository([
        meeting("late", at(MONDAY, 15), 60, ["alice"]),
        meeting("touching", at(MONDAY, 9), 60, ["alice"]),
        meeting("early", at(MONDAY, 7), 60, ["alice"]),
    ])

    found = repository.get_meetings_in_range(at(MONDAY, 10), at(MONDAY, 16))

    assert [m.id for m in found] == ["late", "touching"]


def test_loads_meetings_from_json(tmp_path):
    path = tmp_path / "meetings.json"
    path.write_text(json.dumps([
        {"id": "m1", "start": "2025-07-21T10:00:00", "end": "2025-07-21T10:30:00",
         "attendeeIds": ["alice", "bob"], "title": "Sync"},
        {"id": 2, "start": "2025-07-21T11:00:00", "end": "2025-07-21T12:00:00", "status": "cancelled"},
    ]))

    repository = InMemoryMeetingRepository.from_json_file(str(path))

    assert len(repository) == 2
    first, second = repository.get_meetings_in_range(MONDAY, at(MONDAY, 23))
    assert first.attendee_ids == ("alice", "bob")
    assert first.interval.duration_minutes == 30
    assert second.id == "2"
    assert second.status is MeetingStatus.CANCELLED
    assert second.attendee_ids == ()
