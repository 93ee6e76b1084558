import pytest

from src.calendar.repository import InMemoryMeetingRepository
from src.scheduler.errors import InvalidInputError
from src.scheduler.models import ConflictSeverity, MeetingStatus
from src.scheduler.scheduling_validator import SchedulingValidator
from helpers import MONDAY, at, meeting


@pytest.fixture
def busy_repository():
    return InMemoryMeetingRepository([
        meeting("design-review", at(MONDAY, 10), 60, ["alice"]),
        meeting("lunch", at(MONDAY, 12), 60, ["alice", "bob"]),
    ])


def test_free_time_is_valid(busy_repository):
    result = SchedulingValidator(busy_repository).validate_meeting_time(
        at(MONDAY, 14), at(MONDAY, 14, 30), ["alice", "bob"])

    assert result.is_valid
    assert result.conflicts == []
    assert result.suggested_times == []


def test_overlap_offers_hourly_alternatives(busy_repository):
    result = SchedulingValidator(busy_repository).validate_meeting_time(
        at(MONDAY, 10, 15), at(MONDAY, 10, 45), ["alice"])

    assert not result.is_valid
    assert [c.meeting_id for c in result.blocking_conflicts] == ["design-review"]
    assert result.suggested_times == [at(MONDAY, 11), at(MONDAY, 13), at(MONDAY, 14), at(MONDAY, 15)]


def test_back_to_back_is_reported_but_still_valid(busy_repository):
    result = SchedulingValidator(busy_repository).validate_meeting_time(
        at(MONDAY, 11), at(MONDAY, 12), ["alice"])

    assert result.is_valid
    assert {c.severity for c in result.conflicts} == {ConflictSeverity.BACK_TO_BACK}
    assert result.suggested_times == []


def test_rescheduled_meeting_does_not_conflict_with_itself(busy_repository):
    result = SchedulingValidator(busy_repository).validate_meeting_time(
        at(MONDAY, 10, 30), at(MONDAY, 11), ["alice"], meeting_id="design-review")

    assert result.is_valid


def test_cancelled_meetings_are_ignored():
    repository = InMemoryMeetingRepository([
        meeting("old", at(MONDAY, 9), 60, ["alice"], status=MeetingStatus.CANCELLED)])

    result = SchedulingValidator(repository).validate_meeting_time(at(MONDAY, 9), at(MONDAY, 10), ["alice"])

    assert result.is_valid


def test_to_dict(busy_repository):
    data = SchedulingValidator(busy_repository).validate_meeting_time(
        at(MONDAY, 12), at(MONDAY, 12, 30), ["bob"]).to_dict()

    assert data["isValid"] is False
    assert data["interval"] == {"start": "2025-07-21T12:00:00", "end": "2025-07-21T12:30:00"}
    assert data["conflicts"][0]["meetingId"] == "lunch"
    assert data["conflicts"][0]["overlapInterval"] == data["interval"]
    assert data["suggestedTimes"][0] == "2025-07-21T13:00:00"


@pytest.mark.parametrize("start, end, attendees", [
    (at(MONDAY, 10), at(MONDAY, 11), []),
    (at(MONDAY, 11), at(MONDAY, 10), ["alice"]),
    (at(MONDAY, 11), at(MONDAY, 11), ["alice"]),
])
def test_rejects_invalid_requests(busy_repository, start, end, attendees):
    with pytest.raises(InvalidInputError):
        SchedulingValidator(busy_repository).validate_meeting_time(start, end, attendees)
