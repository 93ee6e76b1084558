import pytest

from utils.validators import DataSanitizer, RequestValidator


def valid_request(**overrides):
    request = {"attendeeIds": ["alice", "bob"], "durationMinutes": 30}
    request.update(overrides)
    return request


def test_minimal_request_is_valid():
    assert RequestValidator.validate_suggestion_request(valid_request()) == []


def test_non_object_request():
    assert RequestValidator.validate_suggestion_request(["alice"]) == ["Request must be a JSON object"]
    assert RequestValidator.validate_conflict_check("alice") == ["Request must be a JSON object"]


@pytest.mark.parametrize("overrides, expected", [
    (dict(attendeeIds=["alice", " "]), "Attendee 1 must be a non-empty string"),
    (dict(durationMinutes="30"), "'durationMinutes' must be an integer"),
    (dict(durationMinutes=True), "'durationMinutes' must be an integer"),
    (dict(preferredStartTime="next monday"), "Invalid preferredStartTime: next monday. Expected ISO-8601"),
    (dict(searchRangeDays=0), "searchRangeDays must be between 1 and 30"),
    (dict(searchRangeDays=31), "searchRangeDays must be between 1 and 30"),
    (dict(preferences=[]), "'preferences' must be an object"),
    (dict(preferences={"preferredWindows": [{"startHour": "9", "endHour": 17}]}),
     "Preferred window 0 must have integer 'startHour' and 'endHour'"),
    (dict(preferences={"allowWeekends": "yes"}), "'allowWeekends' must be a boolean"),
    (dict(preferences={"bufferMinutes": 1.5}), "'bufferMinutes' must be an integer"),
])
def test_structural_errors(overrides, expected):
    assert expected in RequestValidator.validate_suggestion_request(valid_request(**overrides))


def test_missing_required_fields():
    errors = RequestValidator.validate_suggestion_request({})

    assert errors == ["Missing required field: attendeeIds", "Missing required field: durationMinutes"]


def test_semantic_checks_are_left_to_the_orchestrator():
    request = valid_request(durationMinutes=-5, preferences={"maxConflicts": -1})

    assert RequestValidator.validate_suggestion_request(request) == []


def test_utc_designator_is_accepted():
    assert RequestValidator.validate_datetime("2025-07-21T09:00:00Z")
    assert RequestValidator.validate_datetime("2025-07-21T09:00:00+05:30")
    assert not RequestValidator.validate_datetime("2025-07-21 nine")


def test_conflict_check_validation():
    assert RequestValidator.validate_conflict_check(
        {"attendeeIds": ["alice"], "start": "2025-07-21T09:00:00", "end": "2025-07-21T10:00:00"}) == []

    errors = RequestValidator.validate_conflict_check({"attendeeIds": ["alice"], "start": "9am", "meetingId": 7})
    assert errors == [
        "Invalid start format: 9am. Expected ISO-8601",
        "Missing required field: end",
        "'meetingId' must be a string",
    ]


def test_sanitizer_trims_and_dedupes_attendees():
    request = {"attendeeIds": [" alice ", "bob", "alice"], "excludeMeetingId": " m1 ", "durationMinutes": 30}

    sanitized = DataSanitizer.sanitize_request(request)

    assert sanitized["attendeeIds"] == ["alice", "bob"]
    assert sanitized["excludeMeetingId"] == "m1"
    assert request["attendeeIds"] == [" alice ", "bob", "alice"]
