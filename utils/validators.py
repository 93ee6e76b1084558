"""
Validation utilities for the Meeting Scheduling Assistant
"""
from typing import Dict, Any, List

from config.settings import Config
from src.scheduler.models import parse_instant

class RequestValidator:
    """Validator for incoming scheduling requests"""

    @staticmethod
    def validate_datetime(datetime_str: Any) -> bool:
        """Validate ISO-8601 datetime"""
        if not isinstance(datetime_str, str):
            return False
        try:
            parse_instant(datetime_str)
            return True
        except ValueError:
            return False

    @staticmethod
    def _validate_attendees(request_data: Dict[str, Any], errors: List[str]):
        if "attendeeIds" not in request_data:
            errors.append("Missing required field: attendeeIds")
        elif not isinstance(request_data["attendeeIds"], list):
            errors.append("'attendeeIds' must be a list")
        else:
            for i, attendee in enumerate(request_data["attendeeIds"]):
                if not isinstance(attendee, str) or not attendee.strip():
                    errors.append(f"Attendee {i} must be a non-empty string")

    @staticmethod
    def _validate_int(request_data: Dict[str, Any], field: str, errors: List[str], required: bool = False):
        if field not in request_data or request_data[field] is None:
            if required:
                errors.append(f"Missing required field: {field}")
            return
        value = request_data[field]
        if isinstance(value, bool) or not isinstance(value, int):
            errors.append(f"'{field}' must be an integer")

    @staticmethod
    def validate_suggestion_request(request_data: Dict[str, Any]) -> List[str]:
        """Validate a suggestion request structure and return list of errors"""
        if not isinstance(request_data, dict):
            return ["Request must be a JSON object"]
        errors = []
        RequestValidator._validate_attendees(request_data, errors)
        RequestValidator._validate_int(request_data, "durationMinutes", errors, required=True)
        RequestValidator._validate_int(request_data, "searchRangeDays", errors)
        RequestValidator._validate_int(request_data, "maxSuggestions", errors)
        RequestValidator._validate_int(request_data, "roomCapacity", errors)

        start = request_data.get("preferredStartTime")
        if start is not None and not RequestValidator.validate_datetime(start):
            errors.append(f"Invalid preferredStartTime: {start}. Expected ISO-8601")

        range_days = request_data.get("searchRangeDays")
        if isinstance(range_days, int) and not 0 < range_days <= max(Config.SEARCH_RANGE_OPTIONS):
            errors.append(f"searchRangeDays must be between 1 and {max(Config.SEARCH_RANGE_OPTIONS)}")

        preferences = request_data.get("preferences")
        if preferences is not None:
            if not isinstance(preferences, dict):
                errors.append("'preferences' must be an object")
            else:
                errors.extend(RequestValidator.validate_preferences(preferences))

        return errors

    @staticmethod
    def validate_preferences(preferences: Dict[str, Any]) -> List[str]:
        """Structural checks; semantic checks happen in the orchestrator"""
        errors = []
        windows = preferences.get("preferredWindows")
        if windows is not None:
            if not isinstance(windows, list):
                errors.append("'preferredWindows' must be a list")
            else:
                for i, window in enumerate(windows):
                    if (not isinstance(window, dict)
                            or not isinstance(window.get("startHour"), int)
                            or not isinstance(window.get("endHour"), int)):
                        errors.append(f"Preferred window {i} must have integer 'startHour' and 'endHour'")

        for field in ("bufferMinutes", "maxConflicts", "minAvailableAttendees"):
            RequestValidator._validate_int(preferences, field, errors)
        for field in ("allowWeekends", "allowAfterHours"):
            if field in preferences and not isinstance(preferences[field], bool):
                errors.append(f"'{field}' must be a boolean")
        return errors

    @staticmethod
    def validate_conflict_check(request_data: Dict[str, Any]) -> List[str]:
        """Validate a conflict check request"""
        if not isinstance(request_data, dict):
            return ["Request must be a JSON object"]
        errors = []
        RequestValidator._validate_attendees(request_data, errors)
        for field in ("start", "end"):
            if field not in request_data:
                errors.append(f"Missing required field: {field}")
            elif not RequestValidator.validate_datetime(request_data[field]):
                errors.append(f"Invalid {field} format: {request_data[field]}. Expected ISO-8601")
        meeting_id = request_data.get("meetingId")
        if meeting_id is not None and not isinstance(meeting_id, str):
            errors.append("'meetingId' must be a string")
        return errors

class DataSanitizer:
    """Sanitize and clean input data"""

    @staticmethod
    def sanitize_attendee_id(attendee_id: str) -> str:
        """Trim surrounding whitespace from an identifier"""
        return attendee_id.strip()

    @staticmethod
    def sanitize_request(request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Sanitize an already validated request, de-duplicating attendees in order"""
        sanitized = request_data.copy()

        if "attendeeIds" in sanitized:
            attendees = [DataSanitizer.sanitize_attendee_id(a) for a in sanitized["attendeeIds"]]
            sanitized["attendeeIds"] = list(dict.fromkeys(attendees))

        for field in ("excludeMeetingId", "meetingId"):
            if isinstance(sanitized.get(field), str):
                sanitized[field] = sanitized[field].strip()

        return sanitized
