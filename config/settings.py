"""
Configuration settings for the Meeting Scheduling Assistant
"""
import os
from typing import Dict, List, Tuple

class Config:
    # Working hours (Mon-Fri)
    BUSINESS_HOURS_START = 9   # 9 AM
    BUSINESS_HOURS_END = 17    # 5 PM

    # Candidate generation
    SLOT_GRANULARITY_MINUTES = 30
    AFTER_HOURS_START = 18     # 6 PM
    AFTER_HOURS_END = 20       # 8 PM

    # Conflict classification
    ADJACENT_GAP_MINUTES = 15

    # Availability lookups
    MAX_CONCURRENT_LOOKUPS = int(os.getenv("SCHEDULER_MAX_CONCURRENCY", "8"))
    AVAILABILITY_TIMEOUT = float(os.getenv("SCHEDULER_AVAILABILITY_TIMEOUT", "5.0"))  # seconds

    # Search defaults
    DEFAULT_MAX_SUGGESTIONS = 10
    DEFAULT_SEARCH_RANGE_DAYS = 7
    SEARCH_RANGE_OPTIONS = (3, 7, 14, 30)
    DEFAULT_PREFERRED_WINDOWS: List[Tuple[int, int]] = [(9, 17)]
    DEFAULT_BUFFER_MINUTES = 0
    DEFAULT_MAX_CONFLICTS = 1
    DEFAULT_MIN_AVAILABLE_RATIO = 0.8

    # Rooms are suggested as opaque names only
    DEFAULT_ROOM_SUGGESTIONS = ["Conference Room B", "Meeting Room 3"]

    # Logging
    LOG_LEVEL = os.getenv("SCHEDULER_LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("SCHEDULER_LOG_FILE")

    # API Configuration
    API_HOST = "0.0.0.0"
    API_PORT = 5000

    # Calendar backend: "memory" (JSON seeded store) or "google"
    CALENDAR_BACKEND = os.getenv("SCHEDULER_CALENDAR_BACKEND", "memory")
    MEETINGS_FILE = os.getenv("SCHEDULER_MEETINGS_FILE")

    # Google Calendar Configuration
    CALENDAR_TOKENS_PATH = os.getenv("SCHEDULER_CALENDAR_TOKENS_PATH", "calendar_tokens")
    AVAILABLE_USERS: List[str] = [
        user.strip()
        for user in os.getenv("SCHEDULER_CALENDAR_USERS", "").split(",")
        if user.strip()
    ]
    CALENDAR_CACHE_MINUTES = 5
    CALENDAR_MAX_RESULTS = 250

    # External directory service (optional availability backend)
    DIRECTORY_SERVICE_URL = os.getenv("SCHEDULER_DIRECTORY_URL")
    DIRECTORY_TIMEOUT = 5  # seconds

    @classmethod
    def get_search_defaults(cls) -> Dict[str, int]:
        """Get default search parameters"""
        return {
            "search_range_days": cls.DEFAULT_SEARCH_RANGE_DAYS,
            "max_suggestions": cls.DEFAULT_MAX_SUGGESTIONS,
            "slot_granularity_minutes": cls.SLOT_GRANULARITY_MINUTES,
        }

    @classmethod
    def get_token_path(cls, email: str) -> str:
        """Get token file path for a user email"""
        if email not in cls.AVAILABLE_USERS:
            raise ValueError(f"User {email} does not have a calendar token. Available users: {cls.AVAILABLE_USERS}")

        username = email.split("@")[0]
        token_file = f"{username}.token"
        token_path = os.path.join(cls.CALENDAR_TOKENS_PATH, token_file)

        if not os.path.exists(token_path):
            raise FileNotFoundError(f"Token file not found: {token_path}. Available users: {cls.AVAILABLE_USERS}")

        return token_path
