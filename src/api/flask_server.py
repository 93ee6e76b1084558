"""
Flask API server for the Meeting Scheduling Assistant
"""
import logging
import time
from datetime import datetime
from typing import Tuple
from flask import Flask, request, jsonify
from flask_cors import CORS
import signal
import sys

from config.settings import Config
from src.calendar.availability import (AvailabilityProvider, DirectoryAvailabilityProvider,
                                       GoogleFreeBusyAvailabilityProvider,
                                       MeetingRepositoryAvailabilityProvider)
from src.calendar.calendar_manager import GoogleCalendarMeetingRepository
from src.calendar.repository import InMemoryMeetingRepository, MeetingRepository
from src.scheduler.errors import InvalidInputError
from src.scheduler.models import SchedulingPreferences, parse_instant
from src.scheduler.orchestrator import SchedulingOrchestrator
from src.scheduler.scheduling_validator import SchedulingValidator
from utils.logger import SchedulingLogger
from utils.validators import DataSanitizer, RequestValidator

logger = logging.getLogger(__name__)


def build_backends(backend: str = None) -> Tuple[MeetingRepository, AvailabilityProvider]:
    """Create the meeting store and availability provider selected in Config"""
    backend = backend or Config.CALENDAR_BACKEND

    if backend == "google":
        repository = GoogleCalendarMeetingRepository()
        provider = GoogleFreeBusyAvailabilityProvider()
    elif backend == "memory":
        if Config.MEETINGS_FILE:
            repository = InMemoryMeetingRepository.from_json_file(Config.MEETINGS_FILE)
        else:
            repository = InMemoryMeetingRepository()
        provider = MeetingRepositoryAvailabilityProvider(repository)
    else:
        raise ValueError(f"Unknown calendar backend: {backend}")

    if Config.DIRECTORY_SERVICE_URL:
        provider = DirectoryAvailabilityProvider(Config.DIRECTORY_SERVICE_URL)

    logger.info(f"Using '{backend}' calendar backend with {type(provider).__name__}")
    return repository, provider


def run_suggestion_search(data: dict, repository: MeetingRepository, provider: AvailabilityProvider):
    """Run one search for an already validated and sanitized request payload"""
    attendee_ids = data["attendeeIds"]
    preferences = SchedulingPreferences.from_dict(data.get("preferences") or {}, len(attendee_ids))
    preferred_start = data.get("preferredStartTime")

    orchestrator = SchedulingOrchestrator(repository, provider)
    return orchestrator.find_suggestions_sync(
        attendee_ids,
        data["durationMinutes"],
        preferred_start_time=parse_instant(preferred_start) if preferred_start else None,
        search_range_days=data.get("searchRangeDays") or Config.DEFAULT_SEARCH_RANGE_DAYS,
        exclude_meeting_id=data.get("excludeMeetingId"),
        preferences=preferences,
        max_suggestions=data.get("maxSuggestions") or Config.DEFAULT_MAX_SUGGESTIONS,
        room_capacity=data.get("roomCapacity"),
    )


def run_conflict_check(data: dict, repository: MeetingRepository):
    """Validate one proposed meeting time for an already sanitized request payload"""
    validator = SchedulingValidator(repository)
    return validator.validate_meeting_time(
        parse_instant(data["start"]),
        parse_instant(data["end"]),
        data["attendeeIds"],
        meeting_id=data.get("meetingId"),
    )


class SchedulingAPI:
    """
    Flask API server exposing suggestion searches and conflict checks
    """

    def __init__(self, meeting_repository: MeetingRepository = None,
                 availability_provider: AvailabilityProvider = None):
        self.config = Config()
        self.app = Flask(__name__)
        CORS(self.app)  # Enable CORS for cross-origin requests

        if meeting_repository is None:
            meeting_repository, default_provider = build_backends()
            availability_provider = availability_provider or default_provider
        elif availability_provider is None:
            availability_provider = MeetingRepositoryAvailabilityProvider(meeting_repository)

        self.meeting_repository = meeting_repository
        self.availability_provider = availability_provider

        self.requests_processed = 0
        self.requests_rejected = 0
        self.start_time = time.time()

        self._setup_routes()

    def _setup_routes(self):
        """Setup Flask routes"""

        @self.app.route('/health', methods=['GET'])
        def health_check():
            """Health check endpoint"""
            return jsonify({
                "status": "healthy",
                "timestamp": datetime.now().isoformat(),
                "backend": self.config.CALENDAR_BACKEND,
                "availabilityProvider": type(self.availability_provider).__name__,
                "defaults": self.config.get_search_defaults(),
            })

        @self.app.route('/suggestions', methods=['POST'])
        def find_suggestions():
            """Find ranked meeting time suggestions"""
            start_time = time.time()
            data = request.get_json(silent=True)

            if not isinstance(data, dict):
                logger.error("No JSON data received")
                self.requests_rejected += 1
                return jsonify({"error": "No JSON data provided"}), 400

            errors = RequestValidator.validate_suggestion_request(data)
            if errors:
                self.requests_rejected += 1
                return jsonify({"error": "Invalid input", "details": errors}), 400

            data = DataSanitizer.sanitize_request(data)
            logger.info(f"🚀 SUGGESTION REQUEST: {len(data['attendeeIds'])} attendee(s), "
                        f"{data['durationMinutes']} minutes")

            try:
                result = run_suggestion_search(data, self.meeting_repository, self.availability_provider)
            except InvalidInputError as e:
                self.requests_rejected += 1
                return jsonify({"error": "Invalid input", "details": e.errors}), 400

            response = result.to_dict()
            self.requests_processed += 1
            SchedulingLogger.log_search_request(data, response, time.time() - start_time)
            return jsonify(response)

        @self.app.route('/conflicts', methods=['POST'])
        def check_conflicts():
            """Check a proposed meeting time against existing meetings"""
            data = request.get_json(silent=True)

            if not isinstance(data, dict):
                self.requests_rejected += 1
                return jsonify({"error": "No JSON data provided"}), 400

            errors = RequestValidator.validate_conflict_check(data)
            if errors:
                self.requests_rejected += 1
                return jsonify({"error": "Invalid input", "details": errors}), 400

            data = DataSanitizer.sanitize_request(data)
            try:
                result = run_conflict_check(data, self.meeting_repository)
            except InvalidInputError as e:
                self.requests_rejected += 1
                return jsonify({"error": "Invalid input", "details": e.errors}), 400

            self.requests_processed += 1
            return jsonify(result.to_dict())

        @self.app.route('/status', methods=['GET'])
        def get_status():
            """Get server status and statistics"""
            return jsonify({
                "status": "running",
                "requestsProcessed": self.requests_processed,
                "requestsRejected": self.requests_rejected,
                "uptime": time.time() - self.start_time,
            })

        @self.app.errorhandler(404)
        def not_found(error):
            return jsonify({"error": "Endpoint not found"}), 404

        @self.app.errorhandler(500)
        def internal_error(error):
            return jsonify({"error": "Internal server error"}), 500

    def _setup_signal_handlers(self):
        """Setup graceful shutdown handlers"""
        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, shutting down gracefully...")
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def run(self, host=None, port=None, debug=False):
        """Run the Flask server"""
        host = host or self.config.API_HOST
        port = port or self.config.API_PORT

        self._setup_signal_handlers()
        logger.info(f"Starting Scheduling API server on {host}:{port}")

        self.app.run(
            host=host,
            port=port,
            debug=debug,
            threaded=True,  # Enable threading for concurrent requests
            use_reloader=False  # Disable reloader in production
        )

def create_app(meeting_repository: MeetingRepository = None,
               availability_provider: AvailabilityProvider = None) -> Flask:
    """Factory function to create Flask app"""
    api = SchedulingAPI(meeting_repository, availability_provider)
    return api.app
