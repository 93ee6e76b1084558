"""
Logging utilities for the Meeting Scheduling Assistant
"""
import json
import logging
import sys
from datetime import datetime
from typing import Optional

from config.settings import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Client libraries that log every HTTP round trip at INFO
NOISY_LOGGERS = ('urllib3', 'googleapiclient', 'google_auth_httplib2', 'werkzeug')

class SchedulingLogger:
    """Root logger setup and structured request logs for the scheduling service"""

    @staticmethod
    def setup_logging(log_level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
        """Configure the root logger; level and file fall back to Config"""
        log_level = (log_level or Config.LOG_LEVEL).upper()
        log_file = log_file or Config.LOG_FILE
        formatter = logging.Formatter(LOG_FORMAT)

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, log_level, logging.INFO))
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        return root_logger

    @staticmethod
    def log_search_request(request_data: dict, response_data: dict, processing_time: float):
        """Log one suggestion search with its outcome and timing"""
        logger = logging.getLogger(__name__)

        suggestions = response_data.get("suggestions", [])
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "generation": response_data.get("generation"),
            "processing_time_seconds": round(processing_time, 3),
            "request": {
                "attendees_count": len(request_data.get("attendeeIds", [])),
                "duration_minutes": request_data.get("durationMinutes"),
                "search_range_days": request_data.get("searchRangeDays", Config.DEFAULT_SEARCH_RANGE_DAYS),
                "has_preferences": bool(request_data.get("preferences")),
            },
            "result": {
                "state": response_data.get("state"),
                "outcome": response_data.get("outcome"),
                "suggestions": len(suggestions),
                "best_score": suggestions[0]["score"] if suggestions else None,
                "candidates_evaluated": response_data.get("candidatesEvaluated"),
                "candidates_failed": response_data.get("candidatesFailed"),
            }
        }

        logger.info(f"⏱️  Search processed: {json.dumps(log_entry, indent=2)}")
