import json
import logging

import pytest

from utils.logger import SchedulingLogger


@pytest.fixture
def restore_root_logger(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    level = root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.setLevel(level)


def test_setup_logging_writes_to_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "scheduler.log"

    root = SchedulingLogger.setup_logging(log_level="debug", log_file=str(log_file))
    logging.getLogger("scheduler.test").debug("slot generated")
    for handler in root.handlers:
        handler.flush()

    assert root.level == logging.DEBUG
    assert len(root.handlers) == 2
    assert logging.getLogger("urllib3").level == logging.WARNING
    assert "scheduler.test - DEBUG - slot generated" in log_file.read_text()


def test_search_request_summary(caplog):
    response = {"generation": 3, "state": "completed", "outcome": "suggestions_found",
                "suggestions": [{"score": 95}], "candidatesEvaluated": 12, "candidatesFailed": 1}

    with caplog.at_level(logging.INFO, logger="utils.logger"):
        SchedulingLogger.log_search_request({"attendeeIds": ["alice"], "durationMinutes": 30}, response, 0.12345)

    message = caplog.records[-1].getMessage()
    entry = json.loads(message.split("Search processed: ", 1)[1])
    assert entry["generation"] == 3
    assert entry["processing_time_seconds"] == 0.123
    assert entry["request"]["search_range_days"] == 7
    assert entry["result"]["best_score"] == 95
