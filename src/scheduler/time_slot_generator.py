"""
Candidate generation over a multi-day search horizon
"""
import logging
from datetime import datetime, timedelta
from typing import List

from config.settings import Config
from src.scheduler.intervals import from_start, is_weekend, start_of_day
from src.scheduler.models import SchedulingPreferences, TimeInterval

logger = logging.getLogger(__name__)

class TimeSlotGenerator:
    """Produces candidate intervals from a horizon and a preference policy"""

    def __init__(self, granularity_minutes: int = None):
        self.config = Config()
        if granularity_minutes is None:
            granularity_minutes = self.config.SLOT_GRANULARITY_MINUTES
        if granularity_minutes <= 0:
            raise ValueError(f"Slot granularity must be positive, got {granularity_minutes}")
        self.granularity = timedelta(minutes=granularity_minutes)

    def generate(self, horizon_start: datetime, horizon_days: int, duration_minutes: int,
                 preferences: SchedulingPreferences) -> List[TimeInterval]:
        """
        Emit candidate intervals, day by day, in configured window order.

        Each day from horizon_start up to horizon_start + horizon_days (inclusive)
        contributes start times every granularity step inside each preferred window
        that can still fit the meeting, shifted earlier by the buffer. Weekend days are
        skipped unless allowed. Starts before horizon_start are never emitted.
        """
        duration = timedelta(minutes=duration_minutes)
        buffer = timedelta(minutes=preferences.buffer_minutes)
        first_day = start_of_day(horizon_start)
        last_day = start_of_day(horizon_start + timedelta(days=horizon_days))

        candidates: List[TimeInterval] = []
        seen = set()

        def emit(start: datetime):
            if start < horizon_start or start in seen:
                return
            seen.add(start)
            candidates.append(from_start(start, duration_minutes))

        day = first_day
        while day <= last_day:
            if is_weekend(day) and not preferences.allow_weekends:
                logger.debug(f"Skipping weekend day {day.date()}")
                day += timedelta(days=1)
                continue

            for window in preferences.preferred_windows:
                window_end = day + timedelta(hours=window.end_hour)
                slot = day + timedelta(hours=window.start_hour)
                while slot + duration <= window_end:
                    # The buffer never pushes a start back into the previous day
                    emit(max(slot - buffer, day))
                    slot += self.granularity

            if preferences.allow_after_hours:
                band_end = day + timedelta(hours=self.config.AFTER_HOURS_END)
                slot = day + timedelta(hours=self.config.AFTER_HOURS_START)
                while slot + duration <= band_end:
                    emit(slot)
                    slot += self.granularity

            day += timedelta(days=1)

        logger.info(f"🗓️  Generated {len(candidates)} candidate slots over {horizon_days} day(s) "
                    f"for a {duration_minutes}-minute meeting")
        return candidates
