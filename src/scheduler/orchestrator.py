"""
Scheduling Orchestrator - coordinates candidate generation, concurrent evaluation and ranking
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from config.settings import Config
from src.calendar.availability import AvailabilityProvider
from src.calendar.repository import MeetingRepository
from src.scheduler.conflict_detector import ConflictDetector
from src.scheduler.errors import AvailabilityLookupError, InvalidInputError
from src.scheduler.intervals import start_of_day
from src.scheduler.models import (CandidateSlot, ScheduledMeeting, SchedulingPreferences,
                                  SearchOutcome, SearchResult, SearchState, TimeInterval, to_naive_utc)
from src.scheduler.suggestion_ranker import SuggestionRanker
from src.scheduler.time_slot_generator import TimeSlotGenerator
from utils.meeting_logger import MeetingLogger

logger = logging.getLogger(__name__)

class SchedulingOrchestrator:
    """
    Runs suggestion searches: Idle -> Searching -> Completed | Cancelled | Failed.

    Every invocation takes a new generation number. Starting a search while another
    is in flight cancels the older one, and a search only delivers results if its
    generation is still the latest when it finishes.
    """

    def __init__(self, meeting_repository: MeetingRepository,
                 availability_provider: AvailabilityProvider,
                 max_concurrency: int = None,
                 availability_timeout: float = None,
                 generator: TimeSlotGenerator = None,
                 detector: ConflictDetector = None,
                 ranker: SuggestionRanker = None):
        self.config = Config()
        self.meeting_repository = meeting_repository
        self.availability_provider = availability_provider
        self.max_concurrency = (self.config.MAX_CONCURRENT_LOOKUPS
                                if max_concurrency is None else max_concurrency)
        self.availability_timeout = (self.config.AVAILABILITY_TIMEOUT
                                     if availability_timeout is None else availability_timeout)
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {self.max_concurrency}")
        self.generator = generator or TimeSlotGenerator()
        self.detector = detector or ConflictDetector()
        self.ranker = ranker or SuggestionRanker()

        self.state = SearchState.IDLE
        self._generation = 0
        self._active_task: Optional[asyncio.Task] = None

    @property
    def generation(self) -> int:
        return self._generation

    def validate(self, attendee_ids: Sequence[str], duration_minutes: int, search_range_days: int,
                 preferences: SchedulingPreferences, max_suggestions: int):
        """Raise InvalidInputError listing every problem with the request"""
        errors = []
        if duration_minutes <= 0:
            errors.append(f"durationMinutes must be positive, got {duration_minutes}")
        if not attendee_ids:
            errors.append("attendeeIds must not be empty")
        if search_range_days < 0:
            errors.append(f"searchRangeDays must not be negative, got {search_range_days}")
        if max_suggestions <= 0:
            errors.append(f"maxSuggestions must be positive, got {max_suggestions}")
        if preferences.buffer_minutes < 0:
            errors.append(f"bufferMinutes must not be negative, got {preferences.buffer_minutes}")
        if preferences.max_conflicts < 0:
            errors.append(f"maxConflicts must not be negative, got {preferences.max_conflicts}")
        if preferences.min_available_attendees > len(attendee_ids):
            errors.append(f"minAvailableAttendees ({preferences.min_available_attendees}) exceeds "
                          f"the number of attendees ({len(attendee_ids)})")

        windows = sorted(preferences.preferred_windows, key=lambda w: w.start_hour)
        for window in windows:
            if not (0 <= window.start_hour < window.end_hour <= 24):
                errors.append(f"Malformed preferred window {window.start_hour}-{window.end_hour}")
        for previous, current in zip(windows, windows[1:]):
            if current.start_hour < previous.end_hour:
                errors.append(f"Preferred windows {previous.start_hour}-{previous.end_hour} and "
                              f"{current.start_hour}-{current.end_hour} overlap")

        if errors:
            raise InvalidInputError(errors)

    async def find_suggestions(self, attendee_ids: Sequence[str], duration_minutes: int,
                               preferred_start_time: Optional[datetime] = None,
                               search_range_days: int = Config.DEFAULT_SEARCH_RANGE_DAYS,
                               exclude_meeting_id: Optional[str] = None,
                               preferences: Optional[SchedulingPreferences] = None,
                               max_suggestions: int = Config.DEFAULT_MAX_SUGGESTIONS,
                               room_capacity: Optional[int] = None) -> SearchResult:
        """
        Find and rank meeting slots for the attendees.

        Raises InvalidInputError before any work starts. Otherwise returns a
        SearchResult whose state is COMPLETED, or CANCELLED when this search was
        superseded by a newer one or cancelled through cancel().
        """
        attendee_ids = list(dict.fromkeys(attendee_ids))
        if preferences is None:
            preferences = SchedulingPreferences.defaults(len(attendee_ids))

        self._generation += 1
        generation = self._generation
        self._cancel_active_task()

        try:
            self.validate(attendee_ids, duration_minutes, search_range_days, preferences, max_suggestions)
        except InvalidInputError as e:
            logger.error(f"❌ Search {generation} rejected: {e}")
            self.state = SearchState.FAILED
            raise

        horizon_start = to_naive_utc(preferred_start_time or datetime.now(timezone.utc))
        rooms = self.config.DEFAULT_ROOM_SUGGESTIONS if room_capacity else None

        self.state = SearchState.SEARCHING
        logger.info(f"🔍 Search {generation} started: {len(attendee_ids)} attendee(s), "
                    f"{duration_minutes} min, {search_range_days} day(s) from {horizon_start.isoformat()}")

        task = asyncio.ensure_future(self._search(
            generation, attendee_ids, duration_minutes, horizon_start, search_range_days,
            exclude_meeting_id, preferences, max_suggestions, rooms,
        ))
        self._active_task = task

        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                return self._cancelled(generation)
            self.state = SearchState.CANCELLED
            raise
        finally:
            if self._active_task is task:
                self._active_task = None

        if generation != self._generation:
            return self._cancelled(generation)

        self.state = SearchState.COMPLETED
        return result

    def find_suggestions_sync(self, *args, **kwargs) -> SearchResult:
        """Run a search to completion on a fresh event loop"""
        return asyncio.run(self.find_suggestions(*args, **kwargs))

    def cancel(self):
        """Cancel the in-flight search, if any"""
        if self.state is not SearchState.SEARCHING:
            return
        self._generation += 1
        self._cancel_active_task()
        self.state = SearchState.CANCELLED

    def _cancel_active_task(self):
        task = self._active_task
        if task is not None and not task.done():
            logger.info("⏹️  Cancelling superseded search")
            task.cancel()

    def _cancelled(self, generation: int) -> SearchResult:
        logger.info(f"Search {generation} cancelled, results discarded")
        return SearchResult(generation=generation, state=SearchState.CANCELLED, outcome=SearchOutcome.CANCELLED)

    async def _search(self, generation: int, attendee_ids: List[str], duration_minutes: int,
                      horizon_start: datetime, search_range_days: int, exclude_meeting_id: Optional[str],
                      preferences: SchedulingPreferences, max_suggestions: int,
                      rooms: Optional[List[str]]) -> SearchResult:
        adjacency = timedelta(minutes=self.config.ADJACENT_GAP_MINUTES)
        range_start = horizon_start - adjacency
        range_end = start_of_day(horizon_start + timedelta(days=search_range_days)) + timedelta(days=1) + adjacency
        existing_meetings = await asyncio.to_thread(
            self.meeting_repository.get_meetings_in_range, range_start, range_end
        )
        MeetingLogger.log_existing_meetings(existing_meetings, attendee_ids)

        candidates = self.generator.generate(horizon_start, search_range_days, duration_minutes, preferences)
        if not candidates:
            logger.info(f"No candidate slots fit a {duration_minutes}-minute meeting")
            return SearchResult(generation=generation, state=SearchState.COMPLETED,
                                outcome=SearchOutcome.NO_MATCHING_SLOTS)

        semaphore = asyncio.Semaphore(self.max_concurrency)
        evaluations = [
            self._evaluate(generation, semaphore, candidate, attendee_ids, existing_meetings, exclude_meeting_id)
            for candidate in candidates
        ]
        results = await asyncio.gather(*evaluations)

        evaluated = [slot for slot in results if slot is not None]
        failed = len(results) - len(evaluated)
        if failed:
            logger.warning(f"⚠️  {failed}/{len(results)} candidate(s) dropped after availability lookup failures")

        if not evaluated:
            return SearchResult(generation=generation, state=SearchState.COMPLETED,
                                outcome=SearchOutcome.NO_FEASIBLE_SLOTS,
                                candidates_evaluated=0, candidates_failed=failed)

        suggestions = self.ranker.rank(evaluated, preferences, limit=max_suggestions, alternative_rooms=rooms)
        MeetingLogger.log_suggestions(suggestions)

        outcome = SearchOutcome.SUGGESTIONS_FOUND if suggestions else SearchOutcome.NO_MATCHING_SLOTS
        return SearchResult(
            generation=generation,
            state=SearchState.COMPLETED,
            outcome=outcome,
            suggestions=tuple(suggestions),
            candidates_evaluated=len(evaluated),
            candidates_failed=failed,
        )

    async def _evaluate(self, generation: int, semaphore: asyncio.Semaphore, candidate: TimeInterval,
                        attendee_ids: List[str], existing_meetings: List[ScheduledMeeting],
                        exclude_meeting_id: Optional[str]) -> Optional[CandidateSlot]:
        """Evaluate one candidate; None means it is dropped"""
        slot = CandidateSlot(
            interval=candidate,
            conflicts=self.detector.detect(candidate, attendee_ids, existing_meetings, exclude_meeting_id),
        )

        async with semaphore:
            if generation != self._generation:
                return None
            try:
                availability = await asyncio.wait_for(
                    self.availability_provider.resolve(attendee_ids, candidate,
                                                       exclude_meeting_id=exclude_meeting_id),
                    timeout=self.availability_timeout,
                )
                missing = set(attendee_ids) - {record.attendee_id for record in availability}
                if missing:
                    raise AvailabilityLookupError(f"No availability data for {sorted(missing)}")
            except asyncio.TimeoutError:
                logger.warning(f"Availability lookup timed out for {candidate.start.isoformat()}")
                return None
            except AvailabilityLookupError as e:
                logger.warning(f"Availability lookup failed for {candidate.start.isoformat()}: {e}")
                return None
            except Exception as e:
                logger.warning(f"Unexpected availability error for {candidate.start.isoformat()}: {e}")
                return None

        slot.availability = [record for record in availability if record.attendee_id in attendee_ids]
        return slot
