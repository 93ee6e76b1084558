"""
Hard-constraint filtering and ordering of evaluated candidates
"""
import logging
from typing import Iterable, List, Optional, Sequence

from config.settings import Config
from src.scheduler.models import CandidateSlot, SchedulingPreferences, Suggestion
from src.scheduler.scoring_engine import ScoringEngine

logger = logging.getLogger(__name__)

class SuggestionRanker:
    """Filters candidates against hard constraints, scores, sorts and truncates"""

    def __init__(self, scoring_engine: ScoringEngine = None):
        self.scoring_engine = scoring_engine or ScoringEngine()

    def rank(self, candidates: Iterable[CandidateSlot], preferences: SchedulingPreferences,
             limit: int = Config.DEFAULT_MAX_SUGGESTIONS,
             alternative_rooms: Optional[Sequence[str]] = None) -> List[Suggestion]:
        suggestions: List[Suggestion] = []
        rejected = 0

        for candidate in candidates:
            if not self.passes_hard_filters(candidate, preferences):
                rejected += 1
                continue

            score, reason, working_hours = self.scoring_engine.score(
                candidate.interval,
                candidate.conflicts,
                candidate.availability,
                candidate.total_attendees,
                preferences,
            )
            suggestions.append(Suggestion(
                interval=candidate.interval,
                score=score,
                conflict_count=candidate.conflict_count,
                available_attendees=candidate.available_attendees,
                total_attendees=candidate.total_attendees,
                reason=reason,
                is_working_hours=working_hours,
                label=self.scoring_engine.label(score),
                conflicts=tuple(candidate.conflicts),
                alternative_rooms=tuple(alternative_rooms or ()),
            ))

        suggestions.sort(key=lambda s: (-s.score, s.interval.start))
        logger.info(f"📊 Ranked {len(suggestions)} suggestion(s), {rejected} rejected by hard filters")
        return suggestions[:max(0, limit)]

    @staticmethod
    def passes_hard_filters(candidate: CandidateSlot, preferences: SchedulingPreferences) -> bool:
        if candidate.conflict_count > preferences.max_conflicts:
            return False
        if candidate.available_attendees < preferences.min_available_attendees:
            return False
        return True
