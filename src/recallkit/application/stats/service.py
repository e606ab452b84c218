"""
Stats Service — Application layer orchestrator.

Coordinates loading data from the repository and summarizing it with the
metrics calculator.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from recallkit.application.progress import study_streak
from recallkit.application.queue_builder import QueueStats, get_queue_stats
from recallkit.application.session_service import recent_performance
from recallkit.application.utils.dates import local_date, utc_now
from recallkit.domain.constants import LOW_ACCURACY_THRESHOLD
from recallkit.domain.models import LifetimeStats
from recallkit.domain.ports import StorageRepository

from .metrics_calculator import CardInsights, DifficultyBreakdown, MetricsCalculator

logger = logging.getLogger(__name__)


@dataclass
class StudyOverview:
    """Everything the statistics view shows, computed in one pass."""

    queue: QueueStats
    study_streak: int
    lifetime: LifetimeStats
    recent_performance: float  # percent over the last sessions
    difficulty: DifficultyBreakdown
    daily_average: float
    upcoming_reviews: int
    cards_studied_today: int
    daily_goal: int


class StatsService:
    """
    Application service for study statistics.

    Depends on the StorageRepository abstraction, not a concrete store.
    """

    def __init__(
        self,
        repo: StorageRepository,
        calculator: MetricsCalculator | None = None,
    ):
        """
        Args:
            repo: The repository (port) for loading data.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._repo = repo
        self._calc = calculator or MetricsCalculator()

    def overview(self, now: datetime | None = None) -> StudyOverview:
        now = now or utc_now()
        cards = self._repo.load_all_cards()
        progress = self._repo.load_progress()
        sessions = self._repo.load_sessions()
        settings = self._repo.load_settings()

        today = local_date(now)
        today_stat = progress.daily_stat(today.isoformat())

        return StudyOverview(
            queue=get_queue_stats(cards, now),
            study_streak=study_streak(progress.daily_stats, today),
            lifetime=progress.lifetime_stats,
            recent_performance=recent_performance(sessions),
            difficulty=self._calc.difficulty_breakdown(cards),
            daily_average=self._calc.daily_average(progress.daily_stats),
            upcoming_reviews=self._calc.upcoming_reviews(cards, now),
            cards_studied_today=today_stat.cards_studied if today_stat else 0,
            daily_goal=settings.daily_goal,
        )

    def card_insights(self, card_ids: list[str] | None = None) -> list[CardInsights]:
        """
        Enrich cards with computed metrics.

        Args:
            card_ids: Cards to include; all cards when None.
        """
        cards = self._repo.load_all_cards()
        if card_ids is not None:
            wanted = set(card_ids)
            cards = [card for card in cards if card.id in wanted]
        return [self._calc.enrich(card) for card in cards]

    def weak_cards(self, ease_threshold: float = 2.0, min_reviews: int = 1) -> list[CardInsights]:
        """
        Cards that keep causing trouble.

        A card is weak if it has been reviewed at least ``min_reviews`` times and:
        - its ease factor is below the threshold, OR
        - its accuracy is below 60%
        """
        weak = []
        for card in self._repo.load_all_cards():
            if card.total_reviews < max(min_reviews, 1):
                continue

            is_weak = False
            if card.ease_factor < ease_threshold:
                is_weak = True
            if card.accuracy is not None and card.accuracy < LOW_ACCURACY_THRESHOLD:
                is_weak = True

            if is_weak:
                weak.append(self._calc.enrich(card))

        return weak
