"""
Progress aggregation for review outcomes.

The aggregator owns ``UserProgress``: per-day ``DailyStat`` entries and the
running ``LifetimeStats``. The scheduler reports each outcome here and never
touches these records itself.
"""

import logging
import math
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta

from recallkit.domain.models import Card, DailyStat, UserProgress

logger = logging.getLogger(__name__)


class ProgressAggregator:
    """
    Accumulates review outcomes into a ``UserProgress`` record.

    The record passed in is updated in place; persisting it is the caller's job.
    """

    def __init__(self, progress: UserProgress):
        self.progress = progress

    def record_outcome(
        self,
        date_key: str,
        correct: bool,
        response_time: float,
        is_new_card: bool = False,
    ) -> DailyStat:
        """
        Add one review to the day's statistics.

        Args:
            date_key: ISO calendar date of the review.
            correct: False for an "again" grade.
            response_time: Seconds spent on the card.
            is_new_card: True when the card had never been reviewed before.

        Returns:
            The DailyStat for ``date_key`` after the update.
        """
        stat = self.progress.daily_stat(date_key)
        if stat is None:
            stat = DailyStat(date=date_key)
            self.progress.daily_stats.append(stat)
            logger.debug(f"Started daily stats for {date_key}")

        stat.cards_studied += 1
        if correct:
            stat.correct_answers += 1
        stat.study_time += response_time
        if is_new_card:
            stat.new_cards += 1

        self.progress.total_study_time += response_time
        return stat

    def recompute_lifetime(self, correct: bool) -> None:
        lifetime = self.progress.lifetime_stats
        lifetime.total_reviews += 1
        if correct:
            lifetime.correct_reviews += 1
        lifetime.accuracy = accuracy_percent(lifetime.correct_reviews, lifetime.total_reviews)

    def record_cards_created(self, count: int = 1) -> None:
        self.progress.lifetime_stats.total_cards_created += count

    def update_streaks(self, today: date) -> int:
        """
        Refresh the current study streak and raise the longest streak if beaten.

        Returns:
            The current streak in days.
        """
        streak = study_streak(self.progress.daily_stats, today)
        self.progress.streak_days = streak
        lifetime = self.progress.lifetime_stats
        lifetime.longest_streak = max(lifetime.longest_streak, streak)
        return streak

    def refresh_card_counts(self, cards: Sequence[Card], now: datetime) -> None:
        self.progress.total_cards = len(cards)
        self.progress.cards_learned = sum(1 for card in cards if card.repetitions > 0)
        self.progress.cards_due = sum(1 for card in cards if card.is_due(now))


def accuracy_percent(correct: int, total: int) -> float:
    if total == 0:
        return 0.0
    return correct / total * 100


def study_streak(daily_stats: Iterable[DailyStat], today: date) -> int:
    """
    Count consecutive study days ending today.

    Walks back one calendar day at a time from ``today`` and stops at the
    first day with no stats or no cards studied. Recomputed on every call.
    """
    studied = {stat.date: stat.cards_studied for stat in daily_stats}

    streak = 0
    current = today
    while studied.get(current.isoformat(), 0) > 0:
        streak += 1
        current -= timedelta(days=1)
    return streak


def predicted_retention(card: Card, days_from_now: float) -> float:
    """
    Estimate recall probability ``days_from_now`` days ahead.

    Uses an exponential forgetting curve R = exp(-t / S) with stability
    S = ease_factor * interval, clamped to [0, 1]. Informational only.
    """
    stability = card.ease_factor * card.interval
    if stability <= 0:
        # Zero-day interval: nothing is retained past the present moment
        return 1.0 if days_from_now <= 0 else 0.0

    retention = math.exp(-days_from_now / stability)
    return max(0.0, min(1.0, retention))
