"""
Metrics calculator for deriving insights from cards and daily stats.

This is a pure computation module with no I/O.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from recallkit.application.progress import predicted_retention
from recallkit.application.scheduler import round_half_up
from recallkit.domain.constants import (
    DAILY_AVERAGE_WINDOW,
    DEFAULT_RESPONSE_TIME,
    HARD_EASE_THRESHOLD,
    HIGH_ACCURACY_THRESHOLD,
    LOW_ACCURACY_THRESHOLD,
    MEDIUM_EASE_THRESHOLD,
    UPCOMING_WINDOW_DAYS,
)
from recallkit.domain.models import Card, CardState, DailyStat, Difficulty


@dataclass
class CardInsights:
    """
    A card's scheduling state enriched with computed metrics.
    """

    card_id: str
    front: str
    state: CardState
    ease_factor: float
    interval: int
    repetitions: int

    # Computed metrics
    accuracy: float | None  # correct / total reviews
    retention_in_week: float  # predicted recall 7 days from now
    optimal_interval: int
    interval_label: str


@dataclass
class DifficultyBreakdown:
    """Card counts bucketed by ease factor."""

    easy: int = 0
    medium: int = 0
    hard: int = 0


class MetricsCalculator:
    """
    Computes derived metrics from cards and daily statistics.

    Stateless and side-effect free.
    """

    def enrich(self, card: Card) -> CardInsights:
        return CardInsights(
            card_id=card.id,
            front=card.front,
            state=card.state,
            ease_factor=card.ease_factor,
            interval=card.interval,
            repetitions=card.repetitions,
            accuracy=card.accuracy,
            retention_in_week=predicted_retention(card, UPCOMING_WINDOW_DAYS),
            optimal_interval=self.optimal_interval(card),
            interval_label=format_interval(card.interval),
        )

    def optimal_interval(self, card: Card) -> int:
        """
        Adjust a card's interval by its historical accuracy.

        Below 60% the interval is halved (at least one day); above 90% it
        grows by 20%. Never-reviewed cards count as 0% accurate.
        """
        accuracy = card.accuracy or 0.0
        if accuracy < LOW_ACCURACY_THRESHOLD:
            return max(1, round_half_up(card.interval * 0.5))
        if accuracy > HIGH_ACCURACY_THRESHOLD:
            return round_half_up(card.interval * 1.2)
        return card.interval

    def suggest_difficulty(self, card: Card, response_time: float) -> Difficulty:
        """
        Suggest a grade from how fast the learner answered.

        Much slower than the card's average means hard; much faster with a
        strong track record means easy; anything else is good.
        """
        average = card.average_response_time or DEFAULT_RESPONSE_TIME
        accuracy = card.accuracy if card.accuracy is not None else 1.0

        if response_time > average * 2:
            return Difficulty.HARD
        if response_time < average * 0.5 and accuracy > HIGH_ACCURACY_THRESHOLD:
            return Difficulty.EASY
        return Difficulty.GOOD

    def difficulty_breakdown(self, cards: Sequence[Card]) -> DifficultyBreakdown:
        breakdown = DifficultyBreakdown()
        for card in cards:
            if card.ease_factor < HARD_EASE_THRESHOLD:
                breakdown.hard += 1
            elif card.ease_factor < MEDIUM_EASE_THRESHOLD:
                breakdown.medium += 1
            else:
                breakdown.easy += 1
        return breakdown

    def upcoming_reviews(
        self, cards: Sequence[Card], now: datetime, days: int = UPCOMING_WINDOW_DAYS
    ) -> int:
        horizon = now + timedelta(days=days)
        return sum(1 for card in cards if card.next_review_date <= horizon)

    def daily_average(
        self, daily_stats: Sequence[DailyStat], window: int = DAILY_AVERAGE_WINDOW
    ) -> float:
        recent = sorted(daily_stats, key=lambda s: s.date)[-window:]
        if not recent:
            return 0.0
        return sum(s.cards_studied for s in recent) / len(recent)


def format_interval(interval: int) -> str:
    """Human-readable interval: days below a month, then months, then years."""
    if interval < 1:
        return "< 1 day"
    if interval == 1:
        return "1 day"
    if interval < 30:
        return f"{interval} days"
    if interval < 365:
        months = round_half_up(interval / 30)
        return f"{months} month{'' if months == 1 else 's'}"
    years = round_half_up(interval / 365)
    return f"{years} year{'' if years == 1 else 's'}"
