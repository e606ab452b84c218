"""
SM-2 review scheduler.

Maps a card's scheduling state and a review grade to the next state. This
is a pure computation module with no I/O: persisting the result and
updating progress statistics is the job of ``ReviewService``.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from recallkit.domain.constants import (
    AGAIN_REQUEUE_DELAY,
    EASY_EASE_BONUS,
    EASY_INTERVAL_MODIFIER,
    EASY_INTERVALS,
    GOOD_INTERVALS,
    HARD_EASE_PENALTY,
    HARD_INTERVAL_MODIFIER,
    HARD_INTERVALS,
)
from recallkit.domain.models import Card, Difficulty, clamp_ease_factor

from .utils.dates import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchedulingResult:
    """
    Next scheduling state for a card.

    Attributes:
        ease_factor: Updated ease factor, within [1.3, 2.5].
        interval: Stored interval in days (0 after "again").
        repetitions: Updated consecutive-success count.
        next_review_date: When the card becomes due again.
        requeue_delay: Delay until the card is due, kept apart from ``interval``
            because "again" re-queues after one minute while storing 0 days.
    """

    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime
    requeue_delay: timedelta


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_next(card: Card, difficulty: Difficulty, now: datetime) -> SchedulingResult:
    """
    Compute the next ease factor, interval and repetition count.

    The first two successful reviews use fixed intervals per grade
    (hard 1/2, good 1/6, easy 4/8 days). After that the interval grows by
    the ease factor, scaled by 0.8 for hard and 1.3 for easy.
    """
    ease_factor = card.ease_factor
    interval = card.interval
    repetitions = card.repetitions

    if difficulty is Difficulty.AGAIN:
        # Ease factor is left alone on a lapse
        repetitions = 0
        interval = 0
    elif difficulty is Difficulty.HARD:
        ease_factor = clamp_ease_factor(ease_factor - HARD_EASE_PENALTY)
        if repetitions < len(HARD_INTERVALS):
            interval = HARD_INTERVALS[repetitions]
        else:
            interval = max(1, round_half_up(interval * ease_factor * HARD_INTERVAL_MODIFIER))
        repetitions += 1
    elif difficulty is Difficulty.GOOD:
        if repetitions < len(GOOD_INTERVALS):
            interval = GOOD_INTERVALS[repetitions]
        else:
            interval = round_half_up(interval * ease_factor)
        repetitions += 1
    elif difficulty is Difficulty.EASY:
        ease_factor = clamp_ease_factor(ease_factor + EASY_EASE_BONUS)
        if repetitions < len(EASY_INTERVALS):
            interval = EASY_INTERVALS[repetitions]
        else:
            interval = round_half_up(interval * ease_factor * EASY_INTERVAL_MODIFIER)
        repetitions += 1
    else:
        raise ValueError(f"Unknown difficulty: {difficulty!r}")

    if difficulty is Difficulty.AGAIN:
        delay = AGAIN_REQUEUE_DELAY
    else:
        delay = timedelta(days=interval)

    return SchedulingResult(
        ease_factor=clamp_ease_factor(ease_factor),
        interval=interval,
        repetitions=repetitions,
        next_review_date=now + delay,
        requeue_delay=delay,
    )


def apply_review(
    card: Card,
    difficulty: Difficulty,
    response_time: float,
    now: datetime | None = None,
) -> Card:
    """
    Apply one review to a card and return the updated copy.

    Args:
        card: The card being reviewed; it is not modified.
        difficulty: The grade given by the learner.
        response_time: Seconds taken to answer (>= 0).
        now: Review timestamp; defaults to the current UTC time.

    Returns:
        A new Card with scheduling state and statistics updated.
    """
    now = now or utc_now()
    result = calculate_next(card, difficulty, now)

    total_reviews = card.total_reviews + 1
    correct = difficulty.is_correct
    previous_average = card.average_response_time or 0.0
    average_response_time = (
        previous_average * card.total_reviews + response_time
    ) / total_reviews

    logger.debug(
        f"Card {card.id}: {difficulty.value} -> interval={result.interval}d "
        f"reps={result.repetitions} ef={result.ease_factor:.2f}"
    )

    return card.model_copy(
        update={
            "ease_factor": result.ease_factor,
            "interval": result.interval,
            "repetitions": result.repetitions,
            "next_review_date": result.next_review_date,
            "total_reviews": total_reviews,
            "correct_reviews": card.correct_reviews + 1 if correct else card.correct_reviews,
            "streak": card.streak + 1 if correct else 0,
            "average_response_time": average_response_time,
            "updated_at": now,
        }
    )
