"""
Queue builder for study sessions.

Builds ordered study queues by:
1. Selecting due cards (next review date has passed) and new cards
2. Shuffling each set and capping it at its daily limit
3. Interleaving roughly two review cards per new card, due cards first
"""

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TypeVar

from recallkit.domain.constants import DEFAULT_EASE_FACTOR, REVIEWS_PER_NEW_CARD
from recallkit.domain.models import Card

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class QueueStats:
    """Counts describing the current card collection."""

    due_count: int
    new_count: int
    total_cards: int
    average_ease_factor: float


def shuffle_cards(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """
    Return a shuffled copy of ``items`` using an unbiased Fisher-Yates pass.

    Args:
        items: Items to shuffle; not modified.
        rng: Random source. Inject a seeded ``random.Random`` for reproducible order.
    """
    rng = rng or random.Random()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def select_due_cards(cards: Sequence[Card], now: datetime) -> list[Card]:
    return [card for card in cards if card.is_due(now)]


def select_new_cards(cards: Sequence[Card]) -> list[Card]:
    return [card for card in cards if card.repetitions == 0]


def _never_reviewed(card: Card) -> bool:
    return card.repetitions == 0 and card.total_reviews == 0


def interleave(due: Sequence[T], new: Sequence[T]) -> list[T]:
    """
    Merge review and new cards at approximately 2 review cards per 1 new card.

    Due cards are prioritized when counts are uneven: each step takes up to
    two due cards, then one new card, until both lists are exhausted.
    """
    queue: list[T] = []
    due_pos = 0
    new_pos = 0

    while due_pos < len(due) or new_pos < len(new):
        chunk = due[due_pos : due_pos + REVIEWS_PER_NEW_CARD]
        queue.extend(chunk)
        due_pos += len(chunk)
        if new_pos < len(new):
            queue.append(new[new_pos])
            new_pos += 1

    return queue


def build_study_queue(
    all_cards: Sequence[Card],
    now: datetime,
    max_new_cards: int,
    max_review_cards: int,
    shuffle: bool = False,
    rng: random.Random | None = None,
) -> list[Card]:
    """
    Build the ordered list of cards to study.

    Args:
        all_cards: Every card in the collection.
        now: Reference time for due selection.
        max_new_cards: Cap on new (never successfully reviewed) cards.
        max_review_cards: Cap on due cards.
        shuffle: Reshuffle the interleaved queue as a whole.
        rng: Random source shared by every shuffle step.

    Returns:
        Ordered cards; empty when nothing is due and nothing is new.
    """
    rng = rng or random.Random()

    # Never-reviewed cards count against the new-card cap even when already due.
    # Lapsed cards (failed back to zero repetitions) stay in the review slot.
    due = [card for card in select_due_cards(all_cards, now) if not _never_reviewed(card)]
    due_ids = {card.id for card in due}
    new = [card for card in select_new_cards(all_cards) if card.id not in due_ids]

    due = shuffle_cards(due, rng)[:max_review_cards]
    new = shuffle_cards(new, rng)[:max_new_cards]

    queue = interleave(due, new)
    if shuffle:
        queue = shuffle_cards(queue, rng)

    logger.debug(f"Built queue: {len(due)} due, {len(new)} new, {len(queue)} total")
    return queue


def get_queue_stats(all_cards: Sequence[Card], now: datetime) -> QueueStats:
    total = len(all_cards)
    average = (
        sum(card.ease_factor for card in all_cards) / total if total else DEFAULT_EASE_FACTOR
    )
    return QueueStats(
        due_count=len(select_due_cards(all_cards, now)),
        new_count=len(select_new_cards(all_cards)),
        total_cards=total,
        average_ease_factor=average,
    )
