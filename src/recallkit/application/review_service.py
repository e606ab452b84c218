"""
Review Service — Application layer orchestrator.

Runs one review as a single logical transaction: schedule the card, report
the outcome to the progress aggregator, persist both.
"""

import logging
from datetime import datetime

from recallkit.domain.errors import CardNotFoundError, StorageError
from recallkit.domain.models import Card, Difficulty
from recallkit.domain.ports import StorageRepository

from .progress import ProgressAggregator
from .scheduler import apply_review
from .utils.dates import date_key, local_date, utc_now

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Applies reviews against a storage repository.

    Follows Dependency Inversion: depends on the StorageRepository
    abstraction, not a concrete store.
    """

    def __init__(self, repo: StorageRepository):
        self._repo = repo

    def review(
        self,
        card_id: str,
        difficulty: Difficulty,
        response_time: float,
        now: datetime | None = None,
    ) -> Card:
        """
        Review a stored card and persist the result.

        Cards are written before progress. If the progress write fails the
        previous card list is written back, so either both records change
        or neither does.

        Args:
            card_id: The card being answered.
            difficulty: The grade given.
            response_time: Seconds taken to answer.
            now: Review timestamp; defaults to the current UTC time.

        Returns:
            The updated card.

        Raises:
            CardNotFoundError: No card has ``card_id``.
            StorageError: A write failed; nothing was changed.
        """
        now = now or utc_now()
        cards = self._repo.load_all_cards()

        index = next((i for i, c in enumerate(cards) if c.id == card_id), None)
        if index is None:
            raise CardNotFoundError(card_id)

        card = cards[index]
        updated = apply_review(card, difficulty, response_time, now)

        progress = self._repo.load_progress()
        aggregator = ProgressAggregator(progress)
        aggregator.record_outcome(
            date_key(now),
            correct=difficulty.is_correct,
            response_time=response_time,
            is_new_card=card.total_reviews == 0,
        )
        aggregator.recompute_lifetime(difficulty.is_correct)
        aggregator.update_streaks(local_date(now))
        progress.last_study_date = now

        new_cards = list(cards)
        new_cards[index] = updated
        aggregator.refresh_card_counts(new_cards, now)

        self._repo.save_all_cards(new_cards)
        try:
            self._repo.save_progress(progress)
        except StorageError:
            logger.error(f"Failed to save progress for review of {card_id}; restoring cards")
            try:
                self._repo.save_all_cards(cards)
            except StorageError as rollback_error:
                logger.error(f"Could not restore cards after review of {card_id}: {rollback_error}")
            raise

        logger.info(
            f"Reviewed {card_id} as {difficulty.value}; next review {updated.next_review_date.isoformat()}"
        )
        return updated
