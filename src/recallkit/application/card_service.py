"""Service for creating, editing and organizing cards and categories."""

import logging
from collections.abc import Iterable
from datetime import datetime

from ulid import ULID

from recallkit.domain.constants import (
    DEFAULT_CATEGORY_COLOR,
    DEFAULT_EASE_FACTOR,
    INITIAL_INTERVAL,
)
from recallkit.domain.errors import CardNotFoundError
from recallkit.domain.models import Card, Category
from recallkit.domain.ports import StorageRepository

from .progress import ProgressAggregator
from .utils.dates import utc_now

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"front", "back", "category", "tags"})


def generate_id() -> str:
    """Generate a sortable unique id using ULID."""
    return str(ULID())


def new_card(
    front: str,
    back: str,
    category: str | None = None,
    tags: Iterable[str] = (),
    now: datetime | None = None,
) -> Card:
    """Build a never-reviewed card that is due immediately."""
    now = now or utc_now()
    return Card(
        id=generate_id(),
        front=front,
        back=back,
        category=category,
        tags=list(tags),
        created_at=now,
        updated_at=now,
        ease_factor=DEFAULT_EASE_FACTOR,
        interval=INITIAL_INTERVAL,
        repetitions=0,
        next_review_date=now,
    )


class CardService:
    def __init__(self, repo: StorageRepository):
        self._repo = repo

    def add_card(
        self,
        front: str,
        back: str,
        category: str | None = None,
        tags: Iterable[str] = (),
        now: datetime | None = None,
    ) -> Card:
        """
        Create and store a card.

        Unknown categories are created on the fly, and the lifetime count of
        created cards is incremented.
        """
        category = category.strip() if category and category.strip() else None
        card = new_card(front.strip(), back.strip(), category, tags, now)

        cards = self._repo.load_all_cards()
        cards.append(card)
        self._repo.save_all_cards(cards)

        progress = self._repo.load_progress()
        ProgressAggregator(progress).record_cards_created()
        self._repo.save_progress(progress)

        if category:
            self._ensure_category(category)
            self.refresh_category_counts()

        logger.info(f"Added card {card.id}")
        return card

    def update_card(self, card_id: str, now: datetime | None = None, **fields) -> Card:
        """
        Edit a card's content fields (front, back, category, tags).

        Raises:
            CardNotFoundError: No card has ``card_id``.
            ValueError: A field other than the content fields was passed.
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot edit fields: {', '.join(sorted(unknown))}")

        cards = self._repo.load_all_cards()
        for index, card in enumerate(cards):
            if card.id == card_id:
                updated = card.model_copy(update={**fields, "updated_at": now or utc_now()})
                cards[index] = updated
                self._repo.save_all_cards(cards)
                if "category" in fields:
                    if updated.category:
                        self._ensure_category(updated.category)
                    self.refresh_category_counts()
                return updated
        raise CardNotFoundError(card_id)

    def delete_card(self, card_id: str) -> bool:
        cards = self._repo.load_all_cards()
        remaining = [card for card in cards if card.id != card_id]
        if len(remaining) == len(cards):
            return False
        self._repo.save_all_cards(remaining)
        self.refresh_category_counts()
        logger.info(f"Deleted card {card_id}")
        return True

    def get_card(self, card_id: str) -> Card:
        for card in self._repo.load_all_cards():
            if card.id == card_id:
                return card
        raise CardNotFoundError(card_id)

    def cards_in_category(self, name: str) -> list[Card]:
        return [card for card in self._repo.load_all_cards() if card.category == name]

    # ---------- Categories ----------

    def add_category(
        self,
        name: str,
        color: str = DEFAULT_CATEGORY_COLOR,
        description: str | None = None,
    ) -> Category:
        categories = self._repo.load_categories()
        for category in categories:
            if category.name == name:
                return category

        category = Category(
            id=generate_id(),
            name=name,
            color=color,
            description=description,
            card_count=len(self.cards_in_category(name)),
        )
        categories.append(category)
        self._repo.save_categories(categories)
        return category

    def delete_category(self, name: str) -> bool:
        """Remove a category and clear it from every card that used it."""
        categories = self._repo.load_categories()
        remaining = [c for c in categories if c.name != name]
        if len(remaining) == len(categories):
            return False

        cards = self._repo.load_all_cards()
        now = utc_now()
        cards = [
            card.model_copy(update={"category": None, "updated_at": now})
            if card.category == name
            else card
            for card in cards
        ]
        self._repo.save_all_cards(cards)
        self._repo.save_categories(remaining)
        return True

    def refresh_category_counts(self) -> list[Category]:
        cards = self._repo.load_all_cards()
        categories = self._repo.load_categories()
        for category in categories:
            category.card_count = sum(1 for card in cards if card.category == category.name)
        self._repo.save_categories(categories)
        return categories

    def _ensure_category(self, name: str) -> None:
        if not any(c.name == name for c in self._repo.load_categories()):
            self.add_category(name)
