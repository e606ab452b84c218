"""
Domain models for cards, study sessions and progress statistics.

These are pure data structures with no I/O. Field names are snake_case in
Python and camelCase on the wire, so a persisted or exported document reads
``{"easeFactor": 2.5, "nextReviewDate": "..."}``.
"""

from datetime import datetime
from enum import Enum

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, NonNegativeInt, field_validator
from pydantic.alias_generators import to_camel

from .constants import (
    DEFAULT_DAILY_GOAL,
    DEFAULT_EASE_FACTOR,
    DEFAULT_MAX_NEW_CARDS,
    DEFAULT_MAX_REVIEWS,
    INITIAL_INTERVAL,
    LEARNING_MAX_REPETITIONS,
    MAX_EASE_FACTOR,
    MIN_EASE_FACTOR,
)


class RecallkitModel(BaseModel):
    """Base model: camelCase aliases, accepts either spelling on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Difficulty(str, Enum):
    """Review grade given by the learner."""

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    @property
    def is_correct(self) -> bool:
        return self is not Difficulty.AGAIN


class CardState(str, Enum):
    """Coarse learning stage derived from the repetition count."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"


def clamp_ease_factor(value: float) -> float:
    return max(MIN_EASE_FACTOR, min(MAX_EASE_FACTOR, value))


class Card(RecallkitModel):
    """
    A flashcard with its SM-2 scheduling state and lifetime statistics.

    Attributes:
        ease_factor: Interval growth multiplier, always within [1.3, 2.5].
        interval: Days until the next review (0 right after an "again").
        repetitions: Consecutive non-"again" reviews.
        next_review_date: When the card becomes due.
        streak: Consecutive correct answers for this card.
        average_response_time: Running mean in seconds, None before the first review.
    """

    id: str
    front: str
    back: str
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: AwareDatetime
    updated_at: AwareDatetime

    # Scheduling state
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: NonNegativeInt = INITIAL_INTERVAL
    repetitions: NonNegativeInt = 0
    next_review_date: AwareDatetime

    # Statistics
    total_reviews: NonNegativeInt = 0
    correct_reviews: NonNegativeInt = 0
    streak: NonNegativeInt = 0
    average_response_time: float | None = None

    @field_validator("ease_factor")
    @classmethod
    def _clamp_ease(cls, v: float) -> float:
        return clamp_ease_factor(v)

    @property
    def state(self) -> CardState:
        if self.repetitions == 0:
            return CardState.NEW
        if self.repetitions <= LEARNING_MAX_REPETITIONS:
            return CardState.LEARNING
        return CardState.REVIEW

    @property
    def accuracy(self) -> float | None:
        """Fraction of correct reviews, None if never reviewed."""
        if self.total_reviews == 0:
            return None
        return self.correct_reviews / self.total_reviews

    def is_due(self, now: datetime) -> bool:
        return self.next_review_date <= now


class StudySession(RecallkitModel):
    id: str
    start_time: AwareDatetime
    end_time: AwareDatetime | None = None
    cards_studied: NonNegativeInt = 0
    correct_answers: NonNegativeInt = 0
    total_time: float = 0.0  # seconds
    average_response_time: float = 0.0


class DailyStat(RecallkitModel):
    """Per-day review totals keyed by an ISO date string (YYYY-MM-DD)."""

    date: str
    cards_studied: NonNegativeInt = 0
    correct_answers: NonNegativeInt = 0
    study_time: float = 0.0  # seconds
    new_cards: NonNegativeInt = 0


class LifetimeStats(RecallkitModel):
    total_reviews: NonNegativeInt = 0
    correct_reviews: NonNegativeInt = 0
    accuracy: float = 0.0  # percent
    longest_streak: NonNegativeInt = 0
    total_cards_created: NonNegativeInt = 0


class UserProgress(RecallkitModel):
    """Aggregated progress owned by the progress aggregator."""

    total_cards: NonNegativeInt = 0
    cards_learned: NonNegativeInt = 0  # cards with repetitions > 0
    cards_due: NonNegativeInt = 0
    streak_days: NonNegativeInt = 0
    total_study_time: float = 0.0  # seconds
    last_study_date: AwareDatetime | None = None

    daily_stats: list[DailyStat] = Field(default_factory=list)
    lifetime_stats: LifetimeStats = Field(default_factory=LifetimeStats)

    def daily_stat(self, date_key: str) -> DailyStat | None:
        for stat in self.daily_stats:
            if stat.date == date_key:
                return stat
        return None


class Category(RecallkitModel):
    id: str
    name: str
    color: str
    description: str | None = None
    card_count: NonNegativeInt = 0


class StudySettings(RecallkitModel):
    """User-facing study preferences, persisted alongside the cards."""

    daily_goal: NonNegativeInt = DEFAULT_DAILY_GOAL
    max_new_cards: NonNegativeInt = DEFAULT_MAX_NEW_CARDS
    max_reviews: NonNegativeInt = DEFAULT_MAX_REVIEWS
    show_timer: bool = True
    auto_advance: bool = False
    shuffle_cards: bool = True


class ExportDocument(RecallkitModel):
    """
    Full data set as written by an export.

    Every collection is optional on import: missing keys leave the stored
    collection untouched.
    """

    cards: list[Card] | None = None
    progress: UserProgress | None = None
    sessions: list[StudySession] | None = None
    categories: list[Category] | None = None
    settings: StudySettings | None = None
    export_date: AwareDatetime | None = None
