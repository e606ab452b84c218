"""
In-Memory Repository — StorageRepository kept in process memory.

Used by the test suite and by the ``memory`` backend for throwaway runs.
Values are deep-copied on the way in and out so callers never share state
with the store, the same as with a real persistence backend.
"""

from typing import Any

from recallkit.domain.models import Card, Category, StudySession, StudySettings, UserProgress
from recallkit.domain.ports import StorageRepository


class InMemoryRepository(StorageRepository):
    def __init__(
        self,
        cards: list[Card] | None = None,
        progress: UserProgress | None = None,
        sessions: list[StudySession] | None = None,
        categories: list[Category] | None = None,
        settings: StudySettings | None = None,
    ):
        self._data: dict[str, Any] = {}
        if cards is not None:
            self.save_all_cards(cards)
        if progress is not None:
            self.save_progress(progress)
        if sessions is not None:
            self.save_sessions(sessions)
        if categories is not None:
            self.save_categories(categories)
        if settings is not None:
            self.save_settings(settings)

    def load_all_cards(self) -> list[Card]:
        return [c.model_copy(deep=True) for c in self._data.get("cards", [])]

    def save_all_cards(self, cards: list[Card]) -> None:
        self._data["cards"] = [c.model_copy(deep=True) for c in cards]

    def load_progress(self) -> UserProgress:
        progress = self._data.get("progress")
        return progress.model_copy(deep=True) if progress else UserProgress()

    def save_progress(self, progress: UserProgress) -> None:
        self._data["progress"] = progress.model_copy(deep=True)

    def load_sessions(self) -> list[StudySession]:
        return [s.model_copy(deep=True) for s in self._data.get("sessions", [])]

    def save_sessions(self, sessions: list[StudySession]) -> None:
        self._data["sessions"] = [s.model_copy(deep=True) for s in sessions]

    def load_categories(self) -> list[Category]:
        return [c.model_copy(deep=True) for c in self._data.get("categories", [])]

    def save_categories(self, categories: list[Category]) -> None:
        self._data["categories"] = [c.model_copy(deep=True) for c in categories]

    def load_settings(self) -> StudySettings:
        settings = self._data.get("settings")
        return settings.model_copy(deep=True) if settings else StudySettings()

    def save_settings(self, settings: StudySettings) -> None:
        self._data["settings"] = settings.model_copy(deep=True)

    def clear_all(self) -> None:
        self._data.clear()
