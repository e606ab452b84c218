"""
Ports (interfaces) for persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on this abstraction, not on a concrete store.
"""

from abc import ABC, abstractmethod
from typing import Any

from .models import Card, Category, StudySession, StudySettings, UserProgress


class StorageRepository(ABC):
    """
    Port for loading and saving the recallkit data set.

    Loads never fail on missing or malformed data: they return an empty or
    default value instead. Saves raise ``StorageError`` when the write cannot
    be completed.

    Implementations:
        - JsonFileRepository: One JSON document per collection on disk.
        - InMemoryRepository: Dict-backed store for tests and throwaway runs.
    """

    @abstractmethod
    def load_all_cards(self) -> list[Card]:
        pass

    @abstractmethod
    def save_all_cards(self, cards: list[Card]) -> None:
        pass

    @abstractmethod
    def load_progress(self) -> UserProgress:
        pass

    @abstractmethod
    def save_progress(self, progress: UserProgress) -> None:
        pass

    @abstractmethod
    def load_sessions(self) -> list[StudySession]:
        pass

    @abstractmethod
    def save_sessions(self, sessions: list[StudySession]) -> None:
        pass

    @abstractmethod
    def load_categories(self) -> list[Category]:
        pass

    @abstractmethod
    def save_categories(self, categories: list[Category]) -> None:
        pass

    @abstractmethod
    def load_settings(self) -> StudySettings:
        pass

    @abstractmethod
    def save_settings(self, settings: StudySettings) -> None:
        pass

    @abstractmethod
    def clear_all(self) -> None:
        """Remove every stored collection."""
        pass

    def append_session(self, session: StudySession) -> None:
        sessions = self.load_sessions()
        sessions.append(session)
        self.save_sessions(sessions)

    def update_session(self, session_id: str, patch: dict[str, Any]) -> StudySession | None:
        """
        Apply a partial update to a stored session.

        Args:
            session_id: The session to update.
            patch: Field names (snake_case) mapped to new values.

        Returns:
            The updated session, or None if no session has that id.
        """
        sessions = self.load_sessions()
        for index, session in enumerate(sessions):
            if session.id == session_id:
                updated = session.model_copy(update=patch)
                sessions[index] = updated
                self.save_sessions(sessions)
                return updated
        return None
