# Domain Package
from .errors import CardNotFoundError, RecallkitError, SessionNotFoundError, StorageError
from .models import (
    Card,
    CardState,
    Category,
    DailyStat,
    Difficulty,
    ExportDocument,
    LifetimeStats,
    StudySession,
    StudySettings,
    UserProgress,
)
from .ports import StorageRepository

__all__ = [
    "Card",
    "CardState",
    "Category",
    "DailyStat",
    "Difficulty",
    "ExportDocument",
    "LifetimeStats",
    "StudySession",
    "StudySettings",
    "UserProgress",
    "StorageRepository",
    "RecallkitError",
    "StorageError",
    "CardNotFoundError",
    "SessionNotFoundError",
]
