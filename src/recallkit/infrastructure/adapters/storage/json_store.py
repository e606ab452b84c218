"""
JSON File Repository — Infrastructure adapter for local file storage.

Implements StorageRepository with one JSON document per collection inside a
data directory. Timestamps are written as RFC 3339 strings and parsed back
into typed datetimes by the models, never by guessing from string shape.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from recallkit.domain.constants import (
    CARDS_FILE,
    CATEGORIES_FILE,
    PROGRESS_FILE,
    SESSIONS_FILE,
    SETTINGS_FILE,
)
from recallkit.domain.errors import StorageError
from recallkit.domain.models import Card, Category, StudySession, StudySettings, UserProgress
from recallkit.domain.ports import StorageRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CARDS = TypeAdapter(list[Card])
_SESSIONS = TypeAdapter(list[StudySession])
_CATEGORIES = TypeAdapter(list[Category])
_PROGRESS = TypeAdapter(UserProgress)
_SETTINGS = TypeAdapter(StudySettings)

ALL_FILES = (CARDS_FILE, PROGRESS_FILE, SESSIONS_FILE, CATEGORIES_FILE, SETTINGS_FILE)


class JsonFileRepository(StorageRepository):
    """
    Stores each collection as ``<data_dir>/<collection>.json``.

    Unreadable or invalid files load as empty/default values (with a
    warning). Writes go through a temporary file and ``os.replace`` so a
    failed write never leaves a truncated document behind.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    # ---------- Cards ----------

    def load_all_cards(self) -> list[Card]:
        return self._read(CARDS_FILE, _CARDS, list)

    def save_all_cards(self, cards: list[Card]) -> None:
        self._write(CARDS_FILE, _CARDS, cards)

    # ---------- Progress ----------

    def load_progress(self) -> UserProgress:
        return self._read(PROGRESS_FILE, _PROGRESS, UserProgress)

    def save_progress(self, progress: UserProgress) -> None:
        self._write(PROGRESS_FILE, _PROGRESS, progress)

    # ---------- Sessions ----------

    def load_sessions(self) -> list[StudySession]:
        return self._read(SESSIONS_FILE, _SESSIONS, list)

    def save_sessions(self, sessions: list[StudySession]) -> None:
        self._write(SESSIONS_FILE, _SESSIONS, sessions)

    # ---------- Categories ----------

    def load_categories(self) -> list[Category]:
        return self._read(CATEGORIES_FILE, _CATEGORIES, list)

    def save_categories(self, categories: list[Category]) -> None:
        self._write(CATEGORIES_FILE, _CATEGORIES, categories)

    # ---------- Settings ----------

    def load_settings(self) -> StudySettings:
        return self._read(SETTINGS_FILE, _SETTINGS, StudySettings)

    def save_settings(self, settings: StudySettings) -> None:
        self._write(SETTINGS_FILE, _SETTINGS, settings)

    def clear_all(self) -> None:
        try:
            for name in ALL_FILES:
                (self.data_dir / name).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not clear {self.data_dir}: {e}") from e

    # ---------- Helpers ----------

    def _read(self, name: str, adapter: TypeAdapter[T], default: Any) -> T:
        path = self.data_dir / name
        if not path.exists():
            return default()

        try:
            return adapter.validate_json(path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable {path}: {e}")
            return default()

    def _write(self, name: str, adapter: TypeAdapter[T], value: T) -> None:
        path = self.data_dir / name
        payload = adapter.dump_json(value, by_alias=True, indent=2)

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e
