from datetime import datetime, timedelta, timezone

import pytest

from recallkit.domain.models import Card
from recallkit.infrastructure.adapters.storage.memory import InMemoryRepository

NOW = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_card():
    """Factory for cards; keyword overrides replace the defaults."""
    counter = iter(range(1, 10_000))

    def _make(**overrides) -> Card:
        data = {
            "id": f"card-{next(counter)}",
            "front": "front",
            "back": "back",
            "created_at": NOW - timedelta(days=30),
            "updated_at": NOW - timedelta(days=30),
            "next_review_date": NOW - timedelta(hours=1),
        }
        data.update(overrides)
        return Card(**data)

    return _make


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/data
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "RECALLKIT_DATA_DIR",
        "RECALLKIT_LOG_DIR",
        "RECALLKIT_BACKEND",
        "RECALLKIT_VERBOSE",
    ):
        monkeypatch.delenv(var, raising=False)
    return home
