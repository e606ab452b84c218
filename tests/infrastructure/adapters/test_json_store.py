import json
from unittest.mock import patch

import pytest

from recallkit.domain.errors import StorageError
from recallkit.domain.models import Category, StudySession, StudySettings, UserProgress
from recallkit.infrastructure.adapters.storage.json_store import JsonFileRepository


@pytest.fixture
def store(tmp_path):
    return JsonFileRepository(tmp_path / "data")


def test_missing_files_load_defaults(store):
    assert store.load_all_cards() == []
    assert store.load_sessions() == []
    assert store.load_categories() == []
    assert store.load_progress() == UserProgress()
    assert store.load_settings() == StudySettings()


def test_cards_round_trip(store, make_card):
    cards = [make_card(id="a", tags=["t"]), make_card(id="b", average_response_time=2.5)]
    store.save_all_cards(cards)
    assert store.load_all_cards() == cards


def test_written_with_camel_case_keys(store, make_card):
    store.save_all_cards([make_card(id="a")])
    raw = json.loads((store.data_dir / "cards.json").read_text())
    assert raw[0]["id"] == "a"
    assert "nextReviewDate" in raw[0]
    assert raw[0]["nextReviewDate"].endswith("Z")


def test_malformed_file_loads_default(store, caplog):
    store.data_dir.mkdir(parents=True)
    (store.data_dir / "cards.json").write_text("{oops")
    (store.data_dir / "settings.json").write_text('{"dailyGoal": -4}')

    assert store.load_all_cards() == []
    assert store.load_settings() == StudySettings()
    assert "Ignoring unreadable" in caplog.text


def test_other_collections_round_trip(store, now):
    store.save_categories([Category(id="c", name="Math", color="#000")])
    store.save_settings(StudySettings(max_new_cards=3))
    store.append_session(StudySession(id="s1", start_time=now))

    updated = store.update_session("s1", {"cards_studied": 4})

    assert store.load_categories()[0].name == "Math"
    assert store.load_settings().max_new_cards == 3
    assert updated.cards_studied == 4
    assert store.load_sessions()[0].cards_studied == 4


def test_write_failure_raises_storage_error(store, make_card):
    with patch("recallkit.infrastructure.adapters.storage.json_store.os.replace", side_effect=OSError("boom")):
        with pytest.raises(StorageError):
            store.save_all_cards([make_card()])

    # No partial file and no temp file left behind
    assert list(store.data_dir.iterdir()) == []


def test_clear_all(store, make_card):
    store.save_all_cards([make_card()])
    store.save_progress(UserProgress())
    store.clear_all()
    assert list(store.data_dir.iterdir()) == []
    store.clear_all()
