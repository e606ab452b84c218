"""Tests for CLI commands: cards, queue, review, study, stats, backup, settings and config."""

import json
import logging
from datetime import datetime

import pytest
from typer.testing import CliRunner

from recallkit.interface.cli import app

runner = CliRunner()


@pytest.fixture
def data_dir(tmp_path, mock_home):
    return tmp_path / "data"


def invoke(data_dir, *args, **kwargs):
    return runner.invoke(app, ["--data-dir", str(data_dir), *args], **kwargs)


def add_card(data_dir, front="Hund", back="dog", *extra):
    result = invoke(data_dir, "add", front, back, *extra)
    assert result.exit_code == 0, result.output
    return result.stdout.strip()


# --- Help ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "SM-2 spaced-repetition" in result.stdout
    assert "review" in result.stdout
    assert "export" in result.stdout


# --- Cards ---


def test_add_and_list(data_dir):
    card_id = add_card(data_dir, "Katze", "cat", "--category", "German", "--tag", "noun")

    result = invoke(data_dir, "list", "--json")
    assert result.exit_code == 0
    cards = json.loads(result.stdout)
    assert cards[0]["id"] == card_id
    assert cards[0]["category"] == "German"
    assert cards[0]["tags"] == ["noun"]
    assert cards[0]["easeFactor"] == 2.5

    result = invoke(data_dir, "list")
    assert "[new]" in result.stdout
    assert "Katze" in result.stdout
    assert "due now" in result.stdout


def test_list_shows_next_review_date_after_review(data_dir):
    card_id = add_card(data_dir)
    invoke(data_dir, "review", card_id, "good")

    listed = json.loads(invoke(data_dir, "list", "--json").stdout)[0]
    next_review = datetime.fromisoformat(listed["nextReviewDate"].replace("Z", "+00:00"))

    result = invoke(data_dir, "list")
    assert "due now" not in result.stdout
    assert f"due {next_review.astimezone():%Y-%m-%d %H:%M}" in result.stdout



def test_list_empty(data_dir):
    result = invoke(data_dir, "list")
    assert result.exit_code == 0
    assert "No cards." in result.stdout


def test_delete(data_dir):
    card_id = add_card(data_dir)
    assert invoke(data_dir, "delete", card_id).exit_code == 0
    assert invoke(data_dir, "delete", card_id).exit_code == 1


# --- Queue & Review ---


def test_queue_lists_new_cards(data_dir):
    card_id = add_card(data_dir)
    result = invoke(data_dir, "queue", "--seed", "1")
    assert result.exit_code == 0
    assert card_id in result.stdout


def test_queue_empty(data_dir):
    result = invoke(data_dir, "queue")
    assert result.exit_code == 0
    assert "All caught up" in result.stdout


def test_review_updates_card(data_dir):
    card_id = add_card(data_dir)
    result = invoke(data_dir, "review", card_id, "good", "--time", "3.5")
    assert result.exit_code == 0, result.output
    assert "1 day" in result.stdout

    card = json.loads(invoke(data_dir, "list", "--json").stdout)[0]
    assert card["repetitions"] == 1
    assert card["averageResponseTime"] == 3.5

    # Card is no longer due, so the queue is empty
    assert "All caught up" in invoke(data_dir, "queue").stdout


def test_review_accepts_numeric_grade(data_dir):
    card_id = add_card(data_dir)
    result = invoke(data_dir, "review", card_id, "4")
    assert result.exit_code == 0
    assert result.stdout.startswith("easy")


def test_review_bad_grade(data_dir):
    card_id = add_card(data_dir)
    result = invoke(data_dir, "review", card_id, "perfect")
    assert result.exit_code != 0


def test_review_unknown_card(data_dir):
    result = invoke(data_dir, "review", "missing", "good")
    assert result.exit_code == 1
    assert "Card not found" in result.output


def test_study_session(data_dir):
    add_card(data_dir)
    result = invoke(data_dir, "study", input="\n3\n")
    assert result.exit_code == 0, result.output
    assert "Studied 1 cards, 1 correct." in result.stdout

    stats = json.loads(invoke(data_dir, "stats", "--json").stdout)
    assert stats["lifetime"]["total_reviews"] == 1
    assert stats["study_streak"] == 1
    assert stats["recent_performance"] == 100.0


def test_study_quit_early(data_dir):
    add_card(data_dir, "one", "1")
    add_card(data_dir, "two", "2")
    result = invoke(data_dir, "study", input="\nq\n")
    assert result.exit_code == 0, result.output
    assert "Studied 0 cards" in result.stdout


def test_study_nothing_due(data_dir):
    result = invoke(data_dir, "study")
    assert "All caught up" in result.stdout


# --- Stats ---


def test_stats_text(data_dir):
    add_card(data_dir)
    result = invoke(data_dir, "stats")
    assert result.exit_code == 0
    assert "Study streak: 0 day(s)" in result.stdout
    assert "Cards created: 1" in result.stdout


def test_stats_cards_json(data_dir):
    card_id = add_card(data_dir)
    invoke(data_dir, "review", card_id, "good")

    result = invoke(data_dir, "stats", "--cards", "--json")
    assert result.exit_code == 0
    insights = json.loads(result.stdout)
    assert insights[0]["card_id"] == card_id
    assert insights[0]["state"] == "learning"
    assert insights[0]["accuracy"] == 1.0
    assert insights[0]["optimal_interval"] == 1
    assert 0.0 < insights[0]["retention_in_week"] < 1.0


def test_stats_weak_lists_failed_cards_only(data_dir):
    good_id = add_card(data_dir, "Haus", "house")
    bad_id = add_card(data_dir, "Baum", "tree")
    invoke(data_dir, "review", good_id, "easy")
    invoke(data_dir, "review", bad_id, "again")

    result = invoke(data_dir, "stats", "--weak")
    assert result.exit_code == 0
    assert bad_id in result.stdout
    assert good_id not in result.stdout
    assert "acc=0%" in result.stdout



# --- Backup ---


def test_export_import_round_trip(data_dir, tmp_path):
    card_id = add_card(data_dir)
    invoke(data_dir, "review", card_id, "hard")
    backup = tmp_path / "backup.json"

    assert invoke(data_dir, "export", str(backup)).exit_code == 0
    exported = json.loads(backup.read_text())
    assert "exportDate" in exported

    other = tmp_path / "other"
    assert invoke(other, "import", str(backup)).exit_code == 0
    assert json.loads(invoke(other, "list", "--json").stdout) == exported["cards"]


def test_import_invalid(data_dir, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{broken")
    result = invoke(data_dir, "import", str(bad))
    assert result.exit_code == 1
    assert "Import failed" in result.output


def test_import_missing_file(data_dir, tmp_path):
    result = invoke(data_dir, "import", str(tmp_path / "nope.json"))
    assert result.exit_code == 1


def test_reset(data_dir):
    add_card(data_dir)
    assert invoke(data_dir, "reset", input="n\n").exit_code != 0
    assert invoke(data_dir, "reset", "--force").exit_code == 0
    assert json.loads(invoke(data_dir, "list", "--json").stdout) == []


# --- Settings & Config ---


def test_settings_set_and_show(data_dir):
    result = invoke(data_dir, "settings", "set", "--max-new-cards", "3", "--no-shuffle")
    assert result.exit_code == 0, result.output

    shown = json.loads(invoke(data_dir, "settings", "show").stdout)
    assert shown["maxNewCards"] == 3
    assert shown["shuffleCards"] is False
    assert shown["dailyGoal"] == 20


def test_config_show(data_dir):
    result = invoke(data_dir, "config", "show")
    assert result.exit_code == 0
    output = json.loads(result.stdout)
    assert output["data_dir"] == str(data_dir.resolve())
    assert output["backend"] == "json"


def test_verbose_flag_reaches_config_and_log_file(data_dir, mock_home):
    result = invoke(data_dir, "-vv", "config", "show")
    assert result.exit_code == 0
    output = json.loads(result.stdout)
    assert output["verbose"] == 3
    assert output["log_dir"] == str((mock_home / ".config/recallkit/logs").resolve())
    assert (mock_home / ".config/recallkit/logs/recallkit.log").exists()


def test_config_file_verbosity_applies_without_flag(data_dir, mock_home):
    cfg = mock_home / ".config/recallkit"
    cfg.mkdir(parents=True)
    (cfg / "config.toml").write_text("verbose = 0\n")

    result = invoke(data_dir, "config", "show")
    assert result.exit_code == 0
    assert json.loads(result.stdout)["verbose"] == 0
    assert logging.getLogger("recallkit").level == logging.WARNING
