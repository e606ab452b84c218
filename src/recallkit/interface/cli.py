"""recallkit CLI — card management, study sessions, statistics and backups."""

import json
import logging
import random
import sys
import time
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from recallkit.application.backup import BackupService
from recallkit.application.card_service import CardService
from recallkit.application.queue_builder import build_study_queue
from recallkit.application.review_service import ReviewService
from recallkit.application.session_service import SessionService
from recallkit.application.stats import CardInsights, MetricsCalculator, StatsService
from recallkit.application.stats.metrics_calculator import format_interval
from recallkit.application.utils.dates import utc_now
from recallkit.application.utils.logging_config import setup_logging
from recallkit.domain.errors import RecallkitError
from recallkit.domain.models import Difficulty
from recallkit.interface._common import (
    _resolve_with_overrides,
    fail,
    open_repository,
    parse_grade,
)

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="recallkit: SM-2 spaced-repetition flashcards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Register subgroups
# ---------------------------------------------------------------------------

config_app = typer.Typer(help="Manage recallkit configuration.")
app.add_typer(config_app, name="config")

settings_app = typer.Typer(help="Study preferences (daily goal, card limits).")
app.add_typer(settings_app, name="settings")


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None, typer.Option("--data-dir", help="Directory holding the JSON data files.")
    ] = None,
    backend: Annotated[
        str | None,
        typer.Option(help="Storage backend: json or memory."),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for recallkit."""
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir
    ctx.obj["backend"] = backend
    # Each -v raises the configured default (INFO) by one step
    ctx.obj["verbose"] = verbose + 1 if verbose else None

    try:
        config = _resolve_with_overrides(ctx)
    except ValidationError as e:
        raise typer.BadParameter(str(e)) from None
    setup_logging(config)


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    front: Annotated[str, typer.Argument(help="Question side.")],
    back: Annotated[str, typer.Argument(help="Answer side.")],
    category: Annotated[str | None, typer.Option(help="Category name.")] = None,
    tag: Annotated[list[str] | None, typer.Option("--tag", "-t", help="Tag (repeatable).")] = None,
):
    """[bold green]Add[/bold green] a new card."""
    service = CardService(open_repository(ctx))
    try:
        card = service.add_card(front, back, category=category, tags=tag or [])
    except RecallkitError as e:
        raise fail(e)
    typer.echo(card.id)


@app.command("list")
def list_cards(
    ctx: typer.Context,
    category: Annotated[str | None, typer.Option(help="Only cards in this category.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List cards with their scheduling state."""
    repo = open_repository(ctx)
    cards = repo.load_all_cards()
    if category:
        cards = [c for c in cards if c.category == category]

    if json_output:
        typer.echo(json.dumps([c.model_dump(mode="json", by_alias=True) for c in cards], indent=2))
        return

    if not cards:
        typer.secho("No cards.", fg="yellow")
        return

    now = utc_now()
    for card in cards:
        if card.is_due(now):
            due = "due now"
        else:
            due = f"due {card.next_review_date.astimezone():%Y-%m-%d %H:%M}"
        typer.echo(
            f"{card.id}  [{card.state.value}]  ef={card.ease_factor:.2f}  {due}  {card.front}"
        )


@app.command()
def delete(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card id.")],
):
    """Delete a card."""
    if not CardService(open_repository(ctx)).delete_card(card_id):
        typer.secho(f"Card not found: {card_id}", fg="red", err=True)
        raise typer.Exit(1)
    typer.secho(f"Deleted {card_id}.", fg="green")


# ---------------------------------------------------------------------------
# Studying
# ---------------------------------------------------------------------------


@app.command("queue")
def queue(
    ctx: typer.Context,
    max_new: Annotated[int | None, typer.Option(help="Override the new-card limit.")] = None,
    max_reviews: Annotated[int | None, typer.Option(help="Override the review limit.")] = None,
    seed: Annotated[int | None, typer.Option(help="Seed for reproducible shuffling.")] = None,
):
    """Show today's study queue: about 2 review cards per new card."""
    repo = open_repository(ctx)
    settings = repo.load_settings()
    cards = build_study_queue(
        repo.load_all_cards(),
        utc_now(),
        max_new_cards=settings.max_new_cards if max_new is None else max_new,
        max_review_cards=settings.max_reviews if max_reviews is None else max_reviews,
        shuffle=settings.shuffle_cards,
        rng=random.Random(seed),
    )

    if not cards:
        typer.secho("All caught up. No cards due.", fg="green")
        return

    for card in cards:
        typer.echo(f"{card.id}  [{card.state.value}]  {card.front}")


@app.command()
def review(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card id.")],
    grade: Annotated[str, typer.Argument(help="again, hard, good, easy (or 1-4).")],
    response_time: Annotated[
        float, typer.Option("--time", min=0, help="Seconds taken to answer.")
    ] = 0.0,
):
    """Record a single review outcome for a card."""
    difficulty = parse_grade(grade)
    try:
        card = ReviewService(open_repository(ctx)).review(card_id, difficulty, response_time)
    except RecallkitError as e:
        raise fail(e)

    typer.echo(
        f"{difficulty.value}: next review {card.next_review_date.isoformat()} "
        f"(interval {format_interval(card.interval)}, ef {card.ease_factor:.2f})"
    )


@app.command()
def study(ctx: typer.Context):
    """Run an interactive study session over today's queue."""
    repo = open_repository(ctx)
    settings = repo.load_settings()
    cards = build_study_queue(
        repo.load_all_cards(),
        utc_now(),
        max_new_cards=settings.max_new_cards,
        max_review_cards=settings.max_reviews,
        shuffle=settings.shuffle_cards,
    )
    if not cards:
        typer.secho("All caught up. No cards due.", fg="green")
        return

    reviews = ReviewService(repo)
    sessions = SessionService(repo)
    calculator = MetricsCalculator()

    try:
        sessions.start()
        for position, card in enumerate(cards, start=1):
            typer.secho(f"\n[{position}/{len(cards)}] {card.front}", bold=True)
            started = time.monotonic()
            typer.prompt("Press Enter to reveal", default="", show_default=False)
            response_time = time.monotonic() - started
            typer.echo(card.back)

            suggested = calculator.suggest_difficulty(card, response_time)
            difficulty = _prompt_grade(suggested.value)
            if difficulty is None:
                break

            reviews.review(card.id, difficulty, response_time)
            sessions.record_answer(difficulty.is_correct)

        session = sessions.finish()
    except RecallkitError as e:
        raise fail(e)

    typer.secho(
        f"\nStudied {session.cards_studied} cards, {session.correct_answers} correct.",
        fg="green",
    )


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
    cards: Annotated[
        bool, typer.Option("--cards", help="Per-card metrics instead of the overview.")
    ] = False,
    weak: Annotated[
        bool, typer.Option("--weak", help="Only cards with low ease or low accuracy.")
    ] = False,
):
    """Show progress: streak, accuracy, queue size and card difficulty."""
    service = StatsService(open_repository(ctx))

    if cards or weak:
        insights = service.weak_cards() if weak else service.card_insights()
        _print_card_insights(insights, json_output)
        return

    overview = service.overview()

    if json_output:
        payload = asdict(overview)
        payload["lifetime"] = overview.lifetime.model_dump()
        typer.echo(json.dumps(payload, indent=2))
        return

    lifetime = overview.lifetime
    typer.echo(f"Study streak: {overview.study_streak} day(s)")
    typer.echo(f"Today: {overview.cards_studied_today}/{overview.daily_goal} cards")
    typer.echo(
        f"Due: {overview.queue.due_count}  New: {overview.queue.new_count}  "
        f"Total: {overview.queue.total_cards}  Avg ease: {overview.queue.average_ease_factor:.2f}"
    )
    typer.echo(
        f"Reviews: {lifetime.total_reviews}  Accuracy: {lifetime.accuracy:.1f}%  "
        f"Longest streak: {lifetime.longest_streak}  Cards created: {lifetime.total_cards_created}"
    )
    typer.echo(f"Recent performance: {overview.recent_performance:.1f}%")
    typer.echo(
        f"Difficulty: easy {overview.difficulty.easy}, medium {overview.difficulty.medium}, "
        f"hard {overview.difficulty.hard}"
    )
    typer.echo(f"Upcoming reviews (7 days): {overview.upcoming_reviews}")


def _print_card_insights(insights: list[CardInsights], json_output: bool) -> None:
    if json_output:
        typer.echo(json.dumps([asdict(i) for i in insights], indent=2))
        return

    if not insights:
        typer.secho("No cards to show.", fg="yellow")
        return

    for i in insights:
        accuracy = "-" if i.accuracy is None else f"{i.accuracy:.0%}"
        typer.echo(
            f"{i.card_id}  [{i.state.value}]  ef={i.ease_factor:.2f}  acc={accuracy}  "
            f"interval {i.interval_label} (optimal {format_interval(i.optimal_interval)})  "
            f"retention in a week {i.retention_in_week:.0%}  {i.front}"
        )


# ---------------------------------------------------------------------------
# Backup
# ---------------------------------------------------------------------------


@app.command("export")
def export_cmd(
    ctx: typer.Context,
    output: Annotated[
        Path | None, typer.Argument(help="File to write. Prints to stdout when omitted.")
    ] = None,
):
    """Export all data as a single JSON document."""
    document = BackupService(open_repository(ctx)).export_data()
    if output is None:
        typer.echo(document)
        return
    output.write_text(document, encoding="utf-8")
    typer.secho(f"Exported to {output}.", fg="green")


@app.command("import")
def import_cmd(
    ctx: typer.Context,
    source: Annotated[Path, typer.Argument(help="JSON export to import.")],
):
    """Import a JSON export, replacing every collection it contains."""
    if not source.exists():
        typer.secho(f"File not found: {source}", fg="red", err=True)
        raise typer.Exit(1)

    if not BackupService(open_repository(ctx)).import_data(source.read_bytes()):
        typer.secho("Import failed: the file is not a valid recallkit export.", fg="red", err=True)
        raise typer.Exit(1)
    typer.secho("Import complete.", fg="green")


@app.command()
def reset(
    ctx: typer.Context,
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Bypass confirmation for destructive actions.")
    ] = False,
):
    """Delete all cards, progress, sessions, categories and settings."""
    if not force:
        typer.confirm("This deletes all recallkit data. Continue?", abort=True)
    try:
        BackupService(open_repository(ctx)).clear_all()
    except RecallkitError as e:
        raise fail(e)
    typer.secho("All data cleared.", fg="green")


# ---------------------------------------------------------------------------
# Settings subgroup
# ---------------------------------------------------------------------------


@settings_app.command("show")
def settings_show(ctx: typer.Context):
    """Display the stored study settings."""
    settings = open_repository(ctx).load_settings()
    typer.echo(settings.model_dump_json(by_alias=True, indent=2))


@settings_app.command("set")
def settings_set(
    ctx: typer.Context,
    daily_goal: Annotated[int | None, typer.Option(min=0, help="Cards per day.")] = None,
    max_new_cards: Annotated[int | None, typer.Option(min=0, help="New cards per day.")] = None,
    max_reviews: Annotated[int | None, typer.Option(min=0, help="Review cards per day.")] = None,
    show_timer: Annotated[bool | None, typer.Option("--show-timer/--hide-timer")] = None,
    auto_advance: Annotated[bool | None, typer.Option("--auto-advance/--no-auto-advance")] = None,
    shuffle_cards: Annotated[bool | None, typer.Option("--shuffle/--no-shuffle")] = None,
):
    """Update study settings. Only the options given are changed."""
    repo = open_repository(ctx)
    changes = {
        k: v
        for k, v in {
            "daily_goal": daily_goal,
            "max_new_cards": max_new_cards,
            "max_reviews": max_reviews,
            "show_timer": show_timer,
            "auto_advance": auto_advance,
            "shuffle_cards": shuffle_cards,
        }.items()
        if v is not None
    }
    settings = repo.load_settings().model_copy(update=changes)
    try:
        repo.save_settings(settings)
    except RecallkitError as e:
        raise fail(e)
    typer.echo(settings.model_dump_json(by_alias=True, indent=2))


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve_with_overrides(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


def _prompt_grade(default: str) -> Difficulty | None:
    """Ask for a grade until a valid one is given; None means quit."""
    while True:
        answer = typer.prompt("Grade (1=again 2=hard 3=good 4=easy, q=quit)", default=default)
        if answer.strip().lower() == "q":
            return None
        try:
            return parse_grade(answer)
        except typer.BadParameter as e:
            typer.secho(str(e), fg="yellow")
