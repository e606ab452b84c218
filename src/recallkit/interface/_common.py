"""Helpers shared by CLI command modules."""

import typer

from recallkit.application.config import AppConfig, resolve_config
from recallkit.application.factory import get_repository
from recallkit.domain.errors import RecallkitError
from recallkit.domain.models import Difficulty
from recallkit.domain.ports import StorageRepository

GRADE_KEYS = {
    "1": Difficulty.AGAIN,
    "2": Difficulty.HARD,
    "3": Difficulty.GOOD,
    "4": Difficulty.EASY,
}


def _resolve_with_overrides(ctx: typer.Context, **kwargs) -> AppConfig:
    """Resolve config, layering global callback options and per-command overrides."""
    obj = ctx.obj or {}
    overrides = {
        "data_dir": obj.get("data_dir"),
        "backend": obj.get("backend"),
        "verbose": obj.get("verbose"),
    }
    overrides.update(kwargs)
    return resolve_config(overrides)


def open_repository(ctx: typer.Context) -> StorageRepository:
    return get_repository(_resolve_with_overrides(ctx))


def parse_grade(value: str) -> Difficulty:
    """Accept a grade name (again/hard/good/easy) or its key 1-4."""
    value = value.strip().lower()
    if value in GRADE_KEYS:
        return GRADE_KEYS[value]
    try:
        return Difficulty(value)
    except ValueError:
        raise typer.BadParameter(
            f"'{value}' is not a grade. Use again, hard, good, easy or 1-4."
        ) from None


def fail(error: RecallkitError) -> typer.Exit:
    typer.secho(f"Error: {error}", fg="red", err=True)
    return typer.Exit(1)
