"""RecallForge CLI - main application entry point.

Thin adapter over ReviewEngine: every command builds the engine from
configuration, performs one operation and renders the result with rich.

    recallforge add "What is 2 + 2?" "4" --difficulty 1
    recallforge pick
    recallforge review <item-id> --success --rating 4
    recallforge stats
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from recallforge import __version__
from recallforge.cli.errors import cli_exception_handler, console
from recallforge.core.config import Config, load_config
from recallforge.core.logging import configure_logging
from recallforge.storage.factory import get_repository
from recallforge.study.due_check import count_due, get_due_notification, time_remaining_text
from recallforge.study.engine import ReviewEngine
from recallforge.study.models import DEFAULT_DIFFICULTY, StudyItem
from recallforge.study.scheduler import ReviewScheduler
from recallforge.study.stats import MasteryLevel, StatsAggregator
from recallforge.study.weights import WeightModel

app = typer.Typer(
    name="recallforge",
    help="Weighted practice and spaced review for question/answer items",
    add_completion=False,
    no_args_is_help=True,
)


@dataclass
class CLIState:
    """Options shared by every command."""

    config_path: Optional[Path] = None
    db_path: Optional[Path] = None
    verbose: bool = False

    def load(self) -> Config:
        config = load_config(self.config_path)
        if self.db_path is not None:
            config.storage.backend = "sqlite"
            config.storage.path = str(self.db_path)
        level = "DEBUG" if self.verbose else config.logging.level
        configure_logging(level=level, log_file=config.log_file_path)
        return config


def _state(ctx: typer.Context) -> CLIState:
    if ctx.obj is None:
        ctx.obj = CLIState()
    return ctx.obj


def _build_engine(ctx: typer.Context, seed: Optional[int] = None) -> ReviewEngine:
    config = _state(ctx).load()
    return ReviewEngine(
        get_repository(config),
        weight_model=WeightModel(config.weights),
        scheduler=ReviewScheduler(config.scheduler),
        rng=random.Random(seed),
    )


def _short(text: str, limit: int = 50) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _items_table(title: str, items: List[StudyItem], engine: ReviewEngine) -> Table:
    now = engine.clock()
    table = Table(title=title, show_lines=False)
    table.add_column("ID", style="dim", overflow="fold")
    table.add_column("Question")
    table.add_column("Diff", justify="right")
    table.add_column("Conf", justify="right")
    table.add_column("Tries", justify="right")
    table.add_column("Next", style="cyan")

    for item in items:
        table.add_row(
            item.item_id,
            escape(_short(item.question)),
            str(item.difficulty),
            f"{item.confidence:.2f}",
            str(item.attempt_count),
            time_remaining_text(item, now),
        )
    return table


# ----------------------------------------------------------------------
# Callback
# ----------------------------------------------------------------------


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"RecallForge {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(
        None, "--db", help="SQLite database file (overrides config)"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config.yaml"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """RecallForge - weighted practice and spaced review."""
    ctx.obj = CLIState(config_path=config, db_path=db, verbose=verbose)


# ----------------------------------------------------------------------
# Item management
# ----------------------------------------------------------------------


@app.command("add")
@cli_exception_handler
def add_command(
    ctx: typer.Context,
    question: str = typer.Argument(..., help="Question text"),
    solution: str = typer.Argument(..., help="Solution text"),
    difficulty: int = typer.Option(
        DEFAULT_DIFFICULTY, "--difficulty", "-d", help="1 (easy) to 5 (hard)"
    ),
) -> None:
    """Add a study item. New items are due immediately."""
    engine = _build_engine(ctx)
    item = engine.add_item(question, solution, difficulty)
    console.print(f"[green]Added item[/green] {item.item_id}")


@app.command("list")
@cli_exception_handler
def list_command(
    ctx: typer.Context,
    search: Optional[str] = typer.Option(
        None, "--search", "-s", help="Filter by question or solution text"
    ),
) -> None:
    """List study items."""
    engine = _build_engine(ctx)
    items = engine.search(search) if search else engine.repository.fetch_all()
    if not items:
        console.print("[yellow]No study items found[/yellow]")
        return
    console.print(_items_table(f"Study items ({len(items)})", items, engine))


@app.command("edit")
@cli_exception_handler
def edit_command(
    ctx: typer.Context,
    item_id: str = typer.Argument(..., help="Item ID"),
    question: Optional[str] = typer.Option(None, "--question", "-q"),
    solution: Optional[str] = typer.Option(None, "--solution", "-a"),
    difficulty: Optional[int] = typer.Option(None, "--difficulty", "-d"),
) -> None:
    """Edit an item's question, solution or difficulty."""
    engine = _build_engine(ctx)
    engine.edit_item(item_id, question=question, solution=solution, difficulty=difficulty)
    console.print(f"[green]Updated item[/green] {item_id}")


@app.command("delete")
@cli_exception_handler
def delete_command(
    ctx: typer.Context,
    item_id: str = typer.Argument(..., help="Item ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete an item and its review history."""
    engine = _build_engine(ctx)
    item = engine.get_item(item_id)
    if not yes:
        typer.confirm(f"Delete '{_short(item.question)}'?", abort=True)
    engine.delete_item(item_id)
    console.print(f"[green]Deleted item[/green] {item_id}")


@app.command("force-due")
@cli_exception_handler
def force_due_command(
    ctx: typer.Context,
    item_id: str = typer.Argument(..., help="Item ID"),
) -> None:
    """Make an item due now without changing its history."""
    engine = _build_engine(ctx)
    engine.force_due(item_id)
    console.print(f"[green]Item is due now[/green] {item_id}")


# ----------------------------------------------------------------------
# Practice
# ----------------------------------------------------------------------


@app.command("due")
@cli_exception_handler
def due_command(ctx: typer.Context) -> None:
    """Show items due for review, earliest first."""
    engine = _build_engine(ctx)
    due = engine.due_items()
    if not due:
        console.print("[green]Nothing is due for review[/green]")
        return
    console.print(_items_table(f"Due for review ({len(due)})", due, engine))


@app.command("pick")
@cli_exception_handler
def pick_command(
    ctx: typer.Context,
    due_only: bool = typer.Option(False, "--due", help="Pick among due items only"),
    reveal: bool = typer.Option(False, "--reveal", help="Also show the solution"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
) -> None:
    """Pick an item to practice, favoring weak and stale items."""
    engine = _build_engine(ctx, seed=seed)
    candidates = engine.due_items() if due_only else None
    item = engine.pick_weighted_random_item(candidates)
    if item is None:
        console.print("[yellow]No study items to pick from[/yellow]")
        return

    body = f"[bold]{escape(item.question)}[/bold]"
    if reveal:
        body += f"\n\n[green]{escape(item.solution)}[/green]"
    console.print(Panel(body, title=f"Item {item.item_id}", border_style="cyan"))
    console.print(
        f"[dim]Record the result with: recallforge review {item.item_id} "
        f"--success/--fail --rating N[/dim]"
    )


@app.command("review")
@cli_exception_handler
def review_command(
    ctx: typer.Context,
    item_id: str = typer.Argument(..., help="Item ID"),
    success: bool = typer.Option(
        ..., "--success/--fail", help="Whether the answer was correct"
    ),
    rating: int = typer.Option(
        ..., "--rating", "-r", help="Confidence rating, 1 (guess) to 5 (certain)"
    ),
) -> None:
    """Record a review and schedule the next one."""
    engine = _build_engine(ctx)
    _, outcome = engine.submit_review_by_id(item_id, success, rating)

    result = "[green]Correct[/green]" if success else "[red]Incorrect[/red]"
    console.print(f"{result} | confidence {outcome.confidence:.2f}")
    console.print(
        f"Next review in {outcome.interval_hours:.1f}h "
        f"({outcome.next_review:%Y-%m-%d %H:%M})"
    )


# ----------------------------------------------------------------------
# Diagnostics
# ----------------------------------------------------------------------


@app.command("weights")
@cli_exception_handler
def weights_command(ctx: typer.Context) -> None:
    """Show each item's current selection weight and pick probability."""
    engine = _build_engine(ctx)
    pairs: List[Tuple[StudyItem, int]] = engine.item_weights()
    if not pairs:
        console.print("[yellow]No study items found[/yellow]")
        return

    total = sum(weight for _, weight in pairs)
    table = Table(title="Selection weights")
    table.add_column("ID", style="dim", overflow="fold")
    table.add_column("Question")
    table.add_column("Weight", justify="right")
    table.add_column("Chance", justify="right")
    for item, weight in sorted(pairs, key=lambda pair: pair[1], reverse=True):
        table.add_row(
            item.item_id,
            escape(_short(item.question)),
            str(weight),
            f"{weight / total:.1%}",
        )
    console.print(table)


@app.command("stats")
@cli_exception_handler
def stats_command(ctx: typer.Context) -> None:
    """Show study progress."""
    engine = _build_engine(ctx)
    stats = StatsAggregator(engine.repository, engine.weight_model).get_stats()

    table = Table(title="Study statistics", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total items", str(stats.total_items))
    table.add_row("Due now", str(stats.due_now))
    table.add_row("Completed", str(stats.completed_items))
    table.add_row("Total reviews", str(stats.total_attempts))
    table.add_row("Accuracy", f"{stats.average_accuracy:.1f}%")
    table.add_row("Reviewed today", str(stats.reviewed_today))
    table.add_row("Streak", f"{stats.streak_days} day(s)")
    for level in MasteryLevel:
        table.add_row(level.value.title(), str(stats.mastery_distribution.get(level, 0)))
    console.print(table)

    due, _ = count_due(engine.repository, engine.clock())
    notification = get_due_notification(due)
    if notification:
        console.print(f"[dim]{escape(notification)}[/dim]")


def cli_main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    cli_main()
