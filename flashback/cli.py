"""
Flashback terminal reviewer.

Commands:
    flashback add FRONT BACK  - Create a card and queue it for review
    flashback due             - List items ready for review
    flashback review          - Run a review session over the due items
    flashback summary ID      - Show the summary of a review session
"""
from __future__ import annotations

import logging
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from sqlmodel import Session

from flashback.core.config import settings
from flashback.core.database import engine, init_db
from flashback.core.exceptions import FlashbackException
from flashback.services.card_service import create_card
from flashback.services.item_service import create_item
from flashback.services.review_session_service import (
    cancel_review_session,
    complete_review_session,
    create_review_session,
    get_due_items,
    load_session_queue,
    summarize_review_session,
)
from flashback.services.session_queue import SessionQueue

console = Console()
logger = logging.getLogger(__name__)

app = typer.Typer(
    name="flashback",
    help="Spaced-repetition flashcard reviewer",
    no_args_is_help=True,
)

QUIT_COMMAND = ":q"


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _open_session() -> Session:
    init_db(engine)
    return Session(engine)


def format_duration(seconds: int) -> str:
    """Format seconds as m:ss, or h:mm:ss from one hour up."""
    hours, remainder = divmod(max(0, seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@app.command("add")
def add_card(
    front: str = typer.Argument(..., help="Prompt shown during review"),
    back: str = typer.Argument(..., help="Expected answer"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n", help="Notes shown with the answer"),
    stage: int = typer.Option(0, "--stage", "-s", help="Initial SRS stage"),
) -> None:
    """Create a card and add it to the review queue."""
    with _open_session() as session:
        card = create_card(session, front, back, notes)
        item = create_item(session, card.id, current_srs_stage=stage)
        rprint(
            f"[green]Added[/green] card {card.id} as item {item.id} "
            f"(stage {item.current_srs_stage}, due {item.next_available:%Y-%m-%d %H:%M})"
        )


@app.command("due")
def show_due() -> None:
    """List items ready for review."""
    with _open_session() as session:
        items = get_due_items(session)
        if not items:
            rprint("[green]No items ready to review.[/green]")
            return

        table = Table(title=f"{len(items)} item(s) ready for review")
        table.add_column("Item", justify="right")
        table.add_column("Front")
        table.add_column("Stage", justify="right")
        table.add_column("Streak", justify="right")
        table.add_column("Due since")
        for item in items:
            table.add_row(
                str(item.id),
                item.card.front,
                str(item.current_srs_stage),
                str(item.current_streak),
                f"{item.next_available:%Y-%m-%d %H:%M}",
            )
        console.print(table)


def run_queue(queue: SessionQueue) -> bool:
    """
    Drive a session queue from the prompt.

    Returns:
        True when every item was answered correctly, False if the reviewer quit
    """
    while not queue.is_exhausted:
        item = queue.current
        console.print(Panel(item.front, title=f"{queue.remaining_count} remaining", expand=False))

        guess = Prompt.ask(f"Answer [dim](blank to skip, {QUIT_COMMAND} to quit)[/dim]", default="", show_default=False)
        if guess.strip() == QUIT_COMMAND:
            return False
        if not guess.strip():
            queue.skip()
            rprint("[yellow]Skipped[/yellow]")
            queue.continue_()
            continue

        if queue.submit_guess(guess):
            rprint("[green]Correct![/green]")
        else:
            rprint("[red]Incorrect![/red]")
            if Prompt.ask("Retry or continue?", choices=["r", "c"], default="c") == "r":
                queue.retry()
                continue
            rprint(f"Answer: [bold]{item.back}[/bold]")
            if item.notes:
                rprint(f"[dim]{item.notes}[/dim]")
        queue.continue_()
    return True


@app.command("review")
def review(
    limit: Optional[int] = typer.Option(None, "--limit", "-l", min=1, help="Review at most this many items"),
) -> None:
    """Start a review session over the items that are due."""
    with _open_session() as session:
        items = get_due_items(session)
        if not items:
            rprint("[green]No items ready to review.[/green]")
            return
        if limit:
            items = items[:limit]

        review_session = create_review_session(session, [item.id for item in items])
        queue = load_session_queue(session, review_session.id)

        try:
            finished = run_queue(queue)
        except (KeyboardInterrupt, EOFError):
            console.print()
            finished = False

        try:
            if finished:
                complete_review_session(session, review_session.id, queue.bouts())
            else:
                cancel_review_session(session, review_session.id, queue.bouts())
                rprint(f"[yellow]Review session {review_session.id} cancelled.[/yellow]")
        except FlashbackException as e:
            rprint(f"[red]Error:[/red] {e}")
            raise typer.Exit(code=1)

        print_summary(session, review_session.id)


def print_summary(session: Session, session_id: int) -> None:
    summary = summarize_review_session(session, session_id)

    table = Table(title=f"Review session {summary.id} ({summary.status.value})")
    table.add_column("Card")
    table.add_column("Starting stage", justify="right")
    table.add_column("Ending stage", justify="right")
    table.add_column("Time taken", justify="right")
    table.add_column("Times incorrect", justify="right")
    table.add_column("Current streak", justify="right")
    table.add_column("Max streak", justify="right")
    for review in summary.reviews:
        table.add_row(
            review.item.card.front,
            str(review.starting_srs_stage),
            str(review.ending_srs_stage),
            format_duration(review.seconds_elapsed),
            str(review.times_incorrect),
            str(review.item.current_streak),
            str(review.item.max_streak),
            style="red" if review.times_incorrect else "green",
        )
    console.print(table)

    if summary.percent_correct is not None:
        rprint(f"[bold]{summary.percent_correct:.0%}[/bold] answered correctly on the first try")


@app.command("summary")
def show_summary(session_id: int = typer.Argument(..., help="Review session ID")) -> None:
    """Show the summary of a review session."""
    with _open_session() as session:
        try:
            print_summary(session, session_id)
        except FlashbackException as e:
            rprint(f"[red]Error:[/red] {e}")
            raise typer.Exit(code=1)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
