"""Error rendering for CLI commands.

RecallForgeError carries an error code plus "why it happened" and "how to
fix" guidance; this module turns it into a rich panel:

    ╭──────────── Error: RF-STOR-001 ────────────╮
    │ Study item not found: 3f2a...              │
    │                                            │
    │ Why it happened:                           │
    │   No study item with this id exists ...    │
    │                                            │
    │ How to fix:                                │
    │   - List items with 'recallforge list' ... │
    ╰────────────────────────────────────────────╯
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from recallforge.core.exceptions import (
    RecallForgeError,
    get_root_cause,
    sanitize_message,
)

console = Console()


class ErrorRenderer:
    """Renders errors as panels with "Why" and "How to fix" sections."""

    @staticmethod
    def render(exc: BaseException, context: str = "") -> None:
        if isinstance(exc, RecallForgeError):
            error_code = exc.error_code
            why = exc.why_it_happened
            how_to_fix = list(exc.how_to_fix)
        else:
            error_code = "RF-ERR-999"
            why = "An unexpected error occurred"
            how_to_fix = ["Re-run with --verbose for details"]

        root_cause = get_root_cause(exc)
        root_message = str(root_cause) if root_cause is not exc else None

        content = ErrorRenderer._build_error_content(
            message=sanitize_message(str(exc)),
            context=context,
            why=why,
            how_to_fix=how_to_fix,
            root_message=sanitize_message(root_message) if root_message else None,
        )
        console.print(
            Panel(
                content,
                title=f"[bold red]Error: {error_code}[/bold red]",
                border_style="red",
                padding=(1, 2),
            )
        )

    @staticmethod
    def _build_error_content(
        message: str,
        context: str,
        why: str,
        how_to_fix: List[str],
        root_message: Optional[str],
    ) -> Text:
        text = Text()

        if context:
            text.append(f"{context}\n\n", style="dim")

        text.append(message, style="bold red")
        text.append("\n\n")

        if root_message and root_message != message:
            text.append("Root cause: ", style="bold yellow")
            text.append(root_message, style="yellow")
            text.append("\n\n")

        text.append("Why it happened:\n", style="bold cyan")
        text.append(f"  {why}\n\n", style="cyan")

        text.append("How to fix:\n", style="bold green")
        for fix in how_to_fix:
            text.append(f"  - {fix}\n", style="green")

        return text


def exit_on_error(error: BaseException, context: str = "", exit_code: int = 1) -> None:
    """Render the error and exit the CLI.

    Raises:
        typer.Exit: Always
    """
    ErrorRenderer.render(error, context=context)
    raise typer.Exit(exit_code)


def cli_exception_handler(func: Callable) -> Callable:
    """Decorator that turns RecallForgeError into an error panel and exit code 1.

    Other exceptions propagate so unexpected failures keep their traceback.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/yellow]")
            raise typer.Exit(130)
        except RecallForgeError as e:
            exit_on_error(e)

    return wrapper
