"""Console output helpers shared by CLI commands.

Usage:
    from protocols_mcp.cli.console import console, print_error, print_panel

    print_error("Protocol not found")
    print_panel("Title", "Content here")
"""

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def print_success(message: str) -> None:
    """Print a success message (green checkmark)."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message (red X) to stderr."""
    err_console.print(f"[red]✗[/red] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message (yellow warning sign)."""
    console.print(f"[yellow]⚠[/yellow] {escape(message)}")


def print_panel(title: str, content: str, style: str = "blue") -> None:
    """Print content in a panel/box."""
    console.print(Panel(content, title=title, border_style=style))


def print_markdown(text: str) -> None:
    console.print(Markdown(text))


def create_table(title: str = "") -> Table:
    return Table(title=title) if title else Table()


def truncate(text: str, width: int) -> str:
    """Shorten text to width characters, ending in '...' when cut."""
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


__all__ = [
    "console",
    "err_console",
    "print_success",
    "print_error",
    "print_warning",
    "print_panel",
    "print_markdown",
    "create_table",
    "truncate",
]
