"""Console output for the CLI.

Wraps rich for status messages. Everything goes to stderr: stdout is
reserved for exported catalog documents.
"""

from typing import Any

from rich.console import Console as RichConsole
from rich.table import Table


class Console:
    """CLI output manager wrapping rich."""

    def __init__(self, *, force_terminal: bool | None = None, quiet: bool = False) -> None:
        self._console = RichConsole(force_terminal=force_terminal, stderr=True)
        self._quiet = quiet

    def success(self, message: str) -> None:
        """Print a success message."""
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message."""
        self._console.print(f"[red]✗[/red] {message}")
        if hint:
            self._console.print(f"  [dim]{hint}[/dim]")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._console.print(f"[dim]{message}[/dim]")

    def summary(self, rows: list[tuple[str, Any]], *, title: str | None = None) -> None:
        """Print a two-column key/value table."""
        if self._quiet:
            return
        table = Table(title=title, show_header=False)
        table.add_column(style="cyan")
        table.add_column(justify="right")
        for key, value in rows:
            table.add_row(key, str(value))
        self._console.print(table)


_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
