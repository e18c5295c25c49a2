"""Console output for the CLI.

Wraps rich so every command prints status lines the same way.
"""

from functools import lru_cache
from typing import Any

from rich.console import Console as RichConsole
from rich.table import Table


class Console:
    """CLI output manager wrapping rich."""

    def __init__(self, *, force_terminal: bool | None = None) -> None:
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)

    def success(self, message: str) -> None:
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def info(self, message: str) -> None:
        self._console.print(f"[dim]{message}[/dim]")

    def print(self, *args: Any, **kwargs: Any) -> None:
        self._console.print(*args, **kwargs)

    def settings(self, rows: list[tuple[str, str]], *, title: str | None = None) -> None:
        """Print key/value pairs as a two-column table."""
        table = Table(title=title, show_header=True, header_style="bold")
        table.add_column("Setting")
        table.add_column("Value")
        for key, value in rows:
            table.add_row(key, value)
        self._console.print(table)


@lru_cache(maxsize=1)
def get_console() -> Console:
    """Get the shared console instance."""
    return Console()
