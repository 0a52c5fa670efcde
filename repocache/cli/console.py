"""Console output for the CLI.

Provides a Console class that wraps rich for consistent output.
All CLI output should go through this module.
"""

from datetime import datetime, timezone
from typing import Any

from rich.console import Console as RichConsole
from rich.syntax import Syntax
from rich.table import Table


def relative_time(iso_timestamp: str) -> str:
    """Convert ISO timestamp to relative time string (e.g., '2 hours ago')."""
    try:
        dt = datetime.fromisoformat(iso_timestamp)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        seconds = (datetime.now(timezone.utc) - dt).total_seconds()
        if seconds < 60:
            return "just now"
        elif seconds < 3600:
            mins = int(seconds // 60)
            return f"{mins} minute{'s' if mins != 1 else ''} ago"
        elif seconds < 86400:
            hours = int(seconds // 3600)
            return f"{hours} hour{'s' if hours != 1 else ''} ago"
        elif seconds < 604800:
            days = int(seconds // 86400)
            return f"{days} day{'s' if days != 1 else ''} ago"
        else:
            return dt.strftime("%Y-%m-%d %H:%M")
    except (ValueError, TypeError):
        return iso_timestamp


class Console:
    """CLI output manager wrapping rich."""

    def __init__(self, *, force_terminal: bool | None = None) -> None:
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def warning(self, message: str) -> None:
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console (pass-through to rich)."""
        self._console.print(*args, **kwargs)

    def json(self, text: str) -> None:
        """Print syntax-highlighted JSON."""
        self._console.print(Syntax(text, "json", word_wrap=True))

    def table(
        self,
        rows: list[dict[str, Any]],
        columns: list[tuple[str, str]],  # (key, header)
        *,
        title: str | None = None,
    ) -> None:
        table = Table(title=title, show_header=True, header_style="bold")
        for _, header in columns:
            table.add_column(header)
        for row in rows:
            table.add_row(*[str(row.get(key, "")) for key, _ in columns])
        self._console.print(table)


_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
