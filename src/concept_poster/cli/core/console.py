"""Shared rich console for CLI output."""

import sys
from typing import Optional

from rich.console import Console
from rich.markup import escape

# Windows cp1252 can't encode box drawing characters
console = Console(safe_box=sys.platform == "win32")


def print_error(message: str, details: Optional[dict] = None, out: Optional[Console] = None) -> None:
    """Print an error and its non-empty details.

    Remote error text often contains brackets, so everything is escaped.
    """
    out = out or console
    out.print(f"\n[red]Error: {escape(message)}[/red]")
    for key, value in (details or {}).items():
        if value is not None:
            out.print(f"  [dim]{key}:[/dim] [yellow]{escape(str(value))}[/yellow]")
