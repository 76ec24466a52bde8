"""Console output for the jsonshape CLI.

Status lines and exported documents share one Rich console. ``--no-color``
and the NO_COLOR environment variable both switch styling off; documents
printed with print_json stay plain JSON whenever stdout is not a terminal.
"""

from __future__ import annotations

import os
from typing import Any

from rich.console import Console


def create_console(no_color: bool = False) -> Console:
    plain = no_color or os.environ.get("NO_COLOR") is not None
    return Console(force_terminal=False if plain else None, no_color=plain)


console = create_console()


def success(message: str) -> None:
    """Print ``message`` behind a green check mark."""
    console.print(f"[green]✓[/green] {message}")


def error(message: str) -> None:
    """Print ``message`` behind a red cross."""
    console.print(f"[red]✗[/red] {message}")


def info(message: str) -> None:
    console.print(message)


def print_json(document: dict[str, Any]) -> None:
    """Print an exported document with two-space indentation.

    Long lines are never wrapped, so the output always parses as JSON.
    """
    console.print_json(data=document, indent=2)


def set_no_color(no_color: bool) -> None:
    global console
    console = create_console(no_color=no_color)
