"""Helpers shared by the command groups."""

import json as json_lib
from typing import Any, NoReturn

from rich.console import Console
import typer

console = Console()

STATE_STYLES = {
    "Expired": "red",
    "Capped": "yellow",
    "Simulation": "blue",
    "Online": "green",
}


def fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


def echo_json(data: Any) -> None:
    typer.echo(json_lib.dumps(data, indent=2))


def parse_field_assignment(text: str) -> tuple[int, str, str]:
    """Parse ``INDEX.FIELD=VALUE`` into its parts."""
    target, sep, value = text.partition("=")
    index, dot, field_name = target.partition(".")
    if not sep or not dot or not field_name or not index.strip().isdigit():
        raise typer.BadParameter(f"expected INDEX.FIELD=VALUE, got {text!r}")
    return int(index), field_name.strip(), value


def parse_provider_assignment(text: str) -> tuple[str, str]:
    """Parse ``FIELD=VALUE``."""
    field_name, sep, value = text.partition("=")
    if not sep or not field_name.strip():
        raise typer.BadParameter(f"expected FIELD=VALUE, got {text!r}")
    return field_name.strip(), value


def parse_move(text: str) -> tuple[int, str]:
    """Parse ``INDEX:up`` or ``INDEX:down``."""
    index, sep, direction = text.partition(":")
    direction = direction.strip().lower()
    if not sep or not index.strip().isdigit() or direction not in ("up", "down"):
        raise typer.BadParameter(f"expected INDEX:up or INDEX:down, got {text!r}")
    return int(index), direction


def format_money(amount: float) -> str:
    return f"${amount:.2f}"
