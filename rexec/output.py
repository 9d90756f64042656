"""CLI output formatting."""

from __future__ import annotations

import enum

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import ConfigError
from .errors import RexecError, SshConnectionError
from .location import LocalLocation, RemoteLocation


class OutputFormat(str, enum.Enum):
    """Output format for CLI commands."""

    HUMAN = "human"
    JSON = "json"


def _error_title(e: RexecError) -> str:
    match e:
        case SshConnectionError():
            return "Connection error"
        case _:
            return "Error"


def print_error(
    e: RexecError,
    *,
    console: Console | None = None,
) -> None:
    """Print a RexecError as a Rich panel to stderr."""
    if console is None:
        console = Console(stderr=True)
    title = f"{_error_title(e)} (exit {e.exit_code})"
    console.print(Panel(str(e), title=title, style="red"))


def print_config_error(
    e: ConfigError,
    *,
    console: Console | None = None,
) -> None:
    """Print a ConfigError as a Rich panel to stderr."""
    if console is None:
        console = Console(stderr=True)
    cause = e.__cause__
    match cause:
        case ValidationError():
            lines: list[str] = []
            for err in cause.errors():
                loc = " → ".join(str(p) for p in err["loc"])
                msg = err["msg"]
                if msg.startswith("Value error, "):
                    msg = msg[len("Value error, ") :]
                if loc:
                    lines.append(f"{loc}: {msg}")
                else:
                    lines.append(msg)
            body = "\n".join(lines)
        case _:
            body = str(e)
    console.print(Panel(body, title="Config error", style="red"))


def location_table(loc: LocalLocation | RemoteLocation) -> Table:
    table = Table(title="Location:", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    kind_style = "cyan" if loc.is_remote else "green"
    table.add_row("Kind", Text(loc.kind, style=kind_style))
    table.add_row("Host", loc.host or "")
    table.add_row("Path", loc.path)
    return table


def print_human_location(
    loc: LocalLocation | RemoteLocation,
    *,
    console: Console | None = None,
) -> None:
    """Print a decomposed location as a table."""
    if console is None:
        console = Console()
    console.print(location_table(loc))


def location_data(loc: LocalLocation | RemoteLocation) -> dict[str, object]:
    """JSON-ready view of a location, with ``host`` null when local."""
    return {"kind": loc.kind, "host": loc.host, "path": loc.path}
