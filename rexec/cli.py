"""Typer CLI: exec, run, exists and parse commands."""

from __future__ import annotations

import json
import logging
from typing import Annotated, Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from .config import ConfigError, RexecConfig, load_config
from .dispatch import Dispatcher, ExecutionResult
from .errors import RexecError, TooManyArguments
from .options import PassthroughOption
from .output import (
    OutputFormat,
    location_data,
    print_config_error,
    print_error,
    print_human_location,
)

T = TypeVar("T")

app = typer.Typer(
    name="rexec",
    help="Run commands against local paths or host:path locations",
    no_args_is_help=True,
)

ConfigOpt = Annotated[
    Optional[str],
    typer.Option("--config", "-c", help="Path to config file"),
]
VerboseOpt = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase log verbosity (-v, -vv)",
    ),
]
OutputOpt = Annotated[
    OutputFormat,
    typer.Option("--output", help="Output format"),
]
TtyOpt = Annotated[
    bool,
    typer.Option("--tty", "-t", help="Force ssh pseudo-terminal allocation"),
]
NoTtyOpt = Annotated[
    bool,
    typer.Option(
        "--disable-tty", "-T", help="Disable ssh pseudo-terminal allocation"
    ),
]
QuietOpt = Annotated[
    bool,
    typer.Option("--ssh-quiet", "-q", help="Pass -q to ssh"),
]
IdentityOpt = Annotated[
    Optional[str],
    typer.Option("--identity", "-i", help="ssh identity file"),
]
PortOpt = Annotated[
    Optional[str],
    typer.Option("--port", "-p", help="ssh port"),
]
LoginOpt = Annotated[
    Optional[str],
    typer.Option("--login", "-l", help="ssh login name"),
]
SshOptionOpt = Annotated[
    Optional[list[str]],
    typer.Option("--ssh-option", "-o", help="ssh option, Key=Value"),
]


@app.command("exec")
def exec_(
    location: Annotated[
        Optional[str],
        typer.Argument(help="Local path or host:path", show_default=False),
    ] = None,
    command: Annotated[
        Optional[str],
        typer.Argument(
            help="Shell command line; ::path:: and ::host:: are substituted",
            show_default=False,
        ),
    ] = None,
    extra: Annotated[
        Optional[list[str]],
        typer.Argument(hidden=True),
    ] = None,
    tty: TtyOpt = False,
    no_tty: NoTtyOpt = False,
    quiet: QuietOpt = False,
    identity: IdentityOpt = None,
    port: PortOpt = None,
    login: LoginOpt = None,
    ssh_option: SshOptionOpt = None,
    config: ConfigOpt = None,
    output: OutputOpt = OutputFormat.HUMAN,
    verbose: VerboseOpt = 0,
) -> None:
    """Run a shell command line against a location.

    The command line is evaluated by a shell exactly as given,
    locally or on the remote host. Exits with the command's status.
    """
    _setup_logging(verbose)
    cfg = _load_config_or_exit(config)
    options = _passthrough_options(
        tty, no_tty, quiet, identity, port, login, ssh_option
    )
    dispatcher = Dispatcher(cfg)

    def go() -> ExecutionResult:
        if extra:
            raise TooManyArguments(extra)
        return dispatcher.execute(
            location or "",
            command or "",
            options,
            capture_output=output is OutputFormat.JSON,
        )

    result = _call_or_exit(go)
    _finish(result, output)


@app.command()
def run(
    location: Annotated[
        Optional[str],
        typer.Argument(help="Local path or host:path", show_default=False),
    ] = None,
    argv: Annotated[
        Optional[list[str]],
        typer.Argument(
            help="Command and arguments (after --); no shell is involved",
            show_default=False,
        ),
    ] = None,
    tty: TtyOpt = False,
    no_tty: NoTtyOpt = False,
    quiet: QuietOpt = False,
    identity: IdentityOpt = None,
    port: PortOpt = None,
    login: LoginOpt = None,
    ssh_option: SshOptionOpt = None,
    config: ConfigOpt = None,
    output: OutputOpt = OutputFormat.HUMAN,
    verbose: VerboseOpt = 0,
) -> None:
    """Run a command given as separate arguments against a location."""
    _setup_logging(verbose)
    cfg = _load_config_or_exit(config)
    options = _passthrough_options(
        tty, no_tty, quiet, identity, port, login, ssh_option
    )
    dispatcher = Dispatcher(cfg)
    result = _call_or_exit(
        lambda: dispatcher.run(
            location or "",
            argv or [],
            options,
            capture_output=output is OutputFormat.JSON,
        )
    )
    _finish(result, output)


@app.command()
def exists(
    location: Annotated[
        Optional[str],
        typer.Argument(help="Local path or host:path", show_default=False),
    ] = None,
    config: ConfigOpt = None,
    output: OutputOpt = OutputFormat.HUMAN,
    verbose: VerboseOpt = 0,
) -> None:
    """Check whether a location exists (exit 0) or not (exit 1)."""
    _setup_logging(verbose)
    cfg = _load_config_or_exit(config)
    dispatcher = Dispatcher(cfg)
    loc = _call_or_exit(lambda: dispatcher.resolve(location or ""))
    found = _call_or_exit(lambda: dispatcher.exists(loc))

    match output:
        case OutputFormat.JSON:
            data = {"location": location_data(loc), "exists": found}
            typer.echo(json.dumps(data, indent=2))
        case OutputFormat.HUMAN:
            state = "exists" if found else "missing"
            typer.echo(f"{loc.display()}: {state}")

    if not found:
        raise typer.Exit(1)


@app.command()
def parse(
    location: Annotated[
        Optional[str],
        typer.Argument(help="Local path or host:path", show_default=False),
    ] = None,
    output: OutputOpt = OutputFormat.HUMAN,
) -> None:
    """Show how a location string is interpreted."""
    loc = _call_or_exit(lambda: Dispatcher().resolve(location or ""))
    match output:
        case OutputFormat.JSON:
            typer.echo(json.dumps(location_data(loc), indent=2))
        case OutputFormat.HUMAN:
            print_human_location(loc)


def _passthrough_options(
    tty: bool,
    no_tty: bool,
    quiet: bool,
    identity: str | None,
    port: str | None,
    login: str | None,
    ssh_option: list[str] | None,
) -> list[PassthroughOption]:
    """Collect ssh passthrough flags in a fixed order."""
    options: list[PassthroughOption] = []
    if tty:
        options.append(PassthroughOption(flag="-t"))
    if no_tty:
        options.append(PassthroughOption(flag="-T"))
    if quiet:
        options.append(PassthroughOption(flag="-q"))
    if identity is not None:
        options.append(PassthroughOption(flag="-i", value=identity))
    if port is not None:
        options.append(PassthroughOption(flag="-p", value=port))
    if login is not None:
        options.append(PassthroughOption(flag="-l", value=login))
    for opt in ssh_option or []:
        options.append(PassthroughOption(flag="-o", value=opt))
    return options


def _call_or_exit(fn: Callable[[], T]) -> T:
    """Call *fn*, turning a RexecError into its documented exit code."""
    try:
        return fn()
    except RexecError as e:
        print_error(e)
        raise typer.Exit(e.exit_code)


def _finish(result: ExecutionResult, output: OutputFormat) -> None:
    if output is OutputFormat.JSON:
        typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    if not result.success:
        code = result.exit_code
        # Killed by a signal: report it the way a shell does.
        raise typer.Exit(code if code > 0 else 128 - code)


def _load_config_or_exit(config_path: str | None) -> RexecConfig:
    """Load config or exit with code 2 on error."""
    try:
        return load_config(config_path)
    except ConfigError as e:
        print_config_error(e)
        raise typer.Exit(e.exit_code)


def _setup_logging(verbose: int) -> None:
    if verbose <= 0:
        return
    level = logging.INFO if verbose == 1 else logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    logging.getLogger("paramiko").setLevel(logging.WARNING)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
