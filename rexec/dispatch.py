"""Command dispatch: run a command against a local or remote location."""

from __future__ import annotations

import enum
import logging
import shlex
import subprocess
from pathlib import Path
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel

from .config import RexecConfig
from .errors import (
    SSH_CONNECTION_FAILURE_STATUS,
    LaunchError,
    MissingCommand,
    MissingPath,
    SshConnectionError,
)
from .location import LocalLocation, RemoteLocation, decompose
from .options import PassthroughOption, normalize_options
from .remote import remote_runner
from .template import substitute, substitute_argv

logger = logging.getLogger(__name__)

OptionsArg = Iterable[PassthroughOption | tuple[str, str | None]]


class Outcome(str, enum.Enum):
    """How a dispatched command ended."""

    SUCCESS = "success"
    COMMAND_FAILED = "command-failed"


class ExecutionResult(BaseModel):
    """Result of running a command against a location."""

    location: str
    host: Optional[str] = None
    command: str
    exit_code: int
    outcome: Outcome
    stdout: Optional[str] = None
    stderr: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.SUCCESS


class Dispatcher:
    """Runs commands locally or over ssh depending on the location.

    Holds only its configuration. Every call resolves, executes
    and returns on its own; nothing is pooled or retried.
    """

    def __init__(self, config: RexecConfig | None = None) -> None:
        self.config = config if config is not None else RexecConfig()

    def resolve(self, raw: str) -> LocalLocation | RemoteLocation:
        return decompose(raw)

    def exists(self, location: str | LocalLocation | RemoteLocation) -> bool:
        """Check whether the path exists.

        A missing path is False. An unreachable host raises
        SshConnectionError instead.
        """
        loc = self._as_location(location)
        match loc:
            case RemoteLocation(host=host, path=path):
                proc = self._run_remote(
                    host, f"test -e {shlex.quote(path)}", (), True
                )
                if proc.returncode == 0:
                    return True
                elif proc.returncode == SSH_CONNECTION_FAILURE_STATUS:
                    raise SshConnectionError(host)
                else:
                    return False
            case LocalLocation(path=path):
                return Path(path).exists()

    def execute(
        self,
        raw: str,
        template: str,
        options: OptionsArg = (),
        capture_output: bool = False,
    ) -> ExecutionResult:
        """Run a raw shell line against a location.

        The substituted line is handed to a shell as-is: locally to
        the configured shell, remotely to the login shell on the
        host. Pipes, redirections and variable expansion all work,
        and nothing is escaped. Use ``run`` for an argument vector
        that must not be reinterpreted by a shell.
        """
        if not raw:
            raise MissingPath()
        if not template:
            raise MissingCommand()
        opts = normalize_options(options)
        loc = decompose(raw)
        command = substitute(template, loc)

        match loc:
            case RemoteLocation(host=host):
                proc = self._run_remote(host, command, opts, capture_output)
            case LocalLocation():
                logger.debug(
                    "Running locally via %s: %s", self.config.shell, command
                )
                try:
                    proc = subprocess.run(
                        command,
                        shell=True,
                        executable=self.config.shell,
                        capture_output=capture_output,
                        text=True,
                    )
                except OSError as e:
                    raise LaunchError(
                        self.config.shell, e.strerror or str(e)
                    ) from e
        return self._normalize(raw, loc, command, proc)

    def run(
        self,
        raw: str,
        argv: Sequence[str],
        options: OptionsArg = (),
        capture_output: bool = False,
    ) -> ExecutionResult:
        """Run an argument vector against a location.

        Locally the vector is executed without a shell; a program
        that is missing or not executable ends with status 127 or
        126, as it would under a shell. Remotely each element is
        quoted so the remote shell sees the same words.
        """
        if not raw:
            raise MissingPath()
        if not argv or not argv[0]:
            raise MissingCommand()
        opts = normalize_options(options)
        loc = decompose(raw)
        args = substitute_argv(list(argv), loc)
        command = shlex.join(args)

        match loc:
            case RemoteLocation(host=host):
                proc = self._run_remote(host, command, opts, capture_output)
            case LocalLocation():
                logger.debug("Running locally: %s", args)
                try:
                    proc = subprocess.run(
                        args,
                        capture_output=capture_output,
                        text=True,
                    )
                except FileNotFoundError as e:
                    proc = _not_started(args, 127, e, capture_output)
                except PermissionError as e:
                    proc = _not_started(args, 126, e, capture_output)
        return self._normalize(raw, loc, command, proc)

    def _as_location(
        self, location: str | LocalLocation | RemoteLocation
    ) -> LocalLocation | RemoteLocation:
        match location:
            case str():
                return self.resolve(location)
            case _:
                return location

    def _run_remote(
        self,
        host: str,
        command: str,
        options: Sequence[PassthroughOption],
        capture_output: bool,
    ) -> subprocess.CompletedProcess[str]:
        logger.debug(
            "Running on %s (%s): %s", host, self.config.transport, command
        )
        runner = remote_runner(self.config)
        return runner(self.config, host, command, options, capture_output)

    @staticmethod
    def _normalize(
        raw: str,
        loc: LocalLocation | RemoteLocation,
        command: str,
        proc: subprocess.CompletedProcess[str],
    ) -> ExecutionResult:
        code = proc.returncode
        if code == SSH_CONNECTION_FAILURE_STATUS:
            match loc:
                case RemoteLocation(host=host):
                    raise SshConnectionError(host)
        if code != 0:
            logger.info("Command exited %d: %s", code, command)
        return ExecutionResult(
            location=raw,
            host=loc.host,
            command=command,
            exit_code=code,
            outcome=Outcome.SUCCESS if code == 0 else Outcome.COMMAND_FAILED,
            stdout=proc.stdout,
            stderr=proc.stderr,
        )


def _not_started(
    args: list[str],
    status: int,
    error: OSError,
    capture_output: bool,
) -> subprocess.CompletedProcess[str]:
    message = f"{args[0]}: {error.strerror or error}"
    logger.warning("Could not start %s", message)
    return subprocess.CompletedProcess(
        args=args,
        returncode=status,
        stdout="" if capture_output else None,
        stderr=message + "\n" if capture_output else None,
    )


def execute(
    raw: str,
    template: str,
    options: OptionsArg = (),
    capture_output: bool = False,
) -> ExecutionResult:
    """Run a raw shell line with the default configuration."""
    return Dispatcher().execute(raw, template, options, capture_output)


def run(
    raw: str,
    argv: Sequence[str],
    options: OptionsArg = (),
    capture_output: bool = False,
) -> ExecutionResult:
    """Run an argument vector with the default configuration."""
    return Dispatcher().run(raw, argv, options, capture_output)


def exists(location: str | LocalLocation | RemoteLocation) -> bool:
    """Check a location with the default configuration."""
    return Dispatcher().exists(location)
