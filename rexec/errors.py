"""Error taxonomy and the exit codes the CLI reports for each kind."""

from __future__ import annotations

SSH_CONNECTION_FAILURE_STATUS = 255


class RexecError(Exception):
    """Base class for errors that abort a call before or while executing."""

    exit_code: int = 1


class SshConnectionError(RexecError):
    """The ssh transport could not reach the host."""

    exit_code = 22

    def __init__(self, host: str) -> None:
        super().__init__(f"Can't connect to ssh via host: {host}")
        self.host = host


class InvalidLocation(RexecError):
    """The location string is empty or cannot be parsed."""

    exit_code = 26


class MissingArgument(RexecError):
    """A required argument is absent, malformed, or superfluous."""

    exit_code = 27


class MissingPath(MissingArgument):
    exit_code = 27

    def __init__(self) -> None:
        super().__init__(
            "You must supply a path to analyze as the first argument."
        )


class MissingCommand(MissingArgument):
    exit_code = 28

    def __init__(self) -> None:
        super().__init__(
            "You must supply a command to run as the second argument.\n"
            "You may enter '::path::' anywhere in this command and it will"
            " be substituted with the final path (local or remote) derived"
            " from the first argument. '::host::' is also available."
        )


class TooManyArguments(MissingArgument):
    exit_code = 29

    def __init__(self, extra: list[str] | None = None) -> None:
        msg = "You've supplied too many arguments."
        if extra:
            msg += f" Unexpected: {' '.join(extra)}"
        super().__init__(msg)


class InvalidOption(MissingArgument):
    """A passthrough option is unknown or has a bad value."""

    exit_code = 31


class LaunchError(RexecError):
    """The local shell or ssh client could not be started."""

    exit_code = 32

    def __init__(self, program: str, reason: str) -> None:
        super().__init__(f"Can't start {program}: {reason}")
        self.program = program
