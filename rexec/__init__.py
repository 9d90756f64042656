"""Location-transparent command execution.

Resolve a ``host:path`` or local path, substitute ``::path::`` and
``::host::`` into a command, and run it locally or over ssh with the
same success/failure contract either way.
"""

__version__ = "0.1.0"

from .dispatch import (
    Dispatcher,
    ExecutionResult,
    Outcome,
    execute,
    exists,
    run,
)
from .errors import (
    InvalidLocation,
    InvalidOption,
    LaunchError,
    MissingArgument,
    MissingCommand,
    MissingPath,
    RexecError,
    SshConnectionError,
    TooManyArguments,
)
from .location import (
    LocalLocation,
    Location,
    RemoteLocation,
    classify,
    decompose,
    is_remote,
)
from .options import PassthroughOption

__all__ = [
    "Dispatcher",
    "ExecutionResult",
    "InvalidLocation",
    "InvalidOption",
    "LaunchError",
    "LocalLocation",
    "Location",
    "MissingArgument",
    "MissingCommand",
    "MissingPath",
    "Outcome",
    "PassthroughOption",
    "RemoteLocation",
    "RexecError",
    "SshConnectionError",
    "TooManyArguments",
    "classify",
    "decompose",
    "execute",
    "exists",
    "is_remote",
    "run",
]
