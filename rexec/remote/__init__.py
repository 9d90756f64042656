"""Remote command execution over ssh."""

from __future__ import annotations

import subprocess
from typing import Callable, Sequence

from ..config import RexecConfig
from ..options import PassthroughOption
from . import fabricssh, ssh
from .ssh import build_ssh_base_args

RemoteRunner = Callable[
    [RexecConfig, str, str, Sequence[PassthroughOption], bool],
    subprocess.CompletedProcess[str],
]


def remote_runner(config: RexecConfig) -> RemoteRunner:
    """Pick the transport named by the configuration."""
    match config.transport:
        case "fabric":
            return fabricssh.run_remote_command
        case _:
            return ssh.run_remote_command


__all__ = [
    "RemoteRunner",
    "build_ssh_base_args",
    "remote_runner",
]
