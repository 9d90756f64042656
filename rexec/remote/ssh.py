"""OpenSSH client command building and remote command execution."""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

from ..config import RexecConfig, SshConnectionOptions
from ..errors import LaunchError
from ..options import PassthroughOption, normalize_options, options_to_args

logger = logging.getLogger(__name__)


def _ssh_o_options(opts: SshConnectionOptions) -> list[str]:
    """Derive SSH -o option values from structured options."""
    result = [f"ConnectTimeout={opts.connect_timeout}"]
    if opts.batch_mode:
        result.append("BatchMode=yes")
    if opts.compress:
        result.append("Compression=yes")
    if opts.server_alive_interval is not None:
        result.append(f"ServerAliveInterval={opts.server_alive_interval}")
    if not opts.strict_host_key_checking:
        result.append("StrictHostKeyChecking=no")
    if opts.known_hosts_file is not None:
        result.append(f"UserKnownHostsFile={opts.known_hosts_file}")
    if opts.forward_agent:
        result.append("ForwardAgent=yes")
    return result


def build_ssh_base_args(
    config: RexecConfig,
    host: str,
    options: Sequence[PassthroughOption] = (),
) -> list[str]:
    """Build SSH command args up to and including the host.

    Returns args like:
        ssh [passthrough] -o ConnectTimeout=10 -o BatchMode=yes host

    ssh keeps the first value it sees for each setting, so
    per-call options come first, then configured defaults, then
    the structured connection options.
    """
    args = list(config.ssh_command)
    args.extend(options_to_args(normalize_options(options)))
    args.extend(options_to_args(config.default_options))
    for opt in _ssh_o_options(config.connection_options):
        args.extend(["-o", opt])
    args.append(host)
    return args


def run_remote_command(
    config: RexecConfig,
    host: str,
    command: str,
    options: Sequence[PassthroughOption] = (),
    capture_output: bool = False,
) -> subprocess.CompletedProcess[str]:
    """Run a command line on a remote host via the ssh client.

    *command* is passed as a single argument; the remote shell
    evaluates it. Exit status 255 means ssh itself failed.
    Raises LaunchError if the ssh client cannot be started.
    """
    args = build_ssh_base_args(config, host, options) + [command]
    logger.debug("ssh argv: %s", args)
    try:
        return subprocess.run(
            args,
            capture_output=capture_output,
            text=True,
        )
    except OSError as e:
        raise LaunchError(args[0], e.strerror or str(e)) from e
