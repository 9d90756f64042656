"""Fabric-based remote command execution."""

from __future__ import annotations

import logging
import subprocess
from typing import Any, Sequence

import paramiko  # type: ignore[import-untyped]
from fabric import Connection  # type: ignore[import-untyped]

from ..config import RexecConfig
from ..errors import SSH_CONNECTION_FAILURE_STATUS, InvalidOption
from ..options import PassthroughOption, normalize_options, split_ssh_option

logger = logging.getLogger(__name__)


def _yes_no(key: str, value: str) -> bool:
    match value.lower():
        case "yes":
            return True
        case "no":
            return False
        case _:
            raise InvalidOption(f"ssh option {key} expects yes or no")


def _apply_options(
    settings: dict[str, Any],
    options: Sequence[PassthroughOption],
) -> None:
    """Fold passthrough options into Fabric connection settings."""
    # Earlier values win, as with the ssh client.
    seen: set[str] = set()

    def put(name: str, value: Any) -> None:
        if name not in seen:
            seen.add(name)
            settings[name] = value

    for opt in options:
        match opt.flag, opt.value:
            case "-t", _:
                put("pty", True)
            case "-T", _:
                put("pty", False)
            case "-q", _:
                # Paramiko prints no client diagnostics to silence.
                pass
            case "-i", str() as key:
                put("key_filename", key)
            case "-p", str() as port:
                put("port", _to_int("-p", port))
            case "-l", str() as user:
                put("user", user)
            case "-o", str() as raw:
                key, value = split_ssh_option(raw)
                match key.lower():
                    case "connecttimeout":
                        put("connect_timeout", _to_int(key, value))
                    case "port":
                        put("port", _to_int(key, value))
                    case "user":
                        put("user", value)
                    case "identityfile":
                        put("key_filename", value)
                    case "compression":
                        put("compress", _yes_no(key, value))
                    case "forwardagent":
                        put("forward_agent", _yes_no(key, value))
                    case "stricthostkeychecking":
                        put("strict_host_key_checking", _yes_no(key, value))
                    case _:
                        raise InvalidOption(
                            f"ssh option '{key}' is not supported"
                            " by the fabric transport"
                        )


def _to_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise InvalidOption(f"{name} expects an integer, got {value!r}") from e


def _connection_settings(
    config: RexecConfig,
    options: Sequence[PassthroughOption],
) -> dict[str, Any]:
    opts = config.connection_options
    settings: dict[str, Any] = {}
    _apply_options(
        settings,
        list(normalize_options(options)) + list(config.default_options),
    )
    settings.setdefault("pty", False)
    settings.setdefault("port", None)
    settings.setdefault("user", None)
    settings.setdefault("key_filename", None)
    settings.setdefault("connect_timeout", opts.connect_timeout)
    settings.setdefault("compress", opts.compress)
    settings.setdefault("forward_agent", opts.forward_agent)
    settings.setdefault(
        "strict_host_key_checking", opts.strict_host_key_checking
    )
    return settings


def build_connection(
    config: RexecConfig,
    host: str,
    settings: dict[str, Any],
) -> Connection:
    """Build a Fabric Connection for *host*."""
    opts = config.connection_options
    connect_kwargs: dict[str, object] = {
        "allow_agent": opts.allow_agent,
        "look_for_keys": opts.look_for_keys,
        "compress": settings["compress"],
    }
    if settings["key_filename"]:
        connect_kwargs["key_filename"] = settings["key_filename"]

    conn = Connection(
        host=host,
        port=settings["port"],
        user=settings["user"],
        connect_kwargs=connect_kwargs,
        connect_timeout=settings["connect_timeout"],
        forward_agent=settings["forward_agent"],
    )

    if opts.known_hosts_file is not None:
        conn.client.load_host_keys(opts.known_hosts_file)
    if not settings["strict_host_key_checking"]:
        conn.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    return conn


def run_remote_command(
    config: RexecConfig,
    host: str,
    command: str,
    options: Sequence[PassthroughOption] = (),
    capture_output: bool = False,
) -> subprocess.CompletedProcess[str]:
    """Run a command line on a remote host via Fabric.

    A failure to connect or authenticate, or a session lost while
    the command runs, is reported as exit status 255, the same
    status the ssh client uses.
    """
    settings = _connection_settings(config, options)
    with build_connection(config, host, settings) as conn:
        try:
            conn.open()
            interval = config.connection_options.server_alive_interval
            if interval is not None:
                conn.transport.set_keepalive(interval)
            logger.debug("fabric run on %s: %s", host, command)
            result = conn.run(
                command,
                warn=True,
                hide=capture_output,
                pty=settings["pty"],
                in_stream=None if settings["pty"] else False,
            )
        except (paramiko.SSHException, OSError, EOFError) as e:
            logger.debug("fabric session on %s failed: %s", host, e)
            return subprocess.CompletedProcess(
                args=command,
                returncode=SSH_CONNECTION_FAILURE_STATUS,
                stdout="" if capture_output else None,
                stderr=str(e) if capture_output else None,
            )
    return subprocess.CompletedProcess(
        args=command,
        returncode=result.exited,
        stdout=result.stdout if capture_output else None,
        stderr=result.stderr if capture_output else None,
    )
