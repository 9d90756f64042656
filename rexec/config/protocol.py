from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import InvalidOption
from ..options import PassthroughOption, validate_option


def _to_kebab(name: str) -> str:
    return name.replace("_", "-")


class _BaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_kebab,
        populate_by_name=True,
        frozen=True,
    )


class SshConnectionOptions(_BaseModel):
    """SSH connection options applied to every remote call.

    These fields map to parameters across two transports:
    - OpenSSH client: ssh(1) -o options
    - Fabric/Paramiko: Connection() and SSHClient.connect() kwargs
    """

    # SSH: ConnectTimeout | Fabric: connect_timeout
    connect_timeout: int = Field(default=10, ge=1)
    # SSH: BatchMode (OpenSSH only)
    batch_mode: bool = True
    # SSH: Compression | Paramiko: compress
    compress: bool = False
    # SSH: ServerAliveInterval | Paramiko: transport.set_keepalive()
    server_alive_interval: Optional[int] = Field(default=None, ge=1)
    # SSH: StrictHostKeyChecking
    # Paramiko: SSHClient.set_missing_host_key_policy()
    strict_host_key_checking: bool = True
    # SSH: UserKnownHostsFile
    known_hosts_file: Optional[str] = None
    # SSH: ForwardAgent | Fabric: forward_agent
    forward_agent: bool = False

    # Paramiko only
    allow_agent: bool = True
    look_for_keys: bool = True


class RexecConfig(_BaseModel):
    """Top-level configuration passed to a Dispatcher."""

    transport: Literal["openssh", "fabric"] = "openssh"
    ssh_command: List[str] = Field(default_factory=lambda: ["ssh"])
    shell: str = Field(default="/bin/sh", min_length=1)
    connection_options: SshConnectionOptions = Field(
        default_factory=lambda: SshConnectionOptions()
    )
    default_options: List[PassthroughOption] = Field(default_factory=list)

    @field_validator("ssh_command")
    @classmethod
    def non_empty_ssh_command(cls, v: list[str]) -> list[str]:
        if not v or not v[0]:
            raise ValueError("ssh-command must name an executable")
        return v

    @field_validator("default_options")
    @classmethod
    def known_default_options(
        cls, v: list[PassthroughOption]
    ) -> list[PassthroughOption]:
        for opt in v:
            try:
                validate_option(opt)
            except InvalidOption as e:
                raise ValueError(str(e)) from e
        return v
