"""Shared test fixtures."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Iterator
from unittest.mock import MagicMock, patch

import pytest

from rexec.config import RexecConfig
from rexec.dispatch import Dispatcher

SAMPLE_YAML = """\
transport: openssh
ssh-command: [ssh, -F, /dev/null]
shell: /bin/sh
connection-options:
  connect-timeout: 5
  strict-host-key-checking: false
default-options:
  - flag: -o
    value: LogLevel=ERROR
"""


@pytest.fixture()
def sample_config_file(tmp_path: Path) -> Path:
    """Write sample YAML config to a temp file."""
    p = tmp_path / "config.yaml"
    p.write_text(SAMPLE_YAML)
    return p


@pytest.fixture()
def config() -> RexecConfig:
    return RexecConfig()


@pytest.fixture()
def fabric_config() -> RexecConfig:
    return RexecConfig(transport="fabric")


@pytest.fixture()
def dispatcher(config: RexecConfig) -> Dispatcher:
    return Dispatcher(config)


def _completed(
    returncode: int, stdout: str | None = None, stderr: str | None = None
) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout, stderr=stderr
    )


@pytest.fixture()
def mock_ssh_run() -> Iterator[MagicMock]:
    """Patch the ssh client subprocess call; succeeds by default."""
    with patch("rexec.remote.ssh.subprocess.run") as mock_run:
        mock_run.return_value = _completed(0)
        yield mock_run
