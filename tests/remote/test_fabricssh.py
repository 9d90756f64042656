"""Tests for rexec.remote.fabricssh."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import paramiko  # type: ignore[import-untyped]
import pytest

from rexec.config import RexecConfig, SshConnectionOptions
from rexec.errors import InvalidOption
from rexec.options import PassthroughOption
from rexec.remote.fabricssh import run_remote_command

_DEFAULT_CONNECT_KWARGS = {
    "allow_agent": True,
    "look_for_keys": True,
    "compress": False,
}


def _connected(mock_conn_cls: MagicMock, exited: int = 0) -> MagicMock:
    mock_conn = mock_conn_cls.return_value.__enter__.return_value
    mock_conn.run.return_value = MagicMock(
        exited=exited, stdout="out\n", stderr="err\n"
    )
    return mock_conn


class TestRunRemoteCommand:
    @patch("rexec.remote.fabricssh.Connection")
    def test_defaults(
        self, mock_conn_cls: MagicMock, fabric_config: RexecConfig
    ) -> None:
        mock_conn = _connected(mock_conn_cls)

        result = run_remote_command(fabric_config, "nas", "ls /tmp")

        mock_conn_cls.assert_called_once_with(
            host="nas",
            port=None,
            user=None,
            connect_kwargs=_DEFAULT_CONNECT_KWARGS,
            connect_timeout=10,
            forward_agent=False,
        )
        mock_conn.open.assert_called_once_with()
        mock_conn.run.assert_called_once_with(
            "ls /tmp",
            warn=True,
            hide=False,
            pty=False,
            in_stream=False,
        )
        assert result.returncode == 0
        assert result.stdout is None

    @patch("rexec.remote.fabricssh.Connection")
    def test_capture_output(
        self, mock_conn_cls: MagicMock, fabric_config: RexecConfig
    ) -> None:
        mock_conn = _connected(mock_conn_cls, exited=3)

        result = run_remote_command(
            fabric_config, "nas", "false", capture_output=True
        )

        assert mock_conn.run.call_args.kwargs["hide"] is True
        assert result.returncode == 3
        assert result.stdout == "out\n"
        assert result.stderr == "err\n"

    @patch("rexec.remote.fabricssh.Connection")
    def test_passthrough_options(
        self, mock_conn_cls: MagicMock, fabric_config: RexecConfig
    ) -> None:
        mock_conn = _connected(mock_conn_cls)

        run_remote_command(
            fabric_config,
            "nas",
            "top",
            [
                PassthroughOption(flag="-t"),
                PassthroughOption(flag="-p", value="2222"),
                PassthroughOption(flag="-l", value="backup"),
                PassthroughOption(flag="-i", value="~/.ssh/key"),
                PassthroughOption(flag="-o", value="ConnectTimeout=5"),
                PassthroughOption(flag="-o", value="Compression=yes"),
            ],
        )

        mock_conn_cls.assert_called_once_with(
            host="nas",
            port=2222,
            user="backup",
            connect_kwargs={
                "allow_agent": True,
                "look_for_keys": True,
                "compress": True,
                "key_filename": "~/.ssh/key",
            },
            connect_timeout=5,
            forward_agent=False,
        )
        assert mock_conn.run.call_args.kwargs["pty"] is True
        assert mock_conn.run.call_args.kwargs["in_stream"] is None

    @patch("rexec.remote.fabricssh.Connection")
    def test_first_value_wins(
        self, mock_conn_cls: MagicMock, fabric_config: RexecConfig
    ) -> None:
        _connected(mock_conn_cls)
        config = fabric_config.model_copy(
            update={
                "default_options": [
                    PassthroughOption(flag="-p", value="5022")
                ]
            }
        )

        run_remote_command(
            config, "nas", "true", [PassthroughOption(flag="-p", value="22")]
        )

        assert mock_conn_cls.call_args.kwargs["port"] == 22

    @patch("rexec.remote.fabricssh.Connection")
    def test_unsupported_ssh_option(
        self, mock_conn_cls: MagicMock, fabric_config: RexecConfig
    ) -> None:
        with pytest.raises(InvalidOption, match="BatchMode"):
            run_remote_command(
                fabric_config,
                "nas",
                "true",
                [PassthroughOption(flag="-o", value="BatchMode=yes")],
            )
        mock_conn_cls.assert_not_called()

    @patch("rexec.remote.fabricssh.Connection")
    def test_bad_yes_no(
        self, mock_conn_cls: MagicMock, fabric_config: RexecConfig
    ) -> None:
        with pytest.raises(InvalidOption, match="yes or no"):
            run_remote_command(
                fabric_config,
                "nas",
                "true",
                [PassthroughOption(flag="-o", value="ForwardAgent=maybe")],
            )

    @patch("rexec.remote.fabricssh.Connection")
    def test_bad_port(
        self, mock_conn_cls: MagicMock, fabric_config: RexecConfig
    ) -> None:
        with pytest.raises(InvalidOption, match="integer"):
            run_remote_command(
                fabric_config,
                "nas",
                "true",
                [PassthroughOption(flag="-p", value="ssh")],
            )

    @patch("rexec.remote.fabricssh.Connection")
    def test_no_strict_host_key_checking(
        self, mock_conn_cls: MagicMock
    ) -> None:
        _connected(mock_conn_cls)
        config = RexecConfig(
            transport="fabric",
            connection_options=SshConnectionOptions(
                strict_host_key_checking=False,
                known_hosts_file="/dev/null",
            ),
        )

        run_remote_command(config, "nas", "true")

        client = mock_conn_cls.return_value.client
        client.load_host_keys.assert_called_once_with("/dev/null")
        (policy,) = client.set_missing_host_key_policy.call_args.args
        assert isinstance(policy, paramiko.AutoAddPolicy)

    @patch("rexec.remote.fabricssh.Connection")
    def test_server_alive_interval(self, mock_conn_cls: MagicMock) -> None:
        mock_conn = _connected(mock_conn_cls)
        config = RexecConfig(
            transport="fabric",
            connection_options=SshConnectionOptions(server_alive_interval=60),
        )

        run_remote_command(config, "nas", "true")

        mock_conn.transport.set_keepalive.assert_called_once_with(60)

    @pytest.mark.parametrize(
        "error",
        [
            OSError("No route to host"),
            paramiko.AuthenticationException("Authentication failed."),
            paramiko.SSHException("Error reading SSH protocol banner"),
        ],
    )
    @patch("rexec.remote.fabricssh.Connection")
    def test_connection_failure_is_255(
        self,
        mock_conn_cls: MagicMock,
        error: Exception,
        fabric_config: RexecConfig,
    ) -> None:
        mock_conn = mock_conn_cls.return_value.__enter__.return_value
        mock_conn.open.side_effect = error

        result = run_remote_command(
            fabric_config, "nas", "true", capture_output=True
        )

        assert result.returncode == 255
        assert result.stderr == str(error)
        mock_conn.run.assert_not_called()

    @pytest.mark.parametrize(
        "error",
        [
            paramiko.SSHException("SSH session not active"),
            EOFError(),
            ConnectionResetError(104, "Connection reset by peer"),
        ],
    )
    @patch("rexec.remote.fabricssh.Connection")
    def test_session_lost_while_running_is_255(
        self,
        mock_conn_cls: MagicMock,
        error: Exception,
        fabric_config: RexecConfig,
    ) -> None:
        mock_conn = mock_conn_cls.return_value.__enter__.return_value
        mock_conn.run.side_effect = error

        result = run_remote_command(fabric_config, "nas", "sleep 60")

        assert result.returncode == 255
        assert result.stdout is None
        mock_conn.open.assert_called_once()
