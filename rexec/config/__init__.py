"""Configuration types and loading."""

from .loader import (
    ConfigError,
    config_search_paths,
    find_config_file,
    load_config,
)
from .protocol import RexecConfig, SshConnectionOptions

__all__ = [
    "ConfigError",
    "RexecConfig",
    "SshConnectionOptions",
    "config_search_paths",
    "find_config_file",
    "load_config",
]
