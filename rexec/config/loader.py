"""Optional YAML configuration: where it is looked up and how it loads."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from .protocol import RexecConfig

logger = logging.getLogger(__name__)

SYSTEM_CONFIG = Path("/etc/rexec/config.yaml")


class ConfigError(Exception):
    """Raised when configuration is invalid."""

    exit_code = 2


def config_search_paths() -> list[Path]:
    """Candidate config files, most specific first."""
    xdg = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser(
        "~/.config"
    )
    return [Path(xdg) / "rexec" / "config.yaml", SYSTEM_CONFIG]


def find_config_file(config_path: str | None = None) -> Path | None:
    """Return the config file to load, or None to use defaults.

    An explicit *config_path* must exist. Otherwise the first
    existing entry of ``config_search_paths()`` is used.
    """
    if config_path is not None:
        p = Path(config_path)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        return p
    return next((p for p in config_search_paths() if p.is_file()), None)


def load_config(config_path: str | None = None) -> RexecConfig:
    """Load and validate configuration; defaults when there is none."""
    path = find_config_file(config_path)
    if path is None:
        logger.debug("No config file found, using defaults")
        return RexecConfig()
    logger.debug("Loading config from %s", path)
    try:
        raw = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    match raw:
        case None:
            return RexecConfig()
        case dict():
            try:
                return RexecConfig.model_validate(raw)
            except ValidationError as e:
                raise ConfigError(str(e)) from e
        case _:
            raise ConfigError(f"Config file {path} must be a YAML mapping")
