"""Placeholder substitution for command templates."""

from __future__ import annotations

import re

from .location import LocalLocation, RemoteLocation

PATH_PLACEHOLDER = "::path::"
HOST_PLACEHOLDER = "::host::"

_PLACEHOLDER_RE = re.compile(
    "|".join(re.escape(p) for p in (PATH_PLACEHOLDER, HOST_PLACEHOLDER))
)


def placeholder_values(
    location: LocalLocation | RemoteLocation,
) -> dict[str, str]:
    """Values for each placeholder; the host is empty for local paths."""
    return {
        PATH_PLACEHOLDER: location.path,
        HOST_PLACEHOLDER: location.host or "",
    }


def substitute(
    template: str,
    location: LocalLocation | RemoteLocation,
) -> str:
    """Replace every placeholder in *template* in a single pass.

    Substituted text is never scanned again, so a path that itself
    contains ``::host::`` comes through unchanged.
    """
    values = placeholder_values(location)
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(0)], template)


def substitute_argv(
    argv: list[str],
    location: LocalLocation | RemoteLocation,
) -> list[str]:
    """Substitute placeholders in each element of an argument vector."""
    return [substitute(arg, location) for arg in argv]
