"""Location parsing: local paths and ``host:path`` remote locations."""

from __future__ import annotations

import re
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidLocation

# Same convention as scp/rsync: a colon in the first path segment,
# with something on both sides of it.
_REMOTE_RE = re.compile(r"^[^/:]+:.+$", re.DOTALL)
_DANGLING_RE = re.compile(r"^[^/:]+:$")


class LocalLocation(BaseModel):
    """A path on the local filesystem."""

    model_config = ConfigDict(frozen=True)
    kind: Literal["local"] = "local"
    path: str = Field(..., min_length=1)

    @property
    def host(self) -> None:
        return None

    @property
    def is_remote(self) -> bool:
        return False

    def display(self) -> str:
        return self.path


class RemoteLocation(BaseModel):
    """A path on a host reachable over ssh."""

    model_config = ConfigDict(frozen=True)
    kind: Literal["remote"] = "remote"
    # ssh would read a leading dash as an option.
    host: str = Field(..., min_length=1, pattern=r"^[^-]")
    path: str = Field(..., min_length=1)

    @property
    def is_remote(self) -> bool:
        return True

    def display(self) -> str:
        return f"{self.host}:{self.path}"


Location = Annotated[
    Union[LocalLocation, RemoteLocation], Field(discriminator="kind")
]


def classify(raw: str) -> bool:
    """Return True if *raw* denotes a remote ``host:path`` location.

    Raises InvalidLocation for an empty string, for a host with
    nothing after its colon (``"host:"``), or for a host starting
    with ``-``.
    """
    if not raw:
        raise InvalidLocation("Location must not be empty.")
    if _DANGLING_RE.match(raw):
        raise InvalidLocation(
            f"Location '{raw}' names a host but no path after the colon."
        )
    remote = _REMOTE_RE.match(raw) is not None
    if remote and raw.startswith("-"):
        raise InvalidLocation(
            f"Location '{raw}' names a host starting with '-'."
        )
    return remote


is_remote = classify


def decompose(raw: str) -> LocalLocation | RemoteLocation:
    """Split a location string into its host and path parts.

    Remote strings are split at the first colon. Local strings are
    kept verbatim; no tilde or variable expansion happens here.
    """
    if classify(raw):
        host, path = raw.split(":", 1)
        return RemoteLocation(host=host, path=path)
    else:
        return LocalLocation(path=raw)
