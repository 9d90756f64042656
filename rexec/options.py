"""Passthrough options forwarded to the ssh client."""

from __future__ import annotations

from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from .errors import InvalidOption

# flag -> whether it takes a value
PASSTHROUGH_FLAGS: dict[str, bool] = {
    "-t": False,  # force pseudo-terminal allocation
    "-T": False,  # disable pseudo-terminal allocation
    "-q": False,  # quiet mode
    "-i": True,  # identity file
    "-o": True,  # ssh_config option, Key=Value
    "-p": True,  # port
    "-l": True,  # login name
}


class PassthroughOption(BaseModel):
    """A single ``(flag, value)`` pair handed to ssh verbatim."""

    model_config = ConfigDict(frozen=True)
    flag: str
    value: Optional[str] = None

    def to_args(self) -> list[str]:
        if self.value is None:
            return [self.flag]
        else:
            return [self.flag, self.value]


def validate_option(option: PassthroughOption) -> PassthroughOption:
    """Check a flag is known and carries a value only when it needs one."""
    if option.flag not in PASSTHROUGH_FLAGS:
        allowed = ", ".join(PASSTHROUGH_FLAGS)
        raise InvalidOption(
            f"Unsupported passthrough flag '{option.flag}'"
            f" (allowed: {allowed})"
        )
    takes_value = PASSTHROUGH_FLAGS[option.flag]
    if takes_value and not option.value:
        raise InvalidOption(f"Flag '{option.flag}' requires a value")
    if not takes_value and option.value is not None:
        raise InvalidOption(f"Flag '{option.flag}' does not take a value")
    return option


def normalize_options(
    options: Iterable[PassthroughOption | tuple[str, str | None]],
) -> list[PassthroughOption]:
    """Accept option models or plain tuples and validate each one."""
    result: list[PassthroughOption] = []
    for opt in options:
        match opt:
            case PassthroughOption():
                result.append(validate_option(opt))
            case (str() as flag, value):
                result.append(
                    validate_option(PassthroughOption(flag=flag, value=value))
                )
            case _:
                raise InvalidOption(f"Invalid passthrough option: {opt!r}")
    return result


def options_to_args(options: Iterable[PassthroughOption]) -> list[str]:
    """Flatten options into ssh argv words, preserving order."""
    args: list[str] = []
    for opt in options:
        args.extend(opt.to_args())
    return args


def split_ssh_option(value: str) -> tuple[str, str]:
    """Split an ``-o`` value (``Key=Value`` or ``Key Value``)."""
    for sep in ("=", " "):
        if sep in value:
            key, _, val = value.partition(sep)
            return key.strip(), val.strip()
    raise InvalidOption(f"ssh option '{value}' must be of the form Key=Value")
