"""
Conversions between typed directive values and their sshd_config text.

Each value type has exactly one canonical text form. The format_*
functions are total over the values the model holds; the parse_*
functions raise ValueError with a readable message on bad input.
"""
from __future__ import annotations

import re
from typing import Callable, Final, Iterable, TypeVar

from nbs_sshd.model import LogLevel, Match, Subsystem

T = TypeVar("T")

_TRUE: Final[str] = "yes"
_FALSE: Final[str] = "no"

# ASCII digits only: int() alone would also accept "1_000" and non-ASCII digits
_DECIMAL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[+-]?[0-9]+$")

_LOG_LEVELS: Final[dict[str, LogLevel]] = {
    level.value.lower(): level for level in LogLevel
}


def format_bool(value: bool) -> str:
    return _TRUE if value else _FALSE


def parse_bool(text: str) -> bool:
    """Parse 'yes' or 'no'; the match is case-sensitive."""
    if text == _TRUE:
        return True
    if text == _FALSE:
        return False
    raise ValueError(f"Value '{text}' cannot be mapped to a boolean.")


def format_int(value: int) -> str:
    return str(int(value))


def parse_int(text: str) -> int:
    """Parse a plain decimal integer, ignoring surrounding whitespace."""
    stripped = text.strip()
    if not _DECIMAL_PATTERN.match(stripped):
        raise ValueError(f"Value '{text}' is not a decimal integer.")
    return int(stripped)


def format_log_level(level: LogLevel) -> str:
    return LogLevel(level).value


def parse_log_level(text: str) -> LogLevel:
    """Parse a log level name case-insensitively."""
    try:
        return _LOG_LEVELS[text.strip().lower()]
    except KeyError:
        names = ", ".join(level.value for level in LogLevel)
        raise ValueError(
            f"Value '{text}' is not a log level (expected one of: {names})."
        ) from None


def format_list(values: Iterable[object]) -> str:
    """Comma-join the text form of each value, no surrounding whitespace."""
    return ",".join(str(v) for v in values)


def parse_list(text: str, factory: Callable[[str], T]) -> list[T]:
    """
    Split a comma-separated value and build one item per element.

    Elements are trimmed; an empty element is an error.
    """
    items = []
    for element in text.split(","):
        element = element.strip()
        if not element:
            raise ValueError(f"Value '{text}' contains an empty list entry.")
        items.append(factory(element))
    return items


def format_subsystem(subsystem: Subsystem) -> str:
    return f"{subsystem.name} {subsystem.command}"


def parse_subsystem(text: str) -> Subsystem:
    """Parse '<name> <command>'; the command may contain spaces."""
    parts = text.strip().split(None, 1)
    if len(parts) < 2:
        raise ValueError(
            f"Value '{text}' must be a subsystem name followed by a command."
        )
    return Subsystem(parts[0], parts[1])


def format_match_condition(match: Match) -> str:
    """
    Build the 'Match ...' line for a block.

    A criterion with no patterns is left out. Patterns are sorted so the
    same block always renders the same way.
    """
    parts = ["Match"]
    if match.users:
        parts.append(f"User {format_list(sorted(match.users))}")
    if match.addresses:
        parts.append(f"Address {format_list(sorted(match.addresses))}")
    return " ".join(parts)
