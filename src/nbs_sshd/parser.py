"""
sshd_config parser.

Provides:
- SshdConfigParser: Line-oriented parser producing an SshdConfig
- parse, loads, load_from, load_file: Convenience entry points

Parsing rules:
- Blank lines and lines whose first non-blank character is '#' are skipped
- 'Match [User a,b] [Address x,y]' opens a block; the indented directives
  after it belong to that block, and the next unindented line closes it
- Any other line is '<Directive> <value>', dispatched through a table
  for the current scope (global or Match)
- Unknown directives are errors, except for a fixed set of legacy global
  options that are accepted and ignored

Usage:
    config = load_file("/etc/ssh/sshd_config")
    config = loads("Port 2222\\nUsePAM no\\n")
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import IO, Any, Callable, Final, Iterable

from nbs_sshd.errors import (
    ErrorContext,
    FormatError,
    InvalidValueError,
    MalformedLineError,
    MalformedMatchError,
    Scope,
    UnknownDirectiveError,
)
from nbs_sshd.formatters import (
    parse_bool,
    parse_int,
    parse_list,
    parse_log_level,
    parse_subsystem,
)
from nbs_sshd.model import (
    Cipher,
    HostKeyAlgorithm,
    KeyExchangeAlgorithm,
    MacAlgorithm,
    Match,
    SshdConfig,
)

logger = logging.getLogger(__name__)

GlobalHandler = Callable[[SshdConfig, str], None]
MatchHandler = Callable[[Match, str], None]

# Options sshd understands that the model does not carry
IGNORED_GLOBAL_DIRECTIVES: Final[frozenset[str]] = frozenset({
    "KeyRegenerationInterval",
    "HostbasedAuthentication",
    "ServerKeyBits",
    "SyslogFacility",
    "LoginGraceTime",
    "PermitRootLogin",
    "StrictModes",
    "RSAAuthentication",
    "PubkeyAuthentication",
    "IgnoreRhosts",
    "RhostsRSAAuthentication",
    "PermitEmptyPasswords",
    "X11DisplayOffset",
    "PrintLastLog",
    "TCPKeepAlive",
})


def _set_port(config: SshdConfig, value: str) -> None:
    config.port = parse_int(value)


def _set_host_key(config: SshdConfig, value: str) -> None:
    config.host_key_file = value


def _set_challenge_response(config: SshdConfig, value: str) -> None:
    config.challenge_response_authentication = parse_bool(value)


def _set_log_level(config: SshdConfig, value: str) -> None:
    config.log_level = parse_log_level(value)


def _add_subsystem(config: SshdConfig, value: str) -> None:
    config.add_subsystem(parse_subsystem(value))


def _set_use_pam(config: SshdConfig, value: str) -> None:
    config.use_pam = parse_bool(value)


def _set_privilege_separation(config: SshdConfig, value: str) -> None:
    config.use_privilege_separation = parse_bool(value)


def _set_x11_forwarding(config: SshdConfig, value: str) -> None:
    config.x11_forwarding = parse_bool(value)


def _set_print_motd(config: SshdConfig, value: str) -> None:
    config.print_motd = parse_bool(value)


def _set_protocol(config: SshdConfig, value: str) -> None:
    config.protocol = value


def _add_accept_env(config: SshdConfig, value: str) -> None:
    for pattern in value.split(" "):
        if pattern:
            config.add_accepted_environment_variable(pattern)


def _set_ciphers(config: SshdConfig, value: str) -> None:
    config.set_ciphers(parse_list(value, Cipher))


def _set_host_key_algorithms(config: SshdConfig, value: str) -> None:
    config.set_host_key_algorithms(parse_list(value, HostKeyAlgorithm))


def _set_kex_algorithms(config: SshdConfig, value: str) -> None:
    config.set_key_exchange_algorithms(parse_list(value, KeyExchangeAlgorithm))


def _set_macs(config: SshdConfig, value: str) -> None:
    config.set_mac_algorithms(parse_list(value, MacAlgorithm))


def _ignore(config: SshdConfig, value: str) -> None:
    pass


def _set_authentication_methods(match: Match, value: str) -> None:
    match.authentication_methods = value


GLOBAL_DIRECTIVES: Final[dict[str, GlobalHandler]] = {
    "Port": _set_port,
    "HostKey": _set_host_key,
    "ChallengeResponseAuthentication": _set_challenge_response,
    "LogLevel": _set_log_level,
    "Subsystem": _add_subsystem,
    "UsePAM": _set_use_pam,
    "UsePrivilegeSeparation": _set_privilege_separation,
    "X11Forwarding": _set_x11_forwarding,
    "PrintMotd": _set_print_motd,
    "Protocol": _set_protocol,
    "AcceptEnv": _add_accept_env,
    "Ciphers": _set_ciphers,
    "HostKeyAlgorithms": _set_host_key_algorithms,
    "KexAlgorithms": _set_kex_algorithms,
    "MACs": _set_macs,
    **{name: _ignore for name in IGNORED_GLOBAL_DIRECTIVES},
}

MATCH_DIRECTIVES: Final[dict[str, MatchHandler]] = {
    "AuthenticationMethods": _set_authentication_methods,
}


class SshdConfigParser:
    """
    Parser for sshd_config text.

    A parser instance holds only its compiled patterns, so one instance
    can parse any number of inputs. Each call to parse() builds a fresh
    SshdConfig and either returns it complete or raises FormatError.
    """

    MATCH_KEYWORD: Final[str] = "Match"

    def __init__(self) -> None:
        self._match_line = re.compile(
            r"^\s*Match"
            r"(?:\s+User\s+(?P<users>\S+))?"
            r"(?:\s+Address\s+(?P<addresses>\S+))?"
            r"\s*$"
        )
        self._directive_line = re.compile(r"^\s*(?P<name>\S+)\s+(?P<value>.*?)\s*$")

    def parse(self, lines: Iterable[str]) -> SshdConfig:
        """
        Parse configuration lines into an SshdConfig.

        Args:
            lines: Text lines, with or without trailing newlines
                   (a text stream, list, or str.splitlines() result)

        Returns:
            The populated configuration

        Raises:
            FormatError: If any line cannot be parsed
            TypeError: If `lines` is a single string
        """
        if isinstance(lines, str):
            raise TypeError("parse() takes an iterable of lines; use loads() for a string")

        config = SshdConfig()
        current: Match | None = None

        for line_number, raw in enumerate(lines, 1):
            line = raw.rstrip("\r\n")
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue

            # An unindented line ends the open Match block
            if current is not None and not line[0].isspace():
                current = None

            context = ErrorContext(
                scope=Scope.GLOBAL if current is None else Scope.MATCH,
                line_number=line_number,
                line=line,
            )

            match = self._parse_match(line, context)
            if match is not None:
                config.add_match(match)
                current = match
                logger.debug(
                    "Line %d: Match block (users=%s, addresses=%s)",
                    line_number, sorted(match.users), sorted(match.addresses),
                )
                continue

            name, value = self._tokenize(line, context)
            context.directive = name
            context.value = value

            if current is None:
                self._apply_global(config, name, value, context)
            else:
                self._apply_match(current, name, value, context)

        return config

    def _parse_match(self, line: str, context: ErrorContext) -> Match | None:
        """Return a new Match for a Match line, None for any other line."""
        first = line.split(None, 1)[0]
        if first != self.MATCH_KEYWORD:
            return None

        context.directive = self.MATCH_KEYWORD
        found = self._match_line.match(line)
        if not found:
            raise MalformedMatchError(
                f"Match condition '{line.strip()}' is not supported; "
                f"expected 'Match [User <patterns>] [Address <patterns>]'.",
                context,
            )

        return Match(
            users=self._split_patterns(found.group("users"), context),
            addresses=self._split_patterns(found.group("addresses"), context),
        )

    @staticmethod
    def _split_patterns(group: str | None, context: ErrorContext) -> frozenset[str]:
        if group is None:
            return frozenset()
        patterns = group.split(",")
        if not all(patterns):
            raise MalformedMatchError(
                f"Match pattern list '{group}' contains an empty entry.",
                context,
            )
        return frozenset(patterns)

    def _tokenize(self, line: str, context: ErrorContext) -> tuple[str, str]:
        found = self._directive_line.match(line)
        if not found or not found.group("value"):
            raise MalformedLineError(
                f"Line {context.line_number} cannot be split into a directive "
                f"and a value: '{line.strip()}'.",
                context,
            )
        return found.group("name"), found.group("value")

    def _apply_global(
        self,
        config: SshdConfig,
        name: str,
        value: str,
        context: ErrorContext,
    ) -> None:
        handler = GLOBAL_DIRECTIVES.get(name)
        if handler is None:
            raise UnknownDirectiveError(name, Scope.GLOBAL, context)
        if name in IGNORED_GLOBAL_DIRECTIVES:
            logger.debug("Line %d: ignoring %s", context.line_number, name)
        _invoke(handler, config, value, context)

    def _apply_match(
        self,
        match: Match,
        name: str,
        value: str,
        context: ErrorContext,
    ) -> None:
        handler = MATCH_DIRECTIVES.get(name)
        if handler is None:
            raise UnknownDirectiveError(name, Scope.MATCH, context)
        _invoke(handler, match, value, context)


def _invoke(
    handler: Callable[[Any, str], None],
    target: Any,
    value: str,
    context: ErrorContext,
) -> None:
    """Run a directive handler, turning value errors into InvalidValueError."""
    try:
        handler(target, value)
    except ValueError as e:
        raise InvalidValueError(
            f"Invalid value for '{context.directive}' on line "
            f"{context.line_number}: {e}",
            reason=str(e),
            context=context,
        ) from e


def parse(lines: Iterable[str]) -> SshdConfig:
    """Parse an iterable of lines."""
    return SshdConfigParser().parse(lines)


def loads(text: str) -> SshdConfig:
    """Parse configuration from a string."""
    return parse(text.splitlines())


def _decode(data: bytes, encoding: str) -> str:
    """Decode raw file content, reporting bad bytes as InvalidValueError."""
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as e:
        line_number = data.count(b"\n", 0, e.start) + 1
        raise InvalidValueError(
            f"Line {line_number} is not valid {encoding}: {e.reason}",
            reason=e.reason,
            context=ErrorContext(line_number=line_number, extra={"encoding": encoding}),
        ) from e


def load_from(stream: IO[bytes], encoding: str = "utf-8") -> SshdConfig:
    """
    Parse configuration from a binary stream.

    The stream is read to the end with `encoding` and left open.

    Raises:
        FormatError: If the content cannot be parsed, including bytes
            that are not valid in `encoding` (InvalidValueError)
        LookupError: If `encoding` is not a known codec
    """
    return loads(_decode(stream.read(), encoding))


def load_file(path: Path | str, encoding: str = "utf-8") -> SshdConfig:
    """Parse configuration from a file. See load_from() for errors."""
    with open(path, "rb") as f:
        return load_from(f, encoding)


__all__ = [
    "FormatError",
    "GLOBAL_DIRECTIVES",
    "IGNORED_GLOBAL_DIRECTIVES",
    "MATCH_DIRECTIVES",
    "SshdConfigParser",
    "load_file",
    "load_from",
    "loads",
    "parse",
]
