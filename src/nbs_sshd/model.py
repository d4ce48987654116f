"""
In-memory model of an OpenSSH server configuration (sshd_config).

Provides:
- SshdConfig: Root configuration with sshd's defaults
- Match: Conditional block applying to matching users/addresses
- Subsystem: External subsystem (e.g. sftp) definition
- Cipher, HostKeyAlgorithm, KeyExchangeAlgorithm, MacAlgorithm:
  Named algorithm values used in the algorithm list directives
- LogLevel: Verbosity of sshd logging

The model performs no validation beyond keeping each named value,
AcceptEnv pattern and Match pattern a single non-empty token. Text
conversion lives in nbs_sshd.formatters.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, TypeVar


class LogLevel(str, Enum):
    """sshd log verbosity; each value is the canonical directive token."""
    QUIET = "Quiet"
    FATAL = "Fatal"
    ERROR = "Error"
    INFO = "Info"
    VERBOSE = "Verbose"
    DEBUG = "Debug"
    DEBUG1 = "Debug1"
    DEBUG2 = "Debug2"
    DEBUG3 = "Debug3"


def _check_token(value: str, kind: str) -> str:
    """Trim a token and check it is a single non-empty word."""
    if not isinstance(value, str):
        raise TypeError(f"{kind} must be a string, got {type(value).__name__}")
    token = value.strip()
    if not token:
        raise ValueError(f"{kind} must not be empty")
    if any(ch.isspace() for ch in token) or "," in token:
        raise ValueError(f"{kind} must be a single token, got {value!r}")
    return token


class _NamedAlgorithm:
    """
    Thin wrapper around one algorithm name.

    Equality and text form are the name itself, so a value compares
    equal to the plain string it wraps.
    """

    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = _check_token(name, type(self).__name__)

    @property
    def name(self) -> str:
        return self._name

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return self._name == other
        if type(other) is type(self):
            return self._name == other._name  # type: ignore[attr-defined]
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._name)


class Cipher(_NamedAlgorithm):
    """Symmetric cipher name, e.g. aes256-ctr."""
    __slots__ = ()


class HostKeyAlgorithm(_NamedAlgorithm):
    """Host key signature algorithm name, e.g. ssh-ed25519."""
    __slots__ = ()


class KeyExchangeAlgorithm(_NamedAlgorithm):
    """Key exchange algorithm name, e.g. curve25519-sha256."""
    __slots__ = ()


class MacAlgorithm(_NamedAlgorithm):
    """Message authentication code algorithm name, e.g. hmac-sha2-256."""
    __slots__ = ()


A = TypeVar("A", bound=_NamedAlgorithm)


@dataclass(frozen=True)
class Subsystem:
    """
    External subsystem definition.

    Attributes:
        name: Subsystem name requested by clients (single token)
        command: Command line sshd runs for the subsystem
    """
    name: str
    command: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", _check_token(self.name, "Subsystem name"))
        command = self.command.strip() if isinstance(self.command, str) else ""
        if not command:
            raise ValueError(f"Subsystem {self.name!r} must have a command")
        object.__setattr__(self, "command", command)

    def __str__(self) -> str:
        return f"{self.name} {self.command}"


@dataclass
class Match:
    """
    Conditional configuration block.

    Directives inside the block apply to connections whose user name
    matches one of `users` and whose address matches one of `addresses`.
    An empty set leaves that criterion out of the condition.
    """
    users: frozenset[str] = field(default_factory=frozenset)
    addresses: frozenset[str] = field(default_factory=frozenset)
    authentication_methods: str | None = None

    def __post_init__(self) -> None:
        self.users = frozenset(_check_token(p, "Match user pattern") for p in self.users)
        self.addresses = frozenset(
            _check_token(p, "Match address pattern") for p in self.addresses
        )

    def applies_to(self, username: str) -> bool:
        """Return True if the block's user criterion admits `username`."""
        return not self.users or username in self.users


@dataclass
class SshdConfig:
    """
    OpenSSH server configuration.

    Scalar options are plain attributes. Collections are owned by the
    configuration: subsystems, accepted environment variables and Match
    blocks accumulate through the add_* methods, while the algorithm
    lists are replaced as a whole through the set_* methods.

    Usage:
        config = SshdConfig(port=2222)
        config.add_subsystem("sftp", "/usr/lib/openssh/sftp-server")
        config.set_ciphers(["aes256-ctr", "aes128-ctr"])
        config.add_match(Match(users={"alice"}, authentication_methods="publickey"))
    """
    port: int = 22
    host_key_file: str | None = None
    challenge_response_authentication: bool = False
    log_level: LogLevel = LogLevel.INFO
    use_pam: bool = True
    use_privilege_separation: bool = True
    protocol: str = "2,1"
    x11_forwarding: bool = False
    print_motd: bool = False

    accepted_environment_variables: list[str] = field(default_factory=list)
    subsystems: list[Subsystem] = field(default_factory=list)
    ciphers: list[Cipher] = field(default_factory=list)
    host_key_algorithms: list[HostKeyAlgorithm] = field(default_factory=list)
    key_exchange_algorithms: list[KeyExchangeAlgorithm] = field(default_factory=list)
    mac_algorithms: list[MacAlgorithm] = field(default_factory=list)
    matches: list[Match] = field(default_factory=list)

    def add_match(self, match: Match) -> Match:
        """Append a Match block and return it."""
        self.matches.append(match)
        return match

    def add_subsystem(self, name: str | Subsystem, command: str | None = None) -> Subsystem:
        """Append a subsystem, given either a Subsystem or its name and command."""
        if isinstance(name, Subsystem):
            subsystem = name
        else:
            subsystem = Subsystem(name, command or "")
        self.subsystems.append(subsystem)
        return subsystem

    def add_accepted_environment_variable(self, pattern: str) -> None:
        """
        Append one AcceptEnv pattern.

        Raises:
            ValueError: If `pattern` is empty or holds more than one token.
        """
        self.accepted_environment_variables.append(_check_token(pattern, "AcceptEnv pattern"))

    def set_ciphers(self, ciphers: Iterable[str | Cipher]) -> None:
        """Replace the Ciphers list."""
        self.ciphers = _wrap(Cipher, ciphers)

    def set_host_key_algorithms(self, algorithms: Iterable[str | HostKeyAlgorithm]) -> None:
        """Replace the HostKeyAlgorithms list."""
        self.host_key_algorithms = _wrap(HostKeyAlgorithm, algorithms)

    def set_key_exchange_algorithms(
        self, algorithms: Iterable[str | KeyExchangeAlgorithm]
    ) -> None:
        """Replace the KexAlgorithms list."""
        self.key_exchange_algorithms = _wrap(KeyExchangeAlgorithm, algorithms)

    def set_mac_algorithms(self, algorithms: Iterable[str | MacAlgorithm]) -> None:
        """Replace the MACs list."""
        self.mac_algorithms = _wrap(MacAlgorithm, algorithms)

    def subsystem(self, name: str) -> Subsystem | None:
        """Return the first subsystem called `name`, if any."""
        for subsystem in self.subsystems:
            if subsystem.name == name:
                return subsystem
        return None


def _wrap(kind: type[A], values: Iterable[str | A]) -> list[A]:
    return [v if isinstance(v, kind) else kind(str(v)) for v in values]
