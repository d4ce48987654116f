"""nbs-sshd: typed model, parser and serializer for sshd_config files."""

__version__ = "0.1.0"

from nbs_sshd.errors import (
    ErrorContext,
    FormatError,
    InvalidValueError,
    MalformedLineError,
    MalformedMatchError,
    Scope,
    SshdConfigError,
    UnknownDirectiveError,
)
from nbs_sshd.model import (
    Cipher,
    HostKeyAlgorithm,
    KeyExchangeAlgorithm,
    LogLevel,
    MacAlgorithm,
    Match,
    SshdConfig,
    Subsystem,
)
from nbs_sshd.parser import SshdConfigParser, load_file, load_from, loads, parse
from nbs_sshd.serializer import save_file, save_to, serialize

__all__ = [
    # Model
    "SshdConfig",
    "Match",
    "Subsystem",
    "LogLevel",
    "Cipher",
    "HostKeyAlgorithm",
    "KeyExchangeAlgorithm",
    "MacAlgorithm",
    # Parser
    "SshdConfigParser",
    "parse",
    "loads",
    "load_from",
    "load_file",
    # Serializer
    "serialize",
    "save_to",
    "save_file",
    # Errors
    "SshdConfigError",
    "FormatError",
    "MalformedLineError",
    "MalformedMatchError",
    "UnknownDirectiveError",
    "InvalidValueError",
    "ErrorContext",
    "Scope",
]
