"""
sshd_config serializer.

Writes an SshdConfig in a fixed directive order so the same model
always renders to the same text, and parsing that text gives the model
back.
"""
from __future__ import annotations

import io
from pathlib import Path
from typing import IO, Final

from nbs_sshd.formatters import (
    format_bool,
    format_int,
    format_list,
    format_log_level,
    format_match_condition,
    format_subsystem,
)
from nbs_sshd.model import Match, SshdConfig

MATCH_INDENT: Final[str] = "    "


def _write_line(writer: IO[str], line: str) -> None:
    writer.write(line + "\n")


def _write_match(writer: IO[str], match: Match) -> None:
    _write_line(writer, format_match_condition(match))
    if match.authentication_methods is not None:
        _write_line(
            writer,
            f"{MATCH_INDENT}AuthenticationMethods {match.authentication_methods}",
        )


def save_to(config: SshdConfig, writer: IO[str]) -> None:
    """
    Write the configuration to a text sink.

    Args:
        config: Configuration to write
        writer: Any object with a write(str) method
    """
    _write_line(writer, f"Protocol {config.protocol}")
    _write_line(writer, f"Port {format_int(config.port)}")
    if config.host_key_file is not None:
        _write_line(writer, f"HostKey {config.host_key_file}")
    _write_line(
        writer,
        f"ChallengeResponseAuthentication "
        f"{format_bool(config.challenge_response_authentication)}",
    )
    _write_line(writer, f"LogLevel {format_log_level(config.log_level)}")
    for subsystem in config.subsystems:
        _write_line(writer, f"Subsystem {format_subsystem(subsystem)}")
    _write_line(writer, f"UsePAM {format_bool(config.use_pam)}")
    _write_line(
        writer,
        f"UsePrivilegeSeparation {format_bool(config.use_privilege_separation)}",
    )
    _write_line(writer, f"X11Forwarding {format_bool(config.x11_forwarding)}")
    _write_line(writer, f"PrintMotd {format_bool(config.print_motd)}")

    for match in config.matches:
        _write_match(writer, match)

    for variable in config.accepted_environment_variables:
        _write_line(writer, f"AcceptEnv {variable}")

    if config.ciphers:
        _write_line(writer, f"Ciphers {format_list(config.ciphers)}")
    if config.host_key_algorithms:
        _write_line(writer, f"HostKeyAlgorithms {format_list(config.host_key_algorithms)}")
    if config.key_exchange_algorithms:
        _write_line(writer, f"KexAlgorithms {format_list(config.key_exchange_algorithms)}")
    if config.mac_algorithms:
        _write_line(writer, f"MACs {format_list(config.mac_algorithms)}")


def serialize(config: SshdConfig) -> str:
    """Render the configuration as sshd_config text."""
    buffer = io.StringIO()
    save_to(config, buffer)
    return buffer.getvalue()


def save_file(config: SshdConfig, path: Path | str, encoding: str = "utf-8") -> None:
    """Write the configuration to a file, replacing its contents."""
    with open(path, "w", encoding=encoding, newline="\n") as f:
        save_to(config, f)
