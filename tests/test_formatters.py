"""
Tests for directive value formatters.

Each formatter has one canonical output and a strict parser.
"""
import pytest

from nbs_sshd.formatters import (
    format_bool,
    format_int,
    format_list,
    format_log_level,
    format_match_condition,
    format_subsystem,
    parse_bool,
    parse_int,
    parse_list,
    parse_log_level,
    parse_subsystem,
)
from nbs_sshd.model import Cipher, LogLevel, MacAlgorithm, Match, Subsystem


class TestBooleanFormatter:
    """Tests for yes/no conversion."""

    def test_format(self) -> None:
        """True and False render as yes and no."""
        assert format_bool(True) == "yes"
        assert format_bool(False) == "no"

    @pytest.mark.parametrize("value", [True, False])
    def test_parse_inverts_format(self, value: bool) -> None:
        """Parsing the rendered text gives back the boolean."""
        assert parse_bool(format_bool(value)) is value

    @pytest.mark.parametrize("text", ["Yes", "YES", "true", "on", "", " yes"])
    def test_parse_rejects_other_tokens(self, text: str) -> None:
        """Only the exact lowercase tokens are booleans."""
        with pytest.raises(ValueError, match="cannot be mapped to a boolean"):
            parse_bool(text)


class TestIntegerFormatter:
    """Tests for decimal integer conversion."""

    def test_format(self) -> None:
        """Integers render without separators."""
        assert format_int(22) == "22"
        assert format_int(1000000) == "1000000"
        assert format_int(-1) == "-1"

    def test_parse(self) -> None:
        """Signed decimals parse; surrounding whitespace is ignored."""
        assert parse_int("2222") == 2222
        assert parse_int("+22") == 22
        assert parse_int("-5") == -5
        assert parse_int(" 22 ") == 22
        assert parse_int("007") == 7

    @pytest.mark.parametrize("text", ["", "1,000", "1_000", "1e3", "22.", "abc", "²"])
    def test_parse_rejects_non_decimal(self, text: str) -> None:
        """Anything but ASCII digits with an optional sign is rejected."""
        with pytest.raises(ValueError, match="not a decimal integer"):
            parse_int(text)


class TestLogLevelFormatter:
    """Tests for log level conversion."""

    @pytest.mark.parametrize("level", list(LogLevel))
    def test_format_is_canonical_name(self, level: LogLevel) -> None:
        """Each level renders as its mixed-case name."""
        assert format_log_level(level) == level.value

    @pytest.mark.parametrize("text", ["debug3", "DEBUG3", "Debug3", "dEbUg3"])
    def test_parse_any_case(self, text: str) -> None:
        """Parsing ignores case."""
        assert parse_log_level(text) is LogLevel.DEBUG3

    def test_parse_unknown(self) -> None:
        """Unknown names list the valid choices."""
        with pytest.raises(ValueError, match="Quiet, Fatal"):
            parse_log_level("Trace")


class TestListFormatter:
    """Tests for comma-separated lists."""

    def test_format(self) -> None:
        """Items are joined with bare commas."""
        assert format_list([Cipher("aes128-ctr"), Cipher("aes256-ctr")]) == "aes128-ctr,aes256-ctr"
        assert format_list([]) == ""

    def test_parse_builds_items(self) -> None:
        """Each element becomes one item, trimmed and in order."""
        macs = parse_list(" hmac-sha2-512 ,hmac-sha1", MacAlgorithm)
        assert macs == [MacAlgorithm("hmac-sha2-512"), MacAlgorithm("hmac-sha1")]
        assert all(isinstance(m, MacAlgorithm) for m in macs)

    def test_parse_rejects_empty_entry(self) -> None:
        """Trailing or doubled commas are errors."""
        with pytest.raises(ValueError, match="empty list entry"):
            parse_list("a,", Cipher)


class TestSubsystemFormatter:
    """Tests for 'name command' values."""

    def test_format(self) -> None:
        """Name and command are joined by one space."""
        assert format_subsystem(Subsystem("sftp", "internal-sftp")) == "sftp internal-sftp"

    def test_parse_keeps_command_spaces(self) -> None:
        """Everything after the first whitespace run is the command."""
        subsystem = parse_subsystem("sftp   /usr/lib/sftp-server -l VERBOSE")
        assert subsystem.name == "sftp"
        assert subsystem.command == "/usr/lib/sftp-server -l VERBOSE"

    def test_parse_requires_command(self) -> None:
        """A name alone is not a subsystem."""
        with pytest.raises(ValueError, match="followed by a command"):
            parse_subsystem("sftp")


class TestMatchConditionFormatter:
    """Tests for Match condition lines."""

    def test_user_and_address(self) -> None:
        """Both clauses render with sorted patterns."""
        match = Match(users={"bob", "alice"}, addresses={"10.0.0.0/8"})
        assert format_match_condition(match) == "Match User alice,bob Address 10.0.0.0/8"

    def test_omits_empty_clauses(self) -> None:
        """A clause with no patterns is left out."""
        assert format_match_condition(Match(users={"sshnet"})) == "Match User sshnet"
        assert format_match_condition(Match(addresses={"::1"})) == "Match Address ::1"
        assert format_match_condition(Match()) == "Match"
