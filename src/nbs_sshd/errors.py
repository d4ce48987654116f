"""
sshd_config error taxonomy with structured data for logging.

Provides specific error types for the ways a configuration file can be
rejected, enabling:
- Programmatic error handling with specific exception types
- Rich context (directive, scope, line) for diagnosing a bad file
- Structured data for JSON output from the CLI

Error hierarchy:
- SshdConfigError (base)
  - FormatError
    - MalformedLineError (line cannot be split into name and value)
    - MalformedMatchError (Match condition does not fit the grammar)
    - UnknownDirectiveError (directive not recognised in its scope)
    - InvalidValueError (bad boolean, integer, log level, list or subsystem)
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any


class Scope(str, Enum):
    """Directive context a line was parsed in."""
    GLOBAL = "global"
    MATCH = "Match"


@dataclass
class ErrorContext:
    """
    Structured context for configuration errors.

    Carries everything needed to point at the offending line.
    """
    directive: str | None = None
    scope: Scope | None = None
    line_number: int | None = None
    line: str | None = None
    value: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate invariants after initialisation."""
        if self.line_number is not None:
            assert isinstance(self.line_number, int) and self.line_number >= 1, (
                f"line_number must be a positive integer, got {self.line_number}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        result: dict[str, Any] = {}
        for key, value in asdict(self).items():
            if value is None:
                continue
            if key == "extra":
                field_names = {f.name for f in fields(self)} - {"extra"}
                collisions = field_names & value.keys()
                assert not collisions, (
                    f"Extra keys collision with dataclass field names: "
                    f"{collisions}. Use distinct key names in extra."
                )
                result.update(value)
            elif isinstance(value, Scope):
                result[key] = value.value
            else:
                result[key] = value
        return result


class SshdConfigError(Exception):
    """
    Base exception for all sshd_config errors.

    All errors carry structured context for logging and debugging.
    """

    def __init__(self, message: str, context: ErrorContext | None = None) -> None:
        assert isinstance(message, str) and message.strip(), (
            f"SshdConfigError message must be a non-empty string, "
            f"got {message!r}"
        )
        super().__init__(message)
        self.context = context or ErrorContext()

    @property
    def error_type(self) -> str:
        """Return the error type name for logging."""
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON output."""
        return {
            "error_type": self.error_type,
            "message": str(self),
            **self.context.to_dict(),
        }


# ---------------------------------------------------------------------------
# Format Errors
# ---------------------------------------------------------------------------

class FormatError(SshdConfigError):
    """Base class for errors raised while reading configuration text."""
    pass


class MalformedLineError(FormatError):
    """Line could not be split into a directive name and a value."""
    pass


class MalformedMatchError(FormatError):
    """
    Match condition is not understood.

    This is raised when:
    - The line uses criteria other than User and Address
    - Text follows the recognised criteria
    - A pattern list contains an empty entry
    """
    pass


class UnknownDirectiveError(FormatError):
    """
    Directive name is not recognised in the scope it was found in.

    Unknown directives are never skipped so that drift between the model
    and the real sshd grammar shows up as a failure.
    """

    def __init__(
        self,
        directive: str,
        scope: Scope,
        context: ErrorContext | None = None,
    ) -> None:
        if context is None:
            context = ErrorContext()
        context.directive = directive
        context.scope = scope
        label = "Global" if scope is Scope.GLOBAL else "Match"
        super().__init__(f"{label} option '{directive}' is not implemented.", context)


class InvalidValueError(FormatError):
    """
    Directive value could not be converted to its typed form.

    This is raised when:
    - A boolean is anything other than 'yes' or 'no'
    - An integer is not a plain decimal number
    - A log level names no known level
    - A list or subsystem value contains an empty entry
    - File content is not valid in the requested encoding
    """

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        if context is None:
            context = ErrorContext()
        if reason:
            context.extra["reason"] = reason
        super().__init__(message, context)
