"""Exceptions and parse results for cronline.

Parsing a crontab never unwinds through the table: each parse step returns
a ``ParseResult`` carrying either the parsed value or the error that
explains why the input was rejected. Callers decide whether to demote,
discard or re-raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


# =============================================================================
# Exceptions
# =============================================================================


class CronlineError(Exception):
    """Base class for all cronline errors."""


class CronParseError(CronlineError, ValueError):
    """Raised (or carried) when crontab text cannot be parsed.

    Attributes:
        token: The offending token, if known.
        field: Name of the time field being parsed, if any.
    """

    def __init__(self, message: str, token: str = "", field: str = "") -> None:
        self.token = token
        self.field = field
        super().__init__(message)


class InvalidRangeValue(CronParseError):
    """A range bound or step is not a valid value for its field."""


class UnknownRangeValue(CronParseError):
    """A term handed to the range parser is not a range at all."""


class UnknownFieldPart(CronParseError):
    """A comma-separated field term is neither a name nor an integer."""


class InvalidFilterSchema(CronlineError):
    """A job query names a key that cannot be matched."""

    def __init__(self, keys: list[str]) -> None:
        self.keys = keys
        super().__init__(f"Unsupported query keys: {', '.join(keys)}")


class CrontabCommandError(CronlineError):
    """The crontab program failed to list or install a table."""

    def __init__(
        self,
        message: str,
        args: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.argv = list(args or [])
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class ConfigError(CronlineError):
    """Configuration could not be loaded or is invalid."""


# =============================================================================
# Parse Result
# =============================================================================


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Outcome of a single parse step: a value or an error, never both."""

    value: T | None = None
    error: CronParseError | None = None

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: CronParseError) -> "ParseResult[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the parsed value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
