"""CLI error handling utilities.

This module maps cronline failures to exit codes and readable messages.
"""

from __future__ import annotations

import functools
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, TypeVar

import typer

from cronline.errors import ConfigError, CronParseError, CrontabCommandError

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCode(Enum):
    """Standard CLI error codes."""

    GENERAL_ERROR = 1
    USAGE_ERROR = 2

    # File errors (10-19)
    FILE_NOT_FOUND = 10

    # Validation errors (20-29)
    VALIDATION_FAILED = 20
    INVALID_SCHEDULE = 21

    # Configuration errors (30-39)
    CONFIG_INVALID = 31

    # Crontab program errors (60-69)
    CRONTAB_FAILED = 60


# =============================================================================
# Exception Classes
# =============================================================================


class CLIError(Exception):
    """Base exception for CLI errors.

    Attributes:
        message: Error message
        code: Error code
        hint: Helpful hint for resolution
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.GENERAL_ERROR,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.hint = hint

    def __str__(self) -> str:
        parts = [self.message]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        return "\n".join(parts)


def _translate(error: Exception) -> CLIError | None:
    """Map library errors onto CLI errors."""
    if isinstance(error, CLIError):
        return error
    if isinstance(error, ConfigError):
        return CLIError(str(error), ErrorCode.CONFIG_INVALID, "Check the config file and CRONLINE_* variables.")
    if isinstance(error, CrontabCommandError):
        hint = None
        if error.returncode is None:
            hint = "Set crontab_command or CRONLINE_COMMAND to the crontab program."
        elif "must be privileged" in error.stderr:
            hint = "Editing another user's crontab needs root; try --sudo."
        return CLIError(str(error), ErrorCode.CRONTAB_FAILED, hint)
    if isinstance(error, CronParseError):
        return CLIError(str(error), ErrorCode.INVALID_SCHEDULE)
    return None


# =============================================================================
# Decorator
# =============================================================================


F = TypeVar("F", bound=Callable[..., Any])


def error_boundary(func: F) -> F:
    """Convert exceptions raised by a command into exit codes."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except Exception as e:
            error = _translate(e)
            if error is None:
                logger.exception("Unexpected error")
                typer.echo(typer.style(f"Error: {e}", fg="red"), err=True)
                raise typer.Exit(ErrorCode.GENERAL_ERROR.value)
            typer.echo(typer.style(f"Error: {error.message}", fg="red"), err=True)
            if error.hint:
                typer.echo(typer.style(f"Hint: {error.hint}", fg="yellow"), err=True)
            raise typer.Exit(error.code.value)

    return wrapper  # type: ignore


# =============================================================================
# Validation Helpers
# =============================================================================


def require_file(path: Path, description: str = "File") -> Path:
    """Require that a file exists.

    Raises:
        CLIError: If the file doesn't exist
    """
    if not path.exists():
        raise CLIError(
            f"{description} not found: {path}",
            ErrorCode.FILE_NOT_FOUND,
            "Check that the file exists and the path is correct.",
        )
    return path
