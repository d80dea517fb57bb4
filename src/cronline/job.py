"""Crontab jobs: one schedulable line.

A job is either parsed from a crontab line or built from a command string.
Parsing decides validity once; a line that does not parse yields an invalid
job that remembers the raw text so it can be written back unchanged.

Line grammar, tried in order:
    1. ``<min> <hour> <dom> <month> <dow> <command>[ #<comment>]``
    2. ``@<name> <command>[ #<comment>]`` where ``name`` is a special
       schedule, tried only when no ``#`` comes before the first ``@``.

Example:
    >>> job = Job.parse("0 8-17 * * 1-5 /bin/echo hi #greet")
    >>> job.hour.render(), job.command, job.comment
    ('8-17', '/bin/echo hi', 'greet')
    >>> Job.parse("@daily backup.sh").render()
    '@daily backup.sh'
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Sequence, Union

from cronline.errors import CronParseError, ParseResult
from cronline.fields import FIELD_DESCRIPTORS, Field, FieldType
from cronline.specials import REBOOT, SPECIALS, special_for

logger = logging.getLogger(__name__)

ITEM_PATTERN = re.compile(
    r"^\s*([^@#\s]+)\s+([^@#\s]+)\s+([^@#\s]+)\s+([^@#\s]+)\s+([^@#\s]+)"
    r"\s+([^#\n]*?)(\s+#\s*([^\n]*)|$)"
)
SPECIAL_PATTERN = re.compile(r"^\s*@(\w+)\s([^#\n]*?)(\s+#\s*([^\n]*)|$)")

MatchPattern = Union[str, re.Pattern]


# =============================================================================
# Command and Comment
# =============================================================================


@dataclass(frozen=True)
class TextValue:
    """Immutable text with substring or regex matching."""

    text: str = ""

    def match(self, pattern: MatchPattern) -> bool:
        """Substring test for strings, ``search`` for compiled patterns."""
        if isinstance(pattern, re.Pattern):
            return pattern.search(self.text) is not None
        if isinstance(pattern, str):
            return pattern in self.text
        return False

    def __str__(self) -> str:
        return self.text


class Command(TextValue):
    """The executable part of a crontab line."""


class Comment(TextValue):
    """The inline ``#`` comment of a crontab line (empty if none)."""


# =============================================================================
# Schedule Parsing
# =============================================================================


@dataclass
class Schedule:
    """A parsed schedule: five fields, or the reboot marker."""

    fields: list[Field]
    special: str | None = None


def _blank_fields() -> list[Field]:
    return [Field(FIELD_DESCRIPTORS[field_type]) for field_type in FieldType]


def _parse_fields(tokens: Sequence[str]) -> ParseResult[list[Field]]:
    fields = []
    for field_type, token in zip(FieldType, tokens):
        result = Field.parse(FIELD_DESCRIPTORS[field_type], token)
        if not result.ok:
            return ParseResult.failure(result.error)  # type: ignore[arg-type]
        fields.append(result.unwrap())
    return ParseResult.success(fields)


def parse_schedule(schedule: str) -> ParseResult[Schedule]:
    """Parse a five-field schedule or an ``@name`` special."""
    text = schedule.strip()

    if text.startswith("@"):
        expansion = SPECIALS.get(text[1:])
        if expansion is None:
            return ParseResult.failure(CronParseError(f"Unknown special schedule {text}", text))
        if expansion == REBOOT:
            return ParseResult.success(Schedule(_blank_fields(), REBOOT))
        text = expansion

    tokens = text.split()
    if len(tokens) != 5:
        return ParseResult.failure(CronParseError(
            f"Invalid number of fields: {len(tokens)}. Expected 5 fields.",
            schedule,
        ))

    fields = _parse_fields(tokens)
    if not fields.ok:
        return ParseResult.failure(fields.error)  # type: ignore[arg-type]
    return ParseResult.success(Schedule(fields.unwrap()))


# =============================================================================
# Job
# =============================================================================


class Job:
    """One crontab entry: a schedule, a command and an optional comment.

    Args:
        line: A crontab line to parse.
        command: Command for a new job when no line is given. The schedule
            then defaults to every minute.
        comment: Comment for a new job.

    Raises:
        ValueError: If neither a line nor a command is given.
    """

    __slots__ = ("_fields", "_special", "_command", "_comment", "_valid", "_raw")

    def __init__(
        self,
        line: str | None = None,
        command: str | None = None,
        comment: str | None = None,
    ) -> None:
        self._fields = _blank_fields()
        self._special: str | None = None
        self._command = Command()
        self._comment = Comment()
        self._valid = False
        self._raw: str | None = None

        if line is not None:
            self._parse_line(line)
        elif command:
            self._command = Command(str(command))
            self._comment = Comment("" if comment is None else str(comment))
            self._valid = True
        else:
            raise ValueError("Expected either a crontab line or a command string")

    @classmethod
    def parse(cls, line: str) -> "Job":
        """Parse a crontab line. Check ``is_valid`` on the result."""
        return cls(line=line)

    def _parse_line(self, line: str) -> None:
        match = ITEM_PATTERN.match(line)
        if match:
            result = _parse_fields(match.groups()[:5])
            if result.ok:
                self._fields = result.unwrap()
                self._set_text(match.group(6), match.group(8))
                return
            logger.debug("Rejected crontab line %r: %s", line, result.error)
            self._raw = line
            return

        hash_at = line.find("#")
        if hash_at == -1 or line.find("@") < hash_at:
            match = SPECIAL_PATTERN.match(line)
            if match and match.group(1) in SPECIALS:
                schedule = parse_schedule(f"@{match.group(1)}").unwrap()
                self._fields = schedule.fields
                self._special = schedule.special
                self._set_text(match.group(2), match.group(4))
                return

        self._raw = line

    def _set_text(self, command: str, comment: str | None) -> None:
        self._command = Command(command)
        self._comment = Comment(comment or "")
        self._valid = True

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def is_valid(self) -> bool:
        """Whether the job parsed; decided at construction only."""
        return self._valid

    @property
    def special(self) -> str | None:
        """The reboot marker, if the job runs at startup."""
        return self._special

    @property
    def minute(self) -> Field:
        return self._fields[FieldType.MINUTE.value]

    @property
    def hour(self) -> Field:
        return self._fields[FieldType.HOUR.value]

    @property
    def dom(self) -> Field:
        return self._fields[FieldType.DAY_OF_MONTH.value]

    @property
    def month(self) -> Field:
        return self._fields[FieldType.MONTH.value]

    @property
    def dow(self) -> Field:
        return self._fields[FieldType.DAY_OF_WEEK.value]

    @property
    def fields(self) -> tuple[Field, ...]:
        return tuple(self._fields)

    @property
    def command(self) -> str:
        return self._command.text

    @command.setter
    def command(self, value: object) -> None:
        self._command = Command(str(value))

    @property
    def comment(self) -> str:
        return self._comment.text

    @comment.setter
    def comment(self, value: object) -> None:
        self._comment = Comment(str(value))

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        """Reset the schedule to every minute; command and comment stay."""
        self._special = None
        for field in self._fields:
            field.clear()

    def every_reboot(self) -> None:
        """Run the job at startup instead of on a time pattern."""
        self._special = REBOOT

    def set_schedule(self, schedule: str) -> None:
        """Replace the schedule with a five-field string or ``@name``.

        Raises:
            CronParseError: If the schedule does not parse.
        """
        parsed = parse_schedule(schedule).unwrap()
        self._fields = parsed.fields
        self._special = parsed.special

    # -------------------------------------------------------------------------
    # Matching and rendering
    # -------------------------------------------------------------------------

    def matches_command(self, pattern: MatchPattern) -> bool:
        return self._command.match(pattern)

    def matches_comment(self, pattern: MatchPattern) -> bool:
        return self._comment.match(pattern)

    @property
    def schedule(self) -> str:
        """The time part as it will be written, specials folded back in."""
        if self._special:
            return self._special
        fields = " ".join(field.render() for field in self._fields)
        return special_for(fields) or fields

    def render(self) -> str:
        """Render the job as a crontab line.

        An invalid job renders the line it was parsed from.
        """
        if not self._valid:
            return self._raw or ""

        result = f"{self.schedule} {self._command}"
        if self._comment.text:
            result += f" #{self._comment}"
        return result

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        state = "valid" if self._valid else "invalid"
        return f"Job({self.render()!r}, {state})"
