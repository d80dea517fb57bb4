"""Time fields of a crontab line.

A crontab schedule has five positional fields. Each one is described by a
``FieldDescriptor`` (bounds and symbolic names) and holds an ordered list of
parts: plain integers and ``Range`` terms. Parts keep their insertion order
because that order is what gets written back.

Syntax per field:
    Field         Values            Term forms
    ─────────────────────────────────────────────────
    Minute        0-59              *  N  N-M  */S  N-M/S
    Hour          0-23              *  N  N-M  */S  N-M/S
    Day of Month  1-31              *  N  N-M  */S  N-M/S
    Month         1-12 or JAN-DEC   *  N  N-M  */S  N-M/S
    Day of Week   0-7 or SUN-SAT    *  N  N-M  */S  N-M/S

Fields are mutable and owned by their job. Accessors hand out the live
object, so edits made through it show up in the job's next render.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from cronline.errors import (
    InvalidRangeValue,
    ParseResult,
    UnknownFieldPart,
    UnknownRangeValue,
)

# ASCII only; str.isdigit() also accepts superscripts and other scripts.
DIGITS = re.compile(r"[0-9]+")


# =============================================================================
# Field Descriptors
# =============================================================================


class FieldType(Enum):
    """Positions of the five crontab time fields."""

    MINUTE = 0
    HOUR = 1
    DAY_OF_MONTH = 2
    MONTH = 3
    DAY_OF_WEEK = 4


@dataclass(frozen=True)
class FieldDescriptor:
    """Static metadata for one time field."""

    name: str
    min_value: int
    max_value: int
    names: dict[str, int] = field(default_factory=dict)

    def resolve(self, token: str) -> int | None:
        """Resolve a symbolic name or decimal integer to its value.

        Names are matched case-insensitively. Returns None when the token is
        neither a known name nor an integer within the field's bounds.
        """
        lowered = token.strip().lower()
        if lowered in self.names:
            return self.names[lowered]
        if not DIGITS.fullmatch(lowered):
            return None
        value = int(lowered)
        if value < self.min_value or value > self.max_value:
            return None
        return value


MONTH_NAMES: dict[str, int] = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4,
    "may": 5, "jun": 6, "jul": 7, "aug": 8,
    "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

# 7 is also Sunday, but only numerically; "sun" resolves to 0.
WEEKDAY_NAMES: dict[str, int] = {
    "sun": 0, "mon": 1, "tue": 2, "wed": 3,
    "thu": 4, "fri": 5, "sat": 6,
}

FIELD_DESCRIPTORS: dict[FieldType, FieldDescriptor] = {
    FieldType.MINUTE: FieldDescriptor("Minute", 0, 59),
    FieldType.HOUR: FieldDescriptor("Hour", 0, 23),
    FieldType.DAY_OF_MONTH: FieldDescriptor("Day of Month", 1, 31),
    FieldType.MONTH: FieldDescriptor("Month", 1, 12, MONTH_NAMES),
    FieldType.DAY_OF_WEEK: FieldDescriptor("Day of Week", 0, 7, WEEKDAY_NAMES),
}


# =============================================================================
# Range
# =============================================================================


class Range:
    """A ``from-to[/step]`` or ``*[/step]`` term within one field.

    Example:
        >>> hours = FIELD_DESCRIPTORS[FieldType.HOUR]
        >>> Range.parse("9-17/2", hours).unwrap().render()
        '9-17/2'
        >>> Range.parse("0-23", hours).unwrap().render()
        '*'
    """

    __slots__ = ("_descriptor", "start", "end", "step")

    def __init__(
        self,
        descriptor: FieldDescriptor,
        start: int | None = None,
        end: int | None = None,
        step: int = 1,
    ) -> None:
        """Initialize a range; missing bounds default to the field's limits."""
        self._descriptor = descriptor
        self.start = descriptor.min_value if start is None else start
        self.end = descriptor.max_value if end is None else end
        self.step = step

    @classmethod
    def parse(cls, term: str, descriptor: FieldDescriptor) -> ParseResult["Range"]:
        """Parse a range term such as ``*/15``, ``9-17`` or ``jan-mar/2``."""
        base, slash, step_token = term.partition("/")
        step = 1
        if slash:
            if not DIGITS.fullmatch(step_token) or int(step_token) < 1:
                return ParseResult.failure(InvalidRangeValue(
                    f"Invalid step value {step_token} for {descriptor.name}",
                    step_token,
                    descriptor.name,
                ))
            step = int(step_token)

        if base == "*":
            return ParseResult.success(cls(descriptor, step=step))

        if "-" not in base:
            return ParseResult.failure(UnknownRangeValue(
                f"Unknown time range value {base} for {descriptor.name}",
                base,
                descriptor.name,
            ))

        tokens = base.split("-")
        if len(tokens) != 2:
            return ParseResult.failure(InvalidRangeValue(
                f"Invalid range {base} for {descriptor.name}",
                base,
                descriptor.name,
            ))

        bounds = []
        for token in tokens:
            value = descriptor.resolve(token)
            if value is None:
                return ParseResult.failure(InvalidRangeValue(
                    f"Invalid range value {token} for {descriptor.name}",
                    token,
                    descriptor.name,
                ))
            bounds.append(value)

        start, end = bounds
        if start > end:
            return ParseResult.failure(InvalidRangeValue(
                f"Range {base} runs backwards for {descriptor.name}",
                base,
                descriptor.name,
            ))
        return ParseResult.success(cls(descriptor, start, end, step))

    @property
    def descriptor(self) -> FieldDescriptor:
        return self._descriptor

    @property
    def is_full(self) -> bool:
        """True when the range spans the whole field."""
        return (
            self.start == self._descriptor.min_value
            and self.end == self._descriptor.max_value
        )

    def every(self, n: int) -> "Range":
        """Set the step, e.g. ``hour.between(9, 17).every(2)``."""
        self.step = int(n)
        return self

    def render(self) -> str:
        value = "*" if self.is_full else f"{self.start}-{self.end}"
        if self.step != 1:
            value += f"/{self.step}"
        return value

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Range({self._descriptor.name!r}, {self.render()!r})"


# =============================================================================
# Field
# =============================================================================


Part = Union[int, Range]


class Field:
    """One of the five time slots of a job.

    Example:
        >>> hour = Field(FIELD_DESCRIPTORS[FieldType.HOUR])
        >>> hour.on(0, 12)
        >>> hour.render()
        '0,12'
    """

    __slots__ = ("_descriptor", "_parts")

    def __init__(self, descriptor: FieldDescriptor, parts: list[Part] | None = None) -> None:
        self._descriptor = descriptor
        self._parts: list[Part] = list(parts or [])

    @classmethod
    def parse(cls, descriptor: FieldDescriptor, value: str | None = None) -> ParseResult["Field"]:
        """Parse a comma-separated field value; empty means ``*``."""
        if not value:
            return ParseResult.success(cls(descriptor))

        parts: list[Part] = []
        for token in value.split(","):
            if "/" in token or "-" in token or token == "*":
                result = Range.parse(token, descriptor)
                if not result.ok:
                    return ParseResult.failure(result.error)  # type: ignore[arg-type]
                parts.append(result.unwrap())
                continue

            literal = descriptor.resolve(token)
            if literal is None:
                return ParseResult.failure(UnknownFieldPart(
                    f"Unknown cron time part for {descriptor.name}: {token}",
                    token,
                    descriptor.name,
                ))
            parts.append(literal)

        return ParseResult.success(cls(descriptor, parts))

    @property
    def descriptor(self) -> FieldDescriptor:
        return self._descriptor

    @property
    def min_value(self) -> int:
        return self._descriptor.min_value

    @property
    def max_value(self) -> int:
        return self._descriptor.max_value

    @property
    def parts(self) -> list[Part]:
        """Copy of the part list, in rendering order."""
        return list(self._parts)

    def every(self, n: int) -> Range:
        """Replace all parts with ``*/n`` and return the new range."""
        part = Range(self._descriptor, step=int(n))
        self._parts = [part]
        return part

    def on(self, *values: int) -> None:
        """Append literal values. Bounds are not checked."""
        self._parts.extend(values)

    at = on

    def between(self, start: int | str, end: int | str) -> Range:
        """Append a ``start-end`` range and return it for chaining.

        Raises:
            InvalidRangeValue: If a bound is outside the field.
        """
        part = Range.parse(f"{start}-{end}", self._descriptor).unwrap()
        self._parts.append(part)
        return part

    def clear(self) -> None:
        """Drop every part; the field then renders as ``*``."""
        self._parts = []

    def render(self) -> str:
        return ",".join(str(part) for part in self._parts) or "*"

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Field({self._descriptor.name!r}, {self.render()!r})"
