"""cronline - parse, edit and write crontabs without losing a line.

Features:
    - Five-field schedules with ranges, steps, lists and month/weekday names
    - ``@reboot``, ``@hourly``, ``@daily``, ``@weekly``, ``@monthly``,
      ``@yearly``/``@annually`` and ``@midnight``
    - Inline ``#`` comments on job lines
    - Lossless tables: comments, blanks and unparsable lines are kept in place
    - Queries, creation, removal, reset and diffs on a loaded table
    - Backends for the system ``crontab`` program, files and memory

Usage:
    >>> from cronline import Table
    >>>
    >>> table = Table("0 8-17 * * 1-5 /bin/echo hi #greet\\n")
    >>> job = table.jobs({"comment": "greet"})[0]
    >>> job.hour.between(9, 17).every(2)
    >>> job = table.create("ls -l", "@daily")
    >>> print(table.render())
"""

from cronline.backends import (
    CrontabBackend,
    FileCrontab,
    MemoryCrontab,
    SystemCrontab,
    load_table,
    save_table,
)
from cronline.config import CronlineConfig, load_config
from cronline.errors import (
    ConfigError,
    CronlineError,
    CronParseError,
    CrontabCommandError,
    InvalidFilterSchema,
    InvalidRangeValue,
    ParseResult,
    UnknownFieldPart,
    UnknownRangeValue,
)
from cronline.fields import (
    FIELD_DESCRIPTORS,
    Field,
    FieldDescriptor,
    FieldType,
    Range,
)
from cronline.job import Command, Comment, Job, parse_schedule
from cronline.specials import SPECIALS, expand_special, special_for
from cronline.table import Table

__version__ = "0.1.0"

__all__ = [
    # Fields
    "FieldType",
    "FieldDescriptor",
    "FIELD_DESCRIPTORS",
    "Range",
    "Field",
    # Jobs
    "Command",
    "Comment",
    "Job",
    "parse_schedule",
    "SPECIALS",
    "expand_special",
    "special_for",
    # Table
    "Table",
    # Backends
    "CrontabBackend",
    "SystemCrontab",
    "FileCrontab",
    "MemoryCrontab",
    "load_table",
    "save_table",
    # Config
    "CronlineConfig",
    "load_config",
    # Errors
    "CronlineError",
    "CronParseError",
    "InvalidRangeValue",
    "UnknownRangeValue",
    "UnknownFieldPart",
    "InvalidFilterSchema",
    "CrontabCommandError",
    "ConfigError",
    "ParseResult",
]
