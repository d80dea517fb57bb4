"""Ordered crontab tables.

A ``Table`` keeps every line of a crontab in its original order. Lines that
parse become ``Job`` objects; everything else (comments, blank lines,
variable assignments, lines that do not parse) is kept as raw text so that
loading and rendering a table never loses content.

Architecture:
    raw text
         |
         v
    Table.load ---> lines: [Job | str, ...]   (render order)
         |          jobs:  [Job, ...]         (valid jobs, same order)
         |          snapshot                  (for reset and diff)
         v
    jobs() / create() / remove() / reset()
         |
         v
    Table.render ---> raw text

Usage:
    >>> table = Table("# nightly\\n0 2 * * * backup.sh #db\\n")
    >>> [job.command for job in table.jobs({"comment": "db"})]
    ['backup.sh']
    >>> job = table.create("ls -l", "*/5 * * * *")
    >>> table.remove(job)
    True
"""

from __future__ import annotations

import difflib
import logging
import re
from datetime import datetime
from typing import Callable, Iterable, Mapping, Union

from cronline.errors import InvalidFilterSchema
from cronline.job import Job, MatchPattern, parse_schedule

logger = logging.getLogger(__name__)

Line = Union[Job, str]
Query = Mapping[str, MatchPattern]

# Queryable projections of a job, by filter key.
QUERY_MATCHERS: dict[str, Callable[[Job, MatchPattern], bool]] = {
    "command": Job.matches_command,
    "comment": Job.matches_comment,
}


def _validate_query(query: Query) -> None:
    unknown = sorted(key for key in query if key not in QUERY_MATCHERS)
    if unknown:
        raise InvalidFilterSchema(unknown)
    bad = sorted(
        key for key, value in query.items()
        if not isinstance(value, (str, re.Pattern))
    )
    if bad:
        raise InvalidFilterSchema(bad)


def _trim_trailing_blank(lines: list[Line]) -> None:
    while lines and str(lines[-1]).strip() == "":
        lines.pop()


class Table:
    """A crontab as an ordered mix of jobs and raw lines.

    A table is owned by one caller at a time; it does no locking.

    Args:
        text: Crontab text to load, if any.
    """

    def __init__(self, text: str = "") -> None:
        self._lines: list[Line] = []
        self._jobs: list[Job] = []
        self._backup_lines: list[Line] = []
        self._backup_jobs: list[Job] = []
        self._backup_render = ""
        self.load(text)

    # -------------------------------------------------------------------------
    # Loading and rendering
    # -------------------------------------------------------------------------

    def load(self, text: str) -> "Table":
        """Replace the table's content with parsed ``text``.

        Every line is kept: valid jobs are indexed, the rest stays raw.
        Trailing blank lines are dropped. The result becomes the snapshot
        that ``reset`` and ``diff`` compare against.
        """
        lines: list[Line] = []
        jobs: list[Job] = []

        for line in text.split("\n"):
            job = Job.parse(line)
            if job.is_valid:
                jobs.append(job)
                lines.append(job)
            else:
                lines.append(line)

        _trim_trailing_blank(lines)

        self._lines = lines
        self._jobs = jobs
        self._backup_lines = list(lines)
        self._backup_jobs = list(jobs)
        self._backup_render = self.render()

        logger.info("Loaded crontab: %d lines, %d jobs", len(lines), len(jobs))
        return self

    def render(self) -> str:
        """Render the table as crontab text with one trailing newline."""
        tokens = []
        for line in self._lines:
            if isinstance(line, Job) and not line.is_valid:
                tokens.append(f"# {line.render()}")
            else:
                tokens.append(str(line))
        return "\n".join(tokens).strip() + "\n"

    def __str__(self) -> str:
        return self.render()

    @property
    def lines(self) -> list[Line]:
        """Copy of all lines, jobs and raw text, in render order."""
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._jobs)

    def __iter__(self):
        return iter(list(self._jobs))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def jobs(self, query: Query | None = None) -> list[Job]:
        """Return the jobs matching every key of ``query``.

        Recognised keys are ``command`` and ``comment``; values are strings
        (substring match) or compiled patterns (``search``). A query with
        any other key, or a value of another type, matches nothing.
        """
        if query is None:
            return list(self._jobs)

        try:
            _validate_query(query)
        except InvalidFilterSchema as e:
            logger.debug("Rejected job query %r: %s", dict(query), e)
            return []

        return [
            job for job in self._jobs
            if all(QUERY_MATCHERS[key](job, pattern) for key, pattern in query.items())
        ]

    def find(self, **criteria: MatchPattern) -> list[Job]:
        """Keyword form of ``jobs``: ``table.find(command="backup")``."""
        return self.jobs(criteria)

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def create(
        self,
        command: str,
        when: str | datetime | None = None,
        comment: str | None = None,
    ) -> Job | None:
        """Append a new job and return it.

        Args:
            command: Command to run.
            when: A five-field schedule or ``@name``; or a datetime whose
                minute, hour, day and month become literal fields; or None
                for every minute.
            comment: Inline comment.

        Returns:
            The new job, or None if the command is empty or the schedule
            does not parse.
        """
        if not command:
            logger.debug("Refusing to create a job without a command")
            return None

        job = Job(command=command, comment=comment)

        if isinstance(when, datetime):
            job.minute.on(when.minute)
            job.hour.on(when.hour)
            job.dom.on(when.day)
            job.month.on(when.month)
        elif when is not None:
            schedule = parse_schedule(str(when))
            if not schedule.ok:
                logger.debug("Rejected schedule %r: %s", when, schedule.error)
                return None
            job.set_schedule(str(when))

        self._jobs.append(job)
        self._lines.append(job)
        logger.info("Created job %r", job.render())
        return job

    def remove(self, target: Job | Iterable[Job] | Query) -> bool:
        """Remove jobs by identity.

        Args:
            target: A job, an iterable of jobs, or a query as accepted by
                ``jobs``.

        Returns:
            True if at least one job was removed.
        """
        if isinstance(target, Job):
            doomed = [target]
        elif isinstance(target, Mapping):
            doomed = self.jobs(target)
        else:
            doomed = list(target)

        doomed_ids = {id(job) for job in doomed}
        before = len(self._jobs)

        self._jobs = [job for job in self._jobs if id(job) not in doomed_ids]
        self._lines = [
            line for line in self._lines
            if not (isinstance(line, Job) and id(line) in doomed_ids)
        ]
        _trim_trailing_blank(self._lines)

        removed = before - len(self._jobs)
        if removed:
            logger.info("Removed %d job(s)", removed)
        return removed > 0

    def reset(self) -> None:
        """Discard creates and removes made since the last load."""
        self._lines = list(self._backup_lines)
        self._jobs = list(self._backup_jobs)

    # -------------------------------------------------------------------------
    # Diffing
    # -------------------------------------------------------------------------

    @property
    def is_modified(self) -> bool:
        """True when the current render differs from the loaded one."""
        return self.render() != self._backup_render

    def diff(self, fromfile: str = "crontab", tofile: str = "crontab (modified)") -> str:
        """Unified diff from the loaded table to the current one."""
        return "".join(difflib.unified_diff(
            self._backup_render.splitlines(keepends=True),
            self.render().splitlines(keepends=True),
            fromfile=fromfile,
            tofile=tofile,
        ))

    def __repr__(self) -> str:
        return f"Table(lines={len(self._lines)}, jobs={len(self._jobs)})"
