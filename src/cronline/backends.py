"""Where crontab text comes from and goes to.

The table itself only turns text into jobs and back. Backends move that
text: the system ``crontab`` program, a plain file, or memory.

Usage:
    >>> backend = SystemCrontab(user="deploy")
    >>> table = load_table(backend)
    >>> table.create("/opt/app/cleanup.sh", "@daily")
    >>> save_table(table, backend)
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol, runtime_checkable

from cronline.errors import CrontabCommandError
from cronline.table import Table

logger = logging.getLogger(__name__)

NO_CRONTAB_MARKER = "no crontab for"


# =============================================================================
# Protocol
# =============================================================================


@runtime_checkable
class CrontabBackend(Protocol):
    """Loads and saves one crontab as a complete text blob."""

    def load(self) -> str:
        ...

    def save(self, text: str) -> None:
        ...


# =============================================================================
# System crontab
# =============================================================================


class SystemCrontab:
    """The crontab of a user, read and written with the ``crontab`` program.

    Args:
        command: Path or name of the crontab program.
        user: User whose crontab to edit (``-u``); None for the caller.
        use_sudo: Prefix invocations with ``sudo``.
        timeout: Seconds to wait for the program.
    """

    def __init__(
        self,
        command: str = "crontab",
        user: str | None = None,
        use_sudo: bool = False,
        timeout: float | None = 30.0,
    ) -> None:
        self.command = command
        self.user = user
        self.use_sudo = use_sudo
        self.timeout = timeout

    def build_args(self, action: str) -> list[str]:
        """Build the argv for ``load`` or ``save``."""
        flags = {"load": "-l", "save": "-"}
        if action not in flags:
            raise ValueError(f"Unknown crontab action: {action}")

        args = ["sudo"] if self.use_sudo else []
        args.append(self.command)
        if self.user:
            args.extend(["-u", self.user])
        args.append(flags[action])
        return args

    def _run(self, args: list[str], stdin: str | None = None) -> subprocess.CompletedProcess:
        logger.debug("Running %s", " ".join(args))
        try:
            return subprocess.run(
                args,
                input=stdin,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise CrontabCommandError(
                f"crontab program not found: {args[0]}", args
            ) from e
        except subprocess.TimeoutExpired as e:
            raise CrontabCommandError(
                f"crontab timed out after {self.timeout}s", args
            ) from e

    def load(self) -> str:
        """Return the current crontab; an absent crontab loads as empty."""
        args = self.build_args("load")
        result = self._run(args)

        if result.returncode != 0:
            if NO_CRONTAB_MARKER in (result.stderr or ""):
                logger.info("No crontab installed for %s", self.user or "current user")
                return ""
            raise CrontabCommandError(
                f"Failed to list crontab: {(result.stderr or '').strip()}",
                args,
                result.returncode,
                result.stderr or "",
            )

        return result.stdout or ""

    def save(self, text: str) -> None:
        """Install ``text`` as the new crontab."""
        args = self.build_args("save")
        result = self._run(args, stdin=text)

        if result.returncode != 0:
            raise CrontabCommandError(
                f"Failed to save crontab: {(result.stderr or '').strip()}",
                args,
                result.returncode,
                result.stderr or "",
            )
        logger.info("Saved crontab for %s", self.user or "current user")

    def __repr__(self) -> str:
        return f"SystemCrontab(command={self.command!r}, user={self.user!r})"


# =============================================================================
# File and memory backends
# =============================================================================


class FileCrontab:
    """A crontab kept in a plain file. A missing file loads as empty."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> str:
        if not self.path.exists():
            logger.info("Crontab file %s does not exist yet", self.path)
            return ""
        return self.path.read_text(encoding="utf-8")

    def save(self, text: str) -> None:
        self.path.write_text(text, encoding="utf-8")
        logger.info("Saved crontab to %s", self.path)

    def __repr__(self) -> str:
        return f"FileCrontab({str(self.path)!r})"


class MemoryCrontab:
    """A crontab held in memory; ``saved`` records every save."""

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.saved: list[str] = []

    def load(self) -> str:
        return self.text

    def save(self, text: str) -> None:
        self.text = text
        self.saved.append(text)


# =============================================================================
# Convenience Functions
# =============================================================================


def load_table(backend: CrontabBackend) -> Table:
    """Load a table from a backend."""
    return Table(backend.load())


def save_table(table: Table, backend: CrontabBackend) -> None:
    """Save a table's render to a backend."""
    backend.save(table.render())
