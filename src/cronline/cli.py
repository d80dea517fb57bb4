"""Command-line interface for cronline."""

from __future__ import annotations

import dataclasses
import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer

from cronline.backends import CrontabBackend, FileCrontab, load_table, save_table
from cronline.cli_errors import CLIError, ErrorCode, error_boundary, require_file
from cronline.config import load_config
from cronline.job import MatchPattern
from cronline.table import Table

logger = logging.getLogger(__name__)

ASSIGNMENT_PATTERN = re.compile(r"^\s*[A-Za-z_][A-Za-z0-9_]*\s*=")

app = typer.Typer(
    name="cronline",
    help="Inspect and edit crontabs without losing a line",
    add_completion=False,
)


@dataclass
class CliState:
    backend: CrontabBackend


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _backend(ctx: typer.Context) -> CrontabBackend:
    return ctx.ensure_object(CliState).backend


def _build_query(
    command: str | None,
    comment: str | None,
    regex: bool,
) -> dict[str, MatchPattern]:
    query: dict[str, MatchPattern] = {}
    for key, value in (("command", command), ("comment", comment)):
        if value is None:
            continue
        if regex:
            try:
                query[key] = re.compile(value)
            except re.error as e:
                raise CLIError(f"Invalid regular expression for --{key}: {e}", ErrorCode.USAGE_ERROR)
        else:
            query[key] = value
    return query


def _finish(table: Table, backend: CrontabBackend, dry_run: bool) -> None:
    if dry_run:
        typer.echo(table.diff() or "No changes.")
        return
    save_table(table, backend)


@app.callback()
@error_boundary
def main(
    ctx: typer.Context,
    file: Annotated[
        Optional[Path],
        typer.Option("--file", "-f", help="Edit a crontab file instead of the system crontab"),
    ] = None,
    user: Annotated[
        Optional[str],
        typer.Option("--user", "-u", help="User whose crontab to edit"),
    ] = None,
    sudo: Annotated[
        bool,
        typer.Option("--sudo", help="Run the crontab program through sudo"),
    ] = False,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file (YAML or JSON)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Inspect and edit crontabs without losing a line."""
    config = load_config(require_file(config_file, "Config file") if config_file else None)
    if user is not None:
        config = dataclasses.replace(config, user=user)
    if sudo:
        config = dataclasses.replace(config, use_sudo=True)

    _configure_logging("DEBUG" if verbose else config.log_level)

    backend: CrontabBackend = FileCrontab(file) if file else config.create_backend()
    logger.debug("Using backend %r", backend)
    ctx.obj = CliState(backend=backend)


@app.command(name="list")
@error_boundary
def list_cmd(
    ctx: typer.Context,
    command: Annotated[
        Optional[str],
        typer.Option("--command", help="Only jobs whose command contains this text"),
    ] = None,
    comment: Annotated[
        Optional[str],
        typer.Option("--comment", help="Only jobs whose comment contains this text"),
    ] = None,
    regex: Annotated[
        bool,
        typer.Option("--regex", help="Treat --command/--comment as regular expressions"),
    ] = False,
    format: Annotated[
        str,
        typer.Option("--format", help="Output format (console, json)"),
    ] = "console",
) -> None:
    """List jobs.

    Examples:
        cronline list
        cronline -u deploy list --command backup
        cronline -f jobs.cron list --comment '^nightly' --regex --format json
    """
    table = load_table(_backend(ctx))
    query = _build_query(command, comment, regex)
    jobs = table.jobs(query or None)

    if format == "json":
        typer.echo(json.dumps([
            {"schedule": job.schedule, "command": job.command, "comment": job.comment}
            for job in jobs
        ], indent=2))
        return

    if not jobs:
        typer.echo("No matching jobs.")
        return
    for job in jobs:
        typer.echo(job.render())


@app.command(name="show")
@error_boundary
def show_cmd(ctx: typer.Context) -> None:
    """Print the whole crontab as it would be saved."""
    table = load_table(_backend(ctx))
    typer.echo(table.render(), nl=False)


@app.command(name="add")
@error_boundary
def add_cmd(
    ctx: typer.Context,
    command: Annotated[str, typer.Argument(help="Command to schedule")],
    when: Annotated[
        Optional[str],
        typer.Option("--when", "-w", help="Schedule: five fields or @name (default: every minute)"),
    ] = None,
    at: Annotated[
        Optional[str],
        typer.Option("--at", help="ISO date and time to pin minute, hour, day and month to"),
    ] = None,
    comment: Annotated[
        Optional[str],
        typer.Option("--comment", help="Inline comment"),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show the diff instead of saving"),
    ] = False,
) -> None:
    """Add a job.

    Examples:
        cronline add '/opt/app/report.sh' --when '0 6 * * mon-fri' --comment report
        cronline add 'systemctl restart app' --when @reboot
        cronline add 'echo once' --at 2026-12-24T18:30 --dry-run
    """
    if not command.strip():
        raise CLIError("Command must not be empty", ErrorCode.USAGE_ERROR)
    if when is not None and at is not None:
        raise CLIError("Use either --when or --at, not both", ErrorCode.USAGE_ERROR)

    schedule: str | datetime | None = when
    if at is not None:
        try:
            schedule = datetime.fromisoformat(at)
        except ValueError:
            raise CLIError(f"Invalid date and time: {at}", ErrorCode.USAGE_ERROR)

    backend = _backend(ctx)
    table = load_table(backend)
    job = table.create(command, schedule, comment)
    if job is None:
        raise CLIError(
            f"Invalid schedule: {when}",
            ErrorCode.INVALID_SCHEDULE,
            "Use five fields like '*/5 * * * *' or a name like @daily.",
        )

    _finish(table, backend, dry_run)
    if not dry_run:
        typer.echo(f"Added: {job.render()}")


@app.command(name="remove")
@error_boundary
def remove_cmd(
    ctx: typer.Context,
    command: Annotated[
        Optional[str],
        typer.Option("--command", help="Remove jobs whose command contains this text"),
    ] = None,
    comment: Annotated[
        Optional[str],
        typer.Option("--comment", help="Remove jobs whose comment contains this text"),
    ] = None,
    regex: Annotated[
        bool,
        typer.Option("--regex", help="Treat --command/--comment as regular expressions"),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show the diff instead of saving"),
    ] = False,
) -> None:
    """Remove matching jobs.

    Examples:
        cronline remove --command report.sh
        cronline remove --comment '^tmp-' --regex --dry-run
    """
    query = _build_query(command, comment, regex)
    if not query:
        raise CLIError("Give --command and/or --comment", ErrorCode.USAGE_ERROR)

    backend = _backend(ctx)
    table = load_table(backend)
    matches = table.jobs(query)
    if not table.remove(matches):
        typer.echo("No matching jobs.")
        return

    _finish(table, backend, dry_run)
    if not dry_run:
        typer.echo(f"Removed {len(matches)} job(s).")


@app.command(name="check")
@error_boundary
def check_cmd(
    ctx: typer.Context,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Exit with an error if unparsed lines are found"),
    ] = False,
) -> None:
    """Report lines that are not jobs, comments, blanks or assignments."""
    table = load_table(_backend(ctx))

    problems = []
    for number, line in enumerate(table.lines, start=1):
        if not isinstance(line, str):
            continue
        text = line.strip()
        if not text or text.startswith("#") or ASSIGNMENT_PATTERN.match(line):
            continue
        problems.append((number, line))

    typer.echo(f"Jobs: {len(table)}")
    if not problems:
        typer.echo("All lines parsed.")
        return

    typer.echo(f"Unparsed lines ({len(problems)}):")
    for number, line in problems:
        typer.echo(f"  line {number}: {line}")

    if strict:
        raise typer.Exit(ErrorCode.VALIDATION_FAILED.value)


if __name__ == "__main__":
    app()
