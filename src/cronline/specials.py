"""The ``@name`` shorthand schedules.

Every special name expands either to the reboot marker or to a canonical
five-field schedule. Rendering goes the other way: a job whose fields render
to one of these canonical strings is written with its ``@name``.

Usage:
    >>> expand_special("weekly")
    '0 0 * * 0'
    >>> special_for("0 0 1 1 *")
    '@yearly'
"""

from __future__ import annotations

REBOOT = "@reboot"

# Declaration order matches the crontab(5) manual page.
SPECIALS: dict[str, str] = {
    "reboot": REBOOT,
    "hourly": "0 * * * *",
    "daily": "0 0 * * *",
    "weekly": "0 0 * * 0",
    "monthly": "0 0 1 * *",
    "yearly": "0 0 1 1 *",
    "annually": "0 0 1 1 *",
    "midnight": "0 0 * * *",
}

# Names written back when several aliases share one canonical schedule.
PREFERRED_ALIASES: tuple[str, ...] = ("hourly", "daily", "weekly", "monthly", "yearly")


def _build_reverse_map() -> dict[str, str]:
    reverse = {SPECIALS[name]: f"@{name}" for name in PREFERRED_ALIASES}
    missing = {
        schedule for name, schedule in SPECIALS.items()
        if schedule != REBOOT and schedule not in reverse
    }
    if missing:
        raise RuntimeError(f"No preferred alias for schedules: {sorted(missing)}")
    return reverse


SPECIAL_BY_SCHEDULE: dict[str, str] = _build_reverse_map()


def expand_special(name: str) -> str | None:
    """Return the expansion of a special name (without ``@``), or None."""
    return SPECIALS.get(name)


def special_for(schedule: str) -> str | None:
    """Return the ``@name`` to write for a rendered five-field schedule."""
    return SPECIAL_BY_SCHEDULE.get(schedule)


def list_specials() -> list[str]:
    """List all recognised special names, in declaration order."""
    return list(SPECIALS.keys())
