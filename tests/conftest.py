"""Shared pytest fixtures for cronline tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from cronline.backends import MemoryCrontab


# =============================================================================
# Crontab Text
# =============================================================================


SAMPLE_CRONTAB = """\
SHELL=/bin/bash
MAILTO=ops@example.com

# m h dom mon dow command
0 2 * * * /usr/local/bin/backup.sh #nightly db
*/15 * * * * /opt/bin/poll --quiet
@weekly /usr/sbin/logrotate /etc/logrotate.conf #rotate logs
@reboot /opt/bin/start-agent

# disabled
#30 4 * * * /opt/bin/old-task
"""


@pytest.fixture
def sample_crontab() -> str:
    """A crontab mixing variables, comments, blanks and four jobs."""
    return SAMPLE_CRONTAB


# =============================================================================
# Backends
# =============================================================================


@pytest.fixture
def memory_backend() -> MemoryCrontab:
    """In-memory backend preloaded with the sample crontab."""
    return MemoryCrontab(SAMPLE_CRONTAB)


@pytest.fixture
def crontab_file(tmp_path: Path) -> Path:
    """The sample crontab written to a temporary file."""
    path = tmp_path / "crontab"
    path.write_text(SAMPLE_CRONTAB)
    return path
