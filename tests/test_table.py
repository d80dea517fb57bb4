"""Tests for crontab tables: load, render, query, edit, reset and diff."""

import re
from datetime import datetime

from cronline.job import Job
from cronline.table import QUERY_MATCHERS, Table


# =============================================================================
# Load / Render Tests
# =============================================================================


class TestTableLoad:
    """Tests for loading and rendering."""

    def test_single_job_round_trip(self):
        """Test the canonical scenario line renders unchanged."""
        text = "0 8-17 * * 1-5 /bin/echo hi #greet\n"
        table = Table(text)
        jobs = table.jobs()
        assert len(jobs) == 1
        job = jobs[0]
        assert job.minute.render() == "0"
        assert job.hour.render() == "8-17"
        assert job.dow.render() == "1-5"
        assert job.command == "/bin/echo hi"
        assert job.comment == "greet"
        assert table.render() == text

    def test_round_trip_mixed(self, sample_crontab):
        """Test comments, blanks and variables survive a round trip."""
        table = Table(sample_crontab)
        assert table.render() == sample_crontab

    def test_jobs_are_the_valid_subsequence(self, sample_crontab):
        """Test jobs() equals the Job elements of lines, in order."""
        table = Table(sample_crontab)
        from_lines = [line for line in table.lines if isinstance(line, Job)]
        assert [id(j) for j in table.jobs()] == [id(j) for j in from_lines]
        assert all(job.is_valid for job in table.jobs())
        assert len(table) == 4

    def test_raw_lines_kept_verbatim(self):
        """Test raw lines keep their own whitespace."""
        text = "  # indented comment  \n* * * * * ls\n"
        table = Table(text)
        assert table.lines[0] == "  # indented comment  "

    def test_malformed_line_isolated(self):
        """Test one bad line among good ones stays in place."""
        text = (
            "1 * * * * first\n"
            "99 * * * * broken\n"
            "2 * * * * second\n"
        )
        table = Table(text)
        assert [j.command for j in table.jobs()] == ["first", "second"]
        assert table.lines[1] == "99 * * * * broken"
        assert table.render() == text

    def test_non_ascii_digits_kept_raw(self):
        """Test lines with Unicode digits load as raw lines."""
        text = (
            "² * * * * cmd\n"
            "*/² * * * * cmd\n"
            "0 ٣ * * * cmd\n"
            "0 1 * * * ok\n"
        )
        table = Table(text)
        assert [j.command for j in table.jobs()] == ["ok"]
        assert table.lines[:3] == [
            "² * * * * cmd",
            "*/² * * * * cmd",
            "0 ٣ * * * cmd",
        ]
        assert table.render() == text

    def test_trailing_blank_lines_trimmed(self):
        """Test trailing blanks are dropped but interior ones kept."""
        table = Table("* * * * * a\n\n* * * * * b\n\n\n   \n")
        assert len(table.lines) == 3
        assert table.lines[1] == ""
        assert table.render() == "* * * * * a\n\n* * * * * b\n"

    def test_render_normalizes(self):
        """Test field spacing and comment prefixes are normalized."""
        table = Table("0   9 * * *   run  # note\n")
        assert table.render() == "0 9 * * * run #note\n"

    def test_render_folds_specials(self):
        """Test canonical schedules render with their @name."""
        table = Table("0 0 * * * a\n@annually b\n@reboot c\n")
        assert table.render() == "@daily a\n@yearly b\n@reboot c\n"

    def test_empty_table(self):
        """Test an empty crontab renders a single newline."""
        table = Table()
        assert table.lines == []
        assert table.jobs() == []
        assert table.render() == "\n"

    def test_reload_replaces_content(self):
        """Test load() discards the previous content."""
        table = Table("* * * * * a\n")
        table.load("* * * * * b\n")
        assert [j.command for j in table.jobs()] == ["b"]

    def test_invalid_job_in_lines_is_commented(self):
        """Test an invalid Job element renders as a comment."""
        table = Table("* * * * * a\n")
        table._lines.append(Job.parse("bogus line"))
        assert table.render() == "* * * * * a\n# bogus line\n"


# =============================================================================
# Query Tests
# =============================================================================


class TestTableQuery:
    """Tests for jobs() and find()."""

    def test_no_filter_returns_copy(self, sample_crontab):
        """Test jobs() returns a shallow copy."""
        table = Table(sample_crontab)
        jobs = table.jobs()
        jobs.clear()
        assert len(table.jobs()) == 4

    def test_filter_by_command(self, sample_crontab):
        """Test substring matching on the command."""
        table = Table(sample_crontab)
        jobs = table.jobs({"command": "backup"})
        assert [j.command for j in jobs] == ["/usr/local/bin/backup.sh"]

    def test_filter_by_comment_regex(self, sample_crontab):
        """Test regex matching on the comment."""
        table = Table(sample_crontab)
        jobs = table.jobs({"comment": re.compile(r"^night")})
        assert len(jobs) == 1
        assert jobs[0].comment == "nightly db"

    def test_filter_keys_are_anded(self, sample_crontab):
        """Test all keys must match."""
        table = Table(sample_crontab)
        assert table.jobs({"command": "backup", "comment": "nightly"})
        assert table.jobs({"command": "backup", "comment": "weekly"}) == []

    def test_unknown_key_matches_nothing(self, sample_crontab):
        """Test strict schema validation of the filter."""
        table = Table(sample_crontab)
        assert table.jobs({"command": "backup", "bogus": "y"}) == []

    def test_bad_value_type_matches_nothing(self, sample_crontab):
        """Test non-string, non-pattern values reject the filter."""
        table = Table(sample_crontab)
        assert table.jobs({"command": 5}) == []

    def test_empty_filter_matches_all(self, sample_crontab):
        """Test an empty mapping matches every job."""
        table = Table(sample_crontab)
        assert len(table.jobs({})) == 4

    def test_find_keywords(self, sample_crontab):
        """Test find() is the keyword form of jobs()."""
        table = Table(sample_crontab)
        assert table.find(command="rotate") == table.jobs({"command": "rotate"})
        assert table.find(owner="root") == []
        assert len(table.find()) == 4

    def test_matchers_are_fixed(self):
        """Test only command and comment are queryable."""
        assert set(QUERY_MATCHERS) == {"command", "comment"}


# =============================================================================
# Create Tests
# =============================================================================


class TestTableCreate:
    """Tests for create()."""

    def test_every_minute_default(self):
        """Test a job without schedule runs every minute."""
        table = Table()
        job = table.create("ls -l")
        assert job is not None
        assert job.render() == "* * * * * ls -l"
        assert table.render() == "* * * * * ls -l\n"

    def test_with_schedule_and_comment(self):
        """Test a five-field schedule and comment."""
        table = Table("# header\n")
        job = table.create("report.sh", "30 6 * * 1-5", "daily report")
        assert job.render() == "30 6 * * 1-5 report.sh #daily report"
        assert table.render() == "# header\n30 6 * * 1-5 report.sh #daily report\n"
        assert table.jobs() == [job]

    def test_with_special(self):
        """Test an @name schedule."""
        job = Table().create("start.sh", "@reboot")
        assert job.render() == "@reboot start.sh"

    def test_with_datetime(self):
        """Test a datetime pins minute, hour, day and month."""
        job = Table().create("once.sh", datetime(2026, 12, 24, 18, 30))
        assert job.render() == "30 18 24 12 * once.sh"

    def test_invalid_schedule_returns_none(self):
        """Test a bad schedule creates nothing."""
        table = Table("* * * * * a\n")
        assert table.create("x", "61 * * * *") is None
        assert table.create("x", "not a schedule") is None
        assert len(table.jobs()) == 1
        assert len(table.lines) == 1

    def test_empty_command_returns_none(self):
        """Test a missing command creates nothing."""
        assert Table().create("") is None

    def test_created_job_is_live(self):
        """Test edits to a created job show in the table render."""
        table = Table()
        job = table.create("sync")
        job.minute.every(15)
        assert table.render() == "*/15 * * * * sync\n"


# =============================================================================
# Remove Tests
# =============================================================================


class TestTableRemove:
    """Tests for remove()."""

    def test_remove_single_job(self, sample_crontab):
        """Test removing one job keeps everything else in order."""
        table = Table(sample_crontab)
        target = table.find(command="rotate")[0]
        assert table.remove(target)
        assert all(job is not target for job in table.jobs())
        assert "rotate" not in table.render()
        expected = "\n".join(
            line for line in sample_crontab.split("\n") if "rotate" not in line
        )
        assert table.render() == expected

    def test_remove_by_identity_not_equality(self):
        """Test structurally equal jobs are distinct."""
        table = Table("* * * * * same\n* * * * * same\n")
        first, second = table.jobs()
        assert table.remove(second)
        assert table.jobs() == [first]
        assert table.render() == "* * * * * same\n"

    def test_remove_list(self, sample_crontab):
        """Test removing several jobs at once."""
        table = Table(sample_crontab)
        assert table.remove(table.jobs()[:2])
        assert len(table.jobs()) == 2

    def test_remove_by_filter(self, sample_crontab):
        """Test removing with a query."""
        table = Table(sample_crontab)
        assert table.remove({"comment": "nightly"})
        assert table.find(comment="nightly") == []

    def test_remove_nothing(self, sample_crontab):
        """Test removal reports False when nothing matched."""
        table = Table(sample_crontab)
        assert not table.remove({"command": "does-not-exist"})
        assert not table.remove({"bogus": "x"})
        assert not table.remove(Job(command="foreign"))
        assert table.render() == sample_crontab

    def test_remove_trims_trailing_blanks(self):
        """Test blanks exposed at the end are trimmed."""
        table = Table("* * * * * a\n\n* * * * * b\n")
        table.remove(table.find(command="b"))
        assert len(table.lines) == 1
        assert table.render() == "* * * * * a\n"


# =============================================================================
# Reset / Diff Tests
# =============================================================================


class TestTableResetAndDiff:
    """Tests for reset(), is_modified and diff()."""

    def test_reset_discards_creates_and_removes(self, sample_crontab):
        """Test reset() returns to the loaded snapshot."""
        table = Table(sample_crontab)
        original = table.jobs()
        table.create("new.sh")
        table.remove(original[0])
        table.reset()
        assert [id(j) for j in table.jobs()] == [id(j) for j in original]
        assert table.render() == sample_crontab

    def test_reset_after_reload(self):
        """Test the snapshot follows the most recent load."""
        table = Table("* * * * * a\n")
        table.load("* * * * * b\n")
        table.create("c")
        table.reset()
        assert table.render() == "* * * * * b\n"

    def test_unmodified(self, sample_crontab):
        """Test a fresh table has no diff."""
        table = Table(sample_crontab)
        assert not table.is_modified
        assert table.diff() == ""

    def test_diff_after_edit(self):
        """Test the diff shows added and removed lines."""
        table = Table("* * * * * a\n")
        table.remove(table.jobs()[0])
        table.create("b", "@hourly")
        diff = table.diff()
        assert table.is_modified
        assert "-* * * * * a" in diff
        assert "+@hourly b" in diff
        assert diff.startswith("--- crontab")
