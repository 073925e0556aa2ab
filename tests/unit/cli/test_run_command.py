"""Unit tests for the run command.

Configuration problems end the command with exit code 0; the outcome is
reported on the console and in the log.
"""

from collections.abc import Iterator
from functools import partial
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from conftest import NOW, InMemoryRemoteClient, days_ago
from sftpmaint.cli.main import app
from sftpmaint.maintenance.job import JobResult, MaintenanceJob
from sftpmaint.maintenance.models import SweepKind, SweepReport
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def mock_job() -> Iterator[MagicMock]:
    """Patch MaintenanceJob in the run command."""
    with patch("sftpmaint.cli.commands.run.MaintenanceJob") as mock_class:
        mock_class.return_value.run.return_value = JobResult(
            profile_name="invoices",
            started_at=NOW,
            archive_report=SweepReport(
                kind=SweepKind.ARCHIVE, root="/work", threshold=days_ago(7), completed=True
            ),
            purge_report=SweepReport(
                kind=SweepKind.PURGE, root="/archive", threshold=days_ago(30), completed=True
            ),
        )
        yield mock_class


class TestRunArguments:
    """Tests for profile argument and profiles file handling."""

    def test_run_help(self) -> None:
        """Run command shows help."""
        result = runner.invoke(app, ["run", "--help"])
        assert result.exit_code == 0
        assert "--dry-run" in result.output

    def test_missing_profile_argument(self, isolated_dirs: Path, mock_job: MagicMock) -> None:
        """No profile name is reported and exits 0."""
        result = runner.invoke(app, ["run"])

        assert result.exit_code == 0
        assert "Please provide a profile name" in result.output
        mock_job.assert_not_called()

    def test_missing_profiles_file(self, isolated_dirs: Path, mock_job: MagicMock) -> None:
        """A missing profiles file is reported and exits 0."""
        result = runner.invoke(
            app, ["--config", str(isolated_dirs / "missing.toml"), "run", "invoices"]
        )

        assert result.exit_code == 0
        assert "Profiles file not found" in result.output
        mock_job.assert_not_called()

    def test_unknown_profile(self, profiles_file: Path, mock_job: MagicMock) -> None:
        """An unknown profile is reported and exits 0."""
        result = runner.invoke(app, ["--config", str(profiles_file), "run", "payroll"])

        assert result.exit_code == 0
        assert "No configuration found for profile: payroll" in result.output
        mock_job.assert_not_called()

    def test_bracketed_profile_name(self, profiles_file: Path, mock_job: MagicMock) -> None:
        """A profile name that looks like console markup is printed verbatim."""
        result = runner.invoke(app, ["--config", str(profiles_file), "run", "[/x]"])

        assert result.exit_code == 0
        assert result.exception is None
        assert "No configuration found for profile: [/x]" in result.output
        mock_job.assert_not_called()

    def test_bracketed_config_path(self, isolated_dirs: Path, mock_job: MagicMock) -> None:
        """A missing profiles file with markup in its path is reported and exits 0."""
        missing = isolated_dirs / "[/bold]" / "profiles.toml"

        result = runner.invoke(app, ["--config", str(missing), "run", "invoices"])

        assert result.exit_code == 0
        assert result.exception is None
        assert "Profiles file not found" in result.output
        mock_job.assert_not_called()

    def test_config_from_environment(
        self, profiles_file: Path, mock_job: MagicMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """SFTPMAINT_CONFIG locates the profiles file."""
        monkeypatch.setenv("SFTPMAINT_CONFIG", str(profiles_file))

        result = runner.invoke(app, ["run", "invoices"])

        assert result.exit_code == 0
        mock_job.assert_called_once()


class TestRunJob:
    """Tests for running a job from the command line."""

    def test_runs_profile(self, profiles_file: Path, mock_job: MagicMock) -> None:
        """The named profile is handed to the job with both sweeps enabled."""
        result = runner.invoke(app, ["--config", str(profiles_file), "run", "invoices"])

        assert result.exit_code == 0
        args, kwargs = mock_job.call_args
        assert args[0] == "invoices"
        assert args[1].host == "sftp.example.com"
        assert kwargs == {"dry_run": False, "run_archive": True, "run_purge": True}
        assert "completed successfully" in result.output

    def test_flags_passed_to_job(self, profiles_file: Path, mock_job: MagicMock) -> None:
        """--dry-run and the skip flags reach the job."""
        result = runner.invoke(
            app,
            ["--config", str(profiles_file), "run", "invoices", "--dry-run", "--skip-purge"],
        )

        assert result.exit_code == 0
        _, kwargs = mock_job.call_args
        assert kwargs == {"dry_run": True, "run_archive": True, "run_purge": False}

    def test_session_failure_exits_zero(self, profiles_file: Path, mock_job: MagicMock) -> None:
        """A failed session is reported without a non-zero exit code."""
        mock_job.return_value.run.return_value = JobResult(
            profile_name="invoices", started_at=NOW, error="Failed to connect"
        )

        result = runner.invoke(app, ["--config", str(profiles_file), "run", "invoices"])

        assert result.exit_code == 0
        assert "SFTP job failed: Failed to connect" in result.output

    def test_markup_in_results_printed_verbatim(
        self, profiles_file: Path, mock_job: MagicMock
    ) -> None:
        """Server paths and errors containing markup do not break the output."""
        mock_job.return_value.run.return_value = JobResult(
            profile_name="invoices",
            started_at=NOW,
            archive_report=SweepReport(
                kind=SweepKind.ARCHIVE, root="/work/[/x]", threshold=days_ago(7), completed=True
            ),
            error="channel [/closed]",
        )

        result = runner.invoke(app, ["--config", str(profiles_file), "run", "invoices"])

        assert result.exit_code == 0
        assert result.exception is None
        assert "/work/[/x]" in result.output
        assert "SFTP job failed: channel [/closed]" in result.output

    def test_writes_log_file(self, profiles_file: Path, mock_job: MagicMock) -> None:
        """Runs are logged to the state directory by default."""
        runner.invoke(app, ["--config", str(profiles_file), "run", "invoices"])

        log_file = profiles_file.parent / "state" / "sftpmaint" / "sftpmaint.log"
        assert "Starting SFTP maintenance job for profile: invoices" in log_file.read_text()

    def test_log_file_option(
        self, profiles_file: Path, mock_job: MagicMock, tmp_path: Path
    ) -> None:
        """--log-file overrides the default log location."""
        log_file = tmp_path / "custom.log"

        runner.invoke(
            app,
            ["--config", str(profiles_file), "--log-file", str(log_file), "run", "invoices"],
        )

        assert "Starting SFTP maintenance job" in log_file.read_text()

    def test_end_to_end_with_in_memory_server(
        self, profiles_file: Path, remote: InMemoryRemoteClient
    ) -> None:
        """A full run moves and purges files on the server."""
        remote.add_file("/work/fileA.txt")
        remote.add_file("/work/sub/fileB.txt", mtime=days_ago(10))
        remote.add_file("/work/sub/fileC.txt", mtime=days_ago(1))
        remote.add_file("/archive/old.txt", mtime=days_ago(45))
        job_class = partial(MaintenanceJob, client_factory=lambda _p: remote, clock=lambda: NOW)

        with patch("sftpmaint.cli.commands.run.MaintenanceJob", job_class):
            result = runner.invoke(app, ["--config", str(profiles_file), "run", "invoices"])

        assert result.exit_code == 0
        assert remote.is_file("/archive/fileA.txt")
        assert remote.is_file("/archive/sub/fileB.txt")
        assert remote.is_file("/work/sub/fileC.txt")
        assert not remote.is_file("/archive/old.txt")
        assert remote.disconnect_count == 1
        assert "completed successfully" in result.output
