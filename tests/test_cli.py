"""Test the command-line interface"""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from teisho_downloader import __version__
from teisho_downloader.cli import cli
from teisho_downloader.core.exceptions import (
    InferenceError,
    ListingError,
    TaggingError,
    TeishoDownloaderError,
    UnexpectedStatusError,
)
from teisho_downloader.episodes.models import BatchReport


def run_args(temp_dir, *extra):
    return ["--config", str(temp_dir / "missing.yaml"), "--output-dir", str(temp_dir), *extra]


@pytest.fixture
def runner():
    return CliRunner()


class TestCli:
    """Test option handling and exit codes"""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_config_exits_1(self, runner, temp_dir):
        result = runner.invoke(cli, ["--config", str(temp_dir / "missing.yaml")])

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    @patch("teisho_downloader.cli.run_batch")
    def test_successful_run(self, mock_run_batch, runner, temp_dir):
        mock_run_batch.return_value = BatchReport(total=2, downloaded=2, tagged=2)

        result = runner.invoke(cli, [
            "--config", str(temp_dir / "missing.yaml"),
            "--output-dir", str(temp_dir),
            "--no-progress",
        ])

        assert result.exit_code == 0
        config = mock_run_batch.call_args.args[0]
        assert config.output.directory == temp_dir.resolve()
        assert mock_run_batch.call_args.kwargs == {"dry_run": False, "show_progress": False}
        assert any(p.name.startswith("log_full_") for p in (temp_dir / "logs").iterdir())

    @patch("teisho_downloader.cli.run_batch")
    def test_dry_run_flag(self, mock_run_batch, runner, temp_dir):
        mock_run_batch.return_value = BatchReport()

        runner.invoke(cli, run_args(temp_dir, "--dry-run"))

        assert mock_run_batch.call_args.kwargs["dry_run"] is True

    @pytest.mark.parametrize("error,exit_code", [
        (ListingError("Failed to fetch episode listing: refused"), 2),
        (InferenceError("Bad data for episode: untitled.mp3"), 3),
        (UnexpectedStatusError("Failure to download file x. Status: 500", status_code=500), 3),
    ])
    @patch("teisho_downloader.cli.run_batch")
    def test_fatal_errors(self, mock_run_batch, runner, temp_dir, error, exit_code):
        mock_run_batch.side_effect = error

        result = runner.invoke(cli, run_args(temp_dir))

        assert result.exit_code == exit_code
        assert error.message in result.output

    @patch("teisho_downloader.cli.run_batch")
    def test_interrupt_exits_130(self, mock_run_batch, runner, temp_dir):
        mock_run_batch.side_effect = KeyboardInterrupt

        result = runner.invoke(cli, run_args(temp_dir))

        assert result.exit_code == 130

    @pytest.mark.parametrize("error", [
        TeishoDownloaderError("Something went wrong"),
        TaggingError("Failed to tag x.mp3"),
    ])
    @patch("teisho_downloader.cli.run_batch")
    def test_other_errors_exit_4(self, mock_run_batch, runner, temp_dir, error):
        mock_run_batch.side_effect = error

        result = runner.invoke(cli, run_args(temp_dir))

        assert result.exit_code == 4
        assert f"Error: {error.message}" in result.output
