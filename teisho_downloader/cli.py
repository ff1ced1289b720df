"""
Command-line interface for teisho-downloader.

This module implements the CLI using Click, with rich-click for colored
help output.

Usage:
    teisho-dl                                # Use ./config.yaml
    teisho-dl --config ~/teishos.yaml        # Explicit config file
    teisho-dl --output-dir ~/Music/Teishos   # No config file needed
    teisho-dl --dry-run                      # Show the plan, download nothing

Exit Codes:
    0    Batch completed (episodes in error are listed in the summary)
    1    Configuration error
    2    Listing page could not be fetched
    3    Batch aborted (unrecognized filename or unexpected HTTP status)
    4    Any other teisho-downloader error that escaped the batch
    130  Interrupted by user
"""

import sys
from pathlib import Path
from typing import Optional

import rich_click as click

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.MAX_WIDTH = 100

from teisho_downloader import __version__
from teisho_downloader.core import (
    Config,
    ConfigError,
    InferenceError,
    ListingError,
    TeishoDownloaderError,
    UnexpectedStatusError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from teisho_downloader.pipeline import run_batch

logger = get_logger(__name__)


@click.command()
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml)"
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    metavar="<directory>",
    help="Archive root directory (overrides output.directory)"
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="List, date and number episodes without downloading"
)
@click.option(
    "--no-progress",
    is_flag=True,
    help="Disable the progress bar"
)
@click.version_option(__version__, prog_name="teisho-downloader")
def cli(
    config_path: Optional[Path],
    output_dir: Optional[Path],
    dry_run: bool,
    no_progress: bool
) -> None:
    """
    teisho-downloader: Mirror the Rochester Zen Center teisho archive.

    Scrapes the episode listing, downloads every .mp3 into
    {output-dir}/{year}/ and tags it with album, year and track number.
    Files already on disk are left untouched.
    """
    try:
        config = _load_configuration(config_path, output_dir)
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    try:
        setup_logging(config.output.directory)
        logger.info("teisho-downloader starting")

        report = run_batch(config, dry_run=dry_run, show_progress=not no_progress)

        logger.info(
            f"teisho-downloader finished: {report.failed} of {report.total} episodes in error"
        )

    except ListingError as e:
        click.echo(f"Listing error: {e.message}", err=True)
        logger.error(f"Listing error: {e.message}", exc_info=True)
        sys.exit(2)

    except (InferenceError, UnexpectedStatusError) as e:
        click.echo(f"Batch aborted: {e.message}", err=True)
        logger.critical(f"Batch aborted: {e.message}", exc_info=True)
        sys.exit(3)

    except TeishoDownloaderError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(4)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    finally:
        shutdown_logging()


def _load_configuration(config_path: Optional[Path], output_dir: Optional[Path]) -> Config:
    """
    Load and validate configuration.

    Raises:
        ConfigError: If configuration is invalid or missing.
    """
    return load_config(config_path, output_dir=output_dir)


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `teisho-dl` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
