"""
teisho-downloader: Mirror the Rochester Zen Center teisho podcast archive.

This package scrapes the RZC podcast listing page, works out when each
talk was given from its filename, and builds a local archive of ID3-tagged
.mp3 files grouped by year.

Architecture:
    A run is a single batch that goes through its stages in order:

    LISTING (listing/): Collect episodes
        - Fetch the listing page
        - Extract every .mp3 link and its link text
        - Remember the order links were found in

    INFERRING (episodes/): Date each episode
        - Parse year and month from the filename
        - Apply the known exceptions to the naming convention
        - Pick album bucket and destination {output}/{year}/{name}
        - Create the year directories

    ORDERING (episodes/): Number each episode
        - Sort by (year, month), latest-listed first within a month
        - Assign track numbers that restart at 1 every year

    PROCESSING (download/): Fetch and tag each episode
        - Skip files already on disk
        - Follow redirects, fall back once to the mirror
        - Write a fresh ID3 tag

    REPORTING (pipeline.py): List every episode that ended in error

Modules:
    core/       - Configuration, logging, progress bar, exceptions
    listing/    - Listing page scraping (LISTING)
    episodes/   - Episode model, date inference and ordering
    download/   - HTTP download and ID3 tagging (PROCESSING)
    pipeline.py - Batch orchestration
    cli.py      - Command-line interface

Usage:
    Command Line:
        teisho-dl
        teisho-dl --output-dir ~/Music/Teishos
        teisho-dl --dry-run

    Python API:
        from teisho_downloader import load_config, run_batch, setup_logging

        config = load_config()
        setup_logging(config.output.directory)
        report = run_batch(config)

Configuration:
    Reads config.yaml from the current directory when present:

        output:
          directory: "~/Music/Teishos"

        download:
          timeout: 60

Dependencies:
    - requests: HTTP client
    - mutagen: ID3 tag writing
    - click: CLI framework
    - rich-click: CLI colors
    - rich: Progress bar
    - tqdm: Progress-safe console logging
    - pyyaml: Configuration file parsing
"""

__version__ = "0.1.0"
__author__ = "teisho-downloader"
__license__ = "MIT"

# Convenience imports for common usage
from teisho_downloader.core import (
    Config,
    ConfigError,
    DownloadError,
    InferenceError,
    ListingError,
    TaggingError,
    TeishoDownloaderError,
    UnexpectedStatusError,
    get_logger,
    load_config,
    setup_logging,
)
from teisho_downloader.episodes import BatchReport, Episode
from teisho_downloader.pipeline import run_batch

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    "run_batch",
    # Exceptions
    "TeishoDownloaderError",
    "ConfigError",
    "ListingError",
    "InferenceError",
    "DownloadError",
    "UnexpectedStatusError",
    "TaggingError",
    # Models
    "Episode",
    "BatchReport",
]
