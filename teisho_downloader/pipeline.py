"""
Batch orchestration for teisho-downloader.

A run walks through these stages once, in order, with no way back:

    Listing    fetch the listing page and collect every .mp3 link
    Inferring  derive year/month/album/destination for each episode and
               create the year directories
    Ordering   sort into archive order and number tracks per year
    Processing download, then tag, each episode in turn
    Reporting  log counts and every episode that ended with an error

Per-episode failures (mirror also unreachable, 403, broken stream, tag
write failure) are recorded and the run continues. Three conditions stop
the run instead, by letting their exception propagate:

    - ListingError: the listing page could not be fetched
    - InferenceError: a filename with an unrecognized date format
    - UnexpectedStatusError: an HTTP status with no handling rule

Usage:
    from teisho_downloader.core import load_config
    from teisho_downloader.pipeline import run_batch

    report = run_batch(load_config())
    print(f"{report.failed} episodes need attention")
"""

import requests

from teisho_downloader.core.config import Config
from teisho_downloader.core.exceptions import TaggingError
from teisho_downloader.core.logger import get_logger
from teisho_downloader.core.progress import EpisodeProgressBar
from teisho_downloader.download.downloader import Downloader
from teisho_downloader.download.tagger import Tagger
from teisho_downloader.episodes.inference import infer_metadata, prepare_destination
from teisho_downloader.episodes.models import (
    BatchReport,
    DownloadStatus,
    Episode,
    EpisodeFailure,
)
from teisho_downloader.episodes.ordering import organize_episodes
from teisho_downloader.listing.extractor import discover_episodes, fetch_listing

logger = get_logger(__name__)


USER_AGENT = "teisho-downloader (+https://github.com/teisho-downloader)"


def run_batch(
    config: Config,
    session: requests.Session | None = None,
    dry_run: bool = False,
    show_progress: bool = True
) -> BatchReport:
    """
    Run one complete batch: list, infer, order, download, tag, report.

    Args:
        config: Loaded configuration.
        session: HTTP session to use. A new one is created (and closed)
                 when None.
        dry_run: Stop after ordering and log the planned archive layout.
                 Nothing is written to disk.
        show_progress: Whether to display the Rich progress bar.

    Returns:
        BatchReport with counts and per-episode failures.

    Raises:
        ListingError: If the listing page cannot be fetched.
        InferenceError: If a filename yields a year outside [1970, 2015].
        UnexpectedStatusError: If a host answers with an unhandled status
                               and the config says to abort.
    """
    owns_session = session is None
    if session is None:
        session = requests.Session()
        session.headers["User-Agent"] = USER_AGENT

    try:
        episodes = _list_episodes(config, session)
        episodes = _infer_episodes(config, episodes, create_dirs=not dry_run)
        episodes = organize_episodes(episodes)

        report = BatchReport(total=len(episodes))

        if dry_run:
            _log_plan(episodes)
            return report

        downloader = Downloader(
            session=session,
            mirror_base_url=config.source.mirror_base_url,
            timeout=config.download.timeout,
            chunk_size=config.download.chunk_size,
            max_redirects=config.download.max_redirects,
            abort_on_unexpected_status=config.download.abort_on_unexpected_status
        )
        tagger = Tagger(
            album_artist=config.tagging.album_artist,
            album_prefix=config.tagging.album_prefix
        )

        with EpisodeProgressBar(total=len(episodes), enabled=show_progress) as progress:
            for position, episode in enumerate(episodes, start=1):
                logger.info(f"{position}. Processing: {episode}")
                status = process_episode(episode, downloader, tagger, report)
                progress.update(
                    success=status is DownloadStatus.DOWNLOADED,
                    skipped=status is DownloadStatus.SKIPPED
                )

        log_report(report)
        return report
    finally:
        if owns_session:
            session.close()


def process_episode(
    episode: Episode,
    downloader: Downloader,
    tagger: Tagger,
    report: BatchReport
) -> DownloadStatus:
    """
    Download and tag one episode, recording the outcome in `report`.

    Episodes already on disk are neither downloaded nor re-tagged.

    Returns:
        DOWNLOADED when the file was written and tagged, SKIPPED when it
        was already on disk, FAILED when an error was recorded.

    Raises:
        UnexpectedStatusError: Propagated from the downloader.
    """
    result = downloader.download(episode)

    if result.status is DownloadStatus.SKIPPED:
        report.skipped += 1
        return DownloadStatus.SKIPPED

    if result.status is DownloadStatus.FAILED:
        report.failures.append(EpisodeFailure(episode=episode, error=result.error or "Unknown error"))
        return DownloadStatus.FAILED

    report.downloaded += 1

    try:
        if tagger.tag(episode):
            report.tagged += 1
    except TaggingError as e:
        logger.error(f"Tagging failed: {episode.name} - {e.message}")
        report.failures.append(EpisodeFailure(episode=episode, error=e.message))
        return DownloadStatus.FAILED

    return DownloadStatus.DOWNLOADED


def log_report(report: BatchReport) -> None:
    """Log batch statistics and every episode that ended with an error."""
    logger.info("=" * 60)
    logger.info("BATCH SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Episodes found:    {report.total}")
    logger.info(f"Downloaded:        {report.downloaded}")
    logger.info(f"Already on disk:   {report.skipped}")
    logger.info(f"Tagged:            {report.tagged}")
    logger.info(f"In error:          {report.failed}")
    logger.info("=" * 60)

    logger.warning("Episodes in error:")
    if not report.failures:
        logger.warning("None")
        return

    for failure in report.failures:
        logger.warning(f"Episode: {failure.episode}")
        logger.warning(f"Error: {failure.error}")


def _list_episodes(config: Config, session: requests.Session) -> list[Episode]:
    lines = fetch_listing(session, config.source.listing_url, config.download.timeout)
    episodes = discover_episodes(lines)
    logger.info(f"{len(episodes)} episodes found. Processing.")
    return episodes


def _infer_episodes(config: Config, episodes: list[Episode], create_dirs: bool) -> list[Episode]:
    # Validate everything before touching the disk
    inferred = [infer_metadata(episode, config.output.directory) for episode in episodes]
    if create_dirs:
        for episode in inferred:
            prepare_destination(episode)
    return inferred


def _log_plan(episodes: list[Episode]) -> None:
    logger.info("Dry run: nothing will be downloaded")
    for episode in episodes:
        state = "exists" if episode.destination.exists() else "new"
        logger.info(f"[{state}] {episode.destination} (track {episode.track}): {episode.title}")
