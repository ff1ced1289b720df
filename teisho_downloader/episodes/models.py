"""
Data models for teisho-downloader.

Episode is the only entity. Each processing stage returns a new Episode
(dataclasses.replace) instead of mutating the one it was given, and the
download stage reports its outcome as a DownloadResult.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class Episode:
    """
    One downloadable audio item derived from one scraped link.

    Attributes:
        source_url: URL found in the listing page.
        title: Link text from the listing page.
        discovery_index: Position of the link in the listing (1-based).
                         Only used as a sort tie-breaker.
        name: Filename portion of source_url, e.g. "2009-3-talk.mp3".
        year: Year inferred from name, 0 if unmatched.
        month: Month inferred from name, 0 if unmatched.
        album: Album bucket: year, or 1970 for every year before 2007.
        track: Track number within the year, assigned after sorting.
        destination: Where the file is saved, {output_dir}/{year}/{name}.
    """

    source_url: str
    title: str
    discovery_index: int
    name: str
    year: int = 0
    month: int = 0
    album: int = 0
    track: int = 0
    destination: Path | None = None

    def __str__(self) -> str:
        return (
            f"Episode [idx={self.discovery_index}, name={self.name}, title={self.title}, "
            f"year={self.year}, month={self.month}, track={self.track}]"
        )


class DownloadStatus(Enum):
    """Outcome of the download step for one episode."""
    DOWNLOADED = "downloaded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class DownloadResult:
    """
    Result of downloading one episode.

    Attributes:
        episode: The episode that was processed (unchanged).
        status: DOWNLOADED, SKIPPED (already on disk) or FAILED.
        final_url: Last URL requested. Differs from episode.source_url after
                   redirects or a switch to the mirror.
        error: Human-readable reason when status is FAILED.
        redirects: Number of redirect hops followed.
        used_mirror: Whether the fallback mirror was tried.
    """

    episode: Episode
    status: DownloadStatus
    final_url: str
    error: str | None = None
    redirects: int = 0
    used_mirror: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status is DownloadStatus.DOWNLOADED


@dataclass(frozen=True)
class EpisodeFailure:
    """An episode that ended the run with an error, for the final report."""

    episode: Episode
    error: str


@dataclass
class BatchReport:
    """
    Statistics and failures from one batch run.

    Attributes:
        total: Episodes discovered in the listing.
        downloaded: Files written this run.
        skipped: Episodes already on disk.
        tagged: Files whose tags were written this run.
        failures: Episodes with a recorded error, in processing order.
    """

    total: int = 0
    downloaded: int = 0
    skipped: int = 0
    tagged: int = 0
    failures: list[EpisodeFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)
