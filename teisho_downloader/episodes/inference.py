"""
Year/month inference from episode filenames.

The archive's filenames are historical artifacts with no single format.
Most start with "YYYY-M-" or "YYYY-MM_"; the rest are a short, known list
of exceptions that get hardcoded dates. Anything else is logged as
unmatched and left at year 0, which then fails validation and aborts the
batch so that a rule can be added before files land in the wrong album.

Inference Rules (first match wins):
    1. "2005-3-talk.mp3", "2009-11_retreat.mp3"  -> date from the prefix
    2. "1973 Oct 6.7.mp3"                        -> (1973, 10)
    3. "07_10..."                                -> (2007, 10)
    4. anything else                             -> (0, 0), logged

Post-processing:
    - Year 3009 (a typo in the archive) becomes 2009
    - Album bucket: the year, or 1970 ("pre-millennial") before 2007
    - Year must lie in [1970, 2015]
"""

import re
from dataclasses import replace
from pathlib import Path

from teisho_downloader.core.exceptions import InferenceError
from teisho_downloader.core.logger import get_logger
from teisho_downloader.episodes.models import Episode

logger = get_logger(__name__)


DATE_PATTERN = re.compile(r"(\d\d\d\d)-(\d\d?)[-_].*")

# Filenames that match no pattern but whose date is known
EXACT_NAME_DATES: dict[str, tuple[int, int]] = {
    "1973 Oct 6.7.mp3": (1973, 10),
}

PREFIX_DATES: dict[str, tuple[int, int]] = {
    "07_10": (2007, 10),
}

# Known data-entry typos in the archive
YEAR_CORRECTIONS: dict[int, int] = {
    3009: 2009,
}

MIN_YEAR = 1970
MAX_YEAR = 2015

# Years before this one share a single album
ALBUM_CUTOFF_YEAR = 2007
PRE_MILLENNIAL_ALBUM = 1970


def infer_date(name: str) -> tuple[int, int]:
    """
    Infer (year, month) from an episode filename.

    Args:
        name: Filename such as "2005-3-talk.mp3".

    Returns:
        (year, month), or (0, 0) when no rule matches. Year corrections are
        already applied.
    """
    match = DATE_PATTERN.fullmatch(name)
    if match:
        year, month = int(match.group(1)), int(match.group(2))
    elif name in EXACT_NAME_DATES:
        year, month = EXACT_NAME_DATES[name]
    else:
        for prefix, date in PREFIX_DATES.items():
            if name.startswith(prefix):
                year, month = date
                break
        else:
            logger.warning(f"Unmatched: {name}")
            year, month = 0, 0

    return YEAR_CORRECTIONS.get(year, year), month


def album_for_year(year: int) -> int:
    """Return the album bucket for `year` (1970 for every year before 2007)."""
    return PRE_MILLENNIAL_ALBUM if year < ALBUM_CUTOFF_YEAR else year


def destination_for(output_dir: Path, year: int, name: str) -> Path:
    """Return {output_dir}/{year}/{name}."""
    return output_dir / str(year) / name


def infer_metadata(episode: Episode, output_dir: Path) -> Episode:
    """
    Fill in year, month, album and destination for an episode.

    Args:
        episode: Episode straight from the listing.
        output_dir: Archive root directory.

    Returns:
        A new Episode with the inferred fields set.

    Raises:
        InferenceError: If the inferred year is outside [1970, 2015]. This
                        aborts the batch.
    """
    year, month = infer_date(episode.name)
    inferred = replace(
        episode,
        year=year,
        month=month,
        album=album_for_year(year),
        destination=destination_for(output_dir, year, episode.name),
    )

    if year < MIN_YEAR or year > MAX_YEAR:
        raise InferenceError(
            f"Bad data for episode: {inferred}",
            details={"name": episode.name, "year": year, "url": episode.source_url}
        )

    return inferred


def prepare_destination(episode: Episode) -> None:
    """Create the year directory the episode will be saved into."""
    if episode.destination is not None:
        episode.destination.parent.mkdir(parents=True, exist_ok=True)
