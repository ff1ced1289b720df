"""
ID3 tag writing for downloaded episodes.

Every episode gets a fresh ID3v2 tag that replaces whatever tag the file
came with:

    Field         ID3 frame   Value
    -----------   ---------   ------------------------------------------
    album artist  TPE2        "Rochester Zen Center" (configurable)
    title         TIT2        link text from the listing page
    album         TALB        "Teishos (2009)", or "Teishos (pre-millennial)"
                              for the shared pre-2007 album
    year          TDRC        inferred year (stored as TYER in v2.3)
    track         TRCK        track number within the year

Tags are saved as ID3v2.3 by default, the version most players read.
"""

from pathlib import Path

from mutagen import MutagenError
from mutagen.id3 import ID3, TALB, TDRC, TIT2, TPE2, TRCK

from teisho_downloader.core.config import DEFAULT_ALBUM_ARTIST, DEFAULT_ALBUM_PREFIX
from teisho_downloader.core.exceptions import TaggingError
from teisho_downloader.core.logger import get_logger
from teisho_downloader.episodes.inference import PRE_MILLENNIAL_ALBUM
from teisho_downloader.episodes.models import Episode

logger = get_logger(__name__)


PRE_MILLENNIAL_LABEL = "pre-millennial"

# mutagen text encoding: 1 = UTF-16 with BOM (valid in v2.3), 3 = UTF-8 (v2.4 only)
_ENCODING_FOR_VERSION = {3: 1, 4: 3}


class Tagger:
    """
    Writes ID3 tags into downloaded episode files.

    Attributes:
        album_artist: TPE2 value written into every file.
        album_prefix: Album names are "{album_prefix} ({year})".
        id3_version: ID3v2 minor version to save (3 or 4).
    """

    def __init__(
        self,
        album_artist: str = DEFAULT_ALBUM_ARTIST,
        album_prefix: str = DEFAULT_ALBUM_PREFIX,
        id3_version: int = 3
    ) -> None:
        if id3_version not in _ENCODING_FOR_VERSION:
            raise ValueError(f"Unsupported ID3v2 version: 2.{id3_version}")
        self.album_artist = album_artist
        self.album_prefix = album_prefix
        self.id3_version = id3_version

    def album_name(self, episode: Episode) -> str:
        """Return the album name for an episode's album bucket."""
        if episode.album == PRE_MILLENNIAL_ALBUM:
            return f"{self.album_prefix} ({PRE_MILLENNIAL_LABEL})"
        return f"{self.album_prefix} ({episode.year})"

    def tag(self, episode: Episode) -> bool:
        """
        Replace the ID3 tag of an episode's file.

        Args:
            episode: Episode with destination, year, album and track set.

        Returns:
            True if tags were written, False if there is no file to tag
            (its download failed).

        Raises:
            TaggingError: If mutagen cannot write the file.
        """
        path = episode.destination
        if path is None or not path.exists():
            return False

        logger.info(f"Tagging: {episode.name} with title: {episode.title}")
        self._write_tags(path, self._build_tags(episode))
        logger.debug(f"Tagging: {episode.name} complete.")
        return True

    def _build_tags(self, episode: Episode) -> ID3:
        encoding = _ENCODING_FOR_VERSION[self.id3_version]
        tags = ID3()
        tags.add(TPE2(encoding=encoding, text=self.album_artist))
        tags.add(TIT2(encoding=encoding, text=episode.title))
        tags.add(TALB(encoding=encoding, text=self.album_name(episode)))
        tags.add(TDRC(encoding=encoding, text=str(episode.year)))
        tags.add(TRCK(encoding=encoding, text=str(episode.track)))
        if self.id3_version == 3:
            # TDRC has no v2.3 equivalent; this rewrites it as TYER
            tags.update_to_v23()
        return tags

    def _write_tags(self, path: Path, tags: ID3) -> None:
        try:
            tags.save(path, v2_version=self.id3_version)
        except (MutagenError, OSError) as e:
            raise TaggingError(
                f"Failed to write tags: {e}",
                details={"file_path": str(path), "original_error": str(e)}
            ) from e
