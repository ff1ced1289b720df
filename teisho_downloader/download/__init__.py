"""
Download module for teisho-downloader.

Components:
    - Downloader: Fetches one episode's audio, following redirects and
      falling back to the mirror on connection failure
    - Tagger: Writes ID3 tags into the downloaded file

Usage:
    from teisho_downloader.download import Downloader, Tagger

    downloader = Downloader(session, mirror_base_url)
    tagger = Tagger()

    result = downloader.download(episode)
    if result.succeeded:
        tagger.tag(episode)
"""

from teisho_downloader.download.downloader import REDIRECT_STATUSES, Downloader
from teisho_downloader.download.tagger import Tagger

__all__ = [
    "Downloader",
    "REDIRECT_STATUSES",
    "Tagger",
]
