"""
Episode link extraction from the listing page.

The listing is a blog search page that shows every episode post at once
(the max-results query parameter is set far above the archive size). Each
post contains a plain anchor to the episode's .mp3 file:

    <a href="http://example.org/podcasts/2009-3-talk.mp3">Talk title</a>

The page is scanned one line at a time; a line with such an anchor yields
one link. When a line holds several anchors the last one wins. Lines end
at LF, CR or CRLF only. No HTML parsing is attempted.
"""

import re
from html import unescape
from typing import Iterable, Iterator
from urllib.parse import unquote, urlparse

import requests

from teisho_downloader.core.exceptions import ListingError
from teisho_downloader.core.logger import get_logger
from teisho_downloader.episodes.models import Episode

logger = get_logger(__name__)


# Matched against the whole line; the greedy lead puts the last anchor in the groups
LINK_PATTERN = re.compile(r'.*<a href="([^"]+.mp3)"[^>]*>([^<]*)</a>.*')


def fetch_listing(session: requests.Session, url: str, timeout: float | None = None) -> Iterator[str]:
    """
    Fetch the listing page and yield its lines.

    Args:
        session: HTTP session to use.
        url: Listing page URL.
        timeout: Seconds to wait for the host.

    Yields:
        Lines of the page body, decoded as UTF-8.

    Raises:
        ListingError: If the page cannot be fetched or the host answers
                      with an error status.
    """
    logger.info(f"Fetching episode listing: {url}")
    try:
        with session.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            response.encoding = "utf-8"
            for line in response.iter_lines(decode_unicode=True, delimiter="\n"):
                # Split lone \r too, but nothing else str.splitlines() would
                yield from line.rstrip("\r").split("\r")
    except requests.RequestException as e:
        raise ListingError(
            f"Failed to fetch episode listing: {e}",
            details={"url": url, "original_error": str(e)}
        ) from e


def extract_links(lines: Iterable[str]) -> Iterator[tuple[str, str]]:
    """
    Yield (url, title) for every line holding an anchor to an .mp3 file.

    Lines without such an anchor, including malformed ones, yield nothing.
    When a line holds several anchors, the last one is used.
    """
    for line in lines:
        match = LINK_PATTERN.fullmatch(line)
        if match:
            yield match.group(1), unescape(match.group(2))


def filename_from_url(url: str) -> str:
    """
    Return the (decoded) last path segment of `url`.

    Example:
        filename_from_url("http://host/a/1973%20Oct%206.7.mp3")
        # Returns: "1973 Oct 6.7.mp3"
    """
    path = urlparse(url).path
    segments = [segment for segment in path.split("/") if segment]
    return unquote(segments[-1]) if segments else ""


def discover_episodes(lines: Iterable[str]) -> list[Episode]:
    """
    Build an Episode for every link in the listing, in page order.

    Discovery indexes start at 1 and increase with each link found.
    """
    return [
        Episode(
            source_url=url,
            title=title,
            discovery_index=index,
            name=filename_from_url(url),
        )
        for index, (url, title) in enumerate(extract_links(lines), start=1)
    ]
