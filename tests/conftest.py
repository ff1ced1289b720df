"""Test configuration and fixtures"""

import tempfile
from pathlib import Path

import pytest
import requests

from teisho_downloader.core.config import (
    DEFAULT_ALBUM_ARTIST,
    DEFAULT_ALBUM_PREFIX,
    Config,
    DownloadConfig,
    OutputConfig,
    SourceConfig,
    TaggingConfig,
)
from teisho_downloader.episodes.models import Episode

LISTING_URL = "http://listing.test/search?max-results=10000"
MIRROR_BASE_URL = "https://mirror.test/podcasts"
HOST = "http://host.test/podcasts"

# Enough bytes for mutagen to treat the file as something it can tag
FAKE_MP3 = b"\xff\xfb\x90\x00" + b"\x00" * 1024


class FakeResponse:
    """Stand-in for requests.Response covering what the code under test touches"""

    def __init__(self, status_code=200, body=b"", headers=None, lines=None, broken=False):
        self.status_code = status_code
        self.body = body
        self.headers = headers or {}
        self.lines = lines or []
        self.broken = broken
        self.encoding = None
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.closed = True

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def iter_lines(self, decode_unicode=False, delimiter=None):
        yield from self.lines

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.body), chunk_size):
            yield self.body[start:start + chunk_size]
        if self.broken:
            raise requests.ConnectionError("Connection reset by peer")


class FakeSession:
    """
    Stand-in for requests.Session.

    `routes` maps a URL to a response or exception, or to a list of them
    that is consumed one per request. Requests for unknown URLs fail the
    test.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.headers = {}
        self.requested = []
        self.closed = False

    def get(self, url, **kwargs):
        self.requested.append(url)
        assert url in self.routes, f"Unexpected request: {url}"
        outcome = self.routes[url]
        if isinstance(outcome, list):
            outcome = outcome.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


def anchor(url, title):
    return f'<div class="post-body"><a href="{url}">{title}</a></div>'


def listing_response(*links):
    """Listing page holding one anchor line per (url, title) pair"""
    lines = ["<html>", "<body>"]
    lines.extend(anchor(url, title) for url, title in links)
    lines.extend(["</body>", "</html>"])
    return FakeResponse(lines=lines)


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def config(temp_dir):
    """Configuration pointing at the fake hosts and a temporary archive"""
    return Config(
        source=SourceConfig(listing_url=LISTING_URL, mirror_base_url=MIRROR_BASE_URL),
        output=OutputConfig(directory=temp_dir),
        download=DownloadConfig(
            timeout=5.0,
            chunk_size=256,
            max_redirects=10,
            abort_on_unexpected_status=True,
        ),
        tagging=TaggingConfig(album_artist=DEFAULT_ALBUM_ARTIST, album_prefix=DEFAULT_ALBUM_PREFIX),
    )


@pytest.fixture
def make_episode(temp_dir):
    """Factory for episodes with metadata already inferred"""

    def _make(name="2009-3-talk.mp3", year=2009, month=3, track=1, index=1, title="A talk", album=None):
        return Episode(
            source_url=f"{HOST}/{name}",
            title=title,
            discovery_index=index,
            name=name,
            year=year,
            month=month,
            album=year if album is None else album,
            track=track,
            destination=temp_dir / str(year) / name,
        )

    return _make
