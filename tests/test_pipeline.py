"""Test batch orchestration"""

import pytest
import requests
from mutagen.id3 import ID3

from conftest import (
    FAKE_MP3,
    HOST,
    LISTING_URL,
    MIRROR_BASE_URL,
    FakeResponse,
    FakeSession,
    listing_response,
)
from teisho_downloader import pipeline
from teisho_downloader.core.exceptions import (
    InferenceError,
    ListingError,
    TaggingError,
    UnexpectedStatusError,
)
from teisho_downloader.download.tagger import Tagger
from teisho_downloader.episodes.models import BatchReport, EpisodeFailure
from teisho_downloader.pipeline import log_report, run_batch

RECENT = f"{HOST}/2009-3-talk.mp3"
OLDER = f"{HOST}/2006-1-winter.mp3"
EARLIEST = f"{HOST}/1973%20Oct%206.7.mp3"


def archive_session(**overrides):
    """Listing with three episodes, newest first, each served successfully"""
    routes = {
        LISTING_URL: listing_response(
            (RECENT, "Spring Talk"),
            (OLDER, "Winter Talk"),
            (EARLIEST, "Early Talk"),
        ),
        RECENT: FakeResponse(body=FAKE_MP3),
        OLDER: FakeResponse(body=FAKE_MP3),
        EARLIEST: FakeResponse(body=FAKE_MP3),
    }
    routes.update(overrides)
    return FakeSession(routes)


def media_requests(session):
    return [url for url in session.requested if url != LISTING_URL]


class TestRunBatch:
    """Test complete runs"""

    def test_downloads_and_tags_every_episode(self, config, temp_dir):
        session = archive_session()

        report = run_batch(config, session=session, show_progress=False)

        assert (report.total, report.downloaded, report.tagged, report.failed) == (3, 3, 3, 0)
        assert session.requested == [LISTING_URL, EARLIEST, OLDER, RECENT]

        tags = ID3(temp_dir / "1973" / "1973 Oct 6.7.mp3")
        assert tags["TALB"].text == ["Teishos (pre-millennial)"]
        assert tags["TIT2"].text == ["Early Talk"]
        assert tags["TRCK"].text == ["1"]

        tags = ID3(temp_dir / "2009" / "2009-3-talk.mp3")
        assert tags["TALB"].text == ["Teishos (2009)"]
        assert str(tags["TDRC"].text[0]) == "2009"

    def test_forbidden_episode_does_not_stop_batch(self, config, temp_dir):
        session = archive_session(**{OLDER: FakeResponse(status_code=403)})

        report = run_batch(config, session=session, show_progress=False)

        assert (report.downloaded, report.tagged, report.failed) == (2, 2, 1)
        assert report.failures[0].episode.name == "2006-1-winter.mp3"
        assert report.failures[0].error == f"Access denied to {OLDER}"
        assert not (temp_dir / "2006" / "2006-1-winter.mp3").exists()
        assert (temp_dir / "2009" / "2009-3-talk.mp3").exists()

    def test_mirror_recovery_is_not_reported(self, config):
        session = archive_session(**{
            RECENT: requests.ConnectionError("Connection refused"),
            f"{MIRROR_BASE_URL}/2009-3-talk.mp3": FakeResponse(body=FAKE_MP3),
        })

        report = run_batch(config, session=session, show_progress=False)

        assert report.failures == []
        assert report.downloaded == 3

    def test_rerun_makes_no_downloads_and_no_tags(self, config, monkeypatch):
        run_batch(config, session=archive_session(), show_progress=False)

        tag_calls = []
        monkeypatch.setattr(Tagger, "tag", lambda self, episode: tag_calls.append(episode))
        session = archive_session()

        report = run_batch(config, session=session, show_progress=False)

        assert media_requests(session) == []
        assert tag_calls == []
        assert (report.skipped, report.downloaded, report.tagged) == (3, 0, 0)

    def test_tagging_failure_is_reported(self, config, monkeypatch):
        def fail(self, episode):
            raise TaggingError("Failed to write tags: disk full")

        monkeypatch.setattr(Tagger, "tag", fail)

        report = run_batch(config, session=archive_session(), show_progress=False)

        assert report.downloaded == 3
        assert report.failed == 3
        assert report.failures[0].error == "Failed to write tags: disk full"

    def test_unmatched_filename_aborts_before_downloading(self, config, temp_dir):
        session = FakeSession({
            LISTING_URL: listing_response((RECENT, "Spring Talk"), (f"{HOST}/untitled.mp3", "Mystery")),
        })

        with pytest.raises(InferenceError):
            run_batch(config, session=session, show_progress=False)

        assert session.requested == [LISTING_URL]
        assert list(temp_dir.iterdir()) == []

    def test_unexpected_status_aborts_batch(self, config):
        session = archive_session(**{EARLIEST: FakeResponse(status_code=500)})

        with pytest.raises(UnexpectedStatusError):
            run_batch(config, session=session, show_progress=False)

        assert media_requests(session) == [EARLIEST]

    def test_listing_failure(self, config):
        session = FakeSession({LISTING_URL: requests.ConnectionError("Name or service not known")})

        with pytest.raises(ListingError):
            run_batch(config, session=session, show_progress=False)

    def test_dry_run_touches_nothing(self, config, temp_dir):
        session = archive_session()

        report = run_batch(config, session=session, dry_run=True, show_progress=False)

        assert report.total == 3
        assert report.downloaded == 0
        assert media_requests(session) == []
        assert list(temp_dir.iterdir()) == []

    def test_creates_and_closes_own_session(self, config, monkeypatch):
        session = archive_session()
        monkeypatch.setattr(pipeline.requests, "Session", lambda: session)

        run_batch(config, show_progress=False)

        assert session.closed
        assert session.headers["User-Agent"] == pipeline.USER_AGENT

    def test_given_session_is_left_open(self, config):
        session = archive_session()

        run_batch(config, session=session, show_progress=False)

        assert not session.closed


class TestLogReport:
    """Test the final report"""

    def test_lists_episodes_in_error(self, make_episode, caplog):
        episode = make_episode()
        report = BatchReport(total=2, downloaded=1, tagged=1)
        report.failures.append(EpisodeFailure(episode=episode, error="Access denied to x"))

        log_report(report)

        assert "Episodes in error:" in caplog.text
        assert str(episode) in caplog.text
        assert "Access denied to x" in caplog.text

    def test_clean_run_still_prints_header(self, caplog):
        log_report(BatchReport(total=1, downloaded=1, tagged=1))

        assert "Episodes in error:" in caplog.text
        assert "None" in caplog.text
        assert "Episode:" not in caplog.text
