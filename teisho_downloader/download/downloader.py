"""
Episode audio downloader for teisho-downloader.

This module fetches each episode's .mp3 file over HTTP and saves it to the
episode's destination path.

Download Workflow (one episode):
    1. Skip if the destination file already exists
    2. Request the current URL without automatic redirects
    3. React to the outcome:
       - connection failure: switch once to the fallback mirror, then give up
       - read timeout (only with a configured timeout): give up on this episode
       - 200: stream the body to {destination}.part, then rename into place
       - 301/302/303/307/308: follow the Location header and try again
       - 403: give up on this episode
       - any other status: abort the batch (or give up on this episode,
         when abort_on_unexpected_status is False)
    4. Return a DownloadResult describing what happened

Redirects are followed by hand so that every hop is logged and so that
spaces in Location headers (which the archive's host sends unencoded) can
be fixed before the next request.

Usage:
    from teisho_downloader.download.downloader import Downloader

    downloader = Downloader(session, mirror_base_url="https://mirror.example/podcasts")
    result = downloader.download(episode)
    if result.error:
        print(result.error)
"""

from pathlib import Path
from urllib.parse import quote, urljoin

import requests

from teisho_downloader.core.exceptions import DownloadError, UnexpectedStatusError
from teisho_downloader.core.logger import get_logger, log_download_failure
from teisho_downloader.episodes.models import DownloadResult, DownloadStatus, Episode

logger = get_logger(__name__)


HTTP_OK = 200
HTTP_FORBIDDEN = 403
REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})

# Connection failures tolerated per episode; the first one switches to the mirror
MAX_CONNECTION_FAILURES = 2

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_MAX_REDIRECTS = 10

PARTIAL_SUFFIX = ".part"


class Downloader:
    """
    Downloads episode audio files, one at a time.

    Attributes:
        _session: requests.Session shared by every request of the run.
        _mirror_base_url: Base URL tried once after a connection failure.
        _timeout: Seconds to wait for the host (None leaves it to the transport).
        _chunk_size: Bytes per chunk when streaming to disk.
        _max_redirects: Redirect hops followed before giving up on an episode.
        _abort_on_unexpected_status: Whether an unknown status aborts the batch.
    """

    def __init__(
        self,
        session: requests.Session,
        mirror_base_url: str,
        timeout: float | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        abort_on_unexpected_status: bool = True
    ) -> None:
        self._session = session
        self._mirror_base_url = mirror_base_url.rstrip("/")
        self._timeout = timeout
        self._chunk_size = chunk_size
        self._max_redirects = max_redirects
        self._abort_on_unexpected_status = abort_on_unexpected_status

    def mirror_url(self, name: str) -> str:
        """Return the fallback mirror URL for an episode filename."""
        return f"{self._mirror_base_url}/{quote(name)}"

    def download(self, episode: Episode) -> DownloadResult:
        """
        Download one episode to its destination.

        Args:
            episode: Episode with `destination` set (see infer_metadata()).

        Returns:
            DownloadResult with status DOWNLOADED, SKIPPED or FAILED. A FAILED
            result carries a human-readable error and leaves no file behind.

        Raises:
            UnexpectedStatusError: If the host answers with a status outside
                200, redirects and 403 and abort_on_unexpected_status is set.
                This is meant to stop the whole batch.
        """
        destination = episode.destination
        if destination is None:
            raise ValueError(f"Episode has no destination: {episode}")

        if destination.exists():
            logger.info(f"{episode.name} already downloaded. Skipping.")
            return DownloadResult(
                episode=episode,
                status=DownloadStatus.SKIPPED,
                final_url=episode.source_url
            )

        url = episode.source_url
        connection_failures = 0
        redirects = 0
        used_mirror = False

        while True:
            try:
                response = self._session.get(
                    url,
                    stream=True,
                    allow_redirects=False,
                    timeout=self._timeout
                )
            except requests.ConnectionError as e:
                # Includes ConnectTimeout: the host was never reached
                connection_failures += 1
                error = f"Failure while getting file: {e}. Source url: {url}"
                if connection_failures >= MAX_CONNECTION_FAILURES:
                    return self._failed(episode, url, error, redirects, used_mirror)
                url = self.mirror_url(episode.name)
                used_mirror = True
                logger.warning(f"{error}. Trying {url} instead.")
                continue
            except requests.Timeout as e:
                # The host answered the connection but not in time; the mirror is not tried
                error = f"Timed out waiting for file: {e}. Source url: {url}"
                return self._failed(episode, url, error, redirects, used_mirror)

            with response:
                status = response.status_code

                if status == HTTP_OK:
                    logger.info(f"{episode.discovery_index}: Downloading {episode.name}")
                    try:
                        self._save(response, destination)
                    except DownloadError as e:
                        return self._failed(episode, url, e.message, redirects, used_mirror)
                    logger.debug(f"Saved {episode.name} -> {destination}")
                    return DownloadResult(
                        episode=episode,
                        status=DownloadStatus.DOWNLOADED,
                        final_url=url,
                        redirects=redirects,
                        used_mirror=used_mirror
                    )

                if status in REDIRECT_STATUSES:
                    location = response.headers.get("Location")
                    if not location:
                        error = f"Redirect without Location header from {url}. Status: {status}"
                        return self._failed(episode, url, error, redirects, used_mirror)
                    redirects += 1
                    if redirects > self._max_redirects:
                        error = f"Too many redirects ({redirects}) for {episode.source_url}"
                        return self._failed(episode, url, error, redirects, used_mirror)
                    url = urljoin(url, location).replace(" ", "%20")
                    logger.info(f"Redirecting to {url}")
                    continue

                if status == HTTP_FORBIDDEN:
                    return self._failed(
                        episode, url, f"Access denied to {url}", redirects, used_mirror
                    )

                error = f"Failure to download file {url}. Status: {status}"
                if self._abort_on_unexpected_status:
                    raise UnexpectedStatusError(
                        error,
                        status_code=status,
                        details={"name": episode.name, "url": url}
                    )
                return self._failed(episode, url, error, redirects, used_mirror)

    def _save(self, response: requests.Response, destination: Path) -> None:
        """
        Stream the response body to destination.

        The body goes to a sibling .part file that is renamed once complete,
        so an interrupted copy never leaves a file that later runs would
        take for a finished download.

        Raises:
            DownloadError: If the stream breaks or the file cannot be written.
        """
        partial_path = destination.with_name(destination.name + PARTIAL_SUFFIX)
        try:
            with open(partial_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=self._chunk_size):
                    if chunk:
                        f.write(chunk)
            partial_path.replace(destination)
        except (requests.RequestException, OSError) as e:
            partial_path.unlink(missing_ok=True)
            raise DownloadError(
                f"Failure while saving file: {e}",
                details={"file_path": str(destination), "original_error": str(e)}
            ) from e

    def _failed(
        self,
        episode: Episode,
        url: str,
        error: str,
        redirects: int,
        used_mirror: bool
    ) -> DownloadResult:
        log_download_failure(logger, name=episode.name, url=url, error_message=error)
        return DownloadResult(
            episode=episode,
            status=DownloadStatus.FAILED,
            final_url=url,
            error=error,
            redirects=redirects,
            used_mirror=used_mirror
        )
