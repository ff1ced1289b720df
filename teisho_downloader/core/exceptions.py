"""
Exception classes for teisho-downloader.

This module defines all custom exceptions used throughout the application.
Each exception distinguishes a failure mode by how far it reaches: some
stop the whole batch, others only end the processing of one episode.

Exception Hierarchy:
    TeishoDownloaderError (base)
        ConfigError - Configuration file issues (fatal)
        ListingError - Listing page could not be fetched (fatal)
        InferenceError - Filename date outside the accepted range (batch-fatal)
        DownloadError - Audio download issues (per-episode)
            UnexpectedStatusError - HTTP status we have no rule for (batch-fatal)
        TaggingError - ID3 tag writing issues (per-episode)
"""


class TeishoDownloaderError(Exception):
    """
    Base exception for all teisho-downloader errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch every teisho-downloader error with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., episode name, URL).

    Example:
        try:
            run_batch(config)
        except TeishoDownloaderError as e:
            logger.error(f"Batch failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'name': Episode filename involved in the error
                     - 'url': URL that caused the error
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(TeishoDownloaderError):
    """
    Raised when there's an issue with the configuration file.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml not found
        - config.yaml has invalid YAML syntax
        - Required field missing (output.directory)
        - Invalid field values (e.g., non-positive timeout)
    """
    pass


class ListingError(TeishoDownloaderError):
    """
    Raised when the episode listing page cannot be fetched.

    This is a CRITICAL error: without the listing there is nothing to do.
    """
    pass


class InferenceError(TeishoDownloaderError):
    """
    Raised when a filename yields a year outside the accepted range.

    This aborts the whole batch. It means the listing contains a filename
    format that none of the known rules recognize, and an operator has to
    add a rule before anything is downloaded into the wrong album.

    Example:
        raise InferenceError(
            "Bad data for episode: untitled.mp3",
            details={'name': 'untitled.mp3', 'year': 0}
        )
    """
    pass


class DownloadError(TeishoDownloaderError):
    """
    Raised when an episode's audio file cannot be downloaded.

    This is a NON-CRITICAL error - the batch continues with the next episode
    and the failure is listed in the final report.

    Common causes:
        - Primary host and mirror both unreachable
        - HTTP 403 from the host
        - Connection dropped while streaming the body
        - Redirect loop
    """
    pass


class UnexpectedStatusError(DownloadError):
    """
    Raised when the host answers with a status outside 200, redirects and 403.

    Unlike its parent this aborts the batch (unless configured otherwise),
    since it signals that an assumption about the hosts no longer holds.

    Attributes:
        status_code: The HTTP status returned by the host.
    """

    def __init__(self, message: str, status_code: int, details: dict | None = None) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class TaggingError(TeishoDownloaderError):
    """
    Raised when ID3 tags cannot be written into a downloaded file.

    This is a NON-CRITICAL error - the audio is on disk and usable, so the
    episode is reported for follow-up and the batch continues.

    Example:
        raise TaggingError(
            "Failed to write tags: permission denied",
            details={'file_path': '/music/2009/2009-3-talk.mp3'}
        )
    """
    pass
