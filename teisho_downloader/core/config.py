"""
Configuration management for teisho-downloader.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml.

The configuration file contains:
    - Output directory for downloaded episodes (required)
    - Listing page URL and fallback mirror base URL
    - Download behavior (timeout, chunk size, redirect limit, status policy)
    - Tag values written into every file

Configuration File Location:
    By default config.yaml is read from the current working directory.
    The CLI accepts --config to point elsewhere.

Example config.yaml:
    output:
      directory: "~/Music/Teishos"

    source:
      listing_url: "http://rzcpodcasts.blogspot.com/search?max-results=10000"
      mirror_base_url: "https://s3-us-west-1.amazonaws.com/rzc/podcasts"

    download:
      timeout: null          # seconds; null waits as long as the host does
      chunk_size: 65536
      max_redirects: 10
      abort_on_unexpected_status: true

    tagging:
      album_artist: "Rochester Zen Center"
      album_prefix: "Teishos"
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from teisho_downloader.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

DEFAULT_LISTING_URL = "http://rzcpodcasts.blogspot.com/search?max-results=10000"
DEFAULT_MIRROR_BASE_URL = "https://s3-us-west-1.amazonaws.com/rzc/podcasts"
DEFAULT_TIMEOUT = None
DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_MAX_REDIRECTS = 10
DEFAULT_ALBUM_ARTIST = "Rochester Zen Center"
DEFAULT_ALBUM_PREFIX = "Teishos"


@dataclass(frozen=True)
class SourceConfig:
    """
    Where episodes come from.

    Attributes:
        listing_url: Page scanned line by line for links to .mp3 files.
        mirror_base_url: Base URL tried once per episode when the primary
                         host refuses the connection. The episode filename
                         is appended to it.
    """
    listing_url: str
    mirror_base_url: str


@dataclass(frozen=True)
class OutputConfig:
    """
    Output directory configuration.

    Attributes:
        directory: Absolute path of the archive root. Episodes are saved as
                   {directory}/{year}/{filename}. Path expansion is performed
                   (~ is expanded to home directory).
    """
    directory: Path


@dataclass(frozen=True)
class DownloadConfig:
    """
    Download behavior configuration.

    Attributes:
        timeout: Seconds to wait for the host to connect or send data. None
                 (the default) leaves waiting to the transport. A slow host
                 that hits this limit fails the episode; only a refused
                 connection falls back to the mirror.
        chunk_size: Bytes per chunk when streaming a body to disk.
        max_redirects: Redirect hops followed for one episode before giving up.
        abort_on_unexpected_status: When True, a status outside 200, redirects
                   and 403 stops the whole batch. When False it is recorded
                   against the episode like a 403.
    """
    timeout: float | None
    chunk_size: int
    max_redirects: int
    abort_on_unexpected_status: bool


@dataclass(frozen=True)
class TaggingConfig:
    """
    Values written into the ID3 tag of every episode.

    Attributes:
        album_artist: TPE2 frame value.
        album_prefix: Album names are "{album_prefix} ({year})".
    """
    album_artist: str
    album_prefix: str


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable (frozen dataclass).

    Example:
        config = load_config()
        print(f"Saving to: {config.output.directory}")
        print(f"Mirror: {config.source.mirror_base_url}")
    """
    source: SourceConfig
    output: OutputConfig
    download: DownloadConfig
    tagging: TaggingConfig


def load_config(config_path: Path | None = None, output_dir: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory.
        output_dir: Optional override for output.directory. When given, the
                    config file may omit the output section, and a missing
                    config file is not an error (all defaults are used).

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If the config file is not found, has invalid YAML syntax,
                     is missing required fields, or contains invalid values.

    Example:
        try:
            config = load_config()
        except ConfigError as e:
            print(f"Configuration error: {e.message}")
            sys.exit(1)
    """
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if config_path.exists():
        raw_config = _read_config_file(config_path)
    elif output_dir is not None:
        raw_config = {}
    else:
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    _validate_config(raw_config)

    if output_dir is not None:
        output_config = OutputConfig(directory=output_dir.expanduser().resolve())
    else:
        output_config = _parse_output_config(raw_config.get("output"))

    return Config(
        source=_parse_source_config(raw_config.get("source")),
        output=output_config,
        download=_parse_download_config(raw_config.get("download")),
        tagging=_parse_tagging_config(raw_config.get("tagging")),
    )


def _read_config_file(config_path: Path) -> dict[str, Any]:
    """Read config_path and return its YAML mapping."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except IOError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    # An empty file parses to None
    if raw_config is None:
        return {}

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return raw_config


def _validate_config(raw_config: dict[str, Any]) -> None:
    """
    Check that every present section is a dictionary.

    Raises:
        ConfigError: If a section has the wrong shape.
    """
    for section in ("source", "output", "download", "tagging"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )


def _parse_output_config(output_section: dict[str, Any] | None) -> OutputConfig:
    """
    Parse and validate the output configuration section.

    Expands ~ to home directory and converts to absolute Path.
    Does NOT create the directory (year directories are created during inference).

    Raises:
        ConfigError: If directory is missing or empty.
    """
    directory = (output_section or {}).get("directory", "")

    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError(
            "'output.directory' must be a non-empty string",
            details={"field": "output.directory"}
        )

    return OutputConfig(directory=Path(directory.strip()).expanduser().resolve())


def _parse_source_config(source_section: dict[str, Any] | None) -> SourceConfig:
    """Parse the source section, applying defaults for missing URLs."""
    section = source_section or {}
    listing_url = _parse_url(section, "listing_url", DEFAULT_LISTING_URL)
    mirror_base_url = _parse_url(section, "mirror_base_url", DEFAULT_MIRROR_BASE_URL)
    return SourceConfig(
        listing_url=listing_url,
        mirror_base_url=mirror_base_url.rstrip("/")
    )


def _parse_url(section: dict[str, Any], key: str, default: str) -> str:
    value = section.get(key)
    if value is None:
        return default
    if not isinstance(value, str) or not value.startswith(("http://", "https://")):
        raise ConfigError(
            f"'source.{key}' must be an http(s) URL",
            details={"field": f"source.{key}", "value": value}
        )
    return value.strip()


def _parse_download_config(download_section: dict[str, Any] | None) -> DownloadConfig:
    """
    Parse and validate the download configuration section.

    Applies defaults if section is missing or fields are not specified.

    Raises:
        ConfigError: If a numeric field is not positive, or the status
                     policy is not a boolean.
    """
    timeout = DEFAULT_TIMEOUT
    chunk_size = DEFAULT_CHUNK_SIZE
    max_redirects = DEFAULT_MAX_REDIRECTS
    abort_on_unexpected_status = True

    if download_section is not None:
        raw_timeout = download_section.get("timeout")
        if raw_timeout is not None:
            # bool is an int subclass; reject it explicitly
            if isinstance(raw_timeout, bool) or not isinstance(raw_timeout, (int, float)) or raw_timeout <= 0:
                raise ConfigError(
                    "'download.timeout' must be a positive number",
                    details={"field": "download.timeout", "value": raw_timeout}
                )
            timeout = float(raw_timeout)

        chunk_size = _parse_positive_int(download_section, "chunk_size", chunk_size)
        max_redirects = _parse_positive_int(download_section, "max_redirects", max_redirects)

        raw_abort = download_section.get("abort_on_unexpected_status")
        if raw_abort is not None:
            if not isinstance(raw_abort, bool):
                raise ConfigError(
                    "'download.abort_on_unexpected_status' must be true or false",
                    details={"field": "download.abort_on_unexpected_status", "value": raw_abort}
                )
            abort_on_unexpected_status = raw_abort

    return DownloadConfig(
        timeout=timeout,
        chunk_size=chunk_size,
        max_redirects=max_redirects,
        abort_on_unexpected_status=abort_on_unexpected_status
    )


def _parse_positive_int(section: dict[str, Any], key: str, default: int) -> int:
    value = section.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(
            f"'download.{key}' must be a positive integer",
            details={"field": f"download.{key}", "value": value}
        )
    return value


def _parse_tagging_config(tagging_section: dict[str, Any] | None) -> TaggingConfig:
    """Parse the tagging section, applying defaults for missing values."""
    section = tagging_section or {}
    values = {}
    for key, default in (("album_artist", DEFAULT_ALBUM_ARTIST), ("album_prefix", DEFAULT_ALBUM_PREFIX)):
        value = section.get(key, default)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(
                f"'tagging.{key}' must be a non-empty string",
                details={"field": f"tagging.{key}"}
            )
        values[key] = value.strip()
    return TaggingConfig(**values)
