"""
Episode model, metadata inference and ordering.

Usage:
    from teisho_downloader.episodes import infer_metadata, organize_episodes

    episodes = [infer_metadata(e, output_dir) for e in discovered]
    episodes = organize_episodes(episodes)
"""

from teisho_downloader.episodes.inference import (
    album_for_year,
    infer_date,
    infer_metadata,
    prepare_destination,
)
from teisho_downloader.episodes.models import (
    BatchReport,
    DownloadResult,
    DownloadStatus,
    Episode,
    EpisodeFailure,
)
from teisho_downloader.episodes.ordering import (
    assign_tracks,
    episode_sort_key,
    order_episodes,
    organize_episodes,
)

__all__ = [
    # Models
    "Episode",
    "DownloadStatus",
    "DownloadResult",
    "EpisodeFailure",
    "BatchReport",
    # Inference
    "infer_date",
    "infer_metadata",
    "album_for_year",
    "prepare_destination",
    # Ordering
    "episode_sort_key",
    "order_episodes",
    "assign_tracks",
    "organize_episodes",
]
