"""
Episode ordering and track numbering.

Episodes are sorted by year, then month, then by discovery index in
descending order. The listing page shows episodes newest first, so within
one month the link found later is the older talk and comes first.

Track numbers restart at 1 with every new year.
"""

from dataclasses import replace
from typing import Iterable

from teisho_downloader.episodes.models import Episode


def episode_sort_key(episode: Episode) -> tuple[int, int, int]:
    """Sort key: ascending year and month, descending discovery index."""
    return (episode.year, episode.month, -episode.discovery_index)


def order_episodes(episodes: Iterable[Episode]) -> list[Episode]:
    """Return the episodes in archive order."""
    return sorted(episodes, key=episode_sort_key)


def assign_tracks(ordered: Iterable[Episode]) -> list[Episode]:
    """
    Number already-ordered episodes, restarting at 1 on every year change.

    Args:
        ordered: Episodes in archive order (see order_episodes()).

    Returns:
        New Episodes with `track` set. Within one year the numbers form
        the contiguous run 1..n.
    """
    numbered = []
    current_year = None
    track = 0
    for episode in ordered:
        if episode.year != current_year:
            current_year = episode.year
            track = 1
        numbered.append(replace(episode, track=track))
        track += 1
    return numbered


def organize_episodes(episodes: Iterable[Episode]) -> list[Episode]:
    """Sort episodes and assign track numbers in one step."""
    return assign_tracks(order_episodes(episodes))
