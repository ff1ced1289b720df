"""Test episode ordering and track numbering"""

from teisho_downloader.episodes.models import Episode
from teisho_downloader.episodes.ordering import (
    assign_tracks,
    order_episodes,
    organize_episodes,
)


def dated(index, year, month):
    return Episode(
        source_url=f"http://h/{index}.mp3",
        title=f"Talk {index}",
        discovery_index=index,
        name=f"{year}-{month}-{index}.mp3",
        year=year,
        month=month,
    )


class TestOrderEpisodes:
    """Test archive ordering"""

    def test_sorted_by_year_then_month(self):
        episodes = [dated(1, 2010, 5), dated(2, 2009, 11), dated(3, 2010, 1)]

        ordered = order_episodes(episodes)

        assert [(e.year, e.month) for e in ordered] == [(2009, 11), (2010, 1), (2010, 5)]

    def test_same_month_later_discovery_first(self):
        episodes = [dated(1, 2009, 3), dated(5, 2009, 3)]

        ordered = order_episodes(episodes)

        assert [e.discovery_index for e in ordered] == [5, 1]


class TestAssignTracks:
    """Test per-year track numbering"""

    def test_tracks_restart_each_year(self):
        episodes = [
            dated(1, 2010, 5),
            dated(2, 2009, 3),
            dated(3, 2010, 1),
            dated(4, 2009, 3),
        ]

        organized = organize_episodes(episodes)

        assert [(e.year, e.discovery_index, e.track) for e in organized] == [
            (2009, 4, 1),
            (2009, 2, 2),
            (2010, 3, 1),
            (2010, 1, 2),
        ]

    def test_tracks_are_contiguous_within_year(self):
        episodes = [dated(i, 2011, (i % 12) + 1) for i in range(1, 20)]

        organized = organize_episodes(episodes)

        assert [e.track for e in organized] == list(range(1, 20))

    def test_input_is_not_modified(self):
        episodes = [dated(1, 2009, 3)]

        assign_tracks(episodes)

        assert episodes[0].track == 0

    def test_empty(self):
        assert organize_episodes([]) == []
