"""Tests for playlist ordering and deduplication."""

import pytest

from conftest import make_song
from sonicprint.core.models import FeaturesVersion
from sonicprint.playlist.distance import cosine_distance
from sonicprint.playlist.playlist import (
    album_track_key,
    closest_album_to_group,
    closest_to_first_song,
    closest_to_songs,
    dedup_playlist,
    dedup_playlist_custom_distance,
    song_to_song,
)
from sonicprint.utils.errors import IncompatibleAnalysisError


def names(songs):
    return [song.path.stem for song in songs]


class TestClosestToSongs:
    def test_closest_to_first_song(self):
        first = make_song("first", (0.0,))
        pool = [make_song("far", (5.0,)), make_song("near", (1.0,)), make_song("mid", (-2.0,))]

        closest_to_first_song(first, pool)

        assert names(pool) == ["near", "mid", "far"]

    def test_nearest_reference_counts(self):
        references = [make_song("a", (0.0,)), make_song("b", (10.0,))]
        pool = [make_song("five", (5.0,)), make_song("nine", (9.0,)), make_song("one", (1.0,))]

        closest_to_songs(references, pool)

        assert names(pool) == ["nine", "one", "five"]

    def test_ties_keep_pool_order(self):
        first = make_song("first", (0.0,))
        pool = [make_song("left", (-1.0,)), make_song("right", (1.0,))]

        closest_to_first_song(first, pool)

        assert names(pool) == ["left", "right"]

    def test_custom_distance(self):
        first = make_song("first", (1.0, 0.0))
        pool = [make_song("orthogonal", (0.0, 0.1)), make_song("aligned", (5.0, 0.0))]

        closest_to_first_song(first, pool, cosine_distance)

        assert names(pool) == ["aligned", "orthogonal"]

    def test_empty_reference(self):
        with pytest.raises(ValueError):
            closest_to_songs([], [make_song("a")])

    def test_mixed_versions(self):
        first = make_song("first", version=FeaturesVersion.VERSION1)
        with pytest.raises(IncompatibleAnalysisError):
            closest_to_first_song(first, [make_song("other")])


class TestSongToSong:
    def test_chain_differs_from_closest(self):
        first = make_song("first", (0.0,))
        a, b, c = make_song("a", (1.0,)), make_song("b", (-1.5,)), make_song("c", (2.0,))

        closest = [a, b, c]
        closest_to_first_song(first, closest)
        chain = [a, b, c]
        song_to_song([first], chain)

        assert names(closest) == ["a", "b", "c"]
        assert names(chain) == ["a", "c", "b"]

    def test_chain_along_a_line(self):
        pool = [make_song(str(x), (float(x),)) for x in (5, 1, 2, 10, 6)]

        song_to_song([make_song("start", (0.0,))], pool)

        assert names(pool) == ["1", "2", "5", "6", "10"]

    def test_empty_pool(self):
        pool = []
        song_to_song([make_song("start")], pool)
        assert pool == []


@pytest.fixture
def playlist_with_duplicates():
    """first, an exact copy, second, a retitled copy of second, fourth and a near copy."""
    return [
        make_song("first", (0.0,), title="Song1", artist="A"),
        make_song("first_dupe", (0.0,)),
        make_song("second", (1.0,), title="Song2", artist="B"),
        make_song("third", (2.0,), title="Song2", artist="B"),
        make_song("fourth", (3.0,), title="Song2", artist="C"),
        make_song("fifth", (3.001,)),
    ]


class TestDedup:
    def test_default_threshold(self, playlist_with_duplicates):
        dedup_playlist(playlist_with_duplicates)
        assert names(playlist_with_duplicates) == ["first", "second", "fourth"]

    def test_large_threshold(self, playlist_with_duplicates):
        dedup_playlist(playlist_with_duplicates, 20)
        assert names(playlist_with_duplicates) == ["first"]

    def test_custom_distance(self, playlist_with_duplicates):
        dedup_playlist_custom_distance(playlist_with_duplicates, None, cosine_distance)
        # Zero vectors are never duplicates under the cosine distance
        assert names(playlist_with_duplicates) == ["first", "first_dupe", "second"]

    def test_empty(self):
        playlist = []
        dedup_playlist(playlist)
        assert playlist == []


class TestAlbums:
    def test_track_key_orders_numerically(self):
        songs = [
            make_song("ten", track_number="10"),
            make_song("two", track_number="2/12"),
            make_song("none"),
            make_song("bonus", track_number="bonus"),
            make_song("one", track_number="01"),
        ]
        assert names(sorted(songs, key=album_track_key)) == ["one", "two", "ten", "bonus", "none"]

    def test_closest_album_to_group(self):
        group = [make_song("g1", (0.0,), album="Group"), make_song("g2", (0.2,), album="Group")]
        pool = [
            make_song("far1", (5.0,), album="Far", track_number="1"),
            make_song("near10", (1.0,), album="Near", track_number="10"),
            make_song("loose", (0.1,)),
            make_song("near2", (1.0,), album="Near", track_number="2"),
            make_song("near1", (1.0,), album="Near", track_number="1"),
            group[1],
        ]

        playlist = closest_album_to_group(group, pool)

        assert names(playlist) == ["g1", "g2", "near1", "near2", "near10", "far1"]

    def test_discs_come_before_tracks(self):
        group = [make_song("g", (0.0,))]
        pool = [
            make_song("d2t1", (1.0,), album="Album", disc_number="2", track_number="1"),
            make_song("d1t2", (1.0,), album="Album", disc_number="1", track_number="2"),
            make_song("d1t1", (1.0,), album="Album", disc_number="1", track_number="1"),
        ]

        playlist = closest_album_to_group(group, pool)

        assert names(playlist) == ["g", "d1t1", "d1t2", "d2t1"]

    def test_empty_group(self):
        with pytest.raises(ValueError):
            closest_album_to_group([], [make_song("a", album="A")])
