"""
Playlist algorithms over analyzed songs.

Ordering functions sort a mutable pool in place; every song involved must
share the same features version.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from sonicprint.core.models import Song, check_same_version
from sonicprint.playlist.distance import DistanceMetric, euclidean_distance, set_distance

DEDUP_THRESHOLD: float = 0.05

logger = logging.getLogger("playlist")


def closest_to_songs(
    reference: Sequence[Song],
    pool: List[Song],
    distance: DistanceMetric = euclidean_distance,
) -> None:
    """
    Sort ``pool`` by distance to the nearest song of ``reference``.

    The sort is stable: songs at equal distance keep their order.

    Raises:
        IncompatibleAnalysisError: If features versions are mixed
        ValueError: If ``reference`` is empty
    """
    if not reference:
        raise ValueError("reference must contain at least one song")
    check_same_version(list(reference) + list(pool))
    references = [song.analysis.as_array() for song in reference]
    pool.sort(key=lambda song: set_distance(references, song.analysis.as_array(), distance))


def closest_to_first_song(
    first_song: Song,
    pool: List[Song],
    distance: DistanceMetric = euclidean_distance,
) -> None:
    """Sort ``pool`` by distance to ``first_song``."""
    closest_to_songs([first_song], pool, distance)


def song_to_song(
    reference: Sequence[Song],
    pool: List[Song],
    distance: DistanceMetric = euclidean_distance,
) -> None:
    """
    Reorder ``pool`` as a chain.

    The first song is the one nearest to ``reference``; every following
    song is the remaining one nearest to the song chosen before it. Ties go
    to the earliest song in the pool.
    """
    check_same_version(list(reference) + list(pool))
    if not reference:
        raise ValueError("reference must contain at least one song")

    remaining = list(pool)
    current = [song.analysis.as_array() for song in reference]
    ordered: List[Song] = []

    while remaining:
        distances = [
            set_distance(current, song.analysis.as_array(), distance)
            for song in remaining
        ]
        chosen = remaining.pop(int(np.argmin(distances)))
        ordered.append(chosen)
        current = [chosen.analysis.as_array()]

    pool[:] = ordered


def _same_title_and_artist(first: Song, second: Song) -> bool:
    if not (first.title and first.artist and second.title and second.artist):
        return False
    return first.title == second.title and first.artist == second.artist


def dedup_playlist_custom_distance(
    playlist: List[Song],
    distance_threshold: Optional[float] = None,
    distance: DistanceMetric = euclidean_distance,
) -> None:
    """
    Remove near-duplicates from an ordered playlist, in place.

    A song is dropped when it is closer than ``distance_threshold``
    (default 0.05) to the previous song kept, or when both have the same
    non-empty title and artist. The first song is always kept.
    """
    if not playlist:
        return
    threshold = DEDUP_THRESHOLD if distance_threshold is None else distance_threshold

    kept = [playlist[0]]
    for song in playlist[1:]:
        previous = kept[-1]
        if _same_title_and_artist(previous, song):
            continue
        if distance(previous.analysis.as_array(), song.analysis.as_array()) < threshold:
            continue
        kept.append(song)

    if len(kept) != len(playlist):
        logger.debug(f"Removed {len(playlist) - len(kept)} duplicate songs")
    playlist[:] = kept


def dedup_playlist(playlist: List[Song], distance_threshold: Optional[float] = None) -> None:
    """dedup_playlist_custom_distance() with the euclidean distance."""
    dedup_playlist_custom_distance(playlist, distance_threshold, euclidean_distance)


def _number_key(value: Optional[str]) -> Tuple[int, int, str]:
    """
    Sort key for track/disc numbers such as "3", "03" or "3/12".

    Integers sort first, numerically; unparsable values follow in lexical
    order; missing values come last.
    """
    if value is None:
        return (2, 0, "")
    text = str(value).strip()
    try:
        return (0, int(text.split("/")[0].strip()), "")
    except ValueError:
        return (1, 0, text)


def album_track_key(song: Song) -> Tuple[Tuple[int, int, str], Tuple[int, int, str]]:
    return (_number_key(song.disc_number), _number_key(song.track_number))


def closest_album_to_group(
    group: Sequence[Song],
    pool: Sequence[Song],
    distance: DistanceMetric = euclidean_distance,
) -> List[Song]:
    """
    The group followed by whole albums from ``pool``, nearest album first.

    Songs of ``group`` are removed from the pool, the rest are grouped by
    album (songs without an album are ignored), and albums are ranked by
    the distance between their mean fingerprint and the group's mean
    fingerprint. Each album is emitted in disc then track order.

    Raises:
        ValueError: If ``group`` is empty
    """
    if not group:
        raise ValueError("group must contain at least one song")
    check_same_version(list(group) + list(pool))

    albums: Dict[str, List[Song]] = {}
    for song in pool:
        if song.album is None or song in group:
            continue
        albums.setdefault(song.album, []).append(song)

    group_mean = np.mean([song.analysis.as_array() for song in group], axis=0)
    album_distances = {
        album: distance(
            np.mean([song.analysis.as_array() for song in songs], axis=0), group_mean
        )
        for album, songs in albums.items()
    }

    playlist = list(group)
    for album in sorted(albums, key=album_distances.__getitem__):
        playlist.extend(sorted(albums[album], key=album_track_key))
    return playlist
