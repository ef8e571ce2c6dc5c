"""
Distance metrics and playlist generation.
"""

from sonicprint.playlist.distance import (
    DistanceMetric,
    cosine_distance,
    euclidean_distance,
    get_metric,
    mahalanobis_distance,
    mahalanobis_distance_builder,
    set_distance,
)
from sonicprint.playlist.playlist import (
    closest_album_to_group,
    closest_to_first_song,
    closest_to_songs,
    dedup_playlist,
    dedup_playlist_custom_distance,
    song_to_song,
)

__all__ = [
    "DistanceMetric",
    "cosine_distance",
    "euclidean_distance",
    "get_metric",
    "mahalanobis_distance",
    "mahalanobis_distance_builder",
    "set_distance",
    "closest_album_to_group",
    "closest_to_first_song",
    "closest_to_songs",
    "dedup_playlist",
    "dedup_playlist_custom_distance",
    "song_to_song",
]
