"""
sonicprint

Turns songs into fixed-length fingerprints (tempo, timbre, loudness and
chroma descriptors) and builds playlists of similar songs from them.
"""

__version__ = "1.0.0"
