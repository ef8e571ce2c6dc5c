"""
sonicprint - command-line interface

Example usage:
    # Print the analysis of songs or folders
    sonicprint analyze song.flac
    sonicprint analyze --recursive --json songs.json music/

    # Distance between two songs
    sonicprint distance first.flac second.flac

    # Playlist from a folder, starting from a song
    sonicprint playlist music/ first.flac -n 30 -o playlist.m3u
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from sonicprint import __version__
from sonicprint.core.batch_processor import BatchProcessor
from sonicprint.core.engine import create_analysis_engine
from sonicprint.core.models import Song
from sonicprint.core.result_writer import JSONSongWriter, M3UPlaylistWriter, load_songs
from sonicprint.playlist.distance import get_metric
from sonicprint.playlist.playlist import (
    closest_to_first_song,
    dedup_playlist_custom_distance,
    song_to_song,
)
from sonicprint.utils.config import load_config
from sonicprint.utils.errors import SonicprintError
from sonicprint.utils.logging import setup_logging


def print_song(song: Song) -> None:
    """Print one analyzed song to the console."""
    print("=" * 60)
    print(f"File: {song.path}")
    if song.artist or song.title:
        print(f"Song: {song.artist or '?'} - {song.title or '?'}")
    if song.album:
        print(f"Album: {song.album}")
    print(f"Duration: {song.duration:.1f}s")
    print("-" * 60)
    for index in song.features_version.index():
        print(f"  {index.label:<32} {song.analysis[index]: .6f}")


def run_analyze(args: argparse.Namespace, config: dict) -> int:
    """Analyze files and folders, printing every song."""
    with create_analysis_engine(config) as engine:
        result = BatchProcessor(engine).process(args.inputs, recursive=args.recursive)

    for song in result.songs:
        print_song(song)
    for path, error in sorted(result.failed.items()):
        print(f"Error analyzing {path}: {error}", file=sys.stderr)

    if args.json:
        JSONSongWriter().write(result.songs, args.json)
        print(f"\nSongs saved to: {args.json}")

    print(f"\n{result.success_count}/{result.total_files} songs analyzed")
    return 0 if result.failure_count == 0 else 1


def run_distance(args: argparse.Namespace, config: dict) -> int:
    """Print the distance between two songs."""
    metric = get_metric(args.metric or config["playlist"]["distance"])

    with create_analysis_engine(config) as engine:
        first = engine.song_from_path(args.first)
        second = engine.song_from_path(args.second)

    print(f"d({first.path}, {second.path}) = {first.custom_distance(second, metric)}")
    return 0


def build_playlist(
    first_song: Song,
    songs: Sequence[Song],
    length: int,
    metric_name: str,
    dedup: bool,
    dedup_threshold: Optional[float],
    chain: bool = False,
) -> List[Song]:
    """
    Order ``songs`` into a playlist starting from ``first_song``.

    Returns at most ``length`` songs, ``first_song`` included.
    """
    metric = get_metric(metric_name)
    first_path = first_song.path.resolve()
    pool = [song for song in songs if song.path.resolve() != first_path]

    if chain:
        song_to_song([first_song], pool, metric)
    else:
        closest_to_first_song(first_song, pool, metric)

    playlist = [first_song] + pool
    if dedup:
        dedup_playlist_custom_distance(playlist, dedup_threshold, metric)
    return playlist[:length]


def run_playlist(args: argparse.Namespace, config: dict) -> int:
    """Analyze a folder and print a playlist starting from a song."""
    playlist_config = config["playlist"]

    known: List[Song] = []
    if args.analysis_file and args.analysis_file.exists():
        known = load_songs(args.analysis_file)

    with create_analysis_engine(config) as engine:
        first_song = engine.song_from_path(args.first_song)
        result = BatchProcessor(engine).process(
            [args.folder], recursive=True, skip=[song.path for song in known]
        )

    for path, error in sorted(result.failed.items()):
        print(f"Error analyzing {path}: {error}", file=sys.stderr)

    songs = known + result.songs
    if args.analysis_file:
        JSONSongWriter().write(songs, args.analysis_file)

    folder = args.folder.resolve()
    candidates = [song for song in songs if folder in song.path.resolve().parents]

    playlist = build_playlist(
        first_song,
        candidates,
        length=args.length or playlist_config["length"],
        metric_name=args.metric or playlist_config["distance"],
        dedup=playlist_config["dedup"] and not args.no_dedup,
        dedup_threshold=playlist_config["dedup_threshold"],
        chain=args.song_to_song,
    )

    if args.output_playlist:
        M3UPlaylistWriter().write(playlist, args.output_playlist)
    else:
        for song in playlist:
            print(song.path)
    return 0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sonicprint",
        description="Analyze songs into fingerprints and build playlists of similar songs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Example usage:", 1)[1],
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"sonicprint {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze songs and print their fingerprints")
    analyze.add_argument("inputs", type=Path, nargs="+", help="Audio file(s) or directories")
    analyze.add_argument(
        "--recursive", "-r", action="store_true", help="Search directories recursively"
    )
    analyze.add_argument("--json", type=Path, default=None, help="Save songs to a JSON file")
    analyze.set_defaults(handler=run_analyze)

    distance = subparsers.add_parser("distance", help="Distance between two songs")
    distance.add_argument("first", type=Path, help="First song")
    distance.add_argument("second", type=Path, help="Second song")
    distance.add_argument("--metric", choices=["euclidean", "cosine"], default=None)
    distance.set_defaults(handler=run_distance)

    playlist = subparsers.add_parser(
        "playlist", help="Analyze a folder and make a playlist from a song"
    )
    playlist.add_argument("folder", type=Path, help="Folder containing songs")
    playlist.add_argument(
        "first_song", type=Path, help="Song to start from (can be outside of FOLDER)"
    )
    playlist.add_argument("--length", "-n", type=int, default=None, help="Playlist length")
    playlist.add_argument("--metric", choices=["euclidean", "cosine"], default=None)
    playlist.add_argument(
        "--song-to-song",
        action="store_true",
        help="Chain each song to the previous one instead of to the first song"
    )
    playlist.add_argument("--no-dedup", action="store_true", help="Keep near-duplicate songs")
    playlist.add_argument(
        "--analysis-file", "-a", type=Path, default=None,
        help="Reuse songs analyzed in this JSON file and append new ones to it"
    )
    playlist.add_argument(
        "--output-playlist", "-o", type=Path, default=None, help="Write the playlist as M3U"
    )
    playlist.set_defaults(handler=run_playlist)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the sonicprint command."""
    args = create_parser().parse_args(argv)

    try:
        config = load_config(str(args.config) if args.config else None)
    except SonicprintError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    log_level = "DEBUG" if args.verbose else config["logging"].get("level", "INFO")
    setup_logging(
        level=log_level,
        log_format=config["logging"].get("format", "text"),
        colored=True,
        console_enabled=True
    )

    try:
        return args.handler(args, config)
    except SonicprintError as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
