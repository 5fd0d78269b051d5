import argparse
import asyncio
import json
import logging
import random
import sys
from pathlib import Path
from typing import List

from rich.console import Console
from rich.table import Table

from beatqueue.config import PlayerConfig, find_config
from beatqueue.library.models import Playlist
from beatqueue.models import RepeatMode, Track
from beatqueue.persistence.snapshot import Snapshot
from beatqueue.persistence.store import SnapshotStore
from beatqueue.playback.backend import NullBackend
from beatqueue.playback.store import PlayerStore
from beatqueue.queue import operations
from beatqueue.queue.shuffle import find_track_index
from beatqueue.search import (
    SEARCH_CATEGORIES,
    search_by_category,
    search_playlists,
    search_stats,
    sort_search_results,
)
from beatqueue.utils.timefmt import format_artists, total_duration

logger = logging.getLogger(__name__)


def setup_logging(verbosity: int = 0):
    """Configure logging based on verbosity level."""
    log_level = logging.WARNING
    if verbosity == 1:
        log_level = logging.INFO
    elif verbosity >= 2:
        log_level = logging.DEBUG

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )


def load_config(config_path: Path = None) -> PlayerConfig:
    """Load configuration from standard locations or specified path."""
    return find_config(config_path)


async def load_snapshot(config: PlayerConfig) -> Snapshot:
    """Read the persisted snapshot, or a fresh one if nothing was saved."""
    store = SnapshotStore(config.storage_path, config.storage_key)
    snapshot = await store.load()
    if snapshot is None:
        logger.info(f"No saved library under {config.storage_key}, starting empty")
        return Snapshot()
    return snapshot


def library_tracks(snapshot: Snapshot) -> List[Track]:
    """Every distinct track the library knows about, uploads first."""
    tracks: tuple = ()
    for track in snapshot.uploads + snapshot.favorites:
        tracks = operations.append_unique(tracks, track)
    for playlist in snapshot.playlists:
        for track in playlist.tracks:
            tracks = operations.append_unique(tracks, track)
    return list(tracks)


def _track_table(title: str, tracks: List[Track]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Artist")
    table.add_column("Duration", justify="right")
    for track in tracks:
        table.add_row(track.id, track.title, format_artists(track.artist), str(track.duration))
    return table


def _playlist_table(playlists: List[Playlist]) -> Table:
    table = Table(title="Playlists")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Tracks", justify="right")
    table.add_column("Length", justify="right")
    for playlist in playlists:
        table.add_row(playlist.id, playlist.name, str(len(playlist.tracks)), total_duration(playlist.tracks))
    return table


async def library_async(args: argparse.Namespace):
    """Print the persisted favorites, uploads and playlists."""
    setup_logging(args.verbose)

    try:
        config = load_config(Path(args.config) if args.config else None)
        snapshot = await load_snapshot(config)

        console = Console()
        console.print(_track_table(f"Favorites ({len(snapshot.favorites)})", list(snapshot.favorites)))
        console.print(_track_table(f"Uploads ({len(snapshot.uploads)})", list(snapshot.uploads)))
        console.print(_playlist_table(list(snapshot.playlists)))
        console.print(f"Volume: {snapshot.volume:.2f}  Repeat: {snapshot.repeat_mode.value}")

    except Exception as e:
        logger.error(f"Error reading library: {e}")
        sys.exit(1)


def library_command(args: argparse.Namespace):
    """Command wrapper for the library listing."""
    asyncio.run(library_async(args))


async def search_async(args: argparse.Namespace):
    """Search the persisted library."""
    setup_logging(args.verbose)

    try:
        config = load_config(Path(args.config) if args.config else None)
        snapshot = await load_snapshot(config)

        tracks = library_tracks(snapshot)
        results = sort_search_results(search_by_category(tracks, args.query, args.category), args.query)
        playlists = search_playlists(snapshot.playlists, args.query)
        stats = search_stats(results, tracks, args.query)

        console = Console()
        if results:
            console.print(_track_table(f"Tracks matching '{stats['query']}'", results))
        if playlists:
            console.print(_playlist_table(playlists))
        console.print(
            f"{stats['results']} of {stats['total']} tracks ({stats['percentage']}%), "
            f"{len(playlists)} playlists"
        )

    except Exception as e:
        logger.error(f"Error searching library: {e}")
        sys.exit(1)


def search_command(args: argparse.Namespace):
    """Command wrapper for library search."""
    asyncio.run(search_async(args))


def read_tracks(path: Path) -> List[Track]:
    """Read a JSON list of track payloads, skipping entries without an id."""
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of tracks")

    tracks = []
    for entry in data:
        try:
            tracks.append(Track.from_dict(entry))
        except (ValueError, AttributeError) as e:
            logger.warning(f"Skipping track entry: {e}")
    return tracks


def simulate_playback(
    store: PlayerStore,
    tracks: List[Track],
    start: Track,
    shuffle: bool = False,
    steps: int = 20
) -> List[Track]:
    """Play ``tracks`` from ``start`` to the end, one ended event at a time.

    Returns:
        The tracks in the order they started, at most ``steps`` of them
    """
    store.load_track(start, tracks, shuffle=shuffle)
    played = []
    while len(played) < steps:
        state = store.state
        if state.current_track is None or not state.is_playing:
            if state.error:
                logger.warning(f"Playback stopped: {state.error}")
            break
        played.append(state.current_track)
        store.on_ended()
    return played


def simulate_command(args: argparse.Namespace):
    """Walk a queue built from a JSON track list and print the play order."""
    setup_logging(args.verbose)

    try:
        config = load_config(Path(args.config) if args.config else None)
        tracks = read_tracks(Path(args.tracks_json))
        if not tracks:
            logger.error(f"No playable tracks in {args.tracks_json}")
            sys.exit(1)

        start = tracks[0]
        if args.start:
            index = find_track_index(tracks, args.start)
            if index == -1:
                logger.error(f"Track {args.start} not found in {args.tracks_json}")
                sys.exit(1)
            start = tracks[index]

        rng = random.Random(args.seed) if args.seed is not None else None
        store = PlayerStore(backend=NullBackend(), config=config, rng=rng)
        store.set_repeat_mode(RepeatMode.parse(args.repeat))
        played = simulate_playback(store, tracks, start, shuffle=args.shuffle, steps=args.steps)

        console = Console()
        table = Table(title=f"Play order ({'shuffled' if args.shuffle else 'in order'}, repeat {args.repeat})")
        table.add_column("#", justify="right")
        table.add_column("ID", style="dim")
        table.add_column("Title")
        table.add_column("Artist")
        for position, track in enumerate(played, start=1):
            table.add_row(str(position), track.id, track.title, format_artists(track.artist))
        console.print(table)

    except Exception as e:
        logger.error(f"Error during simulation: {e}")
        sys.exit(1)


async def reset_async(args: argparse.Namespace):
    """Delete the persisted snapshot."""
    setup_logging(args.verbose)

    try:
        config = load_config(Path(args.config) if args.config else None)
        store = SnapshotStore(config.storage_path, config.storage_key)
        await store.clear()
        Console().print(f"Cleared saved library [bold]{config.storage_key}[/bold]")

    except Exception as e:
        logger.error(f"Error resetting library: {e}")
        sys.exit(1)


def reset_command(args: argparse.Namespace):
    """Command wrapper for reset."""
    asyncio.run(reset_async(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="beatqueue: playback queue and library tool"
    )
    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help="Increase verbosity (can be used multiple times)"
    )
    parser.add_argument(
        '-c', '--config',
        help="Path to configuration file"
    )

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        required=True
    )

    # Library command
    library_parser = subparsers.add_parser(
        'library',
        help="Show saved favorites, uploads and playlists"
    )
    library_parser.set_defaults(func=library_command)

    # Search command
    search_parser = subparsers.add_parser(
        'search',
        help="Search the saved library"
    )
    search_parser.add_argument(
        'query',
        help="Text to look for"
    )
    search_parser.add_argument(
        '--category',
        choices=SEARCH_CATEGORIES,
        default='all',
        help="Field to search"
    )
    search_parser.set_defaults(func=search_command)

    # Simulate command
    simulate_parser = subparsers.add_parser(
        'simulate',
        help="Play through a track list and print the resulting order"
    )
    simulate_parser.add_argument(
        'tracks_json',
        help="Path to a JSON list of tracks"
    )
    simulate_parser.add_argument(
        '--shuffle',
        action='store_true',
        help="Shuffle the queue"
    )
    simulate_parser.add_argument(
        '--repeat',
        choices=[mode.value for mode in RepeatMode],
        default=RepeatMode.OFF.value,
        help="Repeat mode"
    )
    simulate_parser.add_argument(
        '--steps',
        type=int,
        default=20,
        help="Maximum number of tracks to play"
    )
    simulate_parser.add_argument(
        '--start',
        help="ID of the track to start from (defaults to the first)"
    )
    simulate_parser.add_argument(
        '--seed',
        type=int,
        help="Seed for the shuffle"
    )
    simulate_parser.set_defaults(func=simulate_command)

    # Reset command
    reset_parser = subparsers.add_parser(
        'reset',
        help="Delete the saved library"
    )
    reset_parser.set_defaults(func=reset_command)

    return parser


def main(argv: List[str] = None):
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if hasattr(args, 'func'):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
