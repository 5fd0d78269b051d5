"""Immutable player state."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from beatqueue.library.models import Playlist, default_playlists
from beatqueue.models import PlaybackStatus, RepeatMode, Track

DEFAULT_VOLUME = 0.6


class SeekOrigin(Enum):
    """Who started the seek in progress."""
    USER = "user"
    MEDIA = "media"


@dataclass(frozen=True)
class PlayerState:
    """Snapshot of the whole session: playback, queue and library.

    Instances are never mutated; transitions build a new one with
    ``dataclasses.replace``.
    """
    # Playback
    current_track: Optional[Track] = None
    is_playing: bool = False
    volume: float = DEFAULT_VOLUME
    elapsed: float = 0.0
    duration: float = 0.0
    is_skipping: bool = False
    is_seeking: bool = False
    seek_position: float = 0.0
    seek_origin: Optional[SeekOrigin] = None
    retry_count: int = 0
    generation: int = 0

    # Queue
    queue: Tuple[Track, ...] = ()
    cursor: int = -1
    original_order: Tuple[Track, ...] = ()
    history: Tuple[Track, ...] = ()
    shuffled: bool = False
    repeat_mode: RepeatMode = RepeatMode.OFF

    # Library
    favorites: Tuple[Track, ...] = ()
    uploads: Tuple[Track, ...] = ()
    playlists: Tuple[Playlist, ...] = field(default_factory=default_playlists)

    error: Optional[str] = None
    is_initialized: bool = False

    @property
    def status(self) -> PlaybackStatus:
        if self.current_track is None:
            return PlaybackStatus.IDLE
        if self.is_playing:
            return PlaybackStatus.PLAYING
        return PlaybackStatus.READY
