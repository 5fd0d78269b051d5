"""Serializable snapshot of the durable part of the player state.

Only favorites, uploads, playlists, volume and repeat mode survive a reload.
The queue and transient playback state are rebuilt empty every session.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from beatqueue.library.models import Playlist, default_playlists
from beatqueue.models import RepeatMode, Track
from beatqueue.playback.state import DEFAULT_VOLUME, PlayerState

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = ('favorites', 'uploads', 'playlists', 'volume', 'repeat_mode')


@dataclass(frozen=True)
class Snapshot:
    favorites: Tuple[Track, ...] = ()
    uploads: Tuple[Track, ...] = ()
    playlists: Tuple[Playlist, ...] = field(default_factory=default_playlists)
    volume: float = DEFAULT_VOLUME
    repeat_mode: RepeatMode = RepeatMode.OFF

    def to_dict(self) -> Dict[str, Any]:
        return {
            'favorites': [track.to_dict() for track in self.favorites],
            'uploads': [track.to_dict() for track in self.uploads],
            'playlists': [playlist.to_dict() for playlist in self.playlists],
            'volume': self.volume,
            'repeatMode': self.repeat_mode.value,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Snapshot':
        """Decode a persisted snapshot, using defaults for anything missing.

        A malformed field is replaced by its default rather than failing the
        whole snapshot; malformed entries inside a list are skipped.
        """
        defaults = cls()
        if not isinstance(data, dict):
            if data is not None:
                logger.warning(f"Ignoring snapshot of unexpected type {type(data).__name__}")
            return defaults

        favorites = _decode_list(data.get('favorites'), Track.from_dict, 'favorite')
        uploads = _decode_list(data.get('uploads'), lambda d: Track.from_dict(d, uploaded=True), 'upload')
        playlists = _decode_list(data.get('playlists'), Playlist.from_dict, 'playlist')

        volume = data.get('volume')
        if isinstance(volume, bool) or not isinstance(volume, (int, float)) or math.isnan(volume):
            volume = defaults.volume
        else:
            volume = max(0.0, min(1.0, float(volume)))

        repeat_value = data.get('repeatMode', data.get('repeat_mode'))
        valid_modes = {mode.value for mode in RepeatMode}
        repeat_mode = RepeatMode(repeat_value) if repeat_value in valid_modes else defaults.repeat_mode

        return cls(
            favorites=favorites if favorites is not None else defaults.favorites,
            uploads=uploads if uploads is not None else defaults.uploads,
            playlists=playlists if playlists is not None else defaults.playlists,
            volume=volume,
            repeat_mode=repeat_mode,
        )


def _decode_list(value: Any, decode, label: str) -> Optional[tuple]:
    if not isinstance(value, list):
        return None
    items = []
    for entry in value:
        try:
            items.append(decode(entry))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Skipping malformed {label} in snapshot: {e}")
    return tuple(items)


def snapshot_from_state(state: PlayerState) -> Snapshot:
    return Snapshot(
        favorites=state.favorites,
        uploads=state.uploads,
        playlists=state.playlists,
        volume=state.volume,
        repeat_mode=state.repeat_mode,
    )


def snapshot_changed(before: PlayerState, after: PlayerState) -> bool:
    """True when any persisted field differs between the two states."""
    return any(getattr(before, name) is not getattr(after, name)
               and getattr(before, name) != getattr(after, name)
               for name in SNAPSHOT_FIELDS)
