"""beatqueue: playback queue and player state for a music streaming client."""

from beatqueue.config import PlayerConfig
from beatqueue.models import PlaybackStatus, RepeatMode, Track, TrackSource
from beatqueue.playback.store import PlayerStore

__version__ = "0.1.0"

__all__ = ['PlayerConfig', 'PlayerStore', 'PlaybackStatus', 'RepeatMode', 'Track', 'TrackSource']
