"""Derived values computed from a PlayerState."""

from typing import Optional, Tuple

from beatqueue.config import DEFAULT_CONFIG, PlayerConfig
from beatqueue.models import RepeatMode, Track
from beatqueue.playback.state import PlayerState
from beatqueue.queue import operations


def _active(state: PlayerState) -> bool:
    return bool(state.queue) and state.cursor > -1


def has_next(state: PlayerState) -> bool:
    if not _active(state):
        return False
    return state.cursor < len(state.queue) - 1 or state.repeat_mode is RepeatMode.ALL


def has_previous(state: PlayerState, config: Optional[PlayerConfig] = None) -> bool:
    config = config or DEFAULT_CONFIG
    if not _active(state):
        return False
    return (
        state.cursor > 0
        or state.repeat_mode is RepeatMode.ALL
        or state.elapsed > config.restart_threshold
    )


def get_next_track(state: PlayerState) -> Optional[Track]:
    """Track that ``next()`` would move to, if any."""
    if not _active(state):
        return None
    index = operations.step(state.cursor, len(state.queue), 1, state.repeat_mode is RepeatMode.ALL)
    return None if index is None else state.queue[index]


def get_previous_track(state: PlayerState, config: Optional[PlayerConfig] = None) -> Optional[Track]:
    """Track that ``previous()`` would land on; the current one when it would restart."""
    config = config or DEFAULT_CONFIG
    if not _active(state):
        return None
    if state.elapsed > config.restart_threshold:
        return state.current_track
    index = operations.step(state.cursor, len(state.queue), -1, state.repeat_mode is RepeatMode.ALL)
    return None if index is None else state.queue[index]


def upcoming(state: PlayerState, limit: Optional[int] = None) -> Tuple[Track, ...]:
    if not _active(state):
        return state.queue[:limit] if limit is not None else state.queue
    remaining = state.queue[state.cursor + 1:]
    return remaining[:limit] if limit is not None else remaining


def is_favorite(state: PlayerState, track_id: str) -> bool:
    return operations.contains(state.favorites, track_id)


def is_in_queue(state: PlayerState, track_id: str) -> bool:
    return operations.contains(state.queue, track_id)


def progress_percentage(state: PlayerState) -> float:
    """Playhead position as 0-100, using the drag position while seeking."""
    if state.duration <= 0:
        return 0.0
    position = state.seek_position if state.is_seeking else state.elapsed
    return max(0.0, min(100.0, position / state.duration * 100))
