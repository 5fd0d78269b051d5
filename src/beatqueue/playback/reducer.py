"""Pure transition function for the player state machine.

``reduce(state, action)`` never mutates ``state``; it returns either the same
object (nothing to do) or a new ``PlayerState``. Invalid requests are no-ops,
sometimes leaving a human readable ``error`` marker for the UI. Nothing here
raises: an unexpected exception inside a transition is logged and turned into
an error marker while the previous state is kept.
"""

import logging
import math
import random
from dataclasses import replace
from typing import Any, Callable, Dict, Optional, Tuple

from beatqueue.config import DEFAULT_CONFIG, PlayerConfig
from beatqueue.library import collections
from beatqueue.models import RepeatMode, Track
from beatqueue.persistence.snapshot import Snapshot
from beatqueue.playback.actions import Action, ActionType
from beatqueue.playback.state import PlayerState, SeekOrigin
from beatqueue.queue import operations
from beatqueue.queue.shuffle import build_shuffled_queue, find_track_index

logger = logging.getLogger(__name__)

Handler = Callable[[PlayerState, Any, PlayerConfig, Optional[random.Random]], PlayerState]


def initial_state(config: Optional[PlayerConfig] = None) -> PlayerState:
    config = config or DEFAULT_CONFIG
    return PlayerState(volume=config.default_volume)


def reduce(
    state: PlayerState,
    action: Action,
    config: Optional[PlayerConfig] = None,
    rng: Optional[random.Random] = None
) -> PlayerState:
    """Apply ``action`` to ``state`` and return the resulting state.

    Args:
        state: Current state
        action: Transition to apply
        config: Tunables (shuffle rounds, restart threshold, history size)
        rng: Random source for shuffling; module-level generator if omitted

    Returns:
        The new state, or ``state`` itself when the action changes nothing
    """
    handler = _HANDLERS.get(action.type)
    if handler is None:
        logger.warning(f"Unknown action type: {action.type}")
        return state

    try:
        return handler(state, action.payload, config or DEFAULT_CONFIG, rng)
    except Exception as e:
        logger.error(f"Player reducer error on {action.type.value}: {e}")
        return replace(state, error=f"Reducer error: {e}")


# ----------------------------
# Shared helpers
# ----------------------------

def _as_track(value: Any) -> Optional[Track]:
    if value is None or isinstance(value, Track):
        return value
    if isinstance(value, dict):
        return Track.from_dict(value)
    raise TypeError(f"Expected a Track or mapping, got {type(value).__name__}")


def _as_tracks(values: Any) -> Tuple[Track, ...]:
    if not isinstance(values, (list, tuple)):
        return ()
    return tuple(_as_track(value) for value in values if value is not None)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value):
        return None
    return float(value)


def _push_history(state: PlayerState, config: PlayerConfig) -> Tuple[Track, ...]:
    if state.current_track is None or config.history_limit == 0:
        return state.history
    return (state.current_track,) + state.history[:config.history_limit - 1]


def _start_at(state: PlayerState, index: int, **changes) -> PlayerState:
    """Make ``queue[index]`` current and start it from the beginning."""
    queue = changes.get('queue', state.queue)
    defaults = dict(
        current_track=queue[index],
        cursor=index,
        elapsed=0.0,
        duration=0.0,
        is_playing=True,
        is_seeking=False,
        seek_origin=None,
        seek_position=0.0,
        retry_count=0,
        generation=state.generation + 1,
        error=None,
    )
    defaults.update(changes)
    return replace(state, **defaults)


def _clamp_position(position: float, duration: float) -> float:
    return max(0.0, min(position, duration))


def _go_idle(state: PlayerState, **changes) -> PlayerState:
    defaults = dict(
        current_track=None,
        cursor=-1,
        is_playing=False,
        elapsed=0.0,
        duration=0.0,
        is_seeking=False,
        seek_origin=None,
        seek_position=0.0,
        error=None,
    )
    defaults.update(changes)
    return replace(state, **defaults)


def _has_active_queue(state: PlayerState) -> bool:
    return bool(state.queue) and state.cursor > -1


def _holds_lock(payload: Any) -> bool:
    # Skips dispatched with hold_lock keep the skip-lock until the caller releases it.
    return bool(isinstance(payload, dict) and payload.get('hold_lock'))


# ----------------------------
# Transport
# ----------------------------

def _set_playing(state, payload, config, rng):
    playing = bool(payload)
    if playing and state.current_track is None:
        logger.debug("Ignoring play request without a current track")
        return state
    return replace(state, is_playing=playing, error=None)


def _toggle_play(state, payload, config, rng):
    if state.current_track is None:
        return state
    return replace(state, is_playing=not state.is_playing, error=None)


def _set_volume(state, payload, config, rng):
    volume = _as_number(payload)
    if volume is None:
        logger.debug(f"Ignoring invalid volume {payload!r}")
        return state
    return replace(state, volume=max(0.0, min(1.0, volume)), error=None)


def _time_update(state, payload, config, rng):
    if state.is_seeking:
        return state
    position = _as_number(payload)
    if position is None or math.isinf(position):
        return state
    position = max(0.0, position)
    if state.duration > 0:
        position = min(position, state.duration)
    if position == state.elapsed:
        return state
    return replace(state, elapsed=position)


def _duration_change(state, payload, config, rng):
    duration = _as_number(payload)
    if duration is None or math.isinf(duration) or duration <= 0:
        return state
    return replace(state, duration=duration, elapsed=min(state.elapsed, duration))


def _set_skipping(state, payload, config, rng):
    return replace(state, is_skipping=bool(payload))


def _seek_started(state, payload, config, rng):
    payload = payload or {}
    if state.is_seeking or state.current_track is None:
        return state
    position = _as_number(payload.get('position'))
    return replace(
        state,
        is_seeking=True,
        seek_origin=payload.get('origin', SeekOrigin.USER),
        seek_position=state.elapsed if position is None else _clamp_position(position, state.duration),
    )


def _seek_moved(state, payload, config, rng):
    position = _as_number(payload)
    if not state.is_seeking or position is None:
        return state
    return replace(state, seek_position=_clamp_position(position, state.duration))


def _seek_ended(state, payload, config, rng):
    payload = payload or {}
    if not state.is_seeking:
        return state
    origin = payload.get('origin')
    if origin is not None and origin != state.seek_origin:
        return state
    position = _as_number(payload.get('position'))
    if position is None:
        position = state.seek_position
    return replace(
        state,
        elapsed=_clamp_position(position, state.duration),
        is_seeking=False,
        seek_origin=None,
        seek_position=0.0,
    )


def _track_ended(state, payload, config, rng):
    state = replace(state, is_skipping=False)
    if state.current_track is None:
        return state

    if state.repeat_mode is RepeatMode.ONE:
        return replace(state, elapsed=0.0, is_playing=True, error=None)

    next_index = operations.step(state.cursor, len(state.queue), 1, state.repeat_mode is RepeatMode.ALL)
    if next_index is None:
        logger.debug("Queue finished, stopping playback")
        return replace(state, is_playing=False, elapsed=0.0)

    return _start_at(state, next_index, history=_push_history(state, config))


def _playback_failed(state, payload, config, rng):
    payload = payload or {}
    kind = payload.get('kind')
    message = payload.get('message') or f"Playback failed: {getattr(kind, 'value', kind)}"
    return replace(state, is_playing=False, is_skipping=False, error=message)


def _retry_load(state, payload, config, rng):
    if state.current_track is None:
        return state
    return replace(
        state,
        retry_count=state.retry_count + 1,
        is_playing=True,
        elapsed=0.0,
        generation=state.generation + 1,
        error=None,
    )


# ----------------------------
# Queue
# ----------------------------

def _load_track(state, payload, config, rng):
    payload = payload or {}
    track = _as_track(payload.get('track'))
    if track is None:
        return replace(state, error="No track provided")

    source = list(_as_tracks(payload.get('source')))
    if not source:
        source = [track]
    elif find_track_index(source, track.id) == -1:
        source.insert(0, track)

    original = tuple(source)
    apply_shuffle = bool(payload.get('shuffle')) or state.shuffled
    queue = original
    if apply_shuffle and len(original) > 1:
        queue = tuple(build_shuffled_queue(original, track, config.shuffle_rounds, rng))

    cursor = find_track_index(queue, track.id)
    history = state.history
    if state.current_track is not None and state.current_track.id != track.id:
        history = _push_history(state, config)

    return _start_at(
        state,
        cursor,
        queue=queue,
        original_order=original,
        shuffled=apply_shuffle,
        is_skipping=False,
        history=history,
    )


def _play_next(state, payload, config, rng):
    if state.is_skipping:
        logger.debug("Skip already in flight, dropping next request")
        return state
    if not _has_active_queue(state):
        return replace(state, error="No tracks in queue")

    next_index = operations.step(state.cursor, len(state.queue), 1, state.repeat_mode is RepeatMode.ALL)
    if next_index is None:
        return replace(state, error="No next track available")
    return _start_at(state, next_index, history=_push_history(state, config),
                     is_skipping=_holds_lock(payload))


def _play_previous(state, payload, config, rng):
    if state.is_skipping:
        logger.debug("Skip already in flight, dropping previous request")
        return state
    if not _has_active_queue(state):
        return replace(state, error="No tracks in queue")

    if state.elapsed > config.restart_threshold:
        return replace(state, elapsed=0.0, error=None)

    prev_index = operations.step(state.cursor, len(state.queue), -1, state.repeat_mode is RepeatMode.ALL)
    if prev_index is None:
        return replace(state, error="No previous track available")
    return _start_at(state, prev_index, is_skipping=_holds_lock(payload))


def _add_to_queue(state, payload, config, rng):
    track = _as_track(payload)
    if track is None:
        return replace(state, error="No track provided")
    if operations.contains(state.queue, track.id):
        logger.debug(f"Track {track.id} already queued")
        return state
    return replace(
        state,
        queue=state.queue + (track,),
        original_order=operations.append_unique(state.original_order, track),
        error=None,
    )


def _queue_next(state, payload, config, rng):
    track = _as_track(payload)
    if track is None:
        return replace(state, error="No track provided")
    if operations.contains(state.queue, track.id):
        logger.debug(f"Track {track.id} already queued")
        return state

    original = state.original_order
    if not operations.contains(original, track.id):
        anchor = find_track_index(original, state.current_track.id if state.current_track else None)
        original = operations.insert_after(original, anchor, track)

    return replace(
        state,
        queue=operations.insert_after(state.queue, state.cursor, track),
        original_order=original,
        error=None,
    )


def _remove_from_queue(state, payload, config, rng):
    index = payload
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(state.queue):
        logger.debug(f"Ignoring removal of invalid queue index {payload!r}")
        return state

    removed = state.queue[index]
    queue, cursor = operations.remove_at(state.queue, state.cursor, index)

    original = state.original_order
    if not operations.contains(queue, removed.id):
        original = collections.remove_by_id(original, removed.id)

    if not queue:
        return _go_idle(state, queue=(), original_order=original)

    if index == state.cursor:
        # The playing entry is gone; whatever now sits under the cursor takes over.
        return _start_at(state, cursor, queue=queue, original_order=original, is_playing=state.is_playing)

    return replace(state, queue=queue, cursor=cursor, original_order=original, error=None)


def _set_queue(state, payload, config, rng):
    queue = _as_tracks(payload)
    original = state.original_order if state.shuffled else queue
    if state.current_track is None:
        return replace(state, queue=queue, original_order=original, cursor=-1, error=None)

    cursor = find_track_index(queue, state.current_track.id)
    if cursor == -1:
        return _go_idle(state, queue=queue, original_order=original)
    return replace(state, queue=queue, original_order=original, cursor=cursor, error=None)


def _clear_queue(state, payload, config, rng):
    return _go_idle(
        state,
        queue=(),
        original_order=(),
        shuffled=False,
        is_skipping=False,
    )


# ----------------------------
# Shuffle & repeat
# ----------------------------

def _toggle_shuffle(state, payload, config, rng):
    if not state.queue:
        return state

    current = state.current_track
    base = state.original_order or state.queue
    if state.shuffled:
        queue = base
    else:
        queue = tuple(build_shuffled_queue(base, current, config.shuffle_rounds, rng))

    new_state = replace(state, queue=queue, shuffled=not state.shuffled, error=None)
    if current is None:
        return replace(new_state, cursor=-1)

    cursor = operations.relocate(queue, current)
    if queue[cursor].id != current.id:
        logger.debug(f"Current track {current.id} not in reshuffled queue, switching to {queue[cursor].id}")
        return _start_at(new_state, cursor, is_playing=state.is_playing)
    return replace(new_state, cursor=cursor)


def _set_shuffle(state, payload, config, rng):
    if bool(payload) == state.shuffled:
        return state
    return _toggle_shuffle(state, payload, config, rng)


def _cycle_repeat(state, payload, config, rng):
    return replace(state, repeat_mode=state.repeat_mode.next_mode(), error=None)


def _set_repeat_mode(state, payload, config, rng):
    return replace(state, repeat_mode=RepeatMode.parse(payload), error=None)


# ----------------------------
# Library
# ----------------------------

def _add_to_favorites(state, payload, config, rng):
    track = _as_track(payload)
    if track is None:
        return replace(state, error="No track provided")
    if operations.contains(state.favorites, track.id):
        return replace(state, error="Track already in favorites")
    return replace(state, favorites=collections.add_favorite(state.favorites, track), error=None)


def _remove_from_favorites(state, payload, config, rng):
    return replace(state, favorites=collections.remove_by_id(state.favorites, payload), error=None)


def _toggle_favorite(state, payload, config, rng):
    track = _as_track(payload)
    if track is None:
        return replace(state, error="No track provided")
    return replace(state, favorites=collections.toggle_favorite(state.favorites, track), error=None)


def _set_favorites(state, payload, config, rng):
    favorites: Tuple[Track, ...] = ()
    for track in _as_tracks(payload):
        favorites = collections.add_favorite(favorites, track)
    return replace(state, favorites=favorites, error=None)


def _add_upload(state, payload, config, rng):
    track = _as_track(payload)
    if track is None:
        return replace(state, error="No track provided")
    return replace(state, uploads=collections.add_upload(state.uploads, track), error=None)


def _remove_upload(state, payload, config, rng):
    return replace(state, uploads=collections.remove_by_id(state.uploads, payload), error=None)


def _update_upload(state, payload, config, rng):
    payload = payload or {}
    uploads = collections.update_upload(state.uploads, payload.get('id'), payload.get('updates') or {})
    return replace(state, uploads=uploads, error=None)


def _set_uploads(state, payload, config, rng):
    return replace(state, uploads=collections.set_uploads(_as_tracks(payload)), error=None)


def _create_playlist(state, payload, config, rng):
    payload = payload or {}
    name = payload.get('name')
    if not name:
        return replace(state, error="Playlist name required")
    playlists = collections.create_playlist(state.playlists, name, payload.get('description', ""))
    return replace(state, playlists=playlists, error=None)


def _delete_playlist(state, payload, config, rng):
    return replace(state, playlists=collections.delete_playlist(state.playlists, payload), error=None)


def _update_playlist(state, payload, config, rng):
    payload = payload or {}
    playlists = collections.update_playlist(state.playlists, payload.get('id'), payload.get('updates') or {})
    return replace(state, playlists=playlists, error=None)


def _add_track_to_playlist(state, payload, config, rng):
    payload = payload or {}
    track = _as_track(payload.get('track'))
    if track is None:
        return replace(state, error="No track provided")
    playlists = collections.add_track_to_playlist(state.playlists, payload.get('playlist_id'), track)
    return replace(state, playlists=playlists, error=None)


def _remove_track_from_playlist(state, payload, config, rng):
    payload = payload or {}
    playlists = collections.remove_track_from_playlist(
        state.playlists, payload.get('playlist_id'), payload.get('track_id')
    )
    return replace(state, playlists=playlists, error=None)


# ----------------------------
# Session
# ----------------------------

def _load_snapshot(state, payload, config, rng):
    snapshot = payload if isinstance(payload, Snapshot) else Snapshot.from_dict(payload)
    return replace(
        state,
        favorites=snapshot.favorites,
        uploads=snapshot.uploads,
        playlists=snapshot.playlists,
        volume=snapshot.volume,
        repeat_mode=snapshot.repeat_mode,
        is_initialized=True,
        error=None,
    )


def _reset_state(state, payload, config, rng):
    return replace(initial_state(config), is_initialized=True)


def _set_error(state, payload, config, rng):
    return replace(state, error=None if payload is None else str(payload))


def _clear_error(state, payload, config, rng):
    if state.error is None:
        return state
    return replace(state, error=None)


_HANDLERS: Dict[ActionType, Handler] = {
    ActionType.SET_PLAYING: _set_playing,
    ActionType.TOGGLE_PLAY: _toggle_play,
    ActionType.SET_VOLUME: _set_volume,
    ActionType.TIME_UPDATE: _time_update,
    ActionType.DURATION_CHANGE: _duration_change,
    ActionType.SET_SKIPPING: _set_skipping,
    ActionType.SEEK_STARTED: _seek_started,
    ActionType.SEEK_MOVED: _seek_moved,
    ActionType.SEEK_ENDED: _seek_ended,
    ActionType.TRACK_ENDED: _track_ended,
    ActionType.PLAYBACK_FAILED: _playback_failed,
    ActionType.RETRY_LOAD: _retry_load,
    ActionType.LOAD_TRACK: _load_track,
    ActionType.PLAY_NEXT: _play_next,
    ActionType.PLAY_PREVIOUS: _play_previous,
    ActionType.ADD_TO_QUEUE: _add_to_queue,
    ActionType.QUEUE_NEXT: _queue_next,
    ActionType.REMOVE_FROM_QUEUE: _remove_from_queue,
    ActionType.SET_QUEUE: _set_queue,
    ActionType.CLEAR_QUEUE: _clear_queue,
    ActionType.TOGGLE_SHUFFLE: _toggle_shuffle,
    ActionType.SET_SHUFFLE: _set_shuffle,
    ActionType.CYCLE_REPEAT: _cycle_repeat,
    ActionType.SET_REPEAT_MODE: _set_repeat_mode,
    ActionType.ADD_TO_FAVORITES: _add_to_favorites,
    ActionType.REMOVE_FROM_FAVORITES: _remove_from_favorites,
    ActionType.TOGGLE_FAVORITE: _toggle_favorite,
    ActionType.SET_FAVORITES: _set_favorites,
    ActionType.ADD_UPLOAD: _add_upload,
    ActionType.REMOVE_UPLOAD: _remove_upload,
    ActionType.UPDATE_UPLOAD: _update_upload,
    ActionType.SET_UPLOADS: _set_uploads,
    ActionType.CREATE_PLAYLIST: _create_playlist,
    ActionType.DELETE_PLAYLIST: _delete_playlist,
    ActionType.UPDATE_PLAYLIST: _update_playlist,
    ActionType.ADD_TRACK_TO_PLAYLIST: _add_track_to_playlist,
    ActionType.REMOVE_TRACK_FROM_PLAYLIST: _remove_track_from_playlist,
    ActionType.LOAD_SNAPSHOT: _load_snapshot,
    ActionType.RESET_STATE: _reset_state,
    ActionType.SET_ERROR: _set_error,
    ActionType.CLEAR_ERROR: _clear_error,
}
