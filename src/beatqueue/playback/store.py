"""Player store: the single owner of the session state.

The store holds the current ``PlayerState``, runs every mutation through
``reduce`` and keeps an attached ``PlaybackBackend`` in step with the result.
Backend events come back in through the ``on_*`` methods.
"""

import logging
import random
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from beatqueue.config import DEFAULT_CONFIG, PlayerConfig
from beatqueue.models import RepeatMode, Track
from beatqueue.persistence.snapshot import Snapshot, snapshot_changed, snapshot_from_state
from beatqueue.playback import selectors
from beatqueue.playback.actions import Action, ActionType, create_action
from beatqueue.playback.backend import RETRYABLE_ERRORS, MediaErrorKind, PlaybackBackend
from beatqueue.playback.reducer import initial_state, reduce
from beatqueue.playback.state import PlayerState, SeekOrigin

logger = logging.getLogger(__name__)

StateListener = Callable[[PlayerState], None]
SnapshotListener = Callable[[Snapshot], None]
TrackLike = Union[Track, Dict[str, Any]]


class PlayerStore:
    """Owns the player state and the media backend wiring."""

    def __init__(
        self,
        backend: Optional[PlaybackBackend] = None,
        config: Optional[PlayerConfig] = None,
        snapshot: Optional[Union[Snapshot, Dict[str, Any]]] = None,
        rng: Optional[random.Random] = None
    ):
        """Initialize the store.

        Args:
            backend: Media backend to drive; the store works without one
            config: Player tunables, defaults when omitted
            snapshot: Previously persisted library/settings to start from
            rng: Random source used for shuffling
        """
        self.config = config or DEFAULT_CONFIG
        self.backend = backend
        self._rng = rng
        self._state = initial_state(self.config)
        self._listeners: List[StateListener] = []
        self._snapshot_listeners: List[SnapshotListener] = []

        if snapshot is not None:
            self._state = reduce(self._state, create_action(ActionType.LOAD_SNAPSHOT, snapshot), self.config)
        else:
            self._state = reduce(self._state, create_action(ActionType.RESET_STATE), self.config)

        if self.backend is not None:
            self.backend.set_volume(self._state.volume)

    @property
    def state(self) -> PlayerState:
        return self._state

    # ----------------------------
    # Subscriptions
    # ----------------------------

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every new state. Returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._unsubscribe(self._listeners, listener)

    def on_snapshot(self, listener: SnapshotListener) -> Callable[[], None]:
        """Call ``listener`` whenever a persisted field changes."""
        self._snapshot_listeners.append(listener)
        return lambda: self._unsubscribe(self._snapshot_listeners, listener)

    @staticmethod
    def _unsubscribe(listeners: List[Callable], listener: Callable) -> None:
        if listener in listeners:
            listeners.remove(listener)

    def snapshot(self) -> Snapshot:
        return snapshot_from_state(self._state)

    # ----------------------------
    # Dispatch
    # ----------------------------

    def dispatch(self, action: Action) -> PlayerState:
        """Apply ``action`` and propagate the result to the backend and listeners."""
        if not isinstance(action, Action):
            logger.error(f"Invalid action: {action!r}")
            return self._state

        before = self._state
        after = reduce(before, action, self.config, self._rng)
        if after is before:
            return after

        self._state = after
        try:
            self._sync_backend(before, after)
        finally:
            for listener in list(self._listeners):
                listener(self._state)
            if snapshot_changed(before, after):
                snapshot = snapshot_from_state(after)
                for listener in list(self._snapshot_listeners):
                    listener(snapshot)
        return self._state

    def _dispatch(self, action_type: ActionType, payload: Any = None) -> PlayerState:
        return self.dispatch(create_action(action_type, payload))

    def _sync_backend(self, before: PlayerState, after: PlayerState) -> None:
        """Bring the backend in line with a state transition.

        A backend call that raises is reported through ``on_error``, so the
        transport stops with an error marker instead of the exception
        reaching the caller.
        """
        backend = self.backend
        if backend is None:
            return

        try:
            self._drive_backend(backend, before, after)
        except Exception as e:
            self._backend_failed(e)

    def _backend_failed(self, error: Exception) -> None:
        logger.error(f"Media backend failed: {error}")
        self.on_error(MediaErrorKind.ABORTED, str(error))

    def _drive_backend(self, backend: PlaybackBackend, before: PlayerState, after: PlayerState) -> None:
        if after.volume != before.volume:
            backend.set_volume(after.volume)

        if after.current_track is None:
            if before.current_track is not None:
                backend.pause()
            return

        if after.generation != before.generation:
            track = after.current_track
            if not track.url:
                logger.warning(f"Track {track.id} has no playable URL")
                self.on_error(MediaErrorKind.SRC_NOT_SUPPORTED, f"No playable source for {track.title}")
                return

            logger.debug(f"Loading {track.id} from {track.url}")
            backend.load(track.url)
            # The backend may have reported back synchronously while loading.
            current = self._state
            if current.generation == after.generation and current.is_playing:
                backend.play()
            return

        if after.is_playing != before.is_playing:
            if after.is_playing:
                backend.play()
            else:
                backend.pause()

    # ----------------------------
    # Transport
    # ----------------------------

    def play(self) -> PlayerState:
        return self._dispatch(ActionType.SET_PLAYING, True)

    def pause(self) -> PlayerState:
        return self._dispatch(ActionType.SET_PLAYING, False)

    def toggle_play(self) -> PlayerState:
        return self._dispatch(ActionType.TOGGLE_PLAY)

    def set_volume(self, volume: float) -> PlayerState:
        return self._dispatch(ActionType.SET_VOLUME, volume)

    def load_track(
        self,
        track: TrackLike,
        source: Optional[Sequence[TrackLike]] = None,
        shuffle: bool = False
    ) -> PlayerState:
        """Build the queue from ``source`` and start ``track``."""
        return self._dispatch(ActionType.LOAD_TRACK, {
            'track': track,
            'source': list(source) if source else [],
            'shuffle': shuffle,
        })

    def next(self) -> bool:
        """Skip forward. Returns False when the request was dropped or had nowhere to go."""
        return self._skip(ActionType.PLAY_NEXT)

    def previous(self) -> bool:
        """Restart the current track or skip back, depending on the playhead."""
        state = self._state
        if state.is_skipping:
            logger.debug("Skip already in flight, dropping previous request")
            return False

        if selectors.has_previous(state, self.config) and state.elapsed > self.config.restart_threshold:
            self._dispatch(ActionType.PLAY_PREVIOUS)
            if self.backend is not None:
                try:
                    self.backend.set_current_time(0.0)
                except Exception as e:
                    logger.error(f"Media backend could not restart track: {e}")
            return True
        return self._skip(ActionType.PLAY_PREVIOUS)

    def _skip(self, action_type: ActionType) -> bool:
        before = self._state
        if before.is_skipping:
            logger.debug(f"Skip already in flight, dropping {action_type.value}")
            return False

        try:
            after = self._dispatch(action_type, {'hold_lock': True})
        finally:
            if self._state.is_skipping:
                self._dispatch(ActionType.SET_SKIPPING, False)
        return after.generation != before.generation

    # ----------------------------
    # Seeking
    # ----------------------------

    def begin_seek(self, position: Optional[float] = None) -> PlayerState:
        """Start a user drag on the seek bar. Time updates are ignored until it ends."""
        return self._dispatch(ActionType.SEEK_STARTED, {'origin': SeekOrigin.USER, 'position': position})

    def update_seek(self, position: float) -> PlayerState:
        return self._dispatch(ActionType.SEEK_MOVED, position)

    def end_seek(self, position: Optional[float] = None) -> PlayerState:
        """Commit the drag: move the backend playhead, then write elapsed once."""
        state = self._state
        if not state.is_seeking or state.seek_origin is not SeekOrigin.USER:
            return state

        target = state.seek_position if position is None else position
        target = max(0.0, min(float(target), state.duration))
        if self.backend is not None:
            try:
                self.backend.set_current_time(target)
            except Exception as e:
                logger.error(f"Media backend could not seek to {target}: {e}")
        return self._dispatch(ActionType.SEEK_ENDED, {'origin': SeekOrigin.USER, 'position': target})

    def seek(self, position: float) -> PlayerState:
        self.begin_seek(position)
        return self.end_seek(position)

    # ----------------------------
    # Backend events
    # ----------------------------

    def on_time_update(self, seconds: float) -> PlayerState:
        return self._dispatch(ActionType.TIME_UPDATE, seconds)

    def on_duration_change(self, seconds: float) -> PlayerState:
        return self._dispatch(ActionType.DURATION_CHANGE, seconds)

    def on_seeking(self) -> PlayerState:
        return self._dispatch(ActionType.SEEK_STARTED, {'origin': SeekOrigin.MEDIA})

    def on_seeked(self, seconds: float) -> PlayerState:
        return self._dispatch(ActionType.SEEK_ENDED, {'origin': SeekOrigin.MEDIA, 'position': seconds})

    def on_ended(self) -> PlayerState:
        before = self._state
        after = self._dispatch(ActionType.TRACK_ENDED)
        if self.backend is None or before.current_track is None:
            return after

        try:
            if before.repeat_mode is RepeatMode.ONE:
                logger.debug(f"Repeating {before.current_track.id}")
                self.backend.set_current_time(0.0)
                self.backend.play()
            elif after.current_track is not None and not after.is_playing:
                logger.debug("No next track, stopping")
                self.backend.set_current_time(0.0)
        except Exception as e:
            self._backend_failed(e)
        return self._state

    def on_error(self, kind: Union[MediaErrorKind, int], message: Optional[str] = None) -> PlayerState:
        """Handle a load or playback failure reported by the backend.

        The transport stops and an error marker is set. A source reported as
        not supported is reloaded up to ``max_format_retries`` times.
        """
        if not isinstance(kind, MediaErrorKind):
            try:
                kind = MediaErrorKind(kind)
            except ValueError:
                kind = MediaErrorKind.DECODE

        state = self._dispatch(ActionType.PLAYBACK_FAILED, {'kind': kind, 'message': message})
        track = state.current_track
        if track is None:
            return state

        if kind in RETRYABLE_ERRORS and state.retry_count < self.config.max_format_retries:
            logger.info(f"Retrying {track.id} after {kind.name} (attempt {state.retry_count + 1})")
            return self._dispatch(ActionType.RETRY_LOAD)

        logger.warning(f"Giving up on {track.id}: {message or kind.name}")
        return state

    # ----------------------------
    # Queue
    # ----------------------------

    def add_to_queue(self, track: TrackLike) -> PlayerState:
        return self._dispatch(ActionType.ADD_TO_QUEUE, track)

    def queue_next(self, track: TrackLike) -> PlayerState:
        return self._dispatch(ActionType.QUEUE_NEXT, track)

    def remove_from_queue(self, index: int) -> PlayerState:
        return self._dispatch(ActionType.REMOVE_FROM_QUEUE, index)

    def set_queue(self, tracks: Sequence[TrackLike]) -> PlayerState:
        return self._dispatch(ActionType.SET_QUEUE, list(tracks))

    def clear_queue(self) -> PlayerState:
        return self._dispatch(ActionType.CLEAR_QUEUE)

    def toggle_shuffle(self) -> PlayerState:
        return self._dispatch(ActionType.TOGGLE_SHUFFLE)

    def set_shuffle(self, enabled: bool) -> PlayerState:
        return self._dispatch(ActionType.SET_SHUFFLE, enabled)

    def cycle_repeat(self) -> PlayerState:
        return self._dispatch(ActionType.CYCLE_REPEAT)

    def set_repeat_mode(self, mode: Union[RepeatMode, str]) -> PlayerState:
        return self._dispatch(ActionType.SET_REPEAT_MODE, mode)

    def has_next(self) -> bool:
        return selectors.has_next(self._state)

    def has_previous(self) -> bool:
        return selectors.has_previous(self._state, self.config)

    def get_next_track(self) -> Optional[Track]:
        return selectors.get_next_track(self._state)

    def get_previous_track(self) -> Optional[Track]:
        return selectors.get_previous_track(self._state, self.config)

    # ----------------------------
    # Library
    # ----------------------------

    def add_favorite(self, track: TrackLike) -> PlayerState:
        return self._dispatch(ActionType.ADD_TO_FAVORITES, track)

    def remove_favorite(self, track_id: str) -> PlayerState:
        return self._dispatch(ActionType.REMOVE_FROM_FAVORITES, track_id)

    def toggle_favorite(self, track: TrackLike) -> PlayerState:
        return self._dispatch(ActionType.TOGGLE_FAVORITE, track)

    def add_upload(self, track: TrackLike) -> PlayerState:
        return self._dispatch(ActionType.ADD_UPLOAD, track)

    def remove_upload(self, track_id: str) -> PlayerState:
        return self._dispatch(ActionType.REMOVE_UPLOAD, track_id)

    def update_upload(self, track_id: str, **updates) -> PlayerState:
        return self._dispatch(ActionType.UPDATE_UPLOAD, {'id': track_id, 'updates': updates})

    def create_playlist(self, name: str, description: str = "") -> PlayerState:
        return self._dispatch(ActionType.CREATE_PLAYLIST, {'name': name, 'description': description})

    def delete_playlist(self, playlist_id: str) -> PlayerState:
        return self._dispatch(ActionType.DELETE_PLAYLIST, playlist_id)

    def update_playlist(self, playlist_id: str, **updates) -> PlayerState:
        return self._dispatch(ActionType.UPDATE_PLAYLIST, {'id': playlist_id, 'updates': updates})

    def add_track_to_playlist(self, playlist_id: str, track: TrackLike) -> PlayerState:
        return self._dispatch(ActionType.ADD_TRACK_TO_PLAYLIST, {'playlist_id': playlist_id, 'track': track})

    def remove_track_from_playlist(self, playlist_id: str, track_id: str) -> PlayerState:
        return self._dispatch(ActionType.REMOVE_TRACK_FROM_PLAYLIST,
                              {'playlist_id': playlist_id, 'track_id': track_id})

    def load_snapshot(self, snapshot: Union[Snapshot, Dict[str, Any]]) -> PlayerState:
        return self._dispatch(ActionType.LOAD_SNAPSHOT, snapshot)

    def reset(self) -> PlayerState:
        return self._dispatch(ActionType.RESET_STATE)

    def clear_error(self) -> PlayerState:
        return self._dispatch(ActionType.CLEAR_ERROR)
