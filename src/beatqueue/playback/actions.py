"""Action types dispatched into the player reducer."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Every transition the reducer understands."""
    # Transport
    SET_PLAYING = "SET_PLAYING"
    TOGGLE_PLAY = "TOGGLE_PLAY"
    SET_VOLUME = "SET_VOLUME"
    TIME_UPDATE = "TIME_UPDATE"
    DURATION_CHANGE = "DURATION_CHANGE"
    SET_SKIPPING = "SET_SKIPPING"
    SEEK_STARTED = "SEEK_STARTED"
    SEEK_MOVED = "SEEK_MOVED"
    SEEK_ENDED = "SEEK_ENDED"
    TRACK_ENDED = "TRACK_ENDED"
    PLAYBACK_FAILED = "PLAYBACK_FAILED"
    RETRY_LOAD = "RETRY_LOAD"

    # Queue
    LOAD_TRACK = "LOAD_TRACK"
    PLAY_NEXT = "PLAY_NEXT"
    PLAY_PREVIOUS = "PLAY_PREVIOUS"
    ADD_TO_QUEUE = "ADD_TO_QUEUE"
    QUEUE_NEXT = "QUEUE_NEXT"
    REMOVE_FROM_QUEUE = "REMOVE_FROM_QUEUE"
    SET_QUEUE = "SET_QUEUE"
    CLEAR_QUEUE = "CLEAR_QUEUE"

    # Shuffle & repeat
    TOGGLE_SHUFFLE = "TOGGLE_SHUFFLE"
    SET_SHUFFLE = "SET_SHUFFLE"
    CYCLE_REPEAT = "CYCLE_REPEAT"
    SET_REPEAT_MODE = "SET_REPEAT_MODE"

    # Favorites
    ADD_TO_FAVORITES = "ADD_TO_FAVORITES"
    REMOVE_FROM_FAVORITES = "REMOVE_FROM_FAVORITES"
    TOGGLE_FAVORITE = "TOGGLE_FAVORITE"
    SET_FAVORITES = "SET_FAVORITES"

    # Uploads
    ADD_UPLOAD = "ADD_UPLOAD"
    REMOVE_UPLOAD = "REMOVE_UPLOAD"
    UPDATE_UPLOAD = "UPDATE_UPLOAD"
    SET_UPLOADS = "SET_UPLOADS"

    # Playlists
    CREATE_PLAYLIST = "CREATE_PLAYLIST"
    DELETE_PLAYLIST = "DELETE_PLAYLIST"
    UPDATE_PLAYLIST = "UPDATE_PLAYLIST"
    ADD_TRACK_TO_PLAYLIST = "ADD_TRACK_TO_PLAYLIST"
    REMOVE_TRACK_FROM_PLAYLIST = "REMOVE_TRACK_FROM_PLAYLIST"

    # Session
    LOAD_SNAPSHOT = "LOAD_SNAPSHOT"
    RESET_STATE = "RESET_STATE"
    SET_ERROR = "SET_ERROR"
    CLEAR_ERROR = "CLEAR_ERROR"


@dataclass(frozen=True)
class Action:
    """A tagged transition request. ``payload`` shape depends on ``type``."""
    type: ActionType
    payload: Any = None


def create_action(action_type: ActionType, payload: Any = None) -> Action:
    return Action(type=action_type, payload=payload)
