"""Media backend interface the player store drives."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Tuple


class MediaErrorKind(Enum):
    """Failure classes reported by a media backend (HTML media error codes)."""
    ABORTED = 1
    NETWORK = 2
    DECODE = 3
    SRC_NOT_SUPPORTED = 4


RETRYABLE_ERRORS = {MediaErrorKind.SRC_NOT_SUPPORTED}


class PlaybackBackend(ABC):
    """Base class for media backends.

    The store calls these methods; the backend reports back through the
    store's ``on_*`` listener methods.
    """

    @abstractmethod
    def load(self, url: str) -> None:
        """Point the backend at a new media source"""
        pass

    @abstractmethod
    def play(self) -> None:
        pass

    @abstractmethod
    def pause(self) -> None:
        pass

    @abstractmethod
    def set_current_time(self, seconds: float) -> None:
        """Move the playhead"""
        pass

    @abstractmethod
    def set_volume(self, volume: float) -> None:
        """Set output volume in the 0.0-1.0 range"""
        pass


class NullBackend(PlaybackBackend):
    """Backend that produces no sound and records every call."""

    def __init__(self):
        self.calls: List[Tuple[str, tuple]] = []
        self.url = None
        self.playing = False
        self.position = 0.0
        self.volume = 1.0

    def load(self, url: str) -> None:
        self.calls.append(('load', (url,)))
        self.url = url
        self.position = 0.0

    def play(self) -> None:
        self.calls.append(('play', ()))
        self.playing = True

    def pause(self) -> None:
        self.calls.append(('pause', ()))
        self.playing = False

    def set_current_time(self, seconds: float) -> None:
        self.calls.append(('set_current_time', (seconds,)))
        self.position = seconds

    def set_volume(self, volume: float) -> None:
        self.calls.append(('set_volume', (volume,)))
        self.volume = volume
