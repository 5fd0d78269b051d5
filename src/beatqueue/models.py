"""Core data models shared by the queue, playback and library layers."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Union

from beatqueue.utils.timefmt import parse_time


class TrackSource(Enum):
    """Where a track came from."""
    CATALOG = "catalog"
    UPLOAD = "upload"


class RepeatMode(Enum):
    """Repeat behaviour at the end of the queue."""
    OFF = "off"
    ALL = "all"
    ONE = "one"

    @classmethod
    def parse(cls, value: Any) -> 'RepeatMode':
        """Coerce ``value`` into a mode, falling back to ``OFF``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.OFF

    def next_mode(self) -> 'RepeatMode':
        """Return the mode after this one in the off -> all -> one cycle."""
        return _REPEAT_CYCLE[self]


_REPEAT_CYCLE = {
    RepeatMode.OFF: RepeatMode.ALL,
    RepeatMode.ALL: RepeatMode.ONE,
    RepeatMode.ONE: RepeatMode.OFF,
}


class PlaybackStatus(Enum):
    """Coarse transport status derived from the player state."""
    IDLE = "idle"
    READY = "ready"
    PLAYING = "playing"


@dataclass(frozen=True)
class Track:
    """A playable track. Edits create a replacement instance."""
    id: str
    title: str = "Unknown Title"
    artist: str = "Unknown Artist"
    album: Optional[str] = None
    duration: Union[str, float, int] = "0:00"  # display string or seconds
    cover: Optional[str] = None
    url: Optional[str] = None
    source: TrackSource = TrackSource.CATALOG
    genre: Optional[str] = None
    category: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_uploaded(self) -> bool:
        return self.source is TrackSource.UPLOAD

    @property
    def duration_seconds(self) -> float:
        return parse_time(self.duration)

    def with_updates(self, **updates) -> 'Track':
        """Return a replacement track with ``updates`` applied."""
        known = {k: v for k, v in updates.items() if k in _TRACK_FIELDS and k != 'extra'}
        unknown = {k: v for k, v in updates.items() if k not in _TRACK_FIELDS}
        if 'source' in known:
            known['source'] = TrackSource(known['source'])
        if unknown:
            known['extra'] = {**self.extra, **unknown}
        return replace(self, **known)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], uploaded: Optional[bool] = None) -> 'Track':
        """Build a track from a loosely shaped catalog or upload payload.

        Args:
            data: Mapping using either catalog keys (``_id``, ``singer``,
                  ``coverImageUrl``, ``audioUrl``) or the canonical ones.
            uploaded: Force the upload flag regardless of the payload.

        Returns:
            The normalized track

        Raises:
            ValueError: If the payload carries no identifier
        """
        track_id = data.get('id') or data.get('_id')
        if not track_id:
            raise ValueError(f"Track payload has no identifier: {data!r}")

        if uploaded is None:
            source_value = data.get('source')
            if source_value in (TrackSource.UPLOAD, TrackSource.UPLOAD.value):
                uploaded = True
            else:
                uploaded = bool(data.get('isUploaded', False))

        consumed = {
            'id', '_id', 'title', 'artist', 'singer', 'album', 'duration', 'cover',
            'coverImageUrl', 'url', 'audioUrl', 'isUploaded', 'source', 'genre', 'category',
        }
        return cls(
            id=str(track_id),
            title=data.get('title') or "Unknown Title",
            artist=data.get('artist') or data.get('singer') or "Unknown Artist",
            album=data.get('album'),
            duration=data.get('duration') or "0:00",
            cover=data.get('cover') or data.get('coverImageUrl'),
            url=data.get('url') or data.get('audioUrl'),
            source=TrackSource.UPLOAD if uploaded else TrackSource.CATALOG,
            genre=data.get('genre'),
            category=data.get('category'),
            extra={k: v for k, v in data.items() if k not in consumed},
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            'id': self.id,
            'title': self.title,
            'artist': self.artist,
            'album': self.album,
            'duration': self.duration,
            'cover': self.cover,
            'url': self.url,
            'isUploaded': self.is_uploaded,
            'genre': self.genre,
            'category': self.category,
        })
        return data


_TRACK_FIELDS = {
    'id', 'title', 'artist', 'album', 'duration', 'cover', 'url',
    'source', 'genre', 'category', 'extra',
}
