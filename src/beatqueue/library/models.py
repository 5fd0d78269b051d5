"""Data models for user playlists."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

from beatqueue.models import Track

DEFAULT_PLAYLIST_ID = "playlist1"


def _new_playlist_id() -> str:
    return f"playlist_{uuid4().hex}"


@dataclass(frozen=True)
class Playlist:
    """A named, ordered collection of tracks."""
    name: str
    id: str = field(default_factory=_new_playlist_id)
    description: str = ""
    tracks: Tuple[Track, ...] = ()
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'songs': [track.to_dict() for track in self.tracks],
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Playlist':
        """Rebuild a playlist from its persisted form.

        Raises:
            ValueError: If the payload has no name or a track has no id
        """
        name = data.get('name')
        if not name:
            raise ValueError(f"Playlist payload has no name: {data!r}")

        tracks = tuple(Track.from_dict(song) for song in data.get('songs') or data.get('tracks') or [])
        return cls(
            id=str(data.get('id') or _new_playlist_id()),
            name=name,
            description=data.get('description') or "",
            tracks=tracks,
            created_at=_parse_timestamp(data.get('createdAt')) or datetime.now(),
            updated_at=_parse_timestamp(data.get('updatedAt')),
        )


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        # epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


def default_playlists() -> Tuple[Playlist, ...]:
    """Playlists present in a fresh session."""
    return (
        Playlist(
            id=DEFAULT_PLAYLIST_ID,
            name="My Favorites",
            description="My favorite songs collection",
        ),
    )
