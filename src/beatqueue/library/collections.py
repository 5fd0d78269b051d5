"""Favorites, uploads and playlist collection updates.

Each function takes the current tuple and returns a new one. Unknown ids are
ignored, so every operation is safe to replay.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Iterable, Tuple

from beatqueue.library.models import Playlist
from beatqueue.models import Track, TrackSource
from beatqueue.queue.operations import append_unique, contains

logger = logging.getLogger(__name__)

PLAYLIST_EDITABLE_FIELDS = ('name', 'description')


def add_favorite(favorites: Tuple[Track, ...], track: Track) -> Tuple[Track, ...]:
    return append_unique(favorites, track)


def remove_by_id(tracks: Tuple[Track, ...], track_id: str) -> Tuple[Track, ...]:
    return tuple(track for track in tracks if track.id != track_id)


def toggle_favorite(favorites: Tuple[Track, ...], track: Track) -> Tuple[Track, ...]:
    if contains(favorites, track.id):
        return remove_by_id(favorites, track.id)
    return favorites + (track,)


def as_upload(track: Track) -> Track:
    if track.is_uploaded:
        return track
    return track.with_updates(source=TrackSource.UPLOAD)


def add_upload(uploads: Tuple[Track, ...], track: Track) -> Tuple[Track, ...]:
    """Add ``track`` to the uploads, replacing an older entry with the same id."""
    track = as_upload(track)
    if contains(uploads, track.id):
        return tuple(track if existing.id == track.id else existing for existing in uploads)
    return uploads + (track,)


def update_upload(uploads: Tuple[Track, ...], track_id: str, updates: Dict[str, Any]) -> Tuple[Track, ...]:
    """Replace the upload ``track_id`` with an edited copy."""
    return tuple(
        as_upload(track.with_updates(**updates)) if track.id == track_id else track
        for track in uploads
    )


def set_uploads(tracks: Iterable[Track]) -> Tuple[Track, ...]:
    return tuple(as_upload(track) for track in tracks)


def create_playlist(playlists: Tuple[Playlist, ...], name: str, description: str = "") -> Tuple[Playlist, ...]:
    playlist = Playlist(name=name, description=description or "")
    logger.info(f"Created playlist: {playlist.name} (ID: {playlist.id})")
    return playlists + (playlist,)


def delete_playlist(playlists: Tuple[Playlist, ...], playlist_id: str) -> Tuple[Playlist, ...]:
    return tuple(playlist for playlist in playlists if playlist.id != playlist_id)


def update_playlist(
    playlists: Tuple[Playlist, ...],
    playlist_id: str,
    updates: Dict[str, Any]
) -> Tuple[Playlist, ...]:
    """Apply name/description edits to one playlist. Other keys are dropped."""
    changes = {k: v for k, v in updates.items() if k in PLAYLIST_EDITABLE_FIELDS}
    ignored = set(updates) - set(changes)
    if ignored:
        logger.debug(f"Ignoring non-editable playlist fields: {sorted(ignored)}")
    if not changes.get('name', True):
        changes.pop('name')
    return _map_playlist(playlists, playlist_id, **changes)


def add_track_to_playlist(playlists: Tuple[Playlist, ...], playlist_id: str, track: Track) -> Tuple[Playlist, ...]:
    for playlist in playlists:
        if playlist.id == playlist_id:
            return _map_playlist(playlists, playlist_id, tracks=playlist.tracks + (track,))
    return playlists


def remove_track_from_playlist(
    playlists: Tuple[Playlist, ...],
    playlist_id: str,
    track_id: str
) -> Tuple[Playlist, ...]:
    for playlist in playlists:
        if playlist.id == playlist_id:
            return _map_playlist(playlists, playlist_id, tracks=remove_by_id(playlist.tracks, track_id))
    return playlists


def _map_playlist(playlists: Tuple[Playlist, ...], playlist_id: str, **changes) -> Tuple[Playlist, ...]:
    now = datetime.now()
    return tuple(
        replace(playlist, updated_at=now, **changes) if playlist.id == playlist_id else playlist
        for playlist in playlists
    )
