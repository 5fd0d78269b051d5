"""Pure helpers over a (queue, cursor) pair.

All functions take tuples and return new tuples, leaving their inputs alone.
A cursor of -1 means nothing is selected.
"""

from typing import Optional, Sequence, Tuple

from beatqueue.models import Track
from beatqueue.queue.shuffle import find_track_index

TrackTuple = Tuple[Track, ...]


def contains(tracks: Sequence[Track], track_id: str) -> bool:
    return find_track_index(tracks, track_id) > -1


def append_unique(tracks: TrackTuple, track: Track) -> TrackTuple:
    """Append ``track`` unless an entry with the same id exists."""
    if contains(tracks, track.id):
        return tracks
    return tracks + (track,)


def insert_after(tracks: TrackTuple, cursor: int, track: Track) -> TrackTuple:
    """Insert ``track`` right after ``cursor`` (or at the end when inactive)."""
    if cursor < 0 or cursor >= len(tracks) - 1:
        return tracks + (track,)
    return tracks[:cursor + 1] + (track,) + tracks[cursor + 1:]


def remove_at(tracks: TrackTuple, cursor: int, index: int) -> Tuple[TrackTuple, int]:
    """Remove the entry at ``index`` and keep the cursor on the same logical track.

    Returns:
        ``(new_queue, new_cursor)``. The cursor is -1 once the queue is empty and
        clamped to the last index if it would fall off the end.
    """
    if index < 0 or index >= len(tracks):
        return tracks, cursor

    remaining = tracks[:index] + tracks[index + 1:]
    if not remaining:
        return remaining, -1

    new_cursor = cursor
    if index < cursor:
        new_cursor = cursor - 1
    if new_cursor >= len(remaining):
        new_cursor = len(remaining) - 1
    return remaining, new_cursor


def step(cursor: int, length: int, delta: int, wrap: bool) -> Optional[int]:
    """Move ``cursor`` by ``delta`` inside a queue of ``length`` entries.

    Returns:
        The new index, or None when the move would leave the queue and
        wrapping is off (or the queue is empty / inactive).
    """
    if length == 0 or cursor < 0:
        return None
    target = cursor + delta
    if 0 <= target < length:
        return target
    if wrap:
        return target % length
    return None


def relocate(tracks: Sequence[Track], track: Optional[Track]) -> int:
    """Index of ``track`` in ``tracks`` by id; 0 when missing, -1 when empty."""
    if not tracks:
        return -1
    index = find_track_index(tracks, track.id if track else None)
    return index if index > -1 else 0
