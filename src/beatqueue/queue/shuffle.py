"""Shuffle generator for endless shuffle play."""

import logging
import random
from typing import List, Optional, Sequence

from beatqueue.models import Track

logger = logging.getLogger(__name__)

SHUFFLE_ROUNDS = 10


def find_track_index(tracks: Sequence[Track], track_id: Optional[str]) -> int:
    """Return the first index of ``track_id`` in ``tracks``, or -1."""
    if track_id is None:
        return -1
    for index, track in enumerate(tracks):
        if track.id == track_id:
            return index
    return -1


def build_shuffled_queue(
    tracks: Sequence[Track],
    current: Optional[Track] = None,
    rounds: int = SHUFFLE_ROUNDS,
    rng: Optional[random.Random] = None
) -> List[Track]:
    """Expand ``tracks`` into a long shuffled queue.

    The queue is ``rounds`` independently shuffled copies of the pool, so that
    "next" can be pressed many times before the queue runs out. When ``current``
    is found in ``tracks`` it is taken out of the pool and placed first.

    Args:
        tracks: Base track list (not modified)
        current: Track that is playing right now, if any
        rounds: Number of shuffled copies of the pool to append
        rng: Random source; the module-level generator when omitted

    Returns:
        The new queue. Empty when ``tracks`` is empty.
    """
    if not tracks:
        return []

    rng = rng or random
    pool = list(tracks)
    head: List[Track] = []

    current_index = find_track_index(pool, current.id if current else None)
    if current_index > -1:
        head.append(pool.pop(current_index))

    shuffled: List[Track] = []
    for _ in range(max(rounds, 1)):
        round_tracks = list(pool)
        rng.shuffle(round_tracks)
        shuffled.extend(round_tracks)

    logger.debug(f"Built shuffled queue of {len(head) + len(shuffled)} tracks from {len(tracks)}")
    return head + shuffled
