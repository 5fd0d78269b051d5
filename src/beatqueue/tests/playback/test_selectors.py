"""Tests for derived player state."""

from dataclasses import replace

from beatqueue.config import PlayerConfig
from beatqueue.models import RepeatMode
from beatqueue.playback import selectors
from beatqueue.playback.state import PlayerState


def queued(tracks, cursor, **changes):
    return PlayerState(
        queue=tuple(tracks),
        original_order=tuple(tracks),
        cursor=cursor,
        current_track=tracks[cursor] if cursor > -1 else None,
        **changes
    )


def test_idle_state_has_no_neighbours():
    """Test an idle player has no next or previous track."""
    state = PlayerState()

    assert selectors.has_next(state) is False
    assert selectors.has_previous(state) is False
    assert selectors.get_next_track(state) is None
    assert selectors.get_previous_track(state) is None


def test_neighbours_in_the_middle(abc_tracks):
    """Test next and previous from the middle of the queue."""
    state = queued(abc_tracks, 1)

    assert selectors.get_next_track(state).id == "C"
    assert selectors.get_previous_track(state).id == "A"


def test_edges_depend_on_repeat(abc_tracks):
    """Test queue edges wrap only with repeat all."""
    last = queued(abc_tracks, 2)
    first = queued(abc_tracks, 0)

    assert selectors.has_next(last) is False
    assert selectors.has_previous(first) is False

    assert selectors.get_next_track(replace(last, repeat_mode=RepeatMode.ALL)).id == "A"
    assert selectors.get_previous_track(replace(first, repeat_mode=RepeatMode.ALL)).id == "C"


def test_previous_is_current_past_threshold(abc_tracks):
    """Test previous means restart once past the threshold."""
    state = queued(abc_tracks, 0, elapsed=4.0)

    assert selectors.has_previous(state) is True
    assert selectors.get_previous_track(state).id == "A"
    assert selectors.has_previous(state, PlayerConfig(restart_threshold=5)) is False


def test_upcoming(abc_tracks):
    """Test listing the tracks after the cursor."""
    state = queued(abc_tracks, 0)

    assert [t.id for t in selectors.upcoming(state)] == ["B", "C"]
    assert [t.id for t in selectors.upcoming(state, limit=1)] == ["B"]
    assert [t.id for t in selectors.upcoming(PlayerState(queue=tuple(abc_tracks)), limit=2)] == ["A", "B"]


def test_membership(abc_tracks):
    """Test favorite and queue membership checks."""
    state = replace(queued(abc_tracks[:2], 0), favorites=(abc_tracks[2],))

    assert selectors.is_in_queue(state, "B") is True
    assert selectors.is_in_queue(state, "C") is False
    assert selectors.is_favorite(state, "C") is True


def test_progress_percentage(abc_tracks):
    """Test playback progress as a percentage."""
    state = queued(abc_tracks, 0, elapsed=45.0, duration=180.0)

    assert selectors.progress_percentage(state) == 25.0
    assert selectors.progress_percentage(replace(state, is_seeking=True, seek_position=90.0)) == 50.0
    assert selectors.progress_percentage(replace(state, duration=0.0)) == 0.0
