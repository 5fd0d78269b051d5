"""Tests for the shuffle generator."""

from collections import Counter
from unittest.mock import MagicMock

from beatqueue.queue.shuffle import SHUFFLE_ROUNDS, build_shuffled_queue, find_track_index


def test_find_track_index(abc_tracks):
    """Test finding a track position by id."""
    assert find_track_index(abc_tracks, "B") == 1
    assert find_track_index(abc_tracks, "Z") == -1
    assert find_track_index(abc_tracks, None) == -1


def test_empty_input():
    """Test shuffling nothing gives nothing."""
    assert build_shuffled_queue([]) == []


def test_current_track_is_pinned_first(five_tracks, rng):
    """Test the current track leads and is left out of the shuffled rounds."""
    queue = build_shuffled_queue(five_tracks, five_tracks[2], rng=rng)

    assert queue[0].id == "C"
    assert len(queue) == 1 + SHUFFLE_ROUNDS * 4
    counts = Counter(track.id for track in queue[1:])
    assert counts == {"A": SHUFFLE_ROUNDS, "B": SHUFFLE_ROUNDS, "D": SHUFFLE_ROUNDS, "E": SHUFFLE_ROUNDS}


def test_without_current_track_every_round_is_a_permutation(five_tracks, rng):
    """Test every round is a full permutation when no track is pinned."""
    queue = build_shuffled_queue(five_tracks, rounds=3, rng=rng)

    assert len(queue) == 15
    for start in range(0, 15, 5):
        assert sorted(t.id for t in queue[start:start + 5]) == ["A", "B", "C", "D", "E"]


def test_unknown_current_track_is_not_pinned(abc_tracks, track_factory, rng):
    """Test a current track outside the list is not added."""
    queue = build_shuffled_queue(abc_tracks, track_factory("Z"), rounds=2, rng=rng)

    assert len(queue) == 6
    assert "Z" not in [t.id for t in queue]


def test_single_track(track_factory, rng):
    """Test a single track is not expanded into rounds."""
    track = track_factory("A")

    assert build_shuffled_queue([track], rounds=3, rng=rng) == [track, track, track]
    assert build_shuffled_queue([track], track, rng=rng) == [track]


def test_input_is_not_modified(five_tracks, rng):
    """Test the source list is left untouched."""
    original = list(five_tracks)
    build_shuffled_queue(five_tracks, five_tracks[0], rng=rng)
    assert five_tracks == original


def test_rng_is_used_once_per_round(abc_tracks):
    """Test the random source shuffles once per round."""
    rng = MagicMock()

    build_shuffled_queue(abc_tracks, rounds=4, rng=rng)

    assert rng.shuffle.call_count == 4


def test_rounds_floor_at_one(abc_tracks, rng):
    """Test a non-positive round count still gives one round."""
    assert len(build_shuffled_queue(abc_tracks, rounds=0, rng=rng)) == 3
