"""Shared fixtures for the beatqueue test-suite."""

import random
from typing import List

import pytest

from beatqueue.config import PlayerConfig
from beatqueue.models import Track
from beatqueue.playback.backend import NullBackend
from beatqueue.playback.store import PlayerStore


def make_track(track_id: str, **kwargs) -> Track:
    """Create a playable track with predictable fields."""
    defaults = {
        'title': f"Song {track_id}",
        'artist': f"Artist {track_id}",
        'duration': "3:00",
        'url': f"https://cdn.example.com/{track_id}.mp3",
    }
    defaults.update(kwargs)
    return Track(id=track_id, **defaults)


@pytest.fixture
def track_factory():
    return make_track


@pytest.fixture
def abc_tracks() -> List[Track]:
    """Three tracks A, B and C."""
    return [make_track(track_id) for track_id in ("A", "B", "C")]


@pytest.fixture
def five_tracks() -> List[Track]:
    """Five tracks A through E."""
    return [make_track(track_id) for track_id in ("A", "B", "C", "D", "E")]


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def config(tmp_path) -> PlayerConfig:
    """Default tunables with storage inside the test's temp directory."""
    return PlayerConfig(storage_path=tmp_path / "state.db")


@pytest.fixture
def backend() -> NullBackend:
    return NullBackend()


@pytest.fixture
def store(backend, config, rng) -> PlayerStore:
    """Player store wired to a recording backend."""
    return PlayerStore(backend=backend, config=config, rng=rng)
