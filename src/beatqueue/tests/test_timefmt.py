"""Tests for time and artist display helpers."""

import pytest

from beatqueue.models import Track
from beatqueue.utils.timefmt import format_artists, format_time, parse_time, total_duration


@pytest.mark.parametrize("seconds,expected", [
    (0, "0:00"),
    (None, "0:00"),
    (-5, "0:00"),
    (float('nan'), "0:00"),
    (9, "0:09"),
    (65.9, "1:05"),
    (3600, "1:00:00"),
    (3725, "1:02:05"),
])
def test_format_time(seconds, expected):
    """Test second counts format as clock strings."""
    assert format_time(seconds) == expected


@pytest.mark.parametrize("text,expected", [
    ("45", 45),
    ("3:15", 195),
    ("1:02:03", 3723),
    (200, 200),
    ("", 0),
    (None, 0),
    ("abc", 0),
    ("1:2:3:4", 0),
    ("-1:00", 0),
])
def test_parse_time(text, expected):
    """Test clock strings parse to seconds."""
    assert parse_time(text) == expected


def test_total_duration():
    """Test summing track durations."""
    tracks = [Track(id="1", duration="3:30"), Track(id="2", duration="2:45"), Track(id="3", duration=15)]
    assert total_duration(tracks) == "6:30"


@pytest.mark.parametrize("raw,expected", [
    ("", "Unknown Artist"),
    ("Adele", "Adele"),
    ("Drake feat. Rihanna", "Drake & Rihanna"),
    ("A, B, C", "A, B, C"),
    ('"A","B","A"', "A & B"),
    ("A, B, C, D, E, F", "A, B, C & 3 more"),
    ("Simon and Garfunkel", "Simon & Garfunkel"),
])
def test_format_artists(raw, expected):
    """Test artist credits are split, deduplicated and shortened."""
    assert format_artists(raw) == expected
