"""Tests for track and playlist search."""

import pytest

from beatqueue.library.models import Playlist
from beatqueue.models import Track
from beatqueue.search import (
    normalize_search_term,
    search_by_category,
    search_playlists,
    search_stats,
    search_suggestions,
    search_tracks,
    sort_search_results,
)


@pytest.fixture
def catalog():
    return [
        Track(id="1", title="Hello", artist="Adele", genre="Pop", album="25"),
        Track(id="2", title="Hello World", artist="Lady A", genre="Country"),
        Track(id="3", title="Someone Like You", artist="Adele", genre="Pop"),
        Track(id="4", title="Shake It Off", artist="Taylor Swift", genre="Pop",
              extra={'description': "say hello to the haters"}),
        Track(id="5", title="Othello", artist="Verdi", genre="Opera"),
    ]


def ids(tracks):
    return [track.id for track in tracks]


def test_normalize_search_term():
    """Test search terms are trimmed, lowercased and non-strings become empty."""
    assert normalize_search_term("  HeLLo ") == "hello"
    assert normalize_search_term(None) == ""
    assert normalize_search_term(42) == ""


def test_empty_query_returns_everything(catalog):
    """Test a blank query returns the full track list."""
    assert search_tracks(catalog, "   ") == catalog


def test_search_tracks_checks_every_field(catalog):
    """Test title, artist, genre, album and description are all searched."""
    assert ids(search_tracks(catalog, "hello")) == ["1", "2", "4", "5"]
    assert ids(search_tracks(catalog, "ADELE")) == ["1", "3"]
    assert ids(search_tracks(catalog, "opera")) == ["5"]
    assert ids(search_tracks(catalog, "25")) == ["1"]


@pytest.mark.parametrize("category,expected", [
    ('title', ["1", "2", "5"]),
    ('artist', []),
    ('all', ["1", "2", "4", "5"]),
    ('nonsense', ["1", "2", "4", "5"]),
])
def test_search_by_category(catalog, category, expected):
    """Test category search, with unknown categories searching everything."""
    assert ids(search_by_category(catalog, "hello", category)) == expected


def test_search_playlists(catalog):
    """Test playlists match on name, description and their tracks."""
    playlists = [
        Playlist(id="p1", name="Morning", description="Wake up songs"),
        Playlist(id="p2", name="Divas", tracks=(catalog[0],)),
        Playlist(id="p3", name="Classics", tracks=(catalog[4],)),
    ]

    assert [p.id for p in search_playlists(playlists, "wake")] == ["p1"]
    assert [p.id for p in search_playlists(playlists, "adele")] == ["p2"]
    assert [p.id for p in search_playlists(playlists, "opera")] == ["p3"]
    assert search_playlists(playlists, "") == playlists


def test_search_suggestions(catalog):
    """Test suggestions need two characters and respect the limit."""
    assert search_suggestions(catalog, "h") == []
    assert search_suggestions(catalog, "ad") == ["Adele", "Lady A"]
    assert search_suggestions(catalog, "o", limit=2) == []
    assert len(search_suggestions(catalog, "po", limit=1)) == 1


def test_sort_search_results(catalog):
    """Test results are ranked by exact title, then title prefix, then name."""
    results = search_tracks(catalog, "hello")

    ordered = sort_search_results(results, "hello")

    # exact title, title prefix, then the rest alphabetically
    assert ids(ordered) == ["1", "2", "5", "4"]


def test_sort_prefers_artist_matches():
    """Test artist matches rank above alphabetical order."""
    tracks = [
        Track(id="1", title="Zebra", artist="Nobody"),
        Track(id="2", title="Yak", artist="Rose Band"),
    ]
    assert ids(sort_search_results(tracks, "rose")) == ["2", "1"]


def test_search_stats(catalog):
    """Test search statistics for a query."""
    stats = search_stats(catalog[:2], catalog, " hello ")

    assert stats == {
        'total': 5,
        'results': 2,
        'query': "hello",
        'has_results': True,
        'percentage': 40,
    }
    assert search_stats([], 0, None)['percentage'] == 0
