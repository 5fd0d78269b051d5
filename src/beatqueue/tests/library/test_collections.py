"""Tests for favorites, uploads and playlist collection helpers."""

from beatqueue.library import collections
from beatqueue.library.models import DEFAULT_PLAYLIST_ID, default_playlists
from beatqueue.models import TrackSource


def test_toggle_favorite(abc_tracks):
    """Test toggling adds then removes a favorite."""
    favorites = collections.toggle_favorite((), abc_tracks[0])
    assert favorites == (abc_tracks[0],)
    assert collections.toggle_favorite(favorites, abc_tracks[0]) == ()


def test_add_favorite_is_unique(abc_tracks):
    """Test the same track is never favorited twice."""
    favorites = collections.add_favorite((), abc_tracks[0])
    assert collections.add_favorite(favorites, abc_tracks[0]) == favorites


def test_remove_by_id_unknown_is_noop(abc_tracks):
    """Test removing an unknown id leaves the list alone."""
    tracks = tuple(abc_tracks)
    assert collections.remove_by_id(tracks, "Z") == tracks


def test_add_upload_marks_source_and_replaces(track_factory):
    """Test uploads are marked as uploads and replace same-id entries."""
    uploads = collections.add_upload((), track_factory("U1", title="Draft"))
    assert uploads[0].source is TrackSource.UPLOAD

    uploads = collections.add_upload(uploads, track_factory("U1", title="Final"))
    assert len(uploads) == 1
    assert uploads[0].title == "Final"


def test_update_upload_keeps_unknown_fields_in_extra(track_factory):
    """Test unknown update fields are kept in extra."""
    uploads = collections.set_uploads([track_factory("U1")])

    uploads = collections.update_upload(uploads, "U1", {'title': "New", 'lyrics': "la la"})

    assert uploads[0].title == "New"
    assert uploads[0].extra['lyrics'] == "la la"
    assert uploads[0].is_uploaded is True


def test_update_upload_unknown_id(track_factory):
    """Test updating an unknown upload changes nothing."""
    uploads = collections.set_uploads([track_factory("U1")])
    assert collections.update_upload(uploads, "nope", {'title': "x"}) == uploads


def test_create_and_delete_playlist():
    """Test creating and deleting a playlist."""
    playlists = collections.create_playlist(default_playlists(), "Workout", "Fast songs")

    assert len(playlists) == 2
    assert playlists[1].name == "Workout"
    assert playlists[1].description == "Fast songs"
    assert playlists[1].id.startswith("playlist_")

    assert collections.delete_playlist(playlists, playlists[1].id) == playlists[:1]


def test_update_playlist_only_edits_name_and_description():
    """Test playlist updates only touch name and description."""
    playlists = default_playlists()

    updated = collections.update_playlist(playlists, DEFAULT_PLAYLIST_ID, {
        'name': "Loved",
        'description': "Songs I love",
        'id': "hijacked",
    })

    assert updated[0].id == DEFAULT_PLAYLIST_ID
    assert updated[0].name == "Loved"
    assert updated[0].description == "Songs I love"
    assert updated[0].updated_at is not None


def test_update_playlist_ignores_empty_name():
    """Test an empty name does not replace the playlist name."""
    updated = collections.update_playlist(default_playlists(), DEFAULT_PLAYLIST_ID, {'name': ""})
    assert updated[0].name == "My Favorites"


def test_playlist_tracks(abc_tracks):
    """Test adding and removing playlist tracks."""
    playlists = collections.add_track_to_playlist(default_playlists(), DEFAULT_PLAYLIST_ID, abc_tracks[0])
    playlists = collections.add_track_to_playlist(playlists, DEFAULT_PLAYLIST_ID, abc_tracks[1])
    assert [t.id for t in playlists[0].tracks] == ["A", "B"]

    playlists = collections.remove_track_from_playlist(playlists, DEFAULT_PLAYLIST_ID, "A")
    assert [t.id for t in playlists[0].tracks] == ["B"]


def test_playlist_unknown_id_is_noop(abc_tracks):
    """Test edits to an unknown playlist change nothing."""
    playlists = default_playlists()
    assert collections.add_track_to_playlist(playlists, "missing", abc_tracks[0]) is playlists
    assert collections.remove_track_from_playlist(playlists, "missing", "A") is playlists
