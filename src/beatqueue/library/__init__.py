from .models import DEFAULT_PLAYLIST_ID, Playlist, default_playlists

__all__ = ['DEFAULT_PLAYLIST_ID', 'Playlist', 'default_playlists']
