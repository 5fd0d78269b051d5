"""Text search over tracks and playlists."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from beatqueue.library.models import Playlist
from beatqueue.models import Track

logger = logging.getLogger(__name__)

SEARCH_CATEGORIES = ('all', 'title', 'artist', 'genre', 'album')
MIN_SUGGESTION_LENGTH = 2


def normalize_search_term(term: Any) -> str:
    if not term or not isinstance(term, str):
        return ""
    return term.lower().strip()


def _matches(text: Optional[str], query: str) -> bool:
    if not text or not query:
        return False
    return query in normalize_search_term(text)


def _track_fields(track: Track, category: str) -> List[Optional[str]]:
    if category == 'all':
        return [track.title, track.artist, track.genre, track.album, track.extra.get('description')]
    return [getattr(track, category)]


def search_tracks(tracks: Sequence[Track], query: str) -> List[Track]:
    """Tracks whose title, artist, genre, album or description contain ``query``.

    An empty query matches everything.
    """
    return search_by_category(tracks, query, 'all')


def search_by_category(tracks: Sequence[Track], query: str, category: str = 'all') -> List[Track]:
    """Filter ``tracks`` on a single field.

    Args:
        tracks: Tracks to search
        query: Case-insensitive substring to look for
        category: One of ``title``, ``artist``, ``genre``, ``album`` or ``all``;
                  anything else searches every field

    Returns:
        Matching tracks in their original order
    """
    normalized = normalize_search_term(query)
    if not normalized:
        return list(tracks)
    if category not in SEARCH_CATEGORIES:
        logger.debug(f"Unknown search category {category!r}, searching all fields")
        category = 'all'
    return [
        track for track in tracks
        if any(_matches(text, normalized) for text in _track_fields(track, category))
    ]


def search_playlists(playlists: Sequence[Playlist], query: str) -> List[Playlist]:
    """Playlists matching by name, description or any contained track."""
    normalized = normalize_search_term(query)
    if not normalized:
        return list(playlists)

    results = []
    for playlist in playlists:
        if _matches(playlist.name, normalized) or _matches(playlist.description, normalized):
            results.append(playlist)
            continue
        if any(
            _matches(track.title, normalized)
            or _matches(track.artist, normalized)
            or _matches(track.genre, normalized)
            for track in playlist.tracks
        ):
            results.append(playlist)
    return results


def search_suggestions(tracks: Iterable[Track], query: str, limit: int = 5) -> List[str]:
    """Distinct titles, artists and genres containing ``query``, in discovery order."""
    if not query or len(query) < MIN_SUGGESTION_LENGTH:
        return []

    normalized = normalize_search_term(query)
    suggestions: Dict[str, None] = {}
    for track in tracks:
        for text in (track.title, track.artist, track.genre):
            if _matches(text, normalized):
                suggestions.setdefault(text, None)
    return list(suggestions)[:limit]


def sort_search_results(results: Sequence[Track], query: str) -> List[Track]:
    """Order results by relevance.

    Exact title matches come first, then titles starting with the query, then
    artist matches. Ties are broken alphabetically by title.
    """
    normalized = normalize_search_term(query)
    if not normalized:
        return list(results)

    def rank(track: Track):
        title = normalize_search_term(track.title or "")
        return (
            title != normalized,
            not title.startswith(normalized),
            not _matches(track.artist, normalized),
            title,
        )

    return sorted(results, key=rank)


def search_stats(results: Sequence[Any], total: Union[Sequence[Any], int], query: Optional[str]) -> Dict[str, Any]:
    results_count = len(results) if results is not None else 0
    if isinstance(total, int):
        total_count = total
    else:
        total_count = len(total) if total is not None else 0
    return {
        'total': total_count,
        'results': results_count,
        'query': query.strip() if query else "",
        'has_results': results_count > 0,
        'percentage': round(results_count / total_count * 100) if total_count > 0 else 0,
    }
