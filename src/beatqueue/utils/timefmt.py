"""Time formatting and artist display helpers."""

import logging
import math
import re
from typing import Iterable, List, Union

logger = logging.getLogger(__name__)

ARTIST_SEPARATORS = [',', ' & ', ' and ', ' ft. ', ' feat. ', ' featuring ', '+', ' x ']
ARTIST_FILLER_WORDS = {'ft', 'feat', 'featuring', 'and'}


def format_time(seconds: Union[int, float, None]) -> str:
    """Format a number of seconds as ``M:SS`` (or ``H:MM:SS`` past an hour)."""
    if not seconds or isinstance(seconds, bool) or math.isnan(seconds) or math.isinf(seconds):
        return "0:00"
    if seconds < 0:
        return "0:00"

    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def parse_time(text: Union[str, int, float, None]) -> float:
    """Convert ``SS``, ``M:SS`` or ``H:MM:SS`` into seconds.

    Numbers are passed through unchanged. Anything unparsable gives 0.
    """
    if isinstance(text, bool):
        return 0
    if isinstance(text, (int, float)):
        if math.isnan(text) or math.isinf(text):
            return 0
        return max(0, text)
    if not text or not isinstance(text, str):
        return 0

    parts = text.strip().split(':')
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        logger.debug(f"Invalid time format: {text!r}")
        return 0

    if any(n < 0 for n in numbers):
        return 0
    if len(numbers) == 1:
        return numbers[0]
    if len(numbers) == 2:
        minutes, seconds = numbers
        return minutes * 60 + seconds
    if len(numbers) == 3:
        hours, minutes, seconds = numbers
        return hours * 3600 + minutes * 60 + seconds

    logger.debug(f"Invalid time format: {text!r}")
    return 0


def total_duration(tracks: Iterable) -> str:
    """Sum the durations of ``tracks`` and format the total."""
    return format_time(sum(parse_time(track.duration) for track in tracks))


def format_artists(raw: str) -> str:
    """Turn a raw artist credit into a readable display string.

    Args:
        raw: Artist string as delivered by the catalog, possibly a quoted
             list (``"A","B"``) or joined with ``feat.``, ``&`` and friends.

    Returns:
        ``"A"``, ``"A & B"``, ``"A, B, C"`` or ``"A, B, C & 2 more"``.
    """
    if not raw:
        return "Unknown Artist"

    cleaned = raw.replace('\\"', '"')
    cleaned = re.sub(r'^"|"$', '', cleaned)

    if '","' in cleaned:
        artists = cleaned.split('","')
    else:
        artists = [cleaned]
        for separator in ARTIST_SEPARATORS:
            if separator in artists[0]:
                artists = artists[0].split(separator)
                break

    names: List[str] = []
    for artist in artists:
        name = artist.strip().strip('"\'')
        if not name or name.lower() in ARTIST_FILLER_WORDS:
            continue
        if name not in names:
            names.append(name)

    if not names:
        return "Unknown Artist"
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} & {names[1]}"
    if len(names) <= 4:
        return ', '.join(names)
    return f"{', '.join(names[:3])} & {len(names) - 3} more"
