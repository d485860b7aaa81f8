"""YouTube search URL construction.

URLs are only built here; nothing ever requests them.
"""

from typing import Iterable
from urllib.parse import urlencode

from .models import SearchEntry, TrackDescriptor

SEARCH_URL_BASE = "https://www.youtube.com"

MODE_MUSIC_VIDEO = "music video"
MODE_LIVE = "live"
MODE_COVER = "cover"
MODE_SHIT = "shit"

# Suffix appended to the track name for each search mode
MODE_SUFFIXES = {
    MODE_MUSIC_VIDEO: " music video",
    MODE_LIVE: " live",
    MODE_COVER: " cover",
    MODE_SHIT: " harry potter amv",
}

SEARCH_MODES = tuple(MODE_SUFFIXES)


def is_known_mode(mode: str) -> bool:
    """Check whether mode is one of the supported search modes."""
    return mode in MODE_SUFFIXES


def build_search_url(display_name: str, mode: str, search_base: str = SEARCH_URL_BASE) -> str:
    """Build the search results URL for a track.

    Args:
        display_name: Track display name, e.g. "Wise Up by Aimee Mann"
        mode: One of SEARCH_MODES
        search_base: Scheme and host of the search service

    Returns:
        URL like "https://www.youtube.com/results?search_query=Wise+Up+...".
        An unknown mode yields the results URL with no search_query at all.
    """
    params = {}
    suffix = MODE_SUFFIXES.get(mode)
    if suffix is not None:
        params["search_query"] = f"{display_name}{suffix}"
    return f"{search_base}/results?{urlencode(params)}"


def build_entries(tracks: Iterable[TrackDescriptor], mode: str) -> tuple[SearchEntry, ...]:
    """Turn catalog tracks into search entries, keeping their order."""
    entries = []
    for track in tracks:
        name = track.display_name
        entries.append(SearchEntry(display_name=name, search_url=build_search_url(name, mode)))
    return tuple(entries)
