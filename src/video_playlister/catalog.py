"""Spotify playlist track fetching."""

import logging
import re
from typing import Optional

import requests

from .errors import AuthError, NotFoundError, ServerError
from .models import TrackDescriptor

logger = logging.getLogger(__name__)

SPOTIFY_API_BASE = "https://api.spotify.com/v1"

PAGE_SIZE = 100

# Spotify includes this prefix, but including it in the request will make us 404
URI_PREFIX = "spotify:playlist:"

TRACK_FIELDS = "items.track(name,artists),error,next,previous"

_SHARE_LINK_RE = re.compile(r"^https?://open\.spotify\.com/(?:[\w-]+/)?playlist/([A-Za-z0-9]+)")


def normalize_playlist_id(raw: str) -> str:
    """Reduce a playlist URI or share link to the bare playlist ID.

    Examples:
        normalize_playlist_id("spotify:playlist:37i9dQZF1DXcBWIGoYBM5M")
        normalize_playlist_id("https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=abc")

    Anything else is returned stripped of surrounding whitespace.
    """
    value = (raw or "").strip()
    if value.startswith(URI_PREFIX):
        return value[len(URI_PREFIX):]
    match = _SHARE_LINK_RE.match(value)
    if match:
        return match.group(1)
    return value


def _name(value, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ServerError(f"Playlist response has a non-string {what} name: {value!r}")
    return value


def parse_tracks(items: list) -> list[TrackDescriptor]:
    """Extract track descriptors from playlist "items", keeping their order.

    Items without a track (removed or unavailable tracks) are skipped, and a
    missing or null name becomes "".

    Raises:
        ServerError: If the items do not have the shape Spotify documents.
    """
    if not isinstance(items, list):
        raise ServerError(f"Playlist response items is not a list: {type(items).__name__}")

    tracks = []
    for item in items:
        if not item:
            continue
        if not isinstance(item, dict):
            raise ServerError(f"Playlist response item is not an object: {item!r}")
        track = item.get("track")
        if not track:
            continue
        if not isinstance(track, dict):
            raise ServerError(f"Playlist response track is not an object: {track!r}")

        artists = track.get("artists") or []
        if not isinstance(artists, list):
            raise ServerError(f"Playlist response artists is not a list: {artists!r}")
        names = []
        for artist in artists:
            if not artist:
                continue
            if not isinstance(artist, dict):
                raise ServerError(f"Playlist response artist is not an object: {artist!r}")
            names.append(_name(artist.get("name"), "artist"))

        tracks.append(TrackDescriptor(title=_name(track.get("name"), "track"), artist_names=tuple(names)))
    return tracks


class CatalogClient:
    """Reads playlist tracks from the Spotify Web API, one page per call.

    Each fetch is a single attempt; callers decide whether to retry.
    """

    def __init__(
        self,
        api_base: str = SPOTIFY_API_BASE,
        session: Optional[requests.Session] = None,
    ):
        self.api_base = api_base
        self._session = session or requests.Session()

    def fetch(
        self,
        playlist_id: str,
        offset: int,
        page_size: int,
        token: str,
    ) -> tuple[list[TrackDescriptor], bool]:
        """Fetch one page of playlist tracks.

        Args:
            playlist_id: Normalized playlist ID
            offset: Index of the first track to return
            page_size: Maximum number of tracks to return
            token: Spotify access token

        Returns:
            (tracks in playlist order, whether Spotify reported a next page)

        Raises:
            NotFoundError: If Spotify reports status 404 for the playlist.
            AuthError: If Spotify rejects the access token.
            ServerError: For transport failures, undecodable bodies and any
                other reported error status.
        """
        logger.info(
            f"Requesting songs by playlist uri {playlist_id} page "
            f"{offset // page_size + 1}, page size {page_size}"
        )

        try:
            response = self._session.get(
                f"{self.api_base}/playlists/{playlist_id}/tracks",
                headers={"Authorization": f"Bearer {token}"},
                params={"fields": TRACK_FIELDS, "offset": offset, "limit": page_size},
            )
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise ServerError(f"Error requesting playlist {playlist_id}: {e}") from e
        except ValueError as e:
            raise ServerError(f"Playlist response for {playlist_id} is not JSON: {e}") from e

        if not isinstance(data, dict):
            raise ServerError(f"Playlist response for {playlist_id} is not a JSON object")

        error = data.get("error") or {}
        status = error.get("status") if isinstance(error, dict) else None
        if status == 404:
            raise NotFoundError("not found")
        if status == 401:
            raise AuthError(f"Spotify rejected the access token: {error.get('message', '')}")
        if status:
            raise ServerError(f"Spotify returned status {status}: {error.get('message', '')}")

        # The playlists API includes a next url which is non-empty if there are more songs
        next_url = data.get("next")
        has_next = isinstance(next_url, str) and next_url != ""

        logger.debug("Building song data strings")
        items = data.get("items")
        tracks = parse_tracks([] if items is None else items)
        return tracks, has_next
