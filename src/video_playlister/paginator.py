"""Resolves a playlist page: credential, cache, fetch, search URLs."""

import logging
import threading
from contextlib import contextmanager
from typing import Optional, Union

from .auth import CredentialManager, Settings
from .catalog import PAGE_SIZE, CatalogClient, normalize_playlist_id
from .errors import AuthError, ValidationError
from .models import Page, PageView
from .page_cache import PageCache, PageKey, format_key
from .search import MODE_MUSIC_VIDEO, build_entries

logger = logging.getLogger(__name__)


def parse_page_number(value: Union[str, int, None]) -> int:
    """Parse a 1-based page number.

    Raises:
        ValidationError: If value is empty, not an integer, or below 1.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("page number is empty")
    try:
        page_number = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"page number {value!r} is not an integer") from e
    if page_number < 1:
        raise ValidationError(f"page number {page_number} is below 1")
    return page_number


def page_offset(page_number: int, page_size: int = PAGE_SIZE) -> int:
    return (page_number - 1) * page_size


class Paginator:
    """Serves pages of search entries for a playlist.

    Pages already in the cache are returned without touching the credential
    manager or the network. Concurrent misses for the same page wait on a
    per-page lock, so each page is fetched from Spotify once.
    """

    def __init__(
        self,
        credentials: CredentialManager,
        catalog: CatalogClient,
        cache: Optional[PageCache] = None,
        mode: str = MODE_MUSIC_VIDEO,
        page_size: int = PAGE_SIZE,
    ):
        self.credentials = credentials
        self.catalog = catalog
        self.cache = cache if cache is not None else PageCache()
        self.mode = mode
        self.page_size = page_size

        # key -> [lock, number of threads holding or waiting for it]
        self._key_locks: dict[PageKey, list] = {}
        self._key_locks_guard = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Paginator":
        """Build a paginator talking to the real Spotify endpoints."""
        credentials = CredentialManager(settings.client_id, settings.client_secret)
        return cls(credentials, CatalogClient(), mode=settings.mode)

    @contextmanager
    def _locked(self, key: PageKey):
        """Hold the lock for one cache key, dropping it when nobody needs it."""
        with self._key_locks_guard:
            entry = self._key_locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._key_locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._key_locks[key]

    def resolve_page(
        self,
        playlist_id: str,
        page_number: Union[str, int, None] = "",
    ) -> PageView:
        """Get one page of search entries plus navigation flags.

        Args:
            playlist_id: Playlist ID, spotify:playlist: URI or share link
            page_number: 1-based page number; anything invalid means page 1

        Raises:
            AuthError, NotFoundError, ServerError: Passed through from the
                credential manager and the catalog client.
        """
        playlist_id = normalize_playlist_id(playlist_id)

        try:
            number = parse_page_number(page_number)
        except ValidationError as e:
            logger.debug(f"Defaulting to page 1: {e}")
            number = 1

        offset = page_offset(number, self.page_size)
        key = (playlist_id, number)

        page = self.cache.get(key)
        if page is not None:
            logger.info(f"Cache hit with key {format_key(key)}")
        else:
            page = self._fetch_page(key, offset)

        # There's a previous page if subtracting the page size stays at or above 0;
        # there's a next page only if Spotify said so
        return PageView(
            playlist_id=playlist_id,
            page_number=number,
            page=page,
            previous_available=offset - self.page_size > -1,
            next_available=page.has_next,
        )

    def _fetch_page(self, key: PageKey, offset: int) -> Page:
        with self._locked(key):
            # Another thread may have fetched this page while we waited
            if key in self.cache:
                logger.info(f"Cache filled while waiting for key {format_key(key)}")
                return self.cache.get(key)

            logger.info(f"Cache miss with key {format_key(key)}, will fetch video data")
            token = self.credentials.ensure_valid()

            playlist_id, _ = key
            try:
                tracks, has_next = self.catalog.fetch(playlist_id, offset, self.page_size, token)
            except AuthError:
                # Don't retry; make the next request start with a fresh token
                self.credentials.invalidate()
                raise

            page = Page(entries=build_entries(tracks, self.mode), has_next=has_next)
            self.cache.put(key, page)
            return page
