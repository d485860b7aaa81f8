"""In-memory page cache.

Pages are keyed by (playlist id, page number) and kept for the lifetime of the
process. Nothing is evicted; a playlist edited upstream keeps showing the pages
fetched before the edit until the process restarts.
"""

import logging
import threading
from typing import Optional

from .models import Page

logger = logging.getLogger(__name__)

PageKey = tuple[str, int]


def format_key(key: PageKey) -> str:
    """Render a cache key as "playlist_id:page" for log messages."""
    playlist_id, page_number = key
    return f"{playlist_id}:{page_number}"


class PageCache:
    """Thread-safe map of built pages.

    Tracks hit/miss counts so front-ends can report how much navigation was
    served without touching Spotify.
    """

    def __init__(self):
        self._pages: dict[PageKey, Page] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    def get(self, key: PageKey) -> Optional[Page]:
        """Get a cached page.

        Args:
            key: (playlist id, page number)

        Returns:
            The cached Page or None on a miss
        """
        with self._lock:
            page = self._pages.get(key)
            if page is None:
                self._misses += 1
            else:
                self._hits += 1
        return page

    def put(self, key: PageKey, page: Page) -> None:
        """Store a page, replacing any page already cached under key."""
        with self._lock:
            self._pages[key] = page
        logger.debug(f"Cached page {format_key(key)} ({len(page.entries)} entries)")

    def clear(self) -> None:
        """Clear all pages and counters (for testing/maintenance)."""
        with self._lock:
            self._pages = {}
            self._hits = 0
            self._misses = 0

    def get_stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dict with page_count, hits, misses
        """
        with self._lock:
            return {
                "page_count": len(self._pages),
                "hits": self._hits,
                "misses": self._misses,
            }

    def __contains__(self, key: PageKey) -> bool:
        with self._lock:
            return key in self._pages

    def __len__(self) -> int:
        with self._lock:
            return len(self._pages)
