"""Value types shared by the fetcher, the cache and the paginator."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TrackDescriptor:
    """A playlist track as returned by the catalog."""

    title: str
    artist_names: tuple[str, ...] = ()

    @property
    def display_name(self) -> str:
        """Human-readable form, e.g. "Wise Up by Aimee Mann"."""
        return f"{self.title} by {' '.join(self.artist_names)}"


@dataclass(frozen=True)
class SearchEntry:
    display_name: str
    search_url: str


@dataclass(frozen=True)
class Page:
    """One bounded slice of search entries for a playlist."""

    entries: tuple[SearchEntry, ...] = ()
    has_next: bool = False


@dataclass(frozen=True)
class PageView:
    """A resolved page plus the navigation flags the front-ends render."""

    playlist_id: str
    page_number: int
    page: Page
    previous_available: bool
    next_available: bool

    @property
    def entries(self) -> tuple[SearchEntry, ...]:
        return self.page.entries
