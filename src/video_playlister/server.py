"""MCP server exposing playlist-to-video-search lookups."""

import threading
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .auth import resolve_settings
from .errors import ConfigurationError, NotFoundError, PlaylisterError
from .models import PageView
from .paginator import Paginator

mcp = FastMCP("VideoPlaylister")

# Shared paginator with thread-safe initialization
_paginator: Optional[Paginator] = None
_paginator_lock = threading.Lock()


def get_paginator() -> Paginator:
    """Get the shared paginator, building it from config on first use."""
    global _paginator
    if _paginator is None:
        with _paginator_lock:
            # Double-check locking pattern
            if _paginator is None:
                _paginator = Paginator.from_settings(resolve_settings())
    return _paginator


def set_paginator(paginator: Optional[Paginator]) -> None:
    """Install the paginator the tools use (None resets to lazy init)."""
    global _paginator
    with _paginator_lock:
        _paginator = paginator


def format_page(view: PageView) -> str:
    """Format a resolved page as plain text for MCP clients."""
    if not view.entries:
        lines = [f"No tracks on page {view.page_number} of playlist {view.playlist_id}"]
    else:
        lines = [f"Playlist {view.playlist_id}, page {view.page_number} ({len(view.entries)} tracks):"]
        for entry in view.entries:
            lines.append(entry.display_name)
            lines.append(f"  {entry.search_url}")

    nav = []
    if view.previous_available:
        nav.append(f"previous: page={view.page_number - 1}")
    if view.next_available:
        nav.append(f"next: page={view.page_number + 1}")
    if nav:
        lines.append("")
        lines.append(" | ".join(nav))
    return "\n".join(lines)


@mcp.tool()
def playlist_videos(uri: str, page: str = "") -> str:
    """
    List YouTube search links for the tracks of a public Spotify playlist.

    Args:
        uri: Playlist ID, spotify:playlist:ID URI, or open.spotify.com share link
        page: Page number (100 tracks per page, default 1)

    Returns: One track name and search URL per track, plus previous/next page hints
    """
    if not uri.strip():
        return "Error: spotify uri is empty"
    try:
        view = get_paginator().resolve_page(uri, page)
    except NotFoundError:
        return f"Error: playlist not found by uri '{uri}'"
    except ConfigurationError as e:
        return f"Configuration error: {e}"
    except PlaylisterError as e:
        return f"API Error: {str(e)}"
    return format_page(view)


@mcp.tool()
def cache_stats() -> str:
    """Report how many playlist pages are cached and the cache hit rate."""
    try:
        stats = get_paginator().cache.get_stats()
    except ConfigurationError as e:
        return f"Configuration error: {e}"
    lookups = stats["hits"] + stats["misses"]
    rate = f"{100 * stats['hits'] / lookups:.0f}%" if lookups else "n/a"
    return (
        f"Cached pages: {stats['page_count']}\n"
        f"Hits: {stats['hits']} | Misses: {stats['misses']} | Hit rate: {rate}"
    )


@mcp.tool()
def check_auth_status() -> str:
    """Check that the Spotify client credentials can obtain an access token."""
    try:
        credentials = get_paginator().credentials
        credentials.ensure_valid()
    except ConfigurationError as e:
        return f"Configuration: ERROR - {e}"
    except PlaylisterError as e:
        return f"Spotify Token: ERROR - {e}"

    age = credentials.token_age() or 0
    return f"Spotify Token: OK ({age / 60:.0f}min old, valid for {(credentials.ttl - age) / 60:.0f}min)"


def main(paginator: Optional[Paginator] = None):
    """Run the MCP server."""
    if paginator is not None:
        set_paginator(paginator)
    mcp.run()
