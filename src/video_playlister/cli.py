"""Command-line interface for video-playlister."""

import argparse
import json
import logging
import sys
from typing import Optional

from .auth import get_config_dir, resolve_settings, Settings
from .errors import ConfigurationError, NotFoundError, PlaylisterError
from .models import PageView
from .paginator import Paginator
from .search import MODE_MUSIC_VIDEO, SEARCH_MODES

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr; stdout belongs to the console and MCP stdio."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def load_settings(args) -> Settings:
    settings = resolve_settings(
        client_id=args.client_id,
        client_secret=args.client_secret,
        mode=args.mode,
        port=getattr(args, "port", None),
    )
    logger.info(
        f"video playlister running with client id: {settings.client_id}, "
        f"client secret: {settings.masked_secret()}, mode: {settings.mode}"
    )
    return settings


def cmd_init(args):
    """Create a sample config file."""
    config_dir = get_config_dir()
    config_file = config_dir / "config.json"

    if config_file.exists() and not args.force:
        print(f"Config already exists: {config_file}")
        print("Use --force to overwrite")
        return 1

    sample_config = {
        "client_id": "YOUR_SPOTIFY_CLIENT_ID",
        "client_secret": "YOUR_SPOTIFY_CLIENT_SECRET",
        "mode": MODE_MUSIC_VIDEO,
        "port": 1313,
    }

    with open(config_file, "w") as f:
        json.dump(sample_config, f, indent=2)

    print(f"Created config file: {config_file}")
    print()
    print("Next steps:")
    print("1. Edit the config file with your Spotify app's client id and secret")
    print("2. Run: video-playlister status")
    print("3. Run: video-playlister web")
    return 0


def cmd_status(args):
    """Check that the configured credentials can obtain a Spotify token."""
    settings = load_settings(args)
    paginator = Paginator.from_settings(settings)

    print("Video Playlister Status")
    print("=" * 40)
    print(f"Config directory: {get_config_dir()}")
    print(f"Client ID: {settings.client_id}")
    print(f"Search mode: {settings.mode}")
    print()

    try:
        paginator.credentials.ensure_valid()
    except PlaylisterError as e:
        print(f"✗ Spotify token request failed: {e}")
        return 1
    print("✓ Spotify token OK")
    return 0


def cmd_web(args):
    """Serve the web page."""
    from .web import run_web_server

    settings = load_settings(args)
    return run_web_server(Paginator.from_settings(settings), port=settings.port)


def cmd_mcp(args):
    """Start the MCP server."""
    from .server import main

    main(Paginator.from_settings(load_settings(args)))
    return 0


def print_page(paginator: Paginator, uri: str, page) -> Optional[PageView]:
    """Print one page of search links. Returns None if the page failed."""
    try:
        view = paginator.resolve_page(uri, page)
    except NotFoundError:
        print(f"playlist not found by uri '{uri}'")
        return None
    except PlaylisterError as e:
        logger.error(f"Error resolving page, err {e}")
        print("server error")
        return None

    print()
    for entry in view.entries:
        print(entry.display_name)
        print(f"  {entry.search_url}")
    print()
    print(f"Page {view.page_number}")
    return view


def browse_loop(paginator: Paginator, uri: str = "") -> int:
    """Interactive console loop: enter a playlist, then page back and forth."""
    view = None
    while True:
        if view is None:
            if not uri:
                uri = input("Playlist URI (blank to quit): ").strip()
                if not uri:
                    return 0
            view = print_page(paginator, uri, 1)
            if view is None:
                uri = ""
            continue

        choices = []
        if view.previous_available:
            choices.append("[p]revious")
        if view.next_available:
            choices.append("[n]ext")
        choices.extend(["[u]ri", "[q]uit"])
        choice = input(f"{', '.join(choices)}: ").strip().lower()

        if choice == "p" and view.previous_available:
            target = view.page_number - 1
        elif choice == "n" and view.next_available:
            target = view.page_number + 1
        elif choice == "u":
            uri = ""
            view = None
            continue
        elif choice == "q":
            return 0
        else:
            print(f"Unknown choice '{choice}'")
            continue

        # Stay on the current page if the new one failed
        view = print_page(paginator, uri, target) or view


def cmd_browse(args):
    """Browse a playlist page by page in the terminal."""
    settings = load_settings(args)
    try:
        return browse_loop(Paginator.from_settings(settings), args.uri or "")
    except (KeyboardInterrupt, EOFError):
        print()
        return 0


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--client-id", help="Spotify client id (or SPOTIFY_CLIENT_ID)")
    common.add_argument("--client-secret", help="Spotify client secret (or SPOTIFY_CLIENT_SECRET)")
    common.add_argument(
        "--mode",
        help=f"Search mode: {', '.join(repr(m) for m in SEARCH_MODES)} (default: {MODE_MUSIC_VIDEO!r})",
    )
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    parser = argparse.ArgumentParser(
        description="Video Playlister - YouTube search links for Spotify playlists"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init
    init_parser = subparsers.add_parser("init", help="Create a sample config file")
    init_parser.add_argument("--force", action="store_true", help="Overwrite existing config")

    # status
    subparsers.add_parser("status", parents=[common], help="Check Spotify credentials")

    # web
    web_parser = subparsers.add_parser("web", parents=[common], help="Serve the web page")
    web_parser.add_argument("--port", type=int, help="Port to listen on (default: 1313)")

    # browse
    browse_parser = subparsers.add_parser(
        "browse", parents=[common], help="Browse a playlist in the terminal"
    )
    browse_parser.add_argument("uri", nargs="?", help="Playlist URI to open first")

    # mcp
    subparsers.add_parser("mcp", parents=[common], help="Start MCP server")

    return parser


COMMANDS = {
    "init": cmd_init,
    "status": cmd_status,
    "web": cmd_web,
    "browse": cmd_browse,
    "mcp": cmd_mcp,
}


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(0)

    configure_logging(getattr(args, "verbose", False))
    try:
        sys.exit(command(args))
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
