"""Shared fixtures for video-playlister tests."""

import pytest

from video_playlister import auth, server
from video_playlister.auth import CredentialManager
from video_playlister.catalog import CatalogClient
from video_playlister.paginator import Paginator

TOKEN_URL = "https://accounts.spotify.com/api/token"
PLAYLIST_ID = "37i9dQZF1DXcBWIGoYBM5M"


def tracks_url(playlist_id: str = PLAYLIST_ID) -> str:
    return f"https://api.spotify.com/v1/playlists/{playlist_id}/tracks"


def track_item(name: str, *artists: str) -> dict:
    return {"track": {"name": name, "artists": [{"name": a} for a in artists]}}


def tracks_body(items: list, next_url=None) -> dict:
    return {"items": items, "next": next_url, "previous": None}


class FakeClock:
    """Controllable stand-in for time.time."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real Spotify credentials in the environment out of tests."""
    monkeypatch.delenv(auth.ENV_CLIENT_ID, raising=False)
    monkeypatch.delenv(auth.ENV_CLIENT_SECRET, raising=False)


@pytest.fixture(autouse=True)
def reset_server_paginator():
    """Make every test start with the MCP server's lazy paginator unset."""
    server.set_paginator(None)
    yield
    server.set_paginator(None)


@pytest.fixture
def mock_config_dir(tmp_path, monkeypatch):
    """Point the config directory at a temp dir."""
    config_dir = tmp_path / "video-playlister"
    config_dir.mkdir()
    monkeypatch.setattr(auth, "DEFAULT_CONFIG_DIR", config_dir)
    return config_dir


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def credentials(clock):
    return CredentialManager("test-client-id", "test-client-secret", clock=clock)


@pytest.fixture
def catalog():
    return CatalogClient()


@pytest.fixture
def paginator(credentials, catalog):
    return Paginator(credentials, catalog)
