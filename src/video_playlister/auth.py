"""Configuration and Spotify access token management."""

import base64
import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests

from .errors import AuthError, ConfigurationError, ServerError
from .search import MODE_MUSIC_VIDEO, SEARCH_MODES, is_known_mode

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "video-playlister"

SPOTIFY_AUTH_API_BASE = "https://accounts.spotify.com/api"

# Spotify documents access tokens as valid for one hour
TOKEN_TTL_SECONDS = 60 * 60

DEFAULT_PORT = 1313

ENV_CLIENT_ID = "SPOTIFY_CLIENT_ID"
ENV_CLIENT_SECRET = "SPOTIFY_CLIENT_SECRET"


def get_config_dir() -> Path:
    """Get or create the config directory."""
    config_dir = DEFAULT_CONFIG_DIR
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def load_config() -> dict:
    """Load configuration from config.json, or {} if there is none."""
    config_file = get_config_dir() / "config.json"
    if not config_file.exists():
        return {}
    try:
        with open(config_file) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Config file is not valid JSON: {config_file} ({e})") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must contain a JSON object: {config_file}")
    return data


def _first(*values):
    """Return the first value that is neither None nor an empty string."""
    for value in values:
        if value is not None and value != "":
            return value
    return None


@dataclass(frozen=True)
class Settings:
    client_id: str
    client_secret: str
    mode: str = MODE_MUSIC_VIDEO
    port: int = DEFAULT_PORT

    def masked_secret(self) -> str:
        """Client secret with everything but the last four characters hidden."""
        if len(self.client_secret) <= 4:
            return "*" * len(self.client_secret)
        return "*" * (len(self.client_secret) - 4) + self.client_secret[-4:]


def resolve_settings(
    client_id: Optional[str] = None,
    client_secret: Optional[str] = None,
    mode: Optional[str] = None,
    port: Optional[int] = None,
) -> Settings:
    """Merge environment, command-line values and config.json into Settings.

    Credentials from the environment win over the arguments, which win over
    the config file.

    Raises:
        ConfigurationError: If a credential is missing, the mode is unknown or
            the port is not an integer.
    """
    config = load_config()

    resolved_id = _first(os.environ.get(ENV_CLIENT_ID), client_id, config.get("client_id"))
    resolved_secret = _first(
        os.environ.get(ENV_CLIENT_SECRET), client_secret, config.get("client_secret")
    )
    resolved_mode = _first(mode, config.get("mode"), MODE_MUSIC_VIDEO)
    resolved_port = _first(port, config.get("port"), DEFAULT_PORT)

    if not resolved_id:
        raise ConfigurationError("spotify client id is empty")
    if not resolved_secret:
        raise ConfigurationError("spotify client secret is empty")
    if not is_known_mode(resolved_mode):
        raise ConfigurationError(
            f"Unknown search mode '{resolved_mode}'. Choose one of: {', '.join(SEARCH_MODES)}"
        )
    try:
        resolved_port = int(resolved_port)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Port must be an integer, got {resolved_port!r}") from e

    return Settings(
        client_id=resolved_id,
        client_secret=resolved_secret,
        mode=resolved_mode,
        port=resolved_port,
    )


def basic_auth_header(client_id: str, client_secret: str) -> str:
    """Build the Basic Authorization header value for the token endpoint."""
    encoded = base64.b64encode(f"{client_id}:{client_secret}".encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


class CredentialManager:
    """Owns the client-credentials access token and refreshes it once it is
    an hour old.

    The check-and-refresh runs under a lock, so concurrent callers never
    request two tokens at once.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        auth_base: str = SPOTIFY_AUTH_API_BASE,
        ttl: float = TOKEN_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        session: Optional[requests.Session] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.auth_base = auth_base
        self.ttl = ttl
        self._clock = clock
        self._session = session or requests.Session()

        self._token: Optional[str] = None
        self._issued_at: Optional[float] = None
        self._lock = threading.Lock()

    def token_age(self) -> Optional[float]:
        """Age of the current token in seconds, or None if none was issued."""
        if self._issued_at is None:
            return None
        return self._clock() - self._issued_at

    def ensure_valid(self) -> str:
        """Return a token that is younger than the TTL, requesting one if needed.

        Raises:
            AuthError: If Spotify rejects the client credentials.
            ServerError: If the token endpoint cannot be reached or decoded.
        """
        with self._lock:
            now = self._clock()
            if self._issued_at is not None and now - self._issued_at < self.ttl:
                age_min = (now - self._issued_at) / 60
                logger.info(
                    f"Reusing {age_min:.0f}min old token, will expire in "
                    f"{self.ttl / 60 - age_min:.0f}min"
                )
                return self._token

            token = self._request_token()
            # Record the time that we successfully got this token
            self._token = token
            self._issued_at = self._clock()
            return token

    def invalidate(self) -> None:
        """Forget the current token so the next ensure_valid() requests a new one."""
        with self._lock:
            self._token = None
            self._issued_at = None

    def _request_token(self) -> str:
        logger.info("Fetching spotify token")
        try:
            response = self._session.post(
                f"{self.auth_base}/token",
                data={"grant_type": "client_credentials"},
                headers={
                    "Authorization": basic_auth_header(self.client_id, self.client_secret),
                    "Content-Type": "application/x-www-form-urlencoded",
                },
            )
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise ServerError(f"Error requesting token from spotify: {e}") from e
        except ValueError as e:
            raise ServerError(f"Token response from spotify is not JSON: {e}") from e

        if not isinstance(data, dict):
            raise ServerError("Token response from spotify is not a JSON object")

        error = data.get("error")
        if error:
            description = data.get("error_description")
            message = f"error requesting token from spotify, err {error}"
            if description:
                message = f"{message} ({description})"
            raise AuthError(message)

        token = data.get("access_token")
        if not token:
            raise ServerError(
                f"Token response from spotify has no access_token (status {response.status_code})"
            )

        logger.debug("Got spotify token")
        return token
