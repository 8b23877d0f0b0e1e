"""Spotify OAuth2 token store backed by spotipy's file cache."""

import asyncio
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import requests
from spotipy.cache_handler import CacheFileHandler
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from queuevote.config import Settings
from queuevote.constants import SPOTIFY_SCOPES
from queuevote.errors import NotAuthorized, UpstreamApiError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OAuthToken:
    """Snapshot of the held Spotify token."""

    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None

    @classmethod
    def from_token_info(cls, token_info: dict[str, Any]) -> "OAuthToken":
        expires_at = token_info.get("expires_at")
        return cls(
            access_token=token_info["access_token"],
            refresh_token=token_info.get("refresh_token"),
            expires_at=(
                datetime.fromtimestamp(expires_at, tz=timezone.utc)
                if expires_at is not None
                else None
            ),
        )


class TokenStore:
    """Single owner of the Spotify bearer/refresh token.

    Every read goes through ``access_token()``, which refreshes an expired
    token and persists it to the cache file while holding one lock, so
    overlapping requests never refresh twice or overwrite each other's
    cache writes. The synchronous methods block on HTTP and are meant to
    run in a worker thread.
    """

    def __init__(self, settings: Settings, auth: SpotifyOAuth | None = None):
        """
        Initialize token store.

        Args:
            settings: Application settings
            auth: Preconfigured OAuth manager (built from settings if omitted)
        """
        self._lock = threading.Lock()
        self._auth = auth or SpotifyOAuth(
            client_id=settings.spotify_client_id,
            client_secret=settings.spotify_client_secret,
            redirect_uri=settings.spotify_redirect_uri,
            scope=SPOTIFY_SCOPES,
            cache_handler=CacheFileHandler(cache_path=str(settings.spotify_cache_path)),
            open_browser=False,
            requests_timeout=settings.spotify_timeout,
        )

    def authorize_url(self) -> str:
        """URL the admin opens to grant access."""
        return self._auth.get_authorize_url()

    @staticmethod
    def parse_response_code(text: str) -> str | None:
        """
        Extract the authorization code from a pasted redirect URL.

        Args:
            text: Redirect URL as copied from the browser

        Returns:
            The ``code`` query parameter, or None if absent or the
            redirect carries an OAuth error
        """
        try:
            _, code = SpotifyOAuth.parse_auth_response_url(text.strip())
        except SpotifyOauthError as e:
            logger.info(f"Redirect URL carries an OAuth error: {e}")
            return None
        return code or None

    def load(self) -> OAuthToken | None:
        """Adopt the cached token, refreshing it if it has expired."""
        try:
            return self._current()
        except NotAuthorized:
            return None

    def _exchange_code(self, code: str) -> OAuthToken:
        with self._lock:
            try:
                token_info = self._auth.get_access_token(
                    code, as_dict=True, check_cache=False
                )
            except (SpotifyOauthError, requests.RequestException) as e:
                raise UpstreamApiError(f"Code exchange failed: {e}") from e
        logger.info("Spotify token obtained and cached")
        return OAuthToken.from_token_info(token_info)

    def access_token(self) -> str:
        """
        Get a valid access token.

        Raises:
            NotAuthorized: No token is cached
            UpstreamApiError: Refreshing the expired token failed
        """
        return self._current().access_token

    def _current(self) -> OAuthToken:
        with self._lock:
            cached = self._auth.cache_handler.get_cached_token()
            if cached is None:
                raise NotAuthorized("No Spotify token, run /spotifylogin")
            try:
                # validate_token refreshes and re-caches an expired token
                token_info = self._auth.validate_token(cached)
            except (SpotifyOauthError, requests.RequestException) as e:
                raise UpstreamApiError(f"Token refresh failed: {e}") from e
        if token_info is None:
            raise NotAuthorized("Spotify token is no longer valid, run /spotifylogin")
        return OAuthToken.from_token_info(token_info)

    async def ensure_token(self) -> OAuthToken | None:
        """Load the cached token at startup and log its expiry."""
        try:
            token = await asyncio.to_thread(self.load)
        except UpstreamApiError as e:
            logger.warning(f"Cached Spotify token unusable: {e}")
            return None
        if token is None:
            logger.info("No Spotify token in cache")
            return None
        expires = token.expires_at.isoformat() if token.expires_at else "unknown"
        logger.info(f"Using cached Spotify token, expires {expires}")
        return token

    async def exchange_code(self, code: str) -> OAuthToken:
        """
        Exchange an authorization code and persist the resulting token.

        Raises:
            UpstreamApiError: The token endpoint rejected the code
        """
        return await asyncio.to_thread(self._exchange_code, code)

    async def has_token(self) -> bool:
        try:
            return await asyncio.to_thread(self.load) is not None
        except UpstreamApiError:
            return False
