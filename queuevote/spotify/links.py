"""Spotify link parsing and short-link resolution."""

import logging
import re
from dataclasses import dataclass

import httpx

from queuevote.errors import TooManyRedirects

logger = logging.getLogger(__name__)

CANONICAL_HOST = "open.spotify.com"
CATALOG_DOMAIN = "spotify.com"
SHORT_LINK_HOST = "spotify.link"

_TRACK_URL_RE = re.compile(r"https?://open\.spotify\.com/track/(\w+)", re.ASCII)
_TRACK_URN_RE = re.compile(r"(?:accept:)?spotify:track:(\w+)", re.ASCII)
_SHORT_LINK_RE = re.compile(r"https?://spotify\.link/\w+", re.ASCII)
_ANY_LINK_RE = re.compile(r"https?://(?:open\.spotify\.com|spotify\.link)/\w+", re.ASCII)
_TRACK_ID_RE = re.compile(r"[A-Za-z0-9_]+", re.ASCII)


@dataclass(frozen=True)
class TrackReference:
    """A canonical Spotify track identifier."""

    track_id: str

    def __post_init__(self):
        if not self.track_id:
            raise ValueError("track_id must not be empty")

    @property
    def urn(self) -> str:
        return f"spotify:track:{self.track_id}"

    @property
    def url(self) -> str:
        return f"https://{CANONICAL_HOST}/track/{self.track_id}"

    @classmethod
    def from_url(cls, text: str) -> "TrackReference | None":
        """Find an open.spotify.com track URL anywhere in ``text``."""
        match = _TRACK_URL_RE.search(text)
        return cls(match.group(1)) if match else None

    @classmethod
    def from_urn(cls, text: str) -> "TrackReference | None":
        """Parse ``[accept:]spotify:track:<id>`` as used in button payloads."""
        match = _TRACK_URN_RE.search(text)
        return cls(match.group(1)) if match else None


def is_valid_track_id(track_id: str) -> bool:
    return bool(track_id) and _TRACK_ID_RE.fullmatch(track_id) is not None


def contains_spotify_link(text: str | None) -> bool:
    """True if ``text`` carries an open.spotify.com or spotify.link URL."""
    return bool(text) and _ANY_LINK_RE.search(text) is not None


def find_short_link(text: str) -> str | None:
    match = _SHORT_LINK_RE.search(text)
    return match.group(0) if match else None


def _is_catalog_host(host: str) -> bool:
    return host == CATALOG_DOMAIN or host.endswith("." + CATALOG_DOMAIN)


class LinkResolver:
    """Turns user text into a TrackReference, following spotify.link redirects.

    Redirects are followed by hand so that the hop cap and the stop
    condition are enforced on every ``Location``: at most ``max_redirects``
    hops are followed, and as soon as a redirect points at spotify.com the
    target URL is returned without requesting it.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        max_redirects: int = 5,
        timeout: float = 10.0,
    ):
        """
        Initialize link resolver.

        Args:
            client: HTTP client to use (one is created if omitted)
            max_redirects: Maximum number of redirect hops to follow
            timeout: Per-request timeout in seconds
        """
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self.max_redirects = max_redirects

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def resolve_short_link(self, url: str) -> str:
        """
        Follow a short link until it reaches spotify.com.

        Args:
            url: spotify.link URL

        Returns:
            The first redirect target on spotify.com, or the final URL if
            the chain ends elsewhere

        Raises:
            TooManyRedirects: More than ``max_redirects`` hops were needed
            httpx.HTTPError: Transport failure
        """
        current = httpx.URL(url)
        hops = 0
        while True:
            response = await self._client.get(current, follow_redirects=False)
            location = response.headers.get("location")
            if not response.is_redirect or not location:
                return str(current)

            hops += 1
            if hops > self.max_redirects:
                raise TooManyRedirects(url, hops)

            current = current.join(location)
            if current.scheme not in ("http", "https"):
                logger.warning(f"Refusing redirect to {current.scheme} URL from {url}")
                return str(current)
            if _is_catalog_host(current.host):
                logger.debug(f"Resolved {url} after {hops} hop(s) to {current}")
                return str(current)

    async def resolve(self, text: str) -> TrackReference | None:
        """
        Resolve any accepted link form in ``text`` to a TrackReference.

        Args:
            text: Free text, e.g. a chat message containing a link

        Returns:
            TrackReference or None if no track could be found
        """
        candidate = text
        short_link = find_short_link(text)
        if short_link is not None:
            try:
                candidate = await self.resolve_short_link(short_link)
            except TooManyRedirects as e:
                logger.warning(str(e))
                return None
            except httpx.HTTPError as e:
                logger.warning(f"Failed to resolve short link {short_link}: {e}")
                return None

        return TrackReference.from_url(candidate)
