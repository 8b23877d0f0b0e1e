"""Spotify Web API calls: track lookup and queue append."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, TypeVar

import requests
from aiogram import html
from spotipy import Spotify, SpotifyException

from queuevote.errors import UpstreamApiError
from queuevote.spotify.auth import TokenStore
from queuevote.spotify.links import TrackReference

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TrackMetadata:
    """Track details as shown on a voting card."""

    name: str
    artists: tuple[str, ...]
    album: str
    popularity: int
    duration: timedelta
    listen_url: str | None = None
    cover_urls: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "TrackMetadata":
        album = item.get("album") or {}
        return cls(
            name=item.get("name", ""),
            artists=tuple(a.get("name", "") for a in item.get("artists", [])),
            album=album.get("name", ""),
            popularity=int(item.get("popularity") or 0),
            duration=timedelta(milliseconds=item.get("duration_ms") or 0),
            listen_url=(item.get("external_urls") or {}).get("spotify"),
            cover_urls=tuple(i["url"] for i in album.get("images", []) if i.get("url")),
        )

    @property
    def duration_text(self) -> str:
        minutes, seconds = divmod(int(self.duration.total_seconds()), 60)
        return f"{minutes}:{seconds:02d}"

    def to_html(self) -> str:
        """Render as Telegram HTML."""
        links = []
        if self.listen_url:
            links.append(html.link("Listen", html.quote(self.listen_url)))
        covers = " ".join(html.link("Cover", html.quote(url)) for url in self.cover_urls)
        if covers:
            links.append(covers)
        lines = [
            f"🎵 {html.bold(html.quote(self.name))}",
            f"👥 {html.bold(html.quote(', '.join(self.artists)))}",
            f"💿 {html.bold(html.quote(self.album))}",
            f"🔥 {self.popularity} • ⏱️ {self.duration_text}",
        ]
        if links:
            lines.append(" • ".join(links))
        return "\n".join(lines)


class SpotifyCatalog:
    """Spotify API client; each call runs in a worker thread with a fresh token."""

    def __init__(self, token_store: TokenStore, market: str = "DE", timeout: float = 10.0):
        self.token_store = token_store
        self.market = market
        self.timeout = timeout

    def _client(self) -> Spotify:
        return Spotify(auth=self.token_store.access_token(), requests_timeout=self.timeout)

    async def _call(self, func: Callable[[Spotify], T], what: str) -> T:
        def run() -> T:
            return func(self._client())

        try:
            return await asyncio.to_thread(run)
        except (SpotifyException, requests.RequestException) as e:
            logger.error(f"Spotify API error ({what}): {e}")
            raise UpstreamApiError(str(e)) from e

    async def fetch_track(self, track: TrackReference) -> TrackMetadata:
        """
        Look up a track.

        Args:
            track: Track to look up

        Returns:
            TrackMetadata for the track

        Raises:
            UpstreamApiError: API call failed or no token is held
        """
        item = await self._call(
            lambda sp: sp.track(track.track_id, market=self.market),
            f"track {track.track_id}",
        )
        return TrackMetadata.from_api(item)

    async def add_to_queue(self, track: TrackReference) -> None:
        """
        Append a track to the playback queue of the linked account.

        Raises:
            UpstreamApiError: API call failed or no token is held
        """
        await self._call(lambda sp: sp.add_to_queue(track.urn), f"queue {track.urn}")
        logger.info(f"Queued {track.urn}")
