"""Application configuration using pydantic-settings."""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class ChatScope:
    """The chat (and optional forum thread) where requests are voted on."""

    chat_id: int
    thread_id: int | None = None

    def contains(self, chat_id: int, thread_id: int | None) -> bool:
        return chat_id == self.chat_id and thread_id == self.thread_id


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Telegram Bot
    telegram_bot_token: str
    telegram_voting_chat_id: int
    telegram_voting_thread_id: int | None = None

    # Spotify OAuth2
    spotify_client_id: str
    spotify_client_secret: str
    spotify_redirect_uri: str = "http://localhost:8888/callback"
    spotify_cache_path: Path = Path(".spotify_token_cache")
    spotify_market: str = "DE"
    spotify_timeout: float = 10.0

    # Short links (spotify.link)
    short_link_timeout: float = 10.0
    short_link_max_redirects: int = 5

    # Redis (dialogue state + vote ledger)
    redis_url: str = "redis://localhost:6379/0"
    vote_ttl_seconds: int = 604800  # 7 days

    # Track requests per user
    track_request_limit: int = 3
    track_request_window: int = 300  # 5 minutes

    # Health endpoint
    http_host: str = "0.0.0.0"
    http_port: int = 8000

    @field_validator("telegram_voting_thread_id", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        if v == "" or v is None:
            return None
        return int(v)

    @property
    def voting_scope(self) -> ChatScope:
        return ChatScope(self.telegram_voting_chat_id, self.telegram_voting_thread_id)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
