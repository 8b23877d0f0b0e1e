"""Shared test fixtures for queuevote."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from aiogram.enums import ChatType
from aiogram.types import CallbackQuery, Message, User

from queuevote.config import ChatScope, Settings

VOTING_CHAT_ID = -1002454626909
VOTING_THREAD_ID = 637


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        telegram_bot_token="123:TEST",
        telegram_voting_chat_id=VOTING_CHAT_ID,
        telegram_voting_thread_id=VOTING_THREAD_ID,
        spotify_client_id="client-id",
        spotify_client_secret="client-secret",
    )


@pytest.fixture
def voting_scope() -> ChatScope:
    return ChatScope(VOTING_CHAT_ID, VOTING_THREAD_ID)


def make_user(user_id: int = 117441870, first_name: str = "Luis", username: str | None = "luis") -> User:
    return User(id=user_id, is_bot=False, first_name=first_name, username=username)


def make_message(
    text: str | None = "hello",
    chat_id: int = 42,
    chat_type: str = ChatType.PRIVATE,
    thread_id: int | None = None,
    user: User | None = None,
    message_id: int = 1,
) -> MagicMock:
    """Stand-in for an aiogram Message; awaitable methods are AsyncMocks."""
    message = MagicMock(spec=Message)
    message.text = text
    message.message_id = message_id
    message.chat = MagicMock(id=chat_id, type=chat_type)
    message.message_thread_id = thread_id
    message.is_topic_message = thread_id is not None
    message.from_user = user or make_user()
    message.html_text = text or ""
    message.answer = AsyncMock()
    message.edit_text = AsyncMock()
    return message


def make_callback(
    data: str | None,
    message: MagicMock | None = None,
    user: User | None = None,
) -> MagicMock:
    callback = MagicMock(spec=CallbackQuery)
    callback.data = data
    callback.message = message
    callback.from_user = user or make_user()
    callback.answer = AsyncMock()
    return callback
