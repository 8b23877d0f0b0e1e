"""Routing filters: voting scope membership, Spotify links, button payloads."""

from typing import Any

from aiogram.enums import ChatType
from aiogram.filters import BaseFilter
from aiogram.types import CallbackQuery, Message

from queuevote.config import ChatScope
from queuevote.spotify.links import contains_spotify_link
from queuevote.voting.cards import parse_callback_data


def _thread_id(message: Message) -> int | None:
    return message.message_thread_id if message.is_topic_message else None


class InVotingScope(BaseFilter):
    """Message was sent in the voting chat and thread.

    With ``inverse=True`` the filter matches every other chat instead.
    """

    def __init__(self, inverse: bool = False):
        self.inverse = inverse

    async def __call__(self, message: Message, voting_scope: ChatScope) -> bool:
        inside = voting_scope.contains(message.chat.id, _thread_id(message))
        return inside != self.inverse


class FromVotingChat(BaseFilter):
    """Button press on a message in the voting chat (thread is not checked)."""

    async def __call__(self, callback: CallbackQuery, voting_scope: ChatScope) -> bool:
        message = callback.message
        return message is not None and message.chat.id == voting_scope.chat_id


class PrivateChat(BaseFilter):
    async def __call__(self, message: Message) -> bool:
        return message.chat.type == ChatType.PRIVATE


class HasSpotifyLink(BaseFilter):
    async def __call__(self, message: Message) -> bool:
        return contains_spotify_link(message.text)


class VoteAction(BaseFilter):
    """Decodes the button payload and passes it on as ``action``."""

    async def __call__(self, callback: CallbackQuery) -> dict[str, Any]:
        return {"action": parse_callback_data(callback.data)}
