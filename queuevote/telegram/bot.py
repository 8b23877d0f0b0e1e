"""Telegram bot and dispatcher setup."""

import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.base import BaseEventIsolation, BaseStorage
from aiogram.fsm.strategy import FSMStrategy
from aiogram.types import BotCommand, BotCommandScopeChat, BotCommandScopeDefault

from queuevote.config import Settings

logger = logging.getLogger(__name__)

USER_COMMANDS = [
    BotCommand(command="help", description="display this text."),
    BotCommand(command="id", description="get chat/thread id"),
]
ADMIN_COMMANDS = USER_COMMANDS + [
    BotCommand(command="spotifylogin", description="link spotify (admin only)"),
]


async def create_bot(settings: Settings) -> Bot:
    """
    Create and configure Telegram bot.

    Args:
        settings: Application settings

    Returns:
        Configured Bot instance
    """
    bot = Bot(
        token=settings.telegram_bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )
    logger.info("Telegram bot created")
    return bot


async def register_commands(bot: Bot, settings: Settings) -> None:
    """Publish the command menu; the voting chat also sees /spotifylogin."""
    await bot.set_my_commands(USER_COMMANDS, scope=BotCommandScopeDefault())
    await bot.set_my_commands(
        ADMIN_COMMANDS,
        scope=BotCommandScopeChat(chat_id=settings.telegram_voting_chat_id),
    )


def create_dispatcher(
    settings: Settings,
    storage: BaseStorage,
    dialogue_lock: BaseEventIsolation,
) -> Dispatcher:
    """
    Create and configure dispatcher with routers.

    Dialogue state is kept per user. Updates are processed concurrently;
    handlers that change dialogue state take ``dialogue_lock`` for the
    state transition only, never across Spotify or short-link calls.

    Args:
        settings: Application settings
        storage: FSM storage for dialogue state
        dialogue_lock: Per-key lock shared with the storage

    Returns:
        Configured Dispatcher instance
    """
    from queuevote.telegram.handlers import (
        callback_router,
        hint_router,
        request_router,
        user_router,
        voting_router,
    )
    from queuevote.telegram.middleware import LoggingMiddleware, RateLimitMiddleware

    dp = Dispatcher(storage=storage, fsm_strategy=FSMStrategy.GLOBAL_USER)
    dp.include_routers(callback_router, voting_router, user_router, request_router, hint_router)

    # Add middleware
    logging_middleware = LoggingMiddleware()
    dp.message.middleware(logging_middleware)
    dp.callback_query.middleware(logging_middleware)
    request_router.message.middleware(
        RateLimitMiddleware(
            max_requests=settings.track_request_limit,
            window=settings.track_request_window,
        )
    )

    dp.workflow_data["voting_scope"] = settings.voting_scope
    dp.workflow_data["dialogue_lock"] = dialogue_lock

    logger.info("Dispatcher created with handlers")
    return dp
