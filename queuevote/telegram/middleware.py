"""Telegram middleware for logging and rate limiting."""

import logging
import time
from collections import deque
from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject

from queuevote.constants import RATE_LIMIT_MESSAGE

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseMiddleware):
    """Middleware for logging incoming messages and button presses with deduplication."""

    def __init__(self):
        """Initialize with message ID tracking."""
        # Store recent message IDs to prevent duplicates
        self._processed_messages: deque = deque(maxlen=1000)

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        """
        Log incoming event and measure processing time.

        Args:
            handler: Next handler in chain
            event: Telegram event
            data: Handler data

        Returns:
            Handler result
        """
        if isinstance(event, Message):
            unique_id = f"{event.chat.id}:{event.message_id}"
            if unique_id in self._processed_messages:
                logger.debug(f"Skipping duplicate message {unique_id}")
                return None
            self._processed_messages.append(unique_id)

            user = event.from_user
            text = event.text[:50] if event.text else "<no text>"
            logger.info(
                f"Message from {user.username if user else 'unknown'} "
                f"(ID: {user.id if user else 0}) in chat {event.chat.id}: {text}"
            )
        elif isinstance(event, CallbackQuery):
            logger.info(
                f"Button {event.data!r} pressed by {event.from_user.username} "
                f"(ID: {event.from_user.id})"
            )
        else:
            return await handler(event, data)

        start_time = time.monotonic()
        result = await handler(event, data)
        elapsed = time.monotonic() - start_time
        logger.debug(f"Processed {type(event).__name__} in {elapsed:.2f}s")
        return result


class RateLimitMiddleware(BaseMiddleware):
    """Allows each user at most ``max_requests`` handled messages per window."""

    def __init__(self, max_requests: int = 3, window: int = 300):
        """
        Initialize rate limiter.

        Args:
            max_requests: Maximum requests per window
            window: Window size in seconds
        """
        self.max_requests = max_requests
        self.window = window
        self._user_timestamps: Dict[int, list[float]] = {}

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        """
        Check rate limits before processing.

        Args:
            handler: Next handler in chain
            event: Telegram event
            data: Handler data

        Returns:
            Handler result or None if the user is over the limit
        """
        if not isinstance(event, Message) or not event.from_user:
            return await handler(event, data)

        user_id = event.from_user.id
        current_time = time.monotonic()

        # Remove old timestamps outside the window
        cutoff = current_time - self.window
        timestamps = [t for t in self._user_timestamps.get(user_id, []) if t > cutoff]

        if len(timestamps) >= self.max_requests:
            logger.warning(f"Rate limit: user {user_id}")
            self._user_timestamps[user_id] = timestamps
            await event.answer(RATE_LIMIT_MESSAGE)
            return None

        timestamps.append(current_time)
        self._user_timestamps[user_id] = timestamps

        return await handler(event, data)
