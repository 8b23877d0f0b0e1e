"""One-shot guard per voting card using Redis."""

import logging

from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class VoteLedger:
    """Records which voting cards have already been accepted or declined."""

    def __init__(self, redis: Redis, ttl: int = 604800):
        """
        Initialize vote ledger.

        Args:
            redis: Redis client instance
            ttl: How long a claim is remembered in seconds (default: 7 days)
        """
        self.redis = redis
        self.ttl = ttl
        self._prefix = "vote_card"

    def _make_key(self, chat_id: int, message_id: int) -> str:
        """Generate Redis key for a voting card."""
        return f"{self._prefix}:{chat_id}:{message_id}"

    async def claim(self, chat_id: int, message_id: int, actor_id: int) -> bool:
        """
        Claim a card for processing.

        Args:
            chat_id: Chat of the voting card
            message_id: Message ID of the voting card
            actor_id: Telegram user ID pressing the button

        Returns:
            True if this call claimed the card, False if it was already claimed
        """
        key = self._make_key(chat_id, message_id)
        claimed = await self.redis.set(key, str(actor_id), nx=True, ex=self.ttl)
        if not claimed:
            logger.info(f"Card {key} already handled, ignoring press by {actor_id}")
        return bool(claimed)

    async def release(self, chat_id: int, message_id: int) -> None:
        """Forget a claim so the card can be voted on again."""
        key = self._make_key(chat_id, message_id)
        await self.redis.delete(key)
        logger.debug(f"Released {key}")
