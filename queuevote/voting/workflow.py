"""Request -> vote -> enqueue workflow."""

import logging

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import (
    CallbackQuery,
    InlineKeyboardMarkup,
    LinkPreviewOptions,
    Message,
)

from queuevote.config import ChatScope
from queuevote.constants import ALREADY_HANDLED_MESSAGE
from queuevote.errors import InvalidCatalogUri, InvalidLink, UpstreamApiError
from queuevote.spotify.catalog import SpotifyCatalog
from queuevote.spotify.links import LinkResolver, TrackReference, is_valid_track_id
from queuevote.storage.votes import VoteLedger
from queuevote.voting.cards import (
    Accept,
    CallbackAction,
    Decline,
    VotingCard,
    accepted_text,
    closed_keyboard,
    declined_text,
    format_author,
    queue_failed_text,
    request_confirmation_text,
    voting_keyboard,
)

logger = logging.getLogger(__name__)

NO_PREVIEW = LinkPreviewOptions(is_disabled=True)


class ApprovalWorkflow:
    """Posts voting cards and applies Accept/Decline presses."""

    def __init__(
        self,
        bot: Bot,
        scope: ChatScope,
        resolver: LinkResolver,
        catalog: SpotifyCatalog,
        ledger: VoteLedger,
    ):
        """
        Initialize approval workflow.

        Args:
            bot: Telegram bot used for all outbound messages
            scope: The voting chat
            resolver: Link resolver for user-submitted text
            catalog: Spotify API client
            ledger: One-shot guard for voting cards
        """
        self.bot = bot
        self.scope = scope
        self.resolver = resolver
        self.catalog = catalog
        self.ledger = ledger

    async def _resolve(self, text: str) -> TrackReference:
        track = await self.resolver.resolve(text)
        if track is None:
            raise InvalidLink(text)
        return track

    async def submit_track_request(
        self,
        requester: str,
        text: str,
        reply_chat_id: int,
    ) -> VotingCard | None:
        """
        Resolve a requested track and post it for voting.

        Args:
            requester: Display name of the requesting user
            text: Message text containing the link
            reply_chat_id: Chat to send the confirmation or failure notice to

        Returns:
            The posted VotingCard, or None if the request failed
        """
        try:
            track = await self._resolve(text)
            metadata = await self.catalog.fetch_track(track)
        except InvalidLink:
            logger.info(f"No track found in request from {requester}")
            await self.bot.send_message(reply_chat_id, "Failed to request track")
            return None
        except UpstreamApiError as e:
            logger.warning(f"Track lookup failed for request from {requester}: {e}")
            await self.bot.send_message(reply_chat_id, "Failed to request track")
            return None

        card = VotingCard(requester=requester, track=track, metadata=metadata)
        await self.bot.send_message(reply_chat_id, request_confirmation_text(track, metadata))
        await self.bot.send_message(
            self.scope.chat_id,
            card.text,
            message_thread_id=self.scope.thread_id,
            reply_markup=card.keyboard,
        )
        logger.info(f"Posted voting card for {track.urn} requested by {requester}")
        return card

    async def handle_callback(self, callback: CallbackQuery, action: CallbackAction) -> None:
        """
        Apply an Accept or Decline press to its voting card.

        Args:
            callback: The button press
            action: Decoded button payload
        """
        if not isinstance(action, (Accept, Decline)):
            logger.debug(f"Ignoring unrecognized payload {callback.data!r}")
            return

        message = callback.message
        chat_id = message.chat.id if message else self.scope.chat_id
        message_id = message.message_id if message else 0
        actor = format_author(callback.from_user)

        if message is not None and not await self.ledger.claim(
            chat_id, message_id, callback.from_user.id
        ):
            await callback.answer(ALREADY_HANDLED_MESSAGE)
            return

        queued = False
        try:
            keyboard = closed_keyboard()
            if isinstance(action, Accept):
                try:
                    track = _validated_track(action)
                    await self.catalog.add_to_queue(track)
                    queued = True
                    text = accepted_text(actor, track)
                except InvalidCatalogUri as e:
                    logger.warning(f"Invalid accept payload {callback.data!r}: {e}")
                    text = "Invalid track ID"
                except UpstreamApiError as e:
                    logger.warning(f"Failed to queue track {action.track_id}: {e}")
                    text = queue_failed_text(track, str(e))
                    keyboard = voting_keyboard(track)
                    if message is not None:
                        await self.ledger.release(chat_id, message_id)
            else:
                card_html = message.html_text if isinstance(message, Message) else None
                text = declined_text(actor, card_html)

            await callback.answer()
            await self._publish(message, text, keyboard)
        except Exception:
            # card still shows its buttons; a queued track keeps the claim
            if message is not None and not queued:
                await self.ledger.release(chat_id, message_id)
            raise

    async def _publish(
        self,
        message: Message | None,
        text: str,
        keyboard: InlineKeyboardMarkup,
    ) -> None:
        """Edit the voting card in place, or post a new message if it is gone."""
        if isinstance(message, Message):
            try:
                await message.edit_text(
                    text,
                    reply_markup=keyboard,
                    link_preview_options=NO_PREVIEW,
                )
                return
            except TelegramBadRequest as e:
                logger.warning(f"Could not edit voting card {message.message_id}: {e}")

        await self.bot.send_message(
            self.scope.chat_id,
            text,
            message_thread_id=self.scope.thread_id,
            reply_markup=keyboard if keyboard.inline_keyboard else None,
            link_preview_options=NO_PREVIEW,
        )


def _validated_track(action: Accept) -> TrackReference:
    if not is_valid_track_id(action.track_id):
        raise InvalidCatalogUri(f"Not a track ID: {action.track_id!r}")
    return TrackReference(action.track_id)
