"""Telegram handlers, grouped into routers in routing precedence order.

1. ``callback_router``: button presses on voting cards in the voting chat.
2. ``voting_router``: admin commands and the Spotify login dialogue in the
   voting chat/thread.
3. ``user_router``: /help and /id anywhere.
4. ``request_router``: Spotify links sent in private chats.
5. ``hint_router``: usage hint for any other text outside the voting chat.
"""

import logging

from aiogram import F, Router, html
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command, CommandStart, StateFilter
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup, default_state
from aiogram.fsm.storage.base import BaseEventIsolation
from aiogram.types import CallbackQuery, Message

from queuevote.constants import ADMIN_HELP_TEXT, HELP_TEXT, USAGE_HINT
from queuevote.errors import UpstreamApiError
from queuevote.spotify.auth import TokenStore
from queuevote.telegram.filters import (
    FromVotingChat,
    HasSpotifyLink,
    InVotingScope,
    PrivateChat,
    VoteAction,
)
from queuevote.voting.cards import CallbackAction, format_author
from queuevote.voting.workflow import ApprovalWorkflow

logger = logging.getLogger(__name__)

callback_router = Router(name="callbacks")
voting_router = Router(name="voting")
user_router = Router(name="user")
request_router = Router(name="requests")
hint_router = Router(name="hint")

voting_router.message.filter(InVotingScope())
request_router.message.filter(InVotingScope(inverse=True), PrivateChat())
hint_router.message.filter(InVotingScope(inverse=True))


# ── FSM States ────────────────────────────────────────────────────────

class SpotifyLogin(StatesGroup):
    awaiting_code = State()


# ── Voting card buttons ───────────────────────────────────────────────

@callback_router.callback_query(FromVotingChat(), VoteAction())
async def handle_vote(
    callback: CallbackQuery,
    action: CallbackAction,
    workflow: ApprovalWorkflow,
) -> None:
    await workflow.handle_callback(callback, action)


# ── Voting chat: admin commands and login dialogue ────────────────────

@voting_router.message(CommandStart(), StateFilter(default_state))
@voting_router.message(Command("help"), StateFilter(default_state))
async def handle_admin_help(message: Message) -> None:
    await message.answer(ADMIN_HELP_TEXT)


@voting_router.message(Command("spotifylogin"), StateFilter(default_state))
async def handle_spotify_login(
    message: Message,
    state: FSMContext,
    token_store: TokenStore,
    dialogue_lock: BaseEventIsolation,
) -> None:
    """
    Handle /spotifylogin - send the authorization URL and wait for the redirect.

    Args:
        message: Telegram message
        state: Dialogue state of the sender
        token_store: Spotify token store from workflow_data
        dialogue_lock: Per-user lock for dialogue state transitions
    """
    async with dialogue_lock.lock(state.key):
        if await state.get_state() is not None:
            return
        await state.set_state(SpotifyLogin.awaiting_code)

    auth_url = token_store.authorize_url()
    await message.answer(
        "Spotify Login\n"
        f"Open this URL in the browser and allow Spotify access: {html.quote(auth_url)}\n"
        "Then paste and send the redirected URL here."
    )


@voting_router.message(SpotifyLogin.awaiting_code)
async def handle_spotify_login_code(
    message: Message,
    state: FSMContext,
    token_store: TokenStore,
    dialogue_lock: BaseEventIsolation,
) -> None:
    """
    Handle the pasted redirect URL. One attempt only, the dialogue always ends here.

    Args:
        message: Telegram message
        state: Dialogue state of the sender
        token_store: Spotify token store from workflow_data
        dialogue_lock: Per-user lock for dialogue state transitions
    """
    async with dialogue_lock.lock(state.key):
        if await state.get_state() != SpotifyLogin.awaiting_code.state:
            # consumed by a concurrent message
            return
        await state.clear()

    code = token_store.parse_response_code(message.text) if message.text else None
    if code is None:
        await message.answer("Invalid Code/URL")
        return

    try:
        await token_store.exchange_code(code)
    except UpstreamApiError as e:
        logger.error(f"Spotify code exchange failed: {e}")
        await message.answer("⚠️ Spotify login failed. Run /spotifylogin again.")
        return

    await message.answer("Token saved")


# ── Commands for everybody ────────────────────────────────────────────

@user_router.message(CommandStart())
@user_router.message(Command("help"))
async def handle_help(message: Message) -> None:
    await message.answer(HELP_TEXT)


@user_router.message(Command("id"))
async def handle_id(message: Message) -> None:
    """Reply with the chat ID (and forum thread ID) for configuration."""
    if message.is_topic_message and message.message_thread_id is not None:
        answer = f"This chat has ID {message.chat.id}, thread {message.message_thread_id}"
    else:
        answer = f"This chat has ID {message.chat.id}"
    await message.answer(answer)


# ── Track requests ────────────────────────────────────────────────────

@request_router.message(HasSpotifyLink())
async def handle_track_request(message: Message, workflow: ApprovalWorkflow) -> None:
    """
    Handle a private message carrying a Spotify link.

    Args:
        message: Telegram message
        workflow: Approval workflow from workflow_data
    """
    requester = format_author(message.from_user)
    try:
        await workflow.submit_track_request(requester, message.text or "", message.chat.id)
    except TelegramAPIError as e:
        logger.error(f"Could not deliver track request from {requester}: {e}")


@hint_router.message(F.text)
async def handle_usage_hint(message: Message) -> None:
    await message.answer(USAGE_HINT)
