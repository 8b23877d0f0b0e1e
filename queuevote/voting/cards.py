"""Voting card rendering and button payload decoding."""

from dataclasses import dataclass

from aiogram import html
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup, User

from queuevote.constants import ACCEPT_LABEL, DECLINE_LABEL
from queuevote.spotify.catalog import TrackMetadata
from queuevote.spotify.links import TrackReference

ACCEPT_PREFIX = "accept:"
DECLINE_PAYLOAD = "decline"


# ── Button actions ────────────────────────────────────────────────────

@dataclass(frozen=True)
class Accept:
    track_id: str


@dataclass(frozen=True)
class Decline:
    pass


@dataclass(frozen=True)
class Unrecognized:
    payload: str | None


CallbackAction = Accept | Decline | Unrecognized


def parse_callback_data(data: str | None) -> CallbackAction:
    """Decode a button payload.

    An ``accept:`` payload whose URN does not parse still yields ``Accept``
    with an empty ``track_id`` so the press can be reported as invalid.
    """
    if data == DECLINE_PAYLOAD:
        return Decline()
    if data and data.startswith(ACCEPT_PREFIX):
        track = TrackReference.from_urn(data)
        return Accept(track.track_id if track else "")
    return Unrecognized(data)


# ── Rendering ─────────────────────────────────────────────────────────

def format_author(user: User | None) -> str:
    if user is None:
        return "Unknown"
    if user.username:
        return f"{user.first_name} (@{user.username})"
    return user.first_name


def voting_keyboard(track: TrackReference) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[[
        InlineKeyboardButton(text=ACCEPT_LABEL, callback_data=f"{ACCEPT_PREFIX}{track.urn}"),
        InlineKeyboardButton(text=DECLINE_LABEL, callback_data=DECLINE_PAYLOAD),
    ]])


def closed_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[])


@dataclass(frozen=True)
class VotingCard:
    """The message posted to the voting chat for one request."""

    requester: str
    track: TrackReference
    metadata: TrackMetadata | None = None

    @property
    def text(self) -> str:
        lines = [f"Anfrage von {html.quote(self.requester)}:"]
        if self.metadata is not None:
            lines.append(self.metadata.to_html())
        lines.append(self.track.url)
        return "\n".join(lines)

    @property
    def keyboard(self) -> InlineKeyboardMarkup:
        return voting_keyboard(self.track)


def accepted_text(actor: str, track: TrackReference) -> str:
    return f"✅ {html.quote(actor)} hat akzeptiert: {track.url}"


def declined_text(actor: str, card_html: str | None) -> str:
    if card_html:
        return f"❌ {html.quote(actor)} hat abgelehnt: {card_html}"
    return f"❌ {html.quote(actor)} hat abgelehnt."


def queue_failed_text(track: TrackReference, reason: str) -> str:
    return (
        f"⚠️ Konnte nicht zur Queue hinzugefügt werden: {html.quote(reason)}\n"
        f"{track.url}"
    )


def request_confirmation_text(track: TrackReference, metadata: TrackMetadata | None = None) -> str:
    if metadata is not None:
        title = f"{metadata.name} von {', '.join(metadata.artists)}"
        return f"Track wurde angefragt: {html.quote(title)}\n{track.url}"
    return f"Track wurde angefragt: {track.url}"
