# Tests for voting card rendering and button payloads

import pytest

from conftest import make_user
from queuevote.spotify.catalog import TrackMetadata
from queuevote.spotify.links import TrackReference
from queuevote.voting.cards import (
    Accept,
    Decline,
    Unrecognized,
    VotingCard,
    accepted_text,
    declined_text,
    format_author,
    parse_callback_data,
    request_confirmation_text,
)


class TestParseCallbackData:
    def test_accept(self):
        assert parse_callback_data("accept:spotify:track:abc123") == Accept("abc123")

    def test_accept_without_urn(self):
        assert parse_callback_data("accept:garbage") == Accept("")

    def test_decline(self):
        assert parse_callback_data("decline") == Decline()

    @pytest.mark.parametrize("data", [None, "", "tasks_today", "declined", "spotify:track:abc"])
    def test_unrecognized(self, data):
        assert parse_callback_data(data) == Unrecognized(data)


class TestFormatAuthor:
    def test_with_username(self):
        assert format_author(make_user(first_name="Luis", username="luis")) == "Luis (@luis)"

    def test_without_username(self):
        assert format_author(make_user(first_name="Luis", username=None)) == "Luis"

    def test_unknown(self):
        assert format_author(None) == "Unknown"


class TestVotingCard:
    def test_buttons(self):
        card = VotingCard(requester="Luis (@luis)", track=TrackReference("abc123"))
        [row] = card.keyboard.inline_keyboard
        assert [b.callback_data for b in row] == ["accept:spotify:track:abc123", "decline"]

    def test_accept_payload_round_trips(self):
        card = VotingCard(requester="x", track=TrackReference("abc123"))
        payload = card.keyboard.inline_keyboard[0][0].callback_data
        assert parse_callback_data(payload) == Accept("abc123")

    def test_text_with_metadata(self):
        meta = TrackMetadata.from_api({"name": "Song", "artists": [{"name": "Band"}], "duration_ms": 61_000})
        card = VotingCard(requester="<Luis>", track=TrackReference("abc123"), metadata=meta)
        assert card.text.startswith("Anfrage von &lt;Luis&gt;:")
        assert "<b>Song</b>" in card.text
        assert card.text.endswith("https://open.spotify.com/track/abc123")

    def test_text_without_metadata(self):
        card = VotingCard(requester="Luis", track=TrackReference("abc123"))
        assert card.text == "Anfrage von Luis:\nhttps://open.spotify.com/track/abc123"


def test_terminal_texts():
    track = TrackReference("abc123")
    assert accepted_text("Anna", track) == "✅ Anna hat akzeptiert: https://open.spotify.com/track/abc123"
    assert declined_text("Anna", "Anfrage von Luis:") == "❌ Anna hat abgelehnt: Anfrage von Luis:"
    assert declined_text("Anna", None) == "❌ Anna hat abgelehnt."


def test_request_confirmation_contains_url():
    track = TrackReference("abc123")
    assert "https://open.spotify.com/track/abc123" in request_confirmation_text(track)
    meta = TrackMetadata.from_api({"name": "Song", "artists": [{"name": "Band"}]})
    text = request_confirmation_text(track, meta)
    assert "Song von Band" in text
    assert "https://open.spotify.com/track/abc123" in text
