# Tests for Spotify link parsing

import pytest

from queuevote.spotify.links import (
    TrackReference,
    contains_spotify_link,
    find_short_link,
    is_valid_track_id,
)


class TestTrackUrl:
    @pytest.mark.parametrize(
        "track_id",
        ["5hvIZF56tE8sAwMA9cKmQQ", "abc123", "a", "under_score", "0"],
    )
    def test_canonical_url(self, track_id):
        for scheme in ("https", "http"):
            track = TrackReference.from_url(f"{scheme}://open.spotify.com/track/{track_id}")
            assert track == TrackReference(track_id)

    def test_surrounding_prose_ignored(self):
        track = TrackReference.from_url("check this out https://open.spotify.com/track/abc123 nice")
        assert track.track_id == "abc123"

    def test_query_string_ignored(self):
        track = TrackReference.from_url(
            "https://open.spotify.com/track/5hvIZF56tE8sAwMA9cKmQQ?si=8e4ab90fe2654448"
        )
        assert track.track_id == "5hvIZF56tE8sAwMA9cKmQQ"

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "no link here",
            "https://open.spotify.com/album/abc123",
            "https://open.spotify.com/playlist/abc123",
            "https://example.com/track/abc123",
            "spotify:track:abc123",
        ],
    )
    def test_no_track(self, text):
        assert TrackReference.from_url(text) is None


class TestTrackUrn:
    def test_plain_urn(self):
        assert TrackReference.from_urn("spotify:track:abc123") == TrackReference("abc123")

    def test_accept_payload(self):
        assert TrackReference.from_urn("accept:spotify:track:abc123") == TrackReference("abc123")

    def test_not_a_track(self):
        assert TrackReference.from_urn("spotify:album:abc123") is None
        assert TrackReference.from_urn("accept:") is None

    @pytest.mark.parametrize("track_id", ["abc123", "5hvIZF56tE8sAwMA9cKmQQ", "x_y"])
    def test_urn_and_url_agree(self, track_id):
        track = TrackReference(track_id)
        assert TrackReference.from_urn(track.urn) == track
        assert TrackReference.from_url(TrackReference.from_urn(track.urn).url) == track


class TestTrackReference:
    def test_canonical_forms(self):
        track = TrackReference("abc123")
        assert track.urn == "spotify:track:abc123"
        assert track.url == "https://open.spotify.com/track/abc123"

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError):
            TrackReference("")

    def test_equality_by_id(self):
        assert TrackReference("abc") == TrackReference("abc")
        assert TrackReference("abc") != TrackReference("abd")
        assert len({TrackReference("abc"), TrackReference("abc")}) == 1


def test_contains_spotify_link():
    assert contains_spotify_link("https://open.spotify.com/track/abc")
    assert contains_spotify_link("look: https://spotify.link/Xy12 !")
    assert contains_spotify_link("https://open.spotify.com/album/abc")
    assert not contains_spotify_link("https://youtube.com/watch?v=abc")
    assert not contains_spotify_link(None)
    assert not contains_spotify_link("")


def test_find_short_link():
    assert find_short_link("try https://spotify.link/AbC123 now") == "https://spotify.link/AbC123"
    assert find_short_link("https://open.spotify.com/track/abc") is None


def test_is_valid_track_id():
    assert is_valid_track_id("5hvIZF56tE8sAwMA9cKmQQ")
    assert not is_valid_track_id("")
    assert not is_valid_track_id("abc/../def")
    assert not is_valid_track_id("abc def")
