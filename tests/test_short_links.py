# Tests for spotify.link redirect resolution

import httpx
import pytest

from queuevote.errors import TooManyRedirects
from queuevote.spotify.links import LinkResolver, TrackReference

SHORT_LINK = "https://spotify.link/AbC123"


def make_chain(hops: int, final: str = "https://open.spotify.com/track/xyz"):
    """Build a redirect chain of ``hops`` redirects ending at ``final``.

    Returns the MockTransport handler and the list of requested URLs.
    """
    urls = [SHORT_LINK] + [f"https://r.example/{i}" for i in range(1, hops)] + [final]
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        requested.append(url)
        index = urls.index(url)
        if index < hops:
            return httpx.Response(302, headers={"location": urls[index + 1]})
        return httpx.Response(200, text="track page")

    return handler, requested


def make_resolver(handler, max_redirects: int = 5) -> LinkResolver:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return LinkResolver(client=client, max_redirects=max_redirects)


@pytest.mark.parametrize("hops", [1, 3, 5])
async def test_chain_within_cap(hops):
    handler, requested = make_chain(hops)
    resolver = make_resolver(handler)

    resolved = await resolver.resolve_short_link(SHORT_LINK)

    assert resolved == "https://open.spotify.com/track/xyz"
    # The canonical URL itself is never requested
    assert all("open.spotify.com" not in url for url in requested)
    assert len(requested) == hops


async def test_three_hops_resolves_to_track():
    handler, _ = make_chain(3)
    resolver = make_resolver(handler)

    track = await resolver.resolve(f"hör mal {SHORT_LINK}")

    assert track == TrackReference("xyz")


async def test_six_hops_too_many():
    handler, requested = make_chain(6)
    resolver = make_resolver(handler)

    with pytest.raises(TooManyRedirects) as exc_info:
        await resolver.resolve_short_link(SHORT_LINK)

    assert exc_info.value.hops == 6
    assert all("open.spotify.com" not in url for url in requested)


async def test_six_hops_resolves_to_none():
    handler, _ = make_chain(6)
    resolver = make_resolver(handler)

    assert await resolver.resolve(SHORT_LINK) is None


async def test_relative_location():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "spotify.link" and request.url.path == "/AbC123":
            return httpx.Response(301, headers={"location": "/next"})
        if request.url.path == "/next":
            return httpx.Response(302, headers={"location": "https://open.spotify.com/track/rel1"})
        return httpx.Response(404)

    resolver = make_resolver(handler)

    assert await resolver.resolve(SHORT_LINK) == TrackReference("rel1")


async def test_chain_ending_elsewhere():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "spotify.link":
            return httpx.Response(302, headers={"location": "https://example.com/landing"})
        return httpx.Response(200, text="not spotify")

    resolver = make_resolver(handler)

    assert await resolver.resolve_short_link(SHORT_LINK) == "https://example.com/landing"
    assert await resolver.resolve(SHORT_LINK) is None


async def test_transport_error_resolves_to_none():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    resolver = make_resolver(handler)

    assert await resolver.resolve(SHORT_LINK) is None


async def test_canonical_link_needs_no_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no HTTP request expected")

    resolver = make_resolver(handler)

    track = await resolver.resolve("https://open.spotify.com/track/abc123")
    assert track == TrackReference("abc123")
