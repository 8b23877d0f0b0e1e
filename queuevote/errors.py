"""Error kinds raised by the request and voting workflow."""


class QueueVoteError(Exception):
    """Base class for all queuevote errors."""


class InvalidLink(QueueVoteError):
    """Text did not resolve to any Spotify track."""


class TooManyRedirects(QueueVoteError):
    """A short link redirected more often than the hop cap allows."""

    def __init__(self, url: str, hops: int):
        super().__init__(f"Too many redirects ({hops}) resolving {url}")
        self.url = url
        self.hops = hops


class InvalidCatalogUri(QueueVoteError):
    """A callback payload did not carry a valid track identifier."""


class UpstreamApiError(QueueVoteError):
    """The Spotify API (or its OAuth endpoint) returned an error."""


class NotAuthorized(UpstreamApiError):
    """No usable Spotify token is held; an admin must run /spotifylogin."""
