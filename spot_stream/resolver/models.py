"""
Result model returned by the track resolver.
"""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class TrackInfo:
    """
    Resolved track metadata.

    Title, artist, link and artwork come from Spotify; the duration comes
    from the matched YouTube video because the embed page does not expose
    one.

    Attributes:
        title: Track name as listed on Spotify.
        artist: First credited artist on Spotify.
        url: Canonical Spotify link, e.g. "https://open.spotify.com/track/abc".
        id: Last path segment of url (the Spotify track id).
        duration: Duration of the matched video in milliseconds, or None.
        thumbnail: Cover art URL from Spotify.
    """

    title: str
    artist: str
    url: str
    id: str
    duration: int | None
    thumbnail: str

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to the public wire shape.

        Returns:
            {"title", "artist", "url", "id", "duration", "thumbnail"}
        """
        return asdict(self)
