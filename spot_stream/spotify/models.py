"""
Data models for Spotify embed-page metadata.

The embed page (https://open.spotify.com/embed/<kind>/<id>) ships its
state as JSON inside a ``<script id="__NEXT_DATA__">`` tag. The part we
care about lives under ``props.pageProps.state.data.entity``.
"""

from dataclasses import dataclass
from typing import Any


OPEN_SPOTIFY_URL = "https://open.spotify.com"


def _uri_to_link(uri: str | None) -> str:
    """
    Convert a Spotify URI to an open.spotify.com link.

    Examples:
        "spotify:track:abc123" -> "https://open.spotify.com/track/abc123"
        None -> ""
    """
    if not uri:
        return ""
    parts = uri.split(":")
    if len(parts) < 3 or parts[0] != "spotify":
        return ""
    return f"{OPEN_SPOTIFY_URL}/{'/'.join(parts[1:])}"


def _largest_image(entity: dict[str, Any]) -> str:
    """
    Pick the widest image the entity offers.

    Tracks carry ``visualIdentity.image``; albums and playlists carry
    ``coverArt.sources``. Both are lists of {url, maxWidth|width}.
    """
    sources = (entity.get("visualIdentity") or {}).get("image") or []
    if not sources:
        sources = (entity.get("coverArt") or {}).get("sources") or []

    best_url = ""
    best_width = -1
    for source in sources:
        if not isinstance(source, dict) or not source.get("url"):
            continue
        width = source.get("maxWidth") or source.get("width") or 0
        if width > best_width:
            best_url = source["url"]
            best_width = width
    return best_url


@dataclass(frozen=True)
class SpotifyPreview:
    """
    Immutable summary of a Spotify link as seen on its embed page.

    Attributes:
        type: Entity type ("track", "album", "playlist", "episode", ...).
        track: Track name for tracks, entity name otherwise.
        artist: First artist name (or the entity subtitle when absent).
        link: Canonical open.spotify.com link built from the entity URI.
        image: URL of the largest cover image, or "".
        title: Entity name.
        description: Entity description (playlists) or "".
        date: Release date ISO string if present.
        audio: URL of the 30 second preview clip if present.
        embed: The embed page URL the data came from.
    """

    type: str
    track: str
    artist: str
    link: str
    image: str
    title: str = ""
    description: str = ""
    date: str | None = None
    audio: str | None = None
    embed: str = ""

    @classmethod
    def from_embed_entity(cls, entity: dict[str, Any], embed_url: str = "") -> "SpotifyPreview":
        """
        Build a preview from the ``entity`` object of the embed page state.

        Args:
            entity: The decoded ``props.pageProps.state.data.entity`` dict.
            embed_url: The page the entity was read from.
        """
        name = entity.get("name") or entity.get("title") or ""

        artists = entity.get("artists") or []
        artist = ""
        if artists and isinstance(artists[0], dict):
            artist = artists[0].get("name") or ""
        if not artist:
            artist = entity.get("subtitle") or ""

        release_date = entity.get("releaseDate") or {}
        date = release_date.get("isoString") if isinstance(release_date, dict) else None

        audio_preview = entity.get("audioPreview") or {}

        return cls(
            type=entity.get("type") or "",
            track=name,
            artist=artist,
            link=_uri_to_link(entity.get("uri")),
            image=_largest_image(entity),
            title=name,
            description=entity.get("description") or "",
            date=date,
            audio=audio_preview.get("url") if isinstance(audio_preview, dict) else None,
            embed=embed_url,
        )
