"""
Spotify link validation.

Everything here is pure string work: no network access, no state. The
resolver calls validate_url() before touching any external service so bad
input fails fast.

Accepted shape (case-insensitive, after dropping the query string):
    http(s)://open.spotify.com/<kind>/<id>
    http(s)://play.spotify.com/<kind>/<id>

where <kind> is track, album or playlist and <id> is alphanumeric.
"""

import re
from enum import Enum


class LinkType(str, Enum):
    """Kinds of Spotify link the validator understands."""
    TRACK = "track"
    ALBUM = "album"
    PLAYLIST = "playlist"


_LINK_PATTERNS = {
    link_type: re.compile(
        rf"^https?://(?:open|play)\.spotify\.com/{link_type.value}/[A-Za-z0-9]+$",
        re.IGNORECASE
    )
    for link_type in LinkType
}


def strip_query(url: str) -> str:
    """
    Drop everything from the first '?' onward.

    No decoding or case normalisation is performed.

    Example:
        strip_query("https://open.spotify.com/track/abc?si=xyz")
        -> "https://open.spotify.com/track/abc"
    """
    return url.split("?", 1)[0]


def _coerce_link_type(kind: "LinkType | str") -> LinkType | None:
    if isinstance(kind, LinkType):
        return kind
    if isinstance(kind, str):
        try:
            return LinkType(kind)
        except ValueError:
            return None
    return None


def validate_url(url: str, kind: "LinkType | str" = LinkType.TRACK) -> bool:
    """
    Return True if url is a Spotify link of the given kind.

    Args:
        url: The link to check. A trailing query string is ignored.
        kind: LinkType or its value ("track", "album", "playlist").
              Any other value makes the result False.

    Returns:
        True if the stripped url matches the pattern for kind.

    Example:
        validate_url("https://open.spotify.com/track/4uLU6hMC?si=1")  # True
        validate_url("https://open.spotify.com/album/1A2B", "album")   # True
        validate_url("https://open.spotify.com/track/1A2B", "artist")  # False
    """
    if not isinstance(url, str):
        return False

    link_type = _coerce_link_type(kind)
    if link_type is None:
        return False

    return _LINK_PATTERNS[link_type].match(strip_query(url)) is not None


def link_type(url: str) -> LinkType | None:
    """Return the LinkType url validates as, or None."""
    for candidate in LinkType:
        if validate_url(url, candidate):
            return candidate
    return None


def extract_id(url: str) -> str:
    """
    Return the trailing path segment of a link (its Spotify id).

    Example:
        extract_id("https://open.spotify.com/track/abc123?si=x") -> "abc123"
    """
    return strip_query(url).rstrip("/").split("/")[-1]
