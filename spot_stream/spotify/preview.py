"""
Spotify metadata lookup through the public embed page.

No API credentials are needed: the embed player page for any public
track, album or playlist contains the entity metadata as JSON. One GET
per lookup, no retries.

Usage:
    from spot_stream.spotify.preview import fetch_preview

    preview = await fetch_preview("https://open.spotify.com/track/4uLU6hMC")
    if preview is not None and preview.type == "track":
        print(preview.track, preview.artist)
"""

import html
import json
import re
from typing import Any
from urllib.parse import urlparse

import aiohttp

from spot_stream.core.exceptions import UpstreamError
from spot_stream.core.logger import get_logger
from spot_stream.spotify.models import OPEN_SPOTIFY_URL, SpotifyPreview
from spot_stream.spotify.url import strip_query


logger = get_logger(__name__)


_NEXT_DATA_RE = re.compile(
    r'<script[^>]+id="__NEXT_DATA__"[^>]*>(.+?)</script>', re.DOTALL
)

# No request deadline; cancellation is left to the caller
NO_TIMEOUT = aiohttp.ClientTimeout(total=None)

REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
}


def to_embed_url(url: str) -> str:
    """
    Map an open/play.spotify.com link to its embed page.

    Example:
        "https://open.spotify.com/track/abc?si=1"
        -> "https://open.spotify.com/embed/track/abc"
    """
    path = urlparse(strip_query(url)).path.rstrip("/")
    if path.startswith("/embed/"):
        return f"{OPEN_SPOTIFY_URL}{path}"
    return f"{OPEN_SPOTIFY_URL}/embed{path}"


def parse_embed_html(page: str, embed_url: str = "") -> SpotifyPreview | None:
    """
    Extract a SpotifyPreview from embed page HTML.

    Args:
        page: Raw HTML of the embed page.
        embed_url: URL the page was fetched from (stored on the preview).

    Returns:
        SpotifyPreview, or None when the page holds no entity (the page
        Spotify serves for unknown or removed ids).

    Raises:
        UpstreamError: If the page has no __NEXT_DATA__ script or the
                       script is not valid JSON.
    """
    match = _NEXT_DATA_RE.search(page)
    if not match:
        raise UpstreamError(
            "Spotify embed page did not contain track data",
            details={"url": embed_url},
            service="spotify"
        )

    try:
        data = json.loads(html.unescape(match.group(1)))
    except json.JSONDecodeError as e:
        raise UpstreamError(
            f"Spotify embed data is not valid JSON: {e}",
            details={"url": embed_url, "original_error": str(e)},
            service="spotify"
        ) from e

    entity = _dig(data, "props", "pageProps", "state", "data", "entity")
    if not isinstance(entity, dict):
        return None

    return SpotifyPreview.from_embed_entity(entity, embed_url)


def _dig(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


async def fetch_preview(
    url: str,
    session: aiohttp.ClientSession | None = None
) -> SpotifyPreview | None:
    """
    Fetch metadata for a Spotify link from its embed page.

    Args:
        url: open.spotify.com link (query string is ignored).
        session: Optional aiohttp session to reuse. When omitted a
                 session is opened and closed for this single request.

    Returns:
        SpotifyPreview, or None if Spotify reports the entity as missing
        (HTTP 404 or a page without entity data).

    Raises:
        UpstreamError: On connection failures, unexpected HTTP status
                       codes or unparseable pages.
    """
    embed_url = to_embed_url(url)
    logger.debug(f"Fetching Spotify preview: {embed_url}")

    if session is None:
        async with aiohttp.ClientSession(timeout=NO_TIMEOUT) as own_session:
            return await _fetch(own_session, embed_url)
    return await _fetch(session, embed_url)


async def _fetch(session: aiohttp.ClientSession, embed_url: str) -> SpotifyPreview | None:
    try:
        async with session.get(embed_url, headers=REQUEST_HEADERS) as response:
            if response.status == 404:
                logger.debug(f"Spotify returned 404 for {embed_url}")
                return None
            if response.status != 200:
                raise UpstreamError(
                    f"Spotify embed page returned HTTP {response.status}",
                    details={"url": embed_url, "status_code": response.status},
                    service="spotify"
                )
            page = await response.text()
    except aiohttp.ClientError as e:
        raise UpstreamError(
            f"Failed to fetch Spotify embed page: {e}",
            details={"url": embed_url, "original_error": str(e)},
            service="spotify"
        ) from e

    return parse_embed_html(page, embed_url)
