"""
YouTube Music search for spot-stream.

Only the single top hit is ever used, so the search asks ytmusicapi for
the video category and returns the first result that carries a video id.
Videos (unlike the "songs" shelf) come with a view count, which the
resolver needs to reject removed or placeholder uploads.

ytmusicapi is synchronous; the call runs in a worker thread so the event
loop stays free. A fresh YTMusic client is created per search, so
concurrent searches share nothing.

Usage:
    from spot_stream.youtube.search import search_one

    video = await search_one("Never Gonna Give You Up Rick Astley")
    if video is not None:
        print(video.url, video.views)
"""

import asyncio
from typing import Any

from ytmusicapi import YTMusic

from spot_stream.core.exceptions import UpstreamError
from spot_stream.core.logger import get_logger
from spot_stream.youtube.models import VideoCandidate


logger = get_logger(__name__)


# Search shelf and page size handed to YTMusic.search()
SEARCH_FILTER = "videos"
SEARCH_LIMIT = 5


def _search_sync(query: str) -> list[dict[str, Any]]:
    ytmusic = YTMusic(language="en")
    return ytmusic.search(query=query, filter=SEARCH_FILTER, limit=SEARCH_LIMIT)


async def search_one(query: str) -> VideoCandidate | None:
    """
    Return the top YouTube Music video for a free-text query.

    Args:
        query: Search text, e.g. "Song Title Artist Name".

    Returns:
        The first result with a video id, or None if nothing was found.

    Raises:
        UpstreamError: If ytmusicapi fails (network error, unexpected
                       response layout).
    """
    if not query.strip():
        return None

    try:
        results = await asyncio.to_thread(_search_sync, query)
    except Exception as e:
        raise UpstreamError(
            f"YouTube Music search failed: {e}",
            details={"query": query, "original_error": str(e)},
            service="ytmusic"
        ) from e

    logger.debug(f"YTMusic search '{query}' returned {len(results or [])} results")

    for result in results or []:
        if isinstance(result, dict) and result.get("videoId"):
            return VideoCandidate.from_ytmusic_result(result)

    return None
