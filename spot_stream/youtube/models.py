"""
Data models for YouTube Music search results.

ytmusicapi hands back loosely typed dicts: durations as "3:33" strings,
view counts as "1.2M". This module turns one of those dicts into a
VideoCandidate with plain integers.
"""

import re
from dataclasses import dataclass
from typing import Any


_VIEW_SUFFIXES = {
    "K": 1_000,
    "M": 1_000_000,
    "B": 1_000_000_000,
}

_VIEWS_RE = re.compile(r"^([\d.,]+)\s*([KMB])?$", re.IGNORECASE)


def parse_duration(duration_str: str | None) -> int | None:
    """
    Parse a duration string to seconds.

    Args:
        duration_str: Duration in format "M:SS" or "H:MM:SS" or None.

    Returns:
        Duration in seconds, or None if missing or unparseable.

    Examples:
        "3:33" -> 213
        "1:02:15" -> 3735
        None -> None
    """
    if not duration_str:
        return None

    try:
        parts = [int(p) for p in duration_str.split(":")]
    except (ValueError, TypeError):
        return None

    if len(parts) == 2:
        minutes, seconds = parts
        return minutes * 60 + seconds
    if len(parts) == 3:
        hours, minutes, seconds = parts
        return hours * 3600 + minutes * 60 + seconds
    return None


def parse_views(views: Any) -> int | None:
    """
    Parse a YouTube view count to an integer.

    Args:
        views: int, or a string like "1.2M", "3,456", "987K views",
               "No views". None when the result has no view count.

    Returns:
        The view count, 0 for "No views", or None if unknown.

    Examples:
        "1.2M" -> 1200000
        "12,345 views" -> 12345
        "No views" -> 0
    """
    if views is None:
        return None
    if isinstance(views, bool):
        return None
    if isinstance(views, int):
        return views

    text = str(views).strip()
    text = re.sub(r"\s*views?$", "", text, flags=re.IGNORECASE).strip()
    if not text:
        return None
    if text.lower() == "no":
        return 0

    match = _VIEWS_RE.match(text)
    if not match:
        return None

    number, suffix = match.groups()
    try:
        value = float(number.replace(",", ""))
    except ValueError:
        return None

    if suffix:
        value *= _VIEW_SUFFIXES[suffix.upper()]
    return int(round(value))


@dataclass(frozen=True)
class VideoCandidate:
    """
    Immutable representation of a single YouTube Music search hit.

    Attributes:
        video_id: YouTube video ID (11-character string).
        url: Watch URL handed to yt-dlp.
             For songs: "https://music.youtube.com/watch?v=..."
             For videos: "https://www.youtube.com/watch?v=..."
        title: Video/song title as shown on YouTube.
        author: First artist or channel name, "" if unknown.
        views: View count, or None when YouTube did not report one.
        duration: Duration in milliseconds, or None if unknown.
        result_type: "video" or "song".
    """

    video_id: str
    url: str
    title: str
    author: str = ""
    views: int | None = None
    duration: int | None = None
    result_type: str = "video"

    @classmethod
    def from_ytmusic_result(cls, result: dict[str, Any]) -> "VideoCandidate":
        """
        Create a VideoCandidate from a ytmusicapi search result.

        Args:
            result: One dictionary from YTMusic.search().
        """
        video_id = result.get("videoId") or ""

        result_type = result.get("resultType") or "video"
        if result_type == "song":
            url = f"https://music.youtube.com/watch?v={video_id}"
        else:
            url = f"https://www.youtube.com/watch?v={video_id}"

        artists_data = result.get("artists") or []
        author = ""
        if isinstance(artists_data, list):
            names = [
                a.get("name") for a in artists_data
                if isinstance(a, dict) and a.get("name")
            ]
            if names:
                author = names[0]

        # duration_seconds is present on most results, the string on all
        seconds = result.get("duration_seconds")
        if not isinstance(seconds, int) or isinstance(seconds, bool):
            seconds = parse_duration(result.get("duration"))

        return cls(
            video_id=video_id,
            url=url,
            title=result.get("title") or "",
            author=author,
            views=parse_views(result.get("views")),
            duration=seconds * 1000 if seconds is not None else None,
            result_type=result_type,
        )
