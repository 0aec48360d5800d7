"""
Spotify track resolution and stream acquisition.

This module ties the three collaborators together:

    Spotify link
        -> validate_url()                (no network, fails fast)
        -> fetch_preview()               (Spotify embed page)
        -> search_one("title artist")    (YouTube Music)
        -> search_one("title")           (only if the first search found nothing)
        -> reject missing / zero-view video
        -> TrackInfo, or open_audio_stream(video.url, options)

Policy:
    - Exactly one fallback query, no other retries.
    - A video with a view count of 0 counts as "no match": such hits are
      almost always removed, private or placeholder uploads.
    - A video without a reported view count is accepted.
    - Errors raised by collaborators are not caught here; they reach the
      caller as-is. Nothing partial is ever returned.

Every call is independent: no cache, no shared client, no locks.

Usage:
    from spot_stream.resolver import resolve_track_info, open_stream

    info = await resolve_track_info("https://open.spotify.com/track/...")
    stream = await open_stream(info.url, {"opus_encoded": True})
"""

from typing import Any

from spot_stream.core.exceptions import InvalidURLError, TrackNotFoundError
from spot_stream.core.logger import get_logger
from spot_stream.download.stream import AudioStream, open_audio_stream
from spot_stream.resolver.models import TrackInfo
from spot_stream.spotify.models import SpotifyPreview
from spot_stream.spotify.preview import fetch_preview
from spot_stream.spotify.url import LinkType, extract_id, strip_query, validate_url
from spot_stream.updater import schedule_update_check
from spot_stream.youtube.models import VideoCandidate
from spot_stream.youtube.search import search_one


logger = get_logger(__name__)


def build_search_queries(preview: SpotifyPreview) -> tuple[str, str]:
    """
    Return the (primary, fallback) search queries for a track.

    Example:
        preview.track = "Song", preview.artist = "Artist"
        -> ("Song Artist", "Song")
    """
    return f"{preview.track} {preview.artist}", f"{preview.track}"


async def _find_video(url: str) -> tuple[SpotifyPreview, VideoCandidate]:
    """
    Run validation, metadata lookup and the video search for url.

    Raises:
        InvalidURLError: url is not a Spotify track link.
        TrackNotFoundError: No track metadata, or no video with views.
    """
    if not validate_url(url, LinkType.TRACK):
        raise InvalidURLError("Invalid URL", details={"url": url, "kind": LinkType.TRACK.value})

    schedule_update_check()

    track_url = strip_query(url)
    preview = await fetch_preview(track_url)
    if preview is None or preview.type != LinkType.TRACK.value:
        raise TrackNotFoundError(
            "Track not found",
            details={"url": track_url, "type": preview.type if preview else None}
        )

    primary_query, fallback_query = build_search_queries(preview)

    logger.debug(f"Searching YouTube Music: {primary_query}")
    video = await search_one(primary_query)
    if video is None:
        logger.debug(f"No result, retrying with title only: {fallback_query}")
        video = await search_one(fallback_query)

    if video is None or video.views == 0:
        raise TrackNotFoundError(
            "Track not found",
            details={
                "url": track_url,
                "query": primary_query,
                "video_url": video.url if video else None,
            }
        )

    logger.debug(f"Matched {preview.artist} - {preview.track} -> {video.url}")
    return preview, video


async def resolve_track_info(url: str) -> TrackInfo:
    """
    Resolve a Spotify track link to TrackInfo.

    Args:
        url: Spotify track link; a query string such as "?si=..." is ignored.

    Returns:
        TrackInfo with Spotify's title, artist, link and artwork, the
        Spotify id, and the matched video's duration in milliseconds.

    Raises:
        InvalidURLError: If url is not a Spotify track link. No network
                         request is made in that case.
        TrackNotFoundError: If Spotify has no such track or no usable
                            YouTube video was found.
        UpstreamError: If Spotify or YouTube Music fails.

    Example:
        info = await resolve_track_info(
            "https://open.spotify.com/track/4cOdK2wGLETKBW3PvgPWqT?si=1"
        )
        print(info.to_dict())
    """
    preview, video = await _find_video(url)

    return TrackInfo(
        title=preview.track,
        artist=preview.artist,
        url=preview.link,
        id=extract_id(preview.link),
        duration=video.duration,
        thumbnail=preview.image,
    )


async def open_stream(url: str, options: dict[str, Any] | None = None) -> AudioStream:
    """
    Open a live audio stream for a Spotify track link.

    Args:
        url: Spotify track link.
        options: Options map forwarded untouched to open_audio_stream()
                 (format, seek, encoder_args, fmt, opus_encoded, ...).
                 None is replaced by an empty dict.

    Returns:
        An open AudioStream; the caller reads and closes it.

    Raises:
        InvalidURLError: Before any network request, for a non-track link.
        TrackNotFoundError: As for resolve_track_info().
        UpstreamError: From Spotify, YouTube Music, yt-dlp or ffmpeg,
                       exactly as the collaborator raised it.
    """
    if options is None:
        options = {}

    _, video = await _find_video(url)
    return await open_audio_stream(video.url, options)
