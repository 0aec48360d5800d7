"""
spot-stream: play Spotify tracks from YouTube.

Given a public Spotify track link, spot-stream reads the track's title,
artist and artwork from Spotify's embed page, finds the matching video on
YouTube Music and hands back either the resolved metadata or a live audio
stream of that video.

Architecture:
    core/       - Configuration, logging, exceptions
    spotify/    - Link validation and embed-page metadata
    youtube/    - YouTube Music search
    download/   - yt-dlp extraction, CDN proxying, ffmpeg transcoding
    resolver/   - The pipeline tying the above together
    updater.py  - Once-per-process release check
    cli.py      - Command-line front-end

Usage:
    Python API:
        from spot_stream import resolve_track_info, open_stream, validate_url

        validate_url("https://open.spotify.com/track/...")          # True
        info = await resolve_track_info("https://open.spotify.com/track/...")
        async with await open_stream(info.url, {"opus_encoded": True}) as stream:
            async for chunk in stream:
                ...

    Command Line:
        spot-stream info "https://open.spotify.com/track/..."
        spot-stream download "https://open.spotify.com/track/..." -o song.webm

Environment:
    SPOT_STREAM_NO_UPDATE=1 disables the release check.

Dependencies:
    - aiohttp: Spotify embed page, GitHub API, CDN proxying
    - ytmusicapi: YouTube Music search
    - yt-dlp: YouTube audio URL extraction
    - ffmpeg-python: ffmpeg command construction
    - rich-click: CLI
    - tqdm: CLI progress bar and log output
    - pyyaml, python-dotenv: CLI configuration
"""

from spot_stream.version import __version__

__author__ = "spot-stream"
__license__ = "MIT"

from spot_stream.core import (
    ConfigError,
    InvalidURLError,
    SpotStreamError,
    TrackNotFoundError,
    UpstreamError,
    get_logger,
    setup_logging,
)
from spot_stream.download import AudioStream
from spot_stream.resolver import TrackInfo, open_stream, resolve_track_info
from spot_stream.spotify import LinkType, validate_url
from spot_stream.updater import check_for_update

__all__ = [
    # Version
    "__version__",
    # Operations
    "resolve_track_info",
    "open_stream",
    "validate_url",
    "check_for_update",
    # Models
    "TrackInfo",
    "LinkType",
    "AudioStream",
    # Exceptions
    "SpotStreamError",
    "InvalidURLError",
    "TrackNotFoundError",
    "UpstreamError",
    "ConfigError",
    # Logging
    "setup_logging",
    "get_logger",
]
