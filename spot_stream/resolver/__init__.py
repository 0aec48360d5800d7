"""
Track resolution for spot-stream.

Components:
    - TrackInfo: Resolved track metadata
    - resolve_track_info: Spotify link -> TrackInfo
    - open_stream: Spotify link -> live AudioStream

Usage:
    from spot_stream.resolver import resolve_track_info, open_stream
"""

from spot_stream.resolver.models import TrackInfo
from spot_stream.resolver.track_resolver import (
    build_search_queries,
    open_stream,
    resolve_track_info,
)

__all__ = [
    "TrackInfo",
    "build_search_queries",
    "open_stream",
    "resolve_track_info",
]
