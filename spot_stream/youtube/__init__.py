"""
YouTube Music integration module for spot-stream.

Components:
    - VideoCandidate: Data model for a single search hit
    - search_one: Top-result search through ytmusicapi

Usage:
    from spot_stream.youtube import search_one

    video = await search_one(f"{title} {artist}")
"""

from spot_stream.youtube.models import VideoCandidate, parse_duration, parse_views
from spot_stream.youtube.search import search_one

__all__ = [
    "VideoCandidate",
    "parse_duration",
    "parse_views",
    "search_one",
]
