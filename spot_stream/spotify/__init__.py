"""
Spotify side of spot-stream.

Components:
    - url: Link validation (pure, no network)
    - models: SpotifyPreview data model
    - preview: Metadata lookup via the public embed page

Usage:
    from spot_stream.spotify import validate_url, fetch_preview, LinkType

    if validate_url(url, LinkType.TRACK):
        preview = await fetch_preview(url)
"""

from spot_stream.spotify.models import SpotifyPreview
from spot_stream.spotify.preview import fetch_preview, parse_embed_html, to_embed_url
from spot_stream.spotify.url import (
    LinkType,
    extract_id,
    link_type,
    strip_query,
    validate_url,
)

__all__ = [
    # Models
    "SpotifyPreview",
    # URL helpers
    "LinkType",
    "validate_url",
    "strip_query",
    "extract_id",
    "link_type",
    # Preview
    "fetch_preview",
    "parse_embed_html",
    "to_embed_url",
]
