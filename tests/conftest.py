"""Test configuration and fixtures"""

import json

import pytest

from spot_stream.spotify.models import SpotifyPreview
from spot_stream.youtube.models import VideoCandidate


TRACK_URL = "https://open.spotify.com/track/abc123"


@pytest.fixture(autouse=True)
def no_update_check(monkeypatch):
    """Keep the release check from reaching GitHub during tests"""
    monkeypatch.setenv("SPOT_STREAM_NO_UPDATE", "1")


@pytest.fixture
def track_preview():
    """Preview of a track as read from the embed page"""
    return SpotifyPreview(
        type="track",
        track="X",
        artist="Y",
        link=TRACK_URL,
        image="img.png",
    )


@pytest.fixture
def album_preview():
    """Preview of an album link"""
    return SpotifyPreview(
        type="album",
        track="Some Album",
        artist="Y",
        link="https://open.spotify.com/album/abc123",
        image="img.png",
    )


@pytest.fixture
def video():
    """A matched video with views"""
    return VideoCandidate(
        video_id="dQw4w9WgXcQ",
        url="v",
        title="X (Official Video)",
        author="Y",
        views=100,
        duration=200000,
    )


@pytest.fixture
def embed_entity():
    """Entity object as found in the embed page __NEXT_DATA__"""
    return {
        "type": "track",
        "name": "Never Gonna Give You Up",
        "uri": "spotify:track:4cOdK2wGLETKBW3PvgPWqT",
        "artists": [
            {"name": "Rick Astley", "uri": "spotify:artist:0gxyHStUsqpMadRV0Di1Qt"}
        ],
        "releaseDate": {"isoString": "1987-11-12T00:00:00Z"},
        "audioPreview": {"url": "https://p.scdn.co/mp3-preview/abc"},
        "visualIdentity": {
            "image": [
                {"url": "https://i.scdn.co/image/small", "maxWidth": 64},
                {"url": "https://i.scdn.co/image/large", "maxWidth": 640},
                {"url": "https://i.scdn.co/image/medium", "maxWidth": 300},
            ]
        },
    }


@pytest.fixture
def make_embed_html():
    """Build an embed page around a __NEXT_DATA__ payload"""
    def _make(payload) -> str:
        return (
            "<!DOCTYPE html><html><head></head><body>"
            '<script id="__NEXT_DATA__" type="application/json">'
            f"{json.dumps(payload)}"
            "</script></body></html>"
        )
    return _make
