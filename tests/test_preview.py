"""Test Spotify embed page parsing and fetching"""

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from spot_stream.core.exceptions import UpstreamError
from spot_stream.spotify.models import SpotifyPreview
from spot_stream.spotify.preview import fetch_preview, parse_embed_html, to_embed_url


def _page_payload(entity):
    return {"props": {"pageProps": {"state": {"data": {"entity": entity}}}}}


def _mock_session(status=200, text=""):
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value=text)
    session = MagicMock()
    session.get.return_value.__aenter__.return_value = response
    return session


class TestToEmbedUrl:
    """Test to_embed_url()"""

    def test_track_link(self):
        assert to_embed_url("https://open.spotify.com/track/abc?si=1") == \
            "https://open.spotify.com/embed/track/abc"

    def test_trailing_slash_and_play_host(self):
        assert to_embed_url("https://play.spotify.com/album/xyz/") == \
            "https://open.spotify.com/embed/album/xyz"

    def test_already_embed(self):
        assert to_embed_url("https://open.spotify.com/embed/track/abc") == \
            "https://open.spotify.com/embed/track/abc"


class TestSpotifyPreviewModel:
    """Test SpotifyPreview.from_embed_entity()"""

    def test_track_entity(self, embed_entity):
        preview = SpotifyPreview.from_embed_entity(embed_entity, "https://e")

        assert preview.type == "track"
        assert preview.track == "Never Gonna Give You Up"
        assert preview.artist == "Rick Astley"
        assert preview.link == "https://open.spotify.com/track/4cOdK2wGLETKBW3PvgPWqT"
        assert preview.image == "https://i.scdn.co/image/large"
        assert preview.date == "1987-11-12T00:00:00Z"
        assert preview.audio == "https://p.scdn.co/mp3-preview/abc"
        assert preview.embed == "https://e"

    def test_album_cover_art(self):
        """Test cover art sources and subtitle fallback for collections"""
        preview = SpotifyPreview.from_embed_entity({
            "type": "album",
            "title": "Whenever You Need Somebody",
            "subtitle": "Rick Astley",
            "uri": "spotify:album:6XhjNHCyCDyyGJRM5mg40G",
            "coverArt": {"sources": [
                {"url": "https://i.scdn.co/a", "width": 300},
                {"url": "https://i.scdn.co/b", "width": 640},
            ]},
        })

        assert preview.type == "album"
        assert preview.track == "Whenever You Need Somebody"
        assert preview.artist == "Rick Astley"
        assert preview.link == "https://open.spotify.com/album/6XhjNHCyCDyyGJRM5mg40G"
        assert preview.image == "https://i.scdn.co/b"

    def test_sparse_entity(self):
        """Test an entity missing every optional field"""
        preview = SpotifyPreview.from_embed_entity({"type": "track"})

        assert preview.track == ""
        assert preview.artist == ""
        assert preview.link == ""
        assert preview.image == ""
        assert preview.date is None
        assert preview.audio is None


class TestParseEmbedHtml:
    """Test parse_embed_html()"""

    def test_extracts_entity(self, embed_entity, make_embed_html):
        page = make_embed_html(_page_payload(embed_entity))

        preview = parse_embed_html(page, "https://open.spotify.com/embed/track/4cOd")

        assert preview.track == "Never Gonna Give You Up"
        assert preview.embed == "https://open.spotify.com/embed/track/4cOd"

    def test_missing_entity_returns_none(self, make_embed_html):
        page = make_embed_html({"props": {"pageProps": {"status": 404}}})

        assert parse_embed_html(page) is None

    def test_missing_script_raises(self):
        with pytest.raises(UpstreamError) as exc_info:
            parse_embed_html("<html><body>nothing here</body></html>", "https://e")

        assert exc_info.value.service == "spotify"

    def test_invalid_json_raises(self):
        page = '<script id="__NEXT_DATA__" type="application/json">{not json</script>'

        with pytest.raises(UpstreamError):
            parse_embed_html(page)


class TestFetchPreview:
    """Test fetch_preview() with a mocked aiohttp session"""

    @pytest.mark.asyncio
    async def test_success(self, embed_entity, make_embed_html):
        session = _mock_session(text=make_embed_html(_page_payload(embed_entity)))

        preview = await fetch_preview("https://open.spotify.com/track/4cOd?si=x", session=session)

        assert preview.artist == "Rick Astley"
        assert session.get.call_args.args[0] == "https://open.spotify.com/embed/track/4cOd"

    @pytest.mark.asyncio
    async def test_not_found_returns_none(self):
        session = _mock_session(status=404)

        assert await fetch_preview("https://open.spotify.com/track/gone", session=session) is None

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        session = _mock_session(status=503)

        with pytest.raises(UpstreamError) as exc_info:
            await fetch_preview("https://open.spotify.com/track/abc", session=session)

        assert exc_info.value.details["status_code"] == 503

    @pytest.mark.asyncio
    async def test_connection_error_is_wrapped(self):
        session = MagicMock()
        session.get.side_effect = aiohttp.ClientConnectionError("connection refused")

        with pytest.raises(UpstreamError) as exc_info:
            await fetch_preview("https://open.spotify.com/track/abc", session=session)

        assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)

    @pytest.mark.asyncio
    async def test_own_session_has_no_overall_deadline(self):
        session = _mock_session(status=404)
        with patch("spot_stream.spotify.preview.aiohttp.ClientSession") as session_cls:
            session_cls.return_value.__aenter__.return_value = session
            assert await fetch_preview("https://open.spotify.com/track/abc") is None

        assert session_cls.call_args.kwargs["timeout"].total is None
