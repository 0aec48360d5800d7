"""Test the command line front-end"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from spot_stream.cli import cli
from spot_stream.core.exceptions import (
    InvalidURLError,
    SpotStreamError,
    TrackNotFoundError,
    UpstreamError,
)
from spot_stream.download.stream import AudioStream
from spot_stream.resolver.models import TrackInfo


TRACK_INFO = TrackInfo(
    title="X",
    artist="Y",
    url="https://open.spotify.com/track/abc123",
    id="abc123",
    duration=200000,
    thumbnail="img.png",
)


class MemoryAudioStream(AudioStream):
    """AudioStream over an in-memory buffer"""

    def __init__(self, data: bytes, **kwargs) -> None:
        super().__init__(**kwargs)
        self._data = data

    async def _read(self, n: int) -> bytes:
        if n < 0:
            n = len(self._data)
        chunk, self._data = self._data[:n], self._data[n:]
        return chunk

    async def _close(self) -> None:
        self._data = b""


class FailingAudioStream(MemoryAudioStream):
    """Stream that breaks after its buffer is drained"""

    async def _read(self, n: int) -> bytes:
        chunk = await super()._read(n)
        if not chunk:
            raise UpstreamError("Audio download interrupted", service="cdn")
        return chunk


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging():
    """Leave the root logger to pytest"""
    with patch("spot_stream.cli.setup_logging"), patch("spot_stream.cli.shutdown_logging"):
        yield


class TestValidateCommand:

    def test_valid(self, runner):
        result = runner.invoke(cli, ["validate", "https://open.spotify.com/track/abc123?si=1"])

        assert result.exit_code == 0
        assert result.output.strip() == "valid"

    def test_invalid(self, runner):
        result = runner.invoke(cli, ["validate", "https://open.spotify.com/album/abc123"])

        assert result.exit_code == 1
        assert result.output.strip() == "invalid"

    def test_kind_option(self, runner):
        result = runner.invoke(cli, ["validate", "https://open.spotify.com/album/abc123", "--kind", "album"])

        assert result.exit_code == 0


class TestInfoCommand:

    def test_prints_json(self, runner):
        with runner.isolated_filesystem():
            with patch("spot_stream.cli.resolve_track_info", new=AsyncMock(return_value=TRACK_INFO)) as resolve:
                result = runner.invoke(cli, ["info", "https://open.spotify.com/track/abc123"])

        assert result.exit_code == 0
        assert json.loads(result.output) == TRACK_INFO.to_dict()
        resolve.assert_awaited_once_with("https://open.spotify.com/track/abc123")

    @pytest.mark.parametrize("error,code", [
        (InvalidURLError("Invalid URL", details={"url": "x"}), 2),
        (TrackNotFoundError("No video found"), 3),
        (UpstreamError("Spotify embed page returned HTTP 503", service="spotify"), 4),
        (SpotStreamError("Something else went wrong"), 1),
    ])
    def test_error_exit_codes(self, runner, error, code):
        with runner.isolated_filesystem():
            with patch("spot_stream.cli.resolve_track_info", new=AsyncMock(side_effect=error)):
                result = runner.invoke(cli, ["info", "https://open.spotify.com/track/abc123"])

        assert result.exit_code == code

    def test_bad_config_file(self, runner):
        with runner.isolated_filesystem():
            Path("config.yaml").write_text("stream: [unclosed\n", encoding="utf-8")
            result = runner.invoke(cli, ["info", "https://open.spotify.com/track/abc123"])

        assert result.exit_code == 1


class TestDownloadCommand:

    def test_writes_stream_to_file(self, runner):
        stream = MemoryAudioStream(
            b"0123456789",
            source_url="https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            content_type="audio/ogg",
            extension="ogg",
            chunk_size=4,
        )

        with runner.isolated_filesystem():
            with patch("spot_stream.cli.resolve_track_info", new=AsyncMock(return_value=TRACK_INFO)), \
                 patch("spot_stream.cli.open_stream", new=AsyncMock(return_value=stream)) as open_mock:
                result = runner.invoke(cli, [
                    "download", "https://open.spotify.com/track/abc123", "--opus", "--seek", "5",
                ])

            assert result.exit_code == 0, result.output
            assert Path("Y - X.ogg").read_bytes() == b"0123456789"
            assert not Path("Y - X.ogg.part").exists()

        options = open_mock.await_args.args[1]
        assert options == {"opus_encoded": True, "seek": 5.0}
        assert stream.closed is True

    def test_explicit_output_path(self, runner):
        stream = MemoryAudioStream(
            b"abc", source_url="v", content_type="audio/webm", extension="webm",
        )

        with runner.isolated_filesystem():
            with patch("spot_stream.cli.resolve_track_info", new=AsyncMock(return_value=TRACK_INFO)), \
                 patch("spot_stream.cli.open_stream", new=AsyncMock(return_value=stream)):
                result = runner.invoke(cli, [
                    "download", "https://open.spotify.com/track/abc123", "-o", "out/song.webm",
                ])

            assert result.exit_code == 0, result.output
            assert Path("out/song.webm").read_bytes() == b"abc"

    def test_interrupted_stream_leaves_no_file(self, runner):
        stream = FailingAudioStream(
            b"partial", source_url="v", content_type="audio/webm", extension="webm", chunk_size=4,
        )

        with runner.isolated_filesystem():
            with patch("spot_stream.cli.resolve_track_info", new=AsyncMock(return_value=TRACK_INFO)), \
                 patch("spot_stream.cli.open_stream", new=AsyncMock(return_value=stream)):
                result = runner.invoke(cli, [
                    "download", "https://open.spotify.com/track/abc123", "-o", "song.webm",
                ])

            assert result.exit_code == 4
            assert list(Path(".").iterdir()) == []

        assert stream.closed is True
