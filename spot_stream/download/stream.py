"""
Live audio streams from YouTube for spot-stream.

This module turns a YouTube watch URL into an incrementally readable
audio byte stream. Nothing is written to disk.

Workflow:
    1. Ask yt-dlp for the direct audio URL (no download)
    2a. No transcoding requested: proxy the bytes from YouTube's CDN
        with aiohttp
    2b. Transcoding requested: spawn ffmpeg reading the direct URL and
        writing the encoded audio to stdout

Options:
    The options map is interpreted here and nowhere else.

        format        yt-dlp format selector (default "bestaudio/best")
        cookie_file   cookies.txt passed to yt-dlp
        chunk_size    bytes per chunk when iterating (default 64 KiB)
        seek          start offset in seconds            -> ffmpeg
        encoder_args  extra ffmpeg output arguments      -> ffmpeg
        fmt           ffmpeg output format (default s16le when transcoding)
        opus_encoded  Opus in an Ogg container           -> ffmpeg

    Any other key is copied into the yt-dlp options dictionary unchanged.
    Passing any of the four ffmpeg keys selects path 2b.

Dependencies:
    - yt-dlp: YouTube extraction
    - aiohttp: CDN proxying
    - ffmpeg-python: ffmpeg command construction (ffmpeg must be installed)

Usage:
    from spot_stream.download.stream import open_audio_stream

    async with await open_audio_stream(video_url, {"opus_encoded": True}) as stream:
        async for chunk in stream:
            sink.write(chunk)
"""

import asyncio
from typing import Any

import aiohttp
import ffmpeg
from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError as YtDlpDownloadError

from spot_stream.core.exceptions import UpstreamError
from spot_stream.core.logger import get_logger


logger = get_logger(__name__)


DEFAULT_FORMAT = "bestaudio/best"
DEFAULT_CHUNK_SIZE = 64 * 1024

# Raw PCM at 48 kHz stereo, the layout most voice/playback pipelines expect
DEFAULT_TRANSCODE_FORMAT = "s16le"
SAMPLE_RATE = 48000
CHANNELS = 2

FFMPEG_OUTPUT_TARGET = "pipe:1"

# Body reads last as long as playback, so no overall deadline
NO_TIMEOUT = aiohttp.ClientTimeout(total=None)

TRANSCODE_KEYS = ("seek", "encoder_args", "fmt", "opus_encoded")
STREAM_KEYS = TRANSCODE_KEYS + ("format", "cookie_file", "chunk_size")

CONTENT_TYPES = {
    "s16le": "audio/L16",
    "ogg": "audio/ogg",
    "opus": "audio/ogg",
    "mp3": "audio/mpeg",
    "webm": "audio/webm",
    "m4a": "audio/mp4",
    "wav": "audio/wav",
    "flac": "audio/flac",
}


class YtDlpLogger:
    """
    Logger object for yt-dlp that routes its output into our logging tree.

    yt-dlp ignores quiet=True for certain errors and prints straight to
    stderr. Passing an object with debug/info/warning/error methods as
    the "logger" option captures all of it.
    """

    def __init__(self) -> None:
        self.last_error: str | None = None

    def debug(self, msg: str) -> None:
        logger.debug(f"yt-dlp: {msg}")

    def info(self, msg: str) -> None:
        logger.debug(f"yt-dlp: {msg}")

    def warning(self, msg: str) -> None:
        logger.debug(f"yt-dlp warning: {msg}")

    def error(self, msg: str) -> None:
        self.last_error = msg
        logger.debug(f"yt-dlp error: {msg}")


class AudioStream:
    """
    Base class for a live audio byte stream.

    Supports ``await stream.read(n)``, ``async for chunk in stream`` and
    ``async with``. Subclasses implement _read() and _close().

    Attributes:
        source_url: The YouTube watch URL the stream was opened for.
        content_type: MIME type of the bytes produced.
        extension: Suggested file extension (without dot).
        chunk_size: Chunk size used by async iteration.
    """

    def __init__(
        self,
        source_url: str,
        content_type: str,
        extension: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> None:
        self.source_url = source_url
        self.content_type = content_type
        self.extension = extension
        self.chunk_size = chunk_size
        self.closed = False

    async def read(self, n: int = -1) -> bytes:
        """
        Read up to n bytes (all remaining bytes if n < 0).

        Returns b"" at end of stream.
        """
        if self.closed:
            return b""
        return await self._read(n)

    async def aclose(self) -> None:
        """Release the underlying connection or process. Safe to call twice."""
        if self.closed:
            return
        self.closed = True
        await self._close()

    async def _read(self, n: int) -> bytes:
        raise NotImplementedError

    async def _close(self) -> None:
        raise NotImplementedError

    def __aiter__(self) -> "AudioStream":
        return self

    async def __anext__(self) -> bytes:
        chunk = await self.read(self.chunk_size)
        if not chunk:
            raise StopAsyncIteration
        return chunk

    async def __aenter__(self) -> "AudioStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class HttpAudioStream(AudioStream):
    """Audio proxied byte for byte from the CDN through aiohttp."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        response: aiohttp.ClientResponse,
        **kwargs: Any
    ) -> None:
        super().__init__(**kwargs)
        self._session = session
        self._response = response

    async def _read(self, n: int) -> bytes:
        try:
            if n < 0:
                return await self._response.content.read()
            return await self._response.content.read(n)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamError(
                f"Audio download interrupted: {e}",
                details={"url": self.source_url, "original_error": str(e)},
                service="cdn"
            ) from e

    async def _close(self) -> None:
        self._response.release()
        await self._session.close()


class ProcessAudioStream(AudioStream):
    """Audio read from the stdout of an ffmpeg subprocess."""

    def __init__(self, process: asyncio.subprocess.Process, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._process = process

    async def _read(self, n: int) -> bytes:
        chunk = await self._process.stdout.read(n)
        if not chunk:
            await self._check_exit()
        return chunk

    async def _check_exit(self) -> None:
        returncode = await self._process.wait()
        if returncode != 0:
            stderr = b""
            if self._process.stderr is not None:
                stderr = await self._process.stderr.read()
            message = stderr.decode("utf-8", errors="replace").strip()
            raise UpstreamError(
                f"ffmpeg exited with status {returncode}: {message or 'no output'}",
                details={"url": self.source_url, "returncode": returncode},
                service="ffmpeg"
            )

    async def _close(self) -> None:
        if self._process.returncode is None:
            try:
                self._process.kill()
            except ProcessLookupError:
                pass
        await self._process.wait()


def needs_transcode(options: dict[str, Any]) -> bool:
    """
    Return True if any ffmpeg option is present in options.

    seek counts whenever it is set, including 0. fmt, encoder_args and
    opus_encoded count only when truthy.
    """
    if options.get("seek") is not None:
        return True
    return any(bool(options.get(key)) for key in ("fmt", "encoder_args", "opus_encoded"))


def build_ydl_options(options: dict[str, Any], yt_logger: YtDlpLogger | None = None) -> dict[str, Any]:
    """
    Build the yt-dlp options dictionary for URL extraction.

    Args:
        options: Caller options map. Keys not in STREAM_KEYS are copied
                 verbatim and may override the defaults below.
        yt_logger: Logger object for yt-dlp output.

    Returns:
        Dictionary for yt_dlp.YoutubeDL().
    """
    ydl_options: dict[str, Any] = {
        "format": options.get("format") or DEFAULT_FORMAT,
        "quiet": True,
        "no_warnings": True,
        "noprogress": True,
        "noplaylist": True,
        "skip_download": True,
        # Try multiple YouTube player clients (fixes "format not available")
        "extractor_args": {
            "youtube": {
                "player_client": ["web", "android", "default"],
            }
        },
    }

    if yt_logger is not None:
        ydl_options["logger"] = yt_logger

    if options.get("cookie_file"):
        ydl_options["cookiefile"] = str(options["cookie_file"])

    for key, value in options.items():
        if key not in STREAM_KEYS:
            ydl_options[key] = value

    return ydl_options


def build_ffmpeg_command(
    source_url: str,
    options: dict[str, Any],
    http_headers: dict[str, str] | None = None
) -> list[str]:
    """
    Build the ffmpeg argument list for transcoding a direct audio URL.

    Args:
        source_url: Direct media URL returned by yt-dlp.
        options: Caller options (seek, encoder_args, fmt, opus_encoded).
        http_headers: Headers yt-dlp says the CDN expects.

    Returns:
        Argument list starting with "ffmpeg" and writing to stdout.
    """
    input_kwargs: dict[str, Any] = {
        "reconnect": 1,
        "reconnect_streamed": 1,
        "reconnect_delay_max": 5,
        "loglevel": "error",
        "hide_banner": None,
    }
    if options.get("seek"):
        input_kwargs["ss"] = options["seek"]
    if http_headers:
        input_kwargs["headers"] = "".join(f"{k}: {v}\r\n" for k, v in http_headers.items())

    if options.get("opus_encoded"):
        output_kwargs: dict[str, Any] = {
            "format": "ogg",
            "acodec": "libopus",
            "ar": SAMPLE_RATE,
            "ac": CHANNELS,
        }
    else:
        output_kwargs = {
            "format": options.get("fmt") or DEFAULT_TRANSCODE_FORMAT,
            "ar": SAMPLE_RATE,
            "ac": CHANNELS,
        }
    output_kwargs["vn"] = None

    command = (
        ffmpeg
        .input(source_url, **input_kwargs)
        .output(FFMPEG_OUTPUT_TARGET, **output_kwargs)
        .compile()
    )

    # Raw encoder arguments go right before the output target
    encoder_args = [str(arg) for arg in options.get("encoder_args") or []]
    if encoder_args:
        target = len(command) - 1 - command[::-1].index(FFMPEG_OUTPUT_TARGET)
        command = command[:target] + encoder_args + command[target:]

    return command


def _select_audio_url(info: dict[str, Any]) -> str | None:
    """Direct URL of the selected format, or the best audio-only format."""
    if info.get("url"):
        return info["url"]

    requested = info.get("requested_formats") or []
    for fmt in requested:
        if fmt.get("acodec") not in (None, "none") and fmt.get("url"):
            return fmt["url"]

    audio_formats = [
        f for f in info.get("formats") or []
        if f.get("acodec") not in (None, "none") and f.get("vcodec") in ("none", None) and f.get("url")
    ]
    if audio_formats:
        audio_formats.sort(key=lambda f: f.get("abr") or 0, reverse=True)
        return audio_formats[0]["url"]

    return None


def _extract_info(video_url: str, ydl_options: dict[str, Any]) -> dict[str, Any]:
    with YoutubeDL(ydl_options) as ydl:
        return ydl.extract_info(video_url, download=False)


def _transcode_extension(options: dict[str, Any]) -> str:
    if options.get("opus_encoded"):
        return "ogg"
    fmt = options.get("fmt") or DEFAULT_TRANSCODE_FORMAT
    return "pcm" if fmt == DEFAULT_TRANSCODE_FORMAT else fmt


async def open_audio_stream(video_url: str, options: dict[str, Any] | None = None) -> AudioStream:
    """
    Open a live audio stream for a YouTube video.

    Args:
        video_url: YouTube or YouTube Music watch URL.
        options: Options map (see module docstring). None means {}.

    Returns:
        An open AudioStream. The caller must close it (aclose() or
        ``async with``).

    Raises:
        UpstreamError: If yt-dlp cannot extract the video, no audio
                       format exists, the CDN refuses the request, or
                       ffmpeg cannot be started.
    """
    options = dict(options or {})
    chunk_size = int(options.get("chunk_size") or DEFAULT_CHUNK_SIZE)

    yt_logger = YtDlpLogger()
    ydl_options = build_ydl_options(options, yt_logger)

    logger.debug(f"Extracting audio URL: {video_url}")
    try:
        info = await asyncio.to_thread(_extract_info, video_url, ydl_options)
    except YtDlpDownloadError as e:
        raise UpstreamError(
            f"yt-dlp could not extract {video_url}: {yt_logger.last_error or e}",
            details={"url": video_url, "original_error": str(e)},
            service="yt-dlp"
        ) from e

    stream_url = _select_audio_url(info or {})
    if not stream_url:
        raise UpstreamError(
            "No audio stream URL found",
            details={"url": video_url},
            service="yt-dlp"
        )

    http_headers = (info or {}).get("http_headers") or {}

    if needs_transcode(options):
        return await _open_ffmpeg_stream(video_url, stream_url, options, http_headers, chunk_size)
    return await _open_http_stream(video_url, stream_url, info, http_headers, chunk_size)


async def _open_http_stream(
    video_url: str,
    stream_url: str,
    info: dict[str, Any],
    http_headers: dict[str, str],
    chunk_size: int
) -> HttpAudioStream:
    extension = info.get("audio_ext") if info.get("audio_ext") not in (None, "none") else info.get("ext")
    extension = extension or "webm"

    session = aiohttp.ClientSession(timeout=NO_TIMEOUT)
    try:
        response = await session.get(stream_url, headers=http_headers)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        await session.close()
        raise UpstreamError(
            f"Failed to connect to audio CDN: {e}",
            details={"url": video_url, "original_error": str(e)},
            service="cdn"
        ) from e

    if response.status >= 400:
        status = response.status
        response.release()
        await session.close()
        raise UpstreamError(
            f"Audio CDN returned HTTP {status}",
            details={"url": video_url, "status_code": status},
            service="cdn"
        )

    content_type = response.headers.get("Content-Type") or CONTENT_TYPES.get(extension, f"audio/{extension}")
    logger.debug(f"Proxying {content_type} stream for {video_url}")

    return HttpAudioStream(
        session,
        response,
        source_url=video_url,
        content_type=content_type,
        extension=extension,
        chunk_size=chunk_size,
    )


async def _open_ffmpeg_stream(
    video_url: str,
    stream_url: str,
    options: dict[str, Any],
    http_headers: dict[str, str],
    chunk_size: int
) -> ProcessAudioStream:
    command = build_ffmpeg_command(stream_url, options, http_headers)
    extension = _transcode_extension(options)
    output_format = "ogg" if options.get("opus_encoded") else (options.get("fmt") or DEFAULT_TRANSCODE_FORMAT)

    logger.debug(f"Starting ffmpeg ({output_format}) for {video_url}")
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise UpstreamError(
            f"Failed to start ffmpeg: {e}",
            details={"url": video_url, "original_error": str(e)},
            service="ffmpeg"
        ) from e

    return ProcessAudioStream(
        process,
        source_url=video_url,
        content_type=CONTENT_TYPES.get(output_format, f"audio/{output_format}"),
        extension=extension,
        chunk_size=chunk_size,
    )
