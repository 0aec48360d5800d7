"""
Audio stream acquisition for spot-stream.

Components:
    - AudioStream: async readable byte stream (CDN proxy or ffmpeg pipe)
    - open_audio_stream: yt-dlp extraction plus optional ffmpeg transcoding

Usage:
    from spot_stream.download import open_audio_stream

    stream = await open_audio_stream("https://www.youtube.com/watch?v=...")
"""

from spot_stream.download.stream import (
    AudioStream,
    HttpAudioStream,
    ProcessAudioStream,
    build_ffmpeg_command,
    build_ydl_options,
    needs_transcode,
    open_audio_stream,
)

__all__ = [
    "AudioStream",
    "HttpAudioStream",
    "ProcessAudioStream",
    "open_audio_stream",
    "build_ffmpeg_command",
    "build_ydl_options",
    "needs_transcode",
]
