"""
Exception classes for spot-stream.

This module defines all custom exceptions used throughout the library.
Each exception carries a human-readable message and an optional details
dictionary so callers can log context without parsing strings.

Exception Hierarchy:
    SpotStreamError (base)
        InvalidURLError - Input is not a Spotify link of the expected kind
        TrackNotFoundError - No track metadata or no usable video match
        UpstreamError - Spotify / YouTube / ffmpeg collaborator failure
        ConfigError - config.yaml issues (CLI only)
"""


class SpotStreamError(Exception):
    """
    Base exception for all spot-stream errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch every library error with a single
    except clause.

    Attributes:
        message: Human-readable error description.
        details: Dictionary with additional context (e.g., url, query).

    Example:
        try:
            info = await resolve_track_info(url)
        except SpotStreamError as e:
            logger.error(f"Lookup failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional context.
                     Common keys include:
                     - 'url': URL that caused the error
                     - 'query': search query that was tried
                     - 'original_error': The underlying exception message
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class InvalidURLError(SpotStreamError):
    """
    Raised when the input is not a Spotify link of the requested kind.

    Raised before any network request is attempted.

    Example:
        raise InvalidURLError(
            "Invalid URL",
            details={'url': 'https://example.com/track/1', 'kind': 'track'}
        )
    """
    pass


class TrackNotFoundError(SpotStreamError):
    """
    Raised when a track cannot be resolved to a playable video.

    Common causes:
        - The embed page returned nothing (deleted or unknown id)
        - The link points to an album, playlist or episode
        - Neither the "title artist" nor the "title" query found a video
        - The only video found has zero views (removed or placeholder)
    """
    pass


class UpstreamError(SpotStreamError):
    """
    Raised when an external service fails at the transport or parse level.

    Covers the Spotify embed page, the YouTube Music search, yt-dlp
    extraction, the CDN audio fetch and the ffmpeg subprocess. The
    original exception is always chained (``raise ... from e``) and its
    text stored in ``details['original_error']``.

    Attributes:
        service: Short name of the failing collaborator
                 ('spotify', 'ytmusic', 'yt-dlp', 'cdn', 'ffmpeg').
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        service: str | None = None
    ) -> None:
        super().__init__(message, details)
        self.service = service


class ConfigError(SpotStreamError):
    """
    Raised when config.yaml exists but cannot be used.

    Common causes:
        - Invalid YAML syntax
        - A section that is not a mapping
        - cookie_file pointing at a missing file
        - encoder_args that is not a list of strings
    """
    pass
