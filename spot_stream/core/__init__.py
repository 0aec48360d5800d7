"""
Core module for spot-stream.

Foundational components used throughout the package:
    - exceptions: Custom exception classes for error handling
    - config: config.yaml loading and the update-check environment switch
    - logger: Logging setup with tqdm-compatible console output

Usage:
    from spot_stream.core import (
        load_config,
        setup_logging, get_logger,
        SpotStreamError, InvalidURLError, TrackNotFoundError
    )
"""

from spot_stream.core.config import (
    NO_UPDATE_ENV,
    Config,
    OutputConfig,
    StreamConfig,
    UpdateConfig,
    is_update_check_disabled,
    load_config,
)
from spot_stream.core.exceptions import (
    ConfigError,
    InvalidURLError,
    SpotStreamError,
    TrackNotFoundError,
    UpstreamError,
)
from spot_stream.core.logger import (
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "OutputConfig",
    "StreamConfig",
    "UpdateConfig",
    "NO_UPDATE_ENV",
    "is_update_check_disabled",
    "load_config",
    # Exceptions
    "SpotStreamError",
    "InvalidURLError",
    "TrackNotFoundError",
    "UpstreamError",
    "ConfigError",
    # Logger
    "setup_logging",
    "get_logger",
    "shutdown_logging",
]
