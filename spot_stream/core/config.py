"""
Configuration management for spot-stream.

The library functions take no configuration besides the per-call options
map. This module serves the command line front-end, which reads an
optional config.yaml, and exposes the environment switch that disables
the startup update check.

Configuration File Location:
    config.yaml in the current working directory, or an explicit path
    passed with --config. A missing default file is not an error; all
    sections have defaults.

Example config.yaml:
    output:
      directory: "~/Music/spot-stream"

    stream:
      format: "bestaudio/best"
      cookie_file: null  # Optional: cookies.txt exported from youtube.com
      encoder_args: []   # Extra ffmpeg output arguments

    updates:
      check: true
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from spot_stream.core.exceptions import ConfigError


# Default configuration file name (looked up in the current working directory)
CONFIG_FILENAME = "config.yaml"

# Environment variable that disables the update check when truthy
NO_UPDATE_ENV = "SPOT_STREAM_NO_UPDATE"

TRUTHY_VALUES = frozenset({"1", "true", "yes", "on"})

DEFAULT_STREAM_FORMAT = "bestaudio/best"


@dataclass(frozen=True)
class OutputConfig:
    """
    Where the CLI writes downloaded streams.

    Attributes:
        directory: Absolute path (~ expanded). Created on first download.
    """
    directory: Path


@dataclass(frozen=True)
class StreamConfig:
    """
    Default stream options applied by the CLI.

    Attributes:
        format: yt-dlp format selector.
        cookie_file: Optional cookies.txt forwarded to yt-dlp.
        encoder_args: Extra ffmpeg output arguments. A non-empty list makes
                      every CLI download go through ffmpeg.
    """
    format: str = DEFAULT_STREAM_FORMAT
    cookie_file: Path | None = None
    encoder_args: tuple[str, ...] = field(default_factory=tuple)

    def to_options(self) -> dict[str, Any]:
        """
        Build the options map passed to open_stream().

        Only non-default values are included so that an untouched
        configuration yields a plain CDN proxy stream.
        """
        options: dict[str, Any] = {}
        if self.format != DEFAULT_STREAM_FORMAT:
            options["format"] = self.format
        if self.cookie_file is not None:
            options["cookie_file"] = str(self.cookie_file)
        if self.encoder_args:
            options["encoder_args"] = list(self.encoder_args)
        return options


@dataclass(frozen=True)
class UpdateConfig:
    """
    Attributes:
        check: Whether the CLI runs the update check at startup.
               The SPOT_STREAM_NO_UPDATE variable overrides a True here.
    """
    check: bool = True


@dataclass(frozen=True)
class Config:
    """
    Complete CLI configuration, created by load_config().

    Attributes:
        output: Output directory settings.
        stream: Default stream options.
        updates: Update-check settings.
    """
    output: OutputConfig
    stream: StreamConfig
    updates: UpdateConfig


def is_update_check_disabled(environ: dict[str, str] | None = None) -> bool:
    """
    Check the SPOT_STREAM_NO_UPDATE environment variable.

    Args:
        environ: Mapping to read from. Defaults to os.environ.

    Returns:
        True if the variable holds a truthy value ("1", "true", "yes",
        "on", case-insensitive). Unset, empty, "0", "false" and any other
        value leave the check enabled.
    """
    if environ is None:
        environ = os.environ
    value = environ.get(NO_UPDATE_ENV, "")
    return value.strip().lower() in TRUTHY_VALUES


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in the current working
                     directory and falls back to defaults when absent.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config file is missing, the file has
                     invalid YAML syntax, or a value is invalid.
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        if explicit:
            raise ConfigError(
                f"Configuration file not found: {config_path}",
                details={"file_path": str(config_path)}
            )
        return _build_config({})

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except IOError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    # An empty file parses to None
    if raw_config is None:
        raw_config = {}

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return _build_config(raw_config)


def _build_config(raw_config: dict[str, Any]) -> Config:
    return Config(
        output=_parse_output_config(_section(raw_config, "output")),
        stream=_parse_stream_config(_section(raw_config, "stream")),
        updates=_parse_update_config(_section(raw_config, "updates")),
    )


def _section(raw_config: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw_config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(
            f"Section '{name}' must be a dictionary",
            details={"section": name}
        )
    return section


def _parse_output_config(output_section: dict[str, Any]) -> OutputConfig:
    directory = output_section.get("directory")

    if directory is None:
        return OutputConfig(directory=Path.cwd())

    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError(
            "'output.directory' must be a non-empty string",
            details={"field": "output.directory"}
        )

    return OutputConfig(directory=Path(directory.strip()).expanduser().resolve())


def _parse_stream_config(stream_section: dict[str, Any]) -> StreamConfig:
    """
    Parse and validate the stream section.

    Raises:
        ConfigError: If format is not a non-empty string, cookie_file does
                     not exist, or encoder_args is not a list of strings.
    """
    fmt = stream_section.get("format", DEFAULT_STREAM_FORMAT)
    if not isinstance(fmt, str) or not fmt.strip():
        raise ConfigError(
            "'stream.format' must be a non-empty string",
            details={"field": "stream.format", "value": fmt}
        )

    cookie_file = None
    raw_cookie = stream_section.get("cookie_file")
    if raw_cookie is not None:
        if not isinstance(raw_cookie, str):
            raise ConfigError(
                "'stream.cookie_file' must be a string path or null",
                details={"field": "stream.cookie_file"}
            )
        cookie_path = Path(raw_cookie).expanduser().resolve()
        if not cookie_path.exists():
            raise ConfigError(
                f"Cookie file not found: {cookie_path}",
                details={"field": "stream.cookie_file", "path": str(cookie_path)}
            )
        cookie_file = cookie_path

    raw_args = stream_section.get("encoder_args") or []
    if not isinstance(raw_args, list) or not all(isinstance(a, str) for a in raw_args):
        raise ConfigError(
            "'stream.encoder_args' must be a list of strings",
            details={"field": "stream.encoder_args", "value": raw_args}
        )

    return StreamConfig(
        format=fmt.strip(),
        cookie_file=cookie_file,
        encoder_args=tuple(raw_args)
    )


def _parse_update_config(update_section: dict[str, Any]) -> UpdateConfig:
    check = update_section.get("check", True)
    if not isinstance(check, bool):
        raise ConfigError(
            "'updates.check' must be true or false",
            details={"field": "updates.check", "value": check}
        )
    return UpdateConfig(check=check)
