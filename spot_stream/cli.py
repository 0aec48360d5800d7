"""
Command-line interface for spot-stream.

A thin front-end over the library API using Click (rich-click for the
colours). The library does not depend on this module.

Commands:
    spot-stream validate <url> [--kind track|album|playlist]
    spot-stream info <url>
    spot-stream download <url> [-o <file>] [--seek S] [--opus] [--cookie-file F]

Global options:
    --config <path>     Explicit config.yaml (default: ./config.yaml if present)
    --verbose           Debug output on the console
    --version           Print version and exit

Exit Codes:
    0   success
    1   invalid input (validate) or configuration error
    2   not a Spotify track link
    3   track not found / no matching video
    4   Spotify, YouTube or ffmpeg failure
    130 interrupted

Usage:
    spot-stream info "https://open.spotify.com/track/4cOdK2wGLETKBW3PvgPWqT"
    spot-stream download "https://open.spotify.com/track/..." --opus
"""

import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import rich_click as click
from dotenv import load_dotenv
from tqdm import tqdm
from yt_dlp.utils import sanitize_filename

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.MAX_WIDTH = 100

from spot_stream.core import (
    NO_UPDATE_ENV,
    Config,
    ConfigError,
    InvalidURLError,
    SpotStreamError,
    TrackNotFoundError,
    UpstreamError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from spot_stream.core.logger import format_matched_message
from spot_stream.resolver import open_stream, resolve_track_info
from spot_stream.resolver.models import TrackInfo
from spot_stream.spotify import LinkType, validate_url
from spot_stream.updater import schedule_update_check
from spot_stream.version import __version__

logger = get_logger(__name__)


# How long the CLI waits for a pending update check before exiting
UPDATE_CHECK_GRACE_SECONDS = 2.0


@click.group()
@click.option(
    "--config", "config_path",
    type=click.Path(path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Path to config.yaml"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show debug output"
)
@click.version_option(__version__, prog_name="spot-stream")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """
    spot-stream: play Spotify tracks from YouTube.

    Looks up a Spotify track, finds it on YouTube Music and prints the
    metadata or saves the audio.

    \b
    EXAMPLES:
        spot-stream validate "https://open.spotify.com/album/..." --kind album
        spot-stream info "https://open.spotify.com/track/..."
        spot-stream download "https://open.spotify.com/track/..." -o song.webm
    """
    load_dotenv()
    setup_logging("DEBUG" if verbose else "INFO")
    ctx.call_on_close(shutdown_logging)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    # The library reads the environment switch, so honour the config file there
    if not config.updates.check:
        os.environ[NO_UPDATE_ENV] = "1"

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.argument("url")
@click.option(
    "--kind",
    type=click.Choice([t.value for t in LinkType]),
    default=LinkType.TRACK.value,
    show_default=True,
    help="Kind of Spotify link expected"
)
def validate(url: str, kind: str) -> None:
    """Check whether URL is a Spotify link of the given kind (no network)."""
    if validate_url(url, kind):
        click.echo("valid")
    else:
        click.echo("invalid")
        sys.exit(1)


@cli.command()
@click.argument("url")
def info(url: str) -> None:
    """Resolve URL and print the track metadata as JSON."""
    track = _run(lambda: resolve_track_info(url))
    click.echo(json.dumps(track.to_dict(), indent=2, ensure_ascii=False))


@cli.command()
@click.argument("url")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<file>",
    help="Output file (default: '<artist> - <title>.<ext>' in the output directory)"
)
@click.option(
    "--seek",
    type=click.FloatRange(min=0),
    default=None,
    metavar="<seconds>",
    help="Start offset in seconds (transcodes with ffmpeg)"
)
@click.option(
    "--opus",
    is_flag=True,
    help="Encode to Opus/Ogg with ffmpeg"
)
@click.option(
    "--cookie-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    metavar="<cookies.txt>",
    help="YouTube cookies for yt-dlp"
)
@click.pass_context
def download(
    ctx: click.Context,
    url: str,
    output: Optional[Path],
    seek: Optional[float],
    opus: bool,
    cookie_file: Optional[Path]
) -> None:
    """Save the audio for URL to a file."""
    config: Config = ctx.obj["config"]

    options = config.stream.to_options()
    if seek:
        options["seek"] = seek
    if opus:
        options["opus_encoded"] = True
    if cookie_file is not None:
        options["cookie_file"] = str(cookie_file)

    path = _run(lambda: _save_stream(url, options, output, config.output.directory))
    logger.info(f"Saved {path}")


async def _save_stream(
    url: str,
    options: dict[str, Any],
    output: Path | None,
    output_dir: Path
) -> Path:
    """
    Resolve url, open its stream and copy it into a file.

    The metadata lookup runs first so the default file name can use
    the artist and title.
    """
    track: TrackInfo = await resolve_track_info(url)

    stream = await open_stream(url, options)
    async with stream:
        logger.info(format_matched_message(track.artist, track.title, stream.source_url))

        if output is None:
            filename = sanitize_filename(f"{track.artist} - {track.title}.{stream.extension}")
            output = output_dir / filename
        output.parent.mkdir(parents=True, exist_ok=True)

        # Written under a .part name and renamed once the stream has ended
        part_path = output.with_name(output.name + ".part")
        try:
            with open(part_path, "wb") as f, tqdm(
                unit="B",
                unit_scale=True,
                unit_divisor=1024,
                desc=track.title[:30],
                leave=False,
            ) as progress:
                async for chunk in stream:
                    f.write(chunk)
                    progress.update(len(chunk))
        except BaseException:
            part_path.unlink(missing_ok=True)
            raise

    part_path.replace(output)
    return output


def _run(factory: Callable[[], Awaitable[Any]]) -> Any:
    """
    Run a coroutine with the update check alongside, mapping errors to exit codes.

    Raises:
        SystemExit: On any SpotStreamError or interruption.
    """
    async def runner() -> Any:
        task = schedule_update_check()
        try:
            return await factory()
        finally:
            if task is not None and not task.done():
                await asyncio.wait({task}, timeout=UPDATE_CHECK_GRACE_SECONDS)

    try:
        return asyncio.run(runner())

    except InvalidURLError as e:
        click.echo(f"Not a Spotify track link: {e.details.get('url', '')}", err=True)
        sys.exit(2)

    except TrackNotFoundError as e:
        click.echo(f"Track not found: {e.message}", err=True)
        logger.debug(f"Details: {e.details}")
        sys.exit(3)

    except UpstreamError as e:
        click.echo(f"Upstream error ({e.service or 'unknown'}): {e.message}", err=True)
        logger.debug(f"Upstream error: {e.message}", exc_info=True)
        sys.exit(4)

    except SpotStreamError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)


def main() -> None:
    """
    Entry point for the CLI.

    Called when running `spot-stream` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
