"""
Update notifier for spot-stream.

Once per process, the first library call made inside a running event loop
(or the CLI at startup) schedules a background request to the GitHub
"latest release" endpoint. If the published tag differs from the running
version, a warning is logged. Any failure is logged as a warning and
otherwise ignored: this check must never get in the way of resolving or
streaming a track.

Set SPOT_STREAM_NO_UPDATE=1 to disable the check entirely.
"""

import asyncio

import aiohttp

from spot_stream.core.config import NO_UPDATE_ENV, is_update_check_disabled
from spot_stream.core.logger import get_logger
from spot_stream.version import __version__


logger = get_logger(__name__)


RELEASES_URL = "https://api.github.com/repos/spot-stream/spot-stream/releases/latest"

# No request deadline; the CLI bounds its wait for the check separately
NO_TIMEOUT = aiohttp.ClientTimeout(total=None)

_update_check_scheduled = False

# Strong references so scheduled checks are not garbage collected mid-flight
_background_tasks: set[asyncio.Task] = set()


async def check_for_update(
    session: aiohttp.ClientSession | None = None,
    current_version: str = __version__
) -> str | None:
    """
    Compare the latest published release with the running version.

    Args:
        session: Optional aiohttp session to reuse.
        current_version: Version to compare against (without "v").

    Returns:
        The latest release tag if it differs from "v{current_version}",
        otherwise None. Also None when the check is disabled or fails.

    Note:
        Never raises. Failures are logged at WARNING level together with
        a hint on how to disable the check.
    """
    if is_update_check_disabled():
        return None

    headers = {
        "User-Agent": f"spot-stream v{current_version}",
        "Accept": "application/vnd.github+json",
    }

    try:
        if session is None:
            async with aiohttp.ClientSession(timeout=NO_TIMEOUT) as own_session:
                data = await _fetch_release(own_session, headers)
        else:
            data = await _fetch_release(session, headers)

        latest = data.get("tag_name") if isinstance(data, dict) else None
        if not latest:
            raise ValueError("release metadata has no tag_name")
    except Exception as e:
        logger.warning(f"Error checking for updates: {e}")
        logger.warning(
            f"You can disable this check by setting the {NO_UPDATE_ENV} "
            f"environment variable to 1"
        )
        return None

    if latest != f"v{current_version}":
        logger.warning(
            f"spot-stream is out of date (running v{current_version}, latest {latest})! "
            f'Update with "pip install --upgrade spot-stream"'
        )
        return latest

    logger.debug(f"spot-stream v{current_version} is up to date")
    return None


async def _fetch_release(session: aiohttp.ClientSession, headers: dict[str, str]) -> dict:
    async with session.get(RELEASES_URL, headers=headers) as response:
        response.raise_for_status()
        return await response.json()


def schedule_update_check() -> asyncio.Task | None:
    """
    Start the update check in the background, at most once per process.

    Returns:
        The created task, or None if the check already ran, is disabled,
        or no event loop is running. Without a running loop nothing is
        consumed, so a later call from async code still schedules it.
    """
    global _update_check_scheduled

    if _update_check_scheduled or is_update_check_disabled():
        return None

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return None

    _update_check_scheduled = True
    task = loop.create_task(check_for_update())
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task
