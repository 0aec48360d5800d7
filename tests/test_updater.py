"""Test the release update check"""

import asyncio
import logging
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from spot_stream import updater
from spot_stream.updater import check_for_update, schedule_update_check


@pytest.fixture
def update_check_enabled(monkeypatch):
    """Re-enable the check and reset the once-per-process flag"""
    monkeypatch.delenv("SPOT_STREAM_NO_UPDATE", raising=False)
    monkeypatch.setattr(updater, "_update_check_scheduled", False)


@pytest.mark.usefixtures("update_check_enabled")
class TestCheckForUpdate:
    """Test check_for_update() with the GitHub request patched out"""

    @pytest.mark.asyncio
    async def test_newer_release_logs_warning(self, caplog):
        with patch("spot_stream.updater._fetch_release",
                   new=AsyncMock(return_value={"tag_name": "v0.2.0"})) as fetch:
            with caplog.at_level(logging.WARNING, logger="spot_stream.updater"):
                latest = await check_for_update(session=object(), current_version="0.1.0")

        assert latest == "v0.2.0"
        assert "out of date" in caplog.text
        headers = fetch.await_args.args[1]
        assert headers["User-Agent"] == "spot-stream v0.1.0"

    @pytest.mark.asyncio
    async def test_same_release_is_quiet(self, caplog):
        with patch("spot_stream.updater._fetch_release",
                   new=AsyncMock(return_value={"tag_name": "v0.1.0"})):
            with caplog.at_level(logging.WARNING, logger="spot_stream.updater"):
                latest = await check_for_update(session=object(), current_version="0.1.0")

        assert latest is None
        assert caplog.records == []

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, caplog):
        error = aiohttp.ClientConnectionError("api.github.com unreachable")
        with patch("spot_stream.updater._fetch_release", new=AsyncMock(side_effect=error)):
            with caplog.at_level(logging.WARNING, logger="spot_stream.updater"):
                latest = await check_for_update(session=object())

        assert latest is None
        assert "Error checking for updates" in caplog.text
        assert "SPOT_STREAM_NO_UPDATE" in caplog.text

    @pytest.mark.asyncio
    async def test_missing_tag_is_a_failure(self, caplog):
        with patch("spot_stream.updater._fetch_release",
                   new=AsyncMock(return_value={"message": "Not Found"})):
            with caplog.at_level(logging.WARNING, logger="spot_stream.updater"):
                latest = await check_for_update(session=object())

        assert latest is None
        assert "tag_name" in caplog.text

    @pytest.mark.asyncio
    async def test_disabled_makes_no_request(self, monkeypatch):
        monkeypatch.setenv("SPOT_STREAM_NO_UPDATE", "true")
        with patch("spot_stream.updater._fetch_release", new=AsyncMock()) as fetch:
            assert await check_for_update(session=object()) is None

        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_own_session_has_no_overall_deadline(self):
        with patch("spot_stream.updater.aiohttp.ClientSession") as session_cls, \
             patch("spot_stream.updater._fetch_release",
                   new=AsyncMock(return_value={"tag_name": "v0.1.0"})):
            assert await check_for_update(current_version="0.1.0") is None

        assert session_cls.call_args.kwargs["timeout"].total is None


@pytest.mark.usefixtures("update_check_enabled")
class TestScheduleUpdateCheck:
    """Test schedule_update_check()"""

    def test_no_running_loop(self):
        assert schedule_update_check() is None
        assert updater._update_check_scheduled is False

    @pytest.mark.asyncio
    async def test_runs_once_per_process(self):
        with patch("spot_stream.updater.check_for_update", new=AsyncMock(return_value=None)) as check:
            task = schedule_update_check()
            assert isinstance(task, asyncio.Task)
            assert schedule_update_check() is None
            await task

        check.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_disabled(self, monkeypatch):
        monkeypatch.setenv("SPOT_STREAM_NO_UPDATE", "1")

        assert schedule_update_check() is None
        assert updater._update_check_scheduled is False
