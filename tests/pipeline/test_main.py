"""Tests for the command-line entry point."""

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import pytest

from main import main
from src.utils.exceptions import MissingConfigError
from src.feed.jobs.feed_job import FeedResult, FeedStatus, run_feed
from src.feed.jobs.scheduler import start_scheduler


def test_run_once_without_any_credentials_exits_nonzero(tmp_path):
    assert main(["--run-once", "--output", str(tmp_path / "feed.xml"), "--log-level", "ERROR"]) == 1
    assert list(tmp_path.iterdir()) == []


def test_scheduler_mode_without_credentials_exits_nonzero():
    with patch("src.feed.jobs.create_scheduler") as create_scheduler:
        assert main(["--log-level", "ERROR"]) == 1
    create_scheduler.assert_not_called()


def test_run_once_with_no_flight_exits_zero():
    job = Mock()
    job.run = AsyncMock(return_value=FeedResult(status=FeedStatus.NO_FLIGHT))

    with patch("src.feed.jobs.create_job", return_value=job):
        assert main(["--run-once", "--log-level", "ERROR"]) == 0

    job.run.assert_awaited_once()


def test_start_scheduler_builds_and_starts_from_settings():
    with patch("src.feed.jobs.scheduler.create_scheduler") as create_scheduler:
        start_scheduler()

    create_scheduler.assert_called_once_with()
    create_scheduler.return_value.start.assert_called_once()


def test_run_feed_requires_a_configured_source(tmp_path):
    with pytest.raises(MissingConfigError):
        asyncio.run(run_feed(tmp_path / "feed.xml"))
