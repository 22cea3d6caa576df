"""Tests for structlog configuration and scoped log context."""

import json

import pytest
import structlog

from curl_runner.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


def test_json_output_goes_to_stderr(capsys):
    configure_logging(level="INFO", json_format=True)
    get_logger("curl_runner.test").info("engine.run_start", plan="unlimited", jobs=3)

    captured = capsys.readouterr()
    assert captured.out == ""
    event = json.loads(captured.err.strip().splitlines()[-1])
    assert event["event"] == "engine.run_start"
    assert event["plan"] == "unlimited"
    assert event["jobs"] == 3
    assert event["level"] == "info"
    assert event["service"] == "curl-runner"
    assert "timestamp" in event


def test_level_filtering(capsys):
    configure_logging(level="WARNING", json_format=True)
    logger = get_logger("curl_runner.test")
    logger.info("hidden")
    logger.warning("shown")
    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "shown" in err


def test_log_context_binds_and_unbinds(capsys):
    configure_logging(level="INFO", json_format=True)
    logger = get_logger("curl_runner.test")
    with LogContext(run_id="run_1", plan="sequential"):
        logger.info("inside")
    logger.info("outside")

    lines = [json.loads(line) for line in capsys.readouterr().err.strip().splitlines()]
    inside = next(e for e in lines if e["event"] == "inside")
    outside = next(e for e in lines if e["event"] == "outside")
    assert inside["run_id"] == "run_1"
    assert inside["plan"] == "sequential"
    assert "run_id" not in outside


@pytest.mark.asyncio
async def test_async_log_context():
    async with LogContext(run_id="run_2"):
        assert structlog.contextvars.get_contextvars()["run_id"] == "run_2"
    assert "run_id" not in structlog.contextvars.get_contextvars()


def test_bind_and_clear():
    bind_context(week=3)
    assert structlog.contextvars.get_contextvars() == {"week": 3}
    clear_context()
    assert structlog.contextvars.get_contextvars() == {}
