"""
Shared pytest fixtures for curl-runner tests.

This module provides:
- A scripts directory and helpers that populate it with ``.sh`` files
- ``fake_executor`` / ``recording_sleep`` doubles from ``_support.fakes``
- Settings pointing every directory at ``tmp_path``
- Isolation from ambient ``CURL_RUNNER_*`` variables and cached settings

Usage:
    @pytest.mark.asyncio
    async def test_something(fake_executor, make_jobs):
        fake_executor.outputs["b.sh"] = http(404)
        ...
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pytest
import structlog

# Ensure curl_runner and _support are importable without an install
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from _support.fakes import FakeExecutor, RecordingSleep  # noqa: E402

from curl_runner.core.settings import RunnerSettings, clear_settings_cache  # noqa: E402
from curl_runner.execution.models import Job  # noqa: E402


@pytest.fixture
def scripts_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "cURL_scripts"
    directory.mkdir()
    return directory


@pytest.fixture
def make_scripts(scripts_dir: Path):
    """Create script files and return their names."""

    def _make(*names: str, body: str = "#!/bin/bash\n") -> list[str]:
        for name in names:
            (scripts_dir / name).write_text(body, encoding="utf-8")
        return list(names)

    return _make


@pytest.fixture
def make_jobs(scripts_dir: Path, make_scripts):
    """Create scripts on disk (except ``missing``) and return matching Jobs."""

    def _make(*names: str, missing: tuple[str, ...] = ()) -> list[Job]:
        make_scripts(*[n for n in names if n not in missing])
        return [Job.in_directory(scripts_dir, name) for name in names]

    return _make


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def settings(tmp_path: Path, scripts_dir: Path) -> RunnerSettings:
    return RunnerSettings(
        _env_file=None,
        scripts_dir=scripts_dir,
        logs_dir=tmp_path / "logs",
        reports_dir=tmp_path / "reports",
    )


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Keep ambient CURL_RUNNER_* variables, .env files and cached settings out."""
    for key in list(os.environ):
        if key.startswith("CURL_RUNNER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo configure_logging() calls made by CLI tests."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
