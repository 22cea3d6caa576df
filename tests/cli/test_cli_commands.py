"""Tests for curl_runner.cli - command smoke tests via CliRunner.

Commands run real ``sh`` scripts from a temporary directory; settings come
from ``CURL_RUNNER_*`` variables plus the global ``--dir/--logs/--reports``
options.
"""

from __future__ import annotations

import json
import sys

import pytest
from typer.testing import CliRunner

from curl_runner import __version__
from curl_runner.cli.app import app

runner = CliRunner()

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="requires a POSIX shell")


@pytest.fixture
def dirs(tmp_path, scripts_dir, monkeypatch):
    monkeypatch.setenv("CURL_RUNNER_INTERPRETER", "sh")
    monkeypatch.setenv("CURL_RUNNER_SCRIPT_DELAY_MS", "0")
    monkeypatch.setenv("CURL_RUNNER_BATCH_DELAY_MS", "0")
    logs = tmp_path / "logs"
    reports = tmp_path / "reports"
    args = ["--dir", str(scripts_dir), "--logs", str(logs), "--reports", str(reports)]
    return {"args": args, "scripts": scripts_dir, "logs": logs, "reports": reports}


@pytest.fixture
def scripts(dirs):
    (dirs["scripts"] / "a_ok.sh").write_text("echo 'HTTP Status: 200'\n")
    (dirs["scripts"] / "b_notfound.sh").write_text("echo 'HTTP Status: 404'\n")
    (dirs["scripts"] / "c_ok.sh").write_text("echo 'HTTP Status: 201'\n")
    return dirs


def invoke(dirs, *args):
    return runner.invoke(app, [*dirs["args"], *args])


# ─── Global options ──────────────────────────────────────────────────────


class TestGlobalOptions:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "curl-runner" in result.output
        assert __version__ in result.output

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("run-parallel", "run-concurrent", "run-concurrency", "weekly"):
            assert command in result.output

    def test_no_command_runs_everything(self, scripts):
        result = invoke(scripts)
        assert result.exit_code == 0
        assert "Successful" in result.output
        assert (scripts["logs"] / "curl-runner-report.log").exists()

    def test_invalid_env_is_config_error(self, dirs, monkeypatch):
        monkeypatch.setenv("CURL_RUNNER_MAX_CONCURRENT", "0")
        result = invoke(dirs, "list")
        assert result.exit_code == 2


# ─── Run commands ────────────────────────────────────────────────────────


class TestRunCommands:
    def test_run_exits_zero_with_failures(self, scripts):
        result = invoke(scripts, "run")
        assert result.exit_code == 0
        assert "b_notfound.sh (HTTP 404)" in result.output
        errors = (scripts["logs"] / "curl-api-errors.log").read_text(encoding="utf-8")
        assert "b_notfound.sh (HTTP 404, client_error)" in errors

    def test_run_script_appends_extension(self, scripts):
        result = invoke(scripts, "run-script", "a_ok")
        assert result.exit_code == 0
        assert "a_ok.sh completed successfully" in result.output
        assert list(scripts["logs"].glob("a_ok_*.log"))

    def test_run_script_missing(self, scripts):
        result = invoke(scripts, "run-script", "ghost")
        assert result.exit_code == 0
        assert "ghost.sh not found" in result.output

    def test_run_parallel(self, scripts):
        result = invoke(scripts, "run-parallel")
        assert result.exit_code == 0
        assert "Parallel Summary" in result.output

    def test_run_concurrent(self, scripts):
        result = invoke(scripts, "run-concurrent", "--batch-size", "2", "--delay", "0")
        assert result.exit_code == 0
        assert "Batch 1/2" in result.output
        assert "Batch 2/2" in result.output

    def test_run_concurrent_rejects_zero_batch(self, scripts):
        result = invoke(scripts, "run-concurrent", "-b", "0")
        assert result.exit_code == 2

    def test_run_concurrency(self, scripts):
        result = invoke(scripts, "run-concurrency", "2")
        assert result.exit_code == 0
        assert "Concurrency Summary" in result.output

    @pytest.mark.parametrize("args", [[], ["0"], ["many"]])
    def test_run_concurrency_usage_errors(self, scripts, args):
        result = invoke(scripts, "run-concurrency", *args)
        assert result.exit_code == 2

    def test_empty_directory(self, dirs):
        result = invoke(dirs, "run")
        assert result.exit_code == 0
        assert "No .sh scripts found" in result.output

    def test_verbose_shows_output_and_failures(self, scripts):
        result = invoke(scripts, "--verbose", "run")
        assert result.exit_code == 0
        assert "HTTP Status: 200" in result.output
        assert "Failures" in result.output


# ─── list / weekly / summary ─────────────────────────────────────────────


class TestOtherCommands:
    def test_list(self, scripts):
        result = invoke(scripts, "list")
        assert result.exit_code == 0
        assert "1. a_ok.sh" in result.output
        assert "3. c_ok.sh" in result.output

    def test_list_empty(self, dirs):
        result = invoke(dirs, "list")
        assert result.exit_code == 0
        assert "No .sh scripts found" in result.output

    def test_unknown_command(self, dirs):
        result = invoke(dirs, "explode")
        assert result.exit_code == 2

    def test_weekly_then_summary(self, scripts):
        result = invoke(scripts, "weekly", "--week", "5", "--runs", "2")
        assert result.exit_code == 0
        assert "Week 5 report" in result.output
        (report_path,) = scripts["reports"].glob("weekly-report-*-week-5.json")
        report = json.loads(report_path.read_text())
        assert report["summary"]["totalScripts"] == 3
        assert report["summary"]["dataGapsCount"] == 1

        result = invoke(scripts, "summary")
        assert result.exit_code == 0
        assert "Summary of 1 week(s)" in result.output
        assert (scripts["reports"] / "data-gap-summary.json").exists()

    def test_weekly_rejects_zero_runs(self, scripts):
        result = invoke(scripts, "weekly", "--runs", "0")
        assert result.exit_code == 2
