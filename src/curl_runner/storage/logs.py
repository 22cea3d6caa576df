"""Append-only log files for runs, reports and API errors.

Three kinds of files live in the logs directory:

==========================  ==============================================
``run_<ts>.log``            one per invocation, every step of the run
``<script>_<ts>.log``       one per ``run-script`` invocation
``curl-runner-report.log``  shared; one line per run start/finish and job
``curl-api-errors.log``     shared; a three-line block per failed job
==========================  ==============================================

Every line is prefixed with ``[<ISO-8601 UTC timestamp>]``.  Writes never
raise: a failure is reported on the diagnostic (structlog) channel and the
run continues.  Lines from concurrently running jobs appear in completion
order.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from pathlib import Path

from curl_runner.core.logging import get_logger
from curl_runner.execution.classifier import categorize_status

logger = get_logger(__name__)

ERROR_SEPARATOR = "─" * 41

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


def _timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _filename_timestamp() -> str:
    # 2026-10-19T08:15:02.123Z -> 2026-10-19T08-15-02
    return _timestamp()[:19].replace(":", "-")


class LogSink:
    """Writes timestamped lines into files under ``logs_dir``."""

    def __init__(
        self,
        logs_dir: str | Path,
        *,
        report_log_file: str = "curl-runner-report.log",
        error_log_file: str = "curl-api-errors.log",
        script_extension: str = ".sh",
    ) -> None:
        self.logs_dir = Path(logs_dir)
        self.report_log_file = report_log_file
        self.error_log_file = error_log_file
        self._extension = script_extension

    @property
    def report_log_path(self) -> Path:
        return self.logs_dir / self.report_log_file

    @property
    def error_log_path(self) -> Path:
        return self.logs_dir / self.error_log_file

    def ensure_directory(self) -> bool:
        """Create the logs directory.  Returns False if that failed."""
        try:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("logs.mkdir_failed", logs_dir=str(self.logs_dir), error=str(exc))
            return False
        return True

    def new_run_log(self, script_name: str | None = None) -> str:
        """Name a fresh run log: ``run_<ts>.log`` or ``<script>_<ts>.log``."""
        ts = _filename_timestamp()
        if script_name:
            stem = script_name.removesuffix(self._extension)
            return f"{_UNSAFE_CHARS.sub('_', stem)}_{ts}.log"
        return f"run_{ts}.log"

    def append_line(self, file_key: str, text: str) -> None:
        """Append ``[<timestamp>] text`` to ``logs_dir/file_key``."""
        self._append(file_key, f"[{_timestamp()}] {text}\n")

    def write_report(self, text: str) -> None:
        """Append a line to the shared report log."""
        self.append_line(self.report_log_file, text)

    def write_error(
        self,
        job_name: str,
        details: str,
        http_status: int | None = None,
        duration_ms: int | None = None,
    ) -> None:
        """Append a failure block to the shared API error log."""
        ts = _timestamp()
        header = f"[{ts}] ❌ API ERROR: {job_name}"
        if http_status:
            header += f" (HTTP {http_status}, {categorize_status(http_status).value})"
        if duration_ms:
            header += f" ({duration_ms}ms)"
        block = (
            f"{header}\n"
            f"[{ts}] Error: {details}\n"
            f"[{ts}] {ERROR_SEPARATOR}\n"
        )
        self._append(self.error_log_file, block)

    def _append(self, file_key: str, payload: str) -> None:
        path = self.logs_dir / file_key
        try:
            with path.open("a", encoding="utf-8") as fh:
                fh.write(payload)
            return
        except FileNotFoundError:
            logger.info("logs.directory_missing", logs_dir=str(self.logs_dir))
        except OSError as exc:
            logger.warning("logs.write_failed", file=str(path), error=str(exc))
            return

        # Directory vanished underneath us; recreate it and try once more.
        if not self.ensure_directory():
            return
        try:
            with path.open("a", encoding="utf-8") as fh:
                fh.write(payload)
        except OSError as exc:
            logger.warning("logs.write_failed", file=str(path), error=str(exc), retried=True)


__all__ = ["LogSink", "ERROR_SEPARATOR"]
