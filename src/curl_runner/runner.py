"""CurlRunner - the application service behind every CLI command.

Wires the collaborators together for one invocation:

::

    list_jobs(scripts_dir) ──▶ [Job] ──▶ ConcurrencyEngine.run(plan)
                                              │ observer
                                              ▼
                                     LoggingObserver ──▶ LogSink
                                              │          (run log, report log,
                                              ▼           API error log)
                                         RunOutcome(results, summary)

Each ``run_*`` method maps to one CLI command and returns a
:class:`RunOutcome`; the CLI only renders it.  Job failures never raise.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from curl_runner.core.errors import InvalidInputError
from curl_runner.core.logging import LogContext, get_logger
from curl_runner.core.settings import RunnerSettings
from curl_runner.execution.aggregator import summarize
from curl_runner.execution.engine import ConcurrencyEngine, RunObserver, Sleep
from curl_runner.execution.models import (
    BatchSummary,
    BoundedCustom,
    ConcurrencyPlan,
    ExecutionResult,
    Failure,
    FailureKind,
    FixedBatch,
    Job,
    Sequential,
    Unlimited,
)
from curl_runner.execution.process import CommandExecutor
from curl_runner.reporting.weekly import DataGapThresholds, WeeklyReporter, build_week_data
from curl_runner.storage.discovery import list_jobs
from curl_runner.storage.logs import LogSink

logger = get_logger(__name__)

_PLAN_LABELS: dict[type, str] = {
    Sequential: "BATCH",
    Unlimited: "PARALLEL",
    FixedBatch: "CONCURRENT",
    BoundedCustom: "CONCURRENCY",
}


@dataclass(frozen=True)
class RunOutcome:
    """What one invocation produced."""

    plan: ConcurrencyPlan
    results: list[ExecutionResult] = field(default_factory=list)
    summary: BatchSummary = field(default_factory=BatchSummary)
    log_file: str | None = None
    wall_ms: int = 0
    batches: int = 0

    @property
    def empty(self) -> bool:
        return not self.results


@dataclass(frozen=True)
class WeeklyOutcome:
    report: dict[str, Any]
    path: Path
    runs: list[RunOutcome]


class LoggingObserver:
    """Mirrors engine progress into the run, report and API error logs."""

    def __init__(self, sink: LogSink, log_file: str, scripts_dir: Path) -> None:
        self._sink = sink
        self._log_file = log_file
        self._scripts_dir = scripts_dir

    def job_started(self, job: Job) -> None:
        if job.exists:
            self._sink.append_line(self._log_file, f"Starting execution of script: {job.name}")

    def job_finished(self, job: Job, result: ExecutionResult) -> None:
        sink, log_file = self._sink, self._log_file

        if not isinstance(result, Failure):
            sink.append_line(
                log_file,
                f"SUCCESS: {job.name} completed successfully in {result.duration_ms}ms",
            )
            if result.output.strip():
                sink.append_line(log_file, f"OUTPUT: {result.output.strip()}")
            sink.write_report(f"✅ SUCCESS: {job.name} ({result.duration_ms}ms)")
            return

        if result.kind is FailureKind.NOT_FOUND:
            sink.append_line(
                log_file, f"ERROR: Script {job.name} not found in {self._scripts_dir}",
            )
        elif result.kind is FailureKind.LAUNCH:
            sink.append_line(log_file, f"ERROR: Error executing {job.name}: {result.error}")
            sink.write_report(
                f"❌ FAILED: {job.name} ({result.duration_ms}ms) - {result.error.splitlines()[0]}",
            )
            sink.write_error(job.name, result.error, None, result.duration_ms)
        else:
            sink.append_line(log_file, f"API ERROR: API Error: HTTP {result.http_status}")
            sink.write_report(
                f"❌ API ERROR: {job.name} ({result.duration_ms}ms) - HTTP {result.http_status}",
            )
            sink.write_error(job.name, result.error, result.http_status, result.duration_ms)

    def batch_started(self, index: int, total: int, jobs: Sequence[Job]) -> None:
        names = ", ".join(job.name for job in jobs)
        self._sink.append_line(
            self._log_file, f"Starting batch {index}/{total} with scripts: {names}",
        )

    def batch_finished(
        self, index: int, total: int, summary: BatchSummary, duration_ms: int,
    ) -> None:
        self._sink.append_line(
            self._log_file,
            f"Batch {index} completed: {summary.succeeded} successful, "
            f"{summary.failed} failed in {duration_ms}ms",
        )


class MultiObserver:
    """Fans each callback out to several observers."""

    def __init__(self, *observers: RunObserver) -> None:
        self._observers = observers

    def job_started(self, job: Job) -> None:
        for observer in self._observers:
            observer.job_started(job)

    def job_finished(self, job: Job, result: ExecutionResult) -> None:
        for observer in self._observers:
            observer.job_finished(job, result)

    def batch_started(self, index: int, total: int, jobs: Sequence[Job]) -> None:
        for observer in self._observers:
            observer.batch_started(index, total, jobs)

    def batch_finished(
        self, index: int, total: int, summary: BatchSummary, duration_ms: int,
    ) -> None:
        for observer in self._observers:
            observer.batch_finished(index, total, summary, duration_ms)


class CurlRunner:
    """Runs the scripts in ``settings.scripts_dir`` and records the results.

    Args:
        settings: Directories, delays and thresholds.
        executor: Substitute command executor (tests); defaults to a real
            :class:`~curl_runner.execution.process.ProcessExecutor`.
        observers: Extra progress observers, e.g. console output.
        sleep: Coroutine used for engine pauses.
    """

    def __init__(
        self,
        settings: RunnerSettings,
        *,
        executor: CommandExecutor | None = None,
        observers: Sequence[RunObserver] = (),
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self.sink = LogSink(
            settings.logs_dir,
            report_log_file=settings.report_log_file,
            error_log_file=settings.error_log_file,
            script_extension=settings.script_extension,
        )
        self.sink.ensure_directory()
        self._executor = executor
        self._observers = tuple(observers)
        self._sleep = sleep

    # ── Discovery ────────────────────────────────────────────────────

    def list_scripts(self) -> list[str]:
        return list_jobs(self.settings.scripts_dir, self.settings.script_extension)

    def jobs_for(self, names: Sequence[str]) -> list[Job]:
        return [
            Job.in_directory(self.settings.scripts_dir, name, self.settings.interpreter)
            for name in names
        ]

    # ── Commands ─────────────────────────────────────────────────────

    async def run_all(self) -> RunOutcome:
        """Every script, one at a time."""
        return await self._execute(self.list_scripts(), Sequential())

    async def run_parallel(self) -> RunOutcome:
        """Every script at once."""
        return await self._execute(self.list_scripts(), Unlimited())

    async def run_concurrent(
        self, batch_size: int | None = None, delay_ms: int | None = None,
    ) -> RunOutcome:
        """Every script in batches with a pause between batches."""
        plan = FixedBatch(
            batch_size=batch_size or self.settings.batch_size,
            inter_batch_delay_ms=self.settings.batch_delay_ms if delay_ms is None else delay_ms,
        )
        return await self._execute(self.list_scripts(), plan)

    async def run_with_concurrency(
        self, names: list[str] | None = None, max_concurrent: int | None = None,
    ) -> RunOutcome:
        """Given scripts (default: all) in chunks of ``max_concurrent``.

        Raises:
            InvalidInputError: ``names`` is not a list.
        """
        plan = BoundedCustom(max_concurrent or self.settings.max_concurrent)
        if names is None:
            names = self.list_scripts()
        if not isinstance(names, list):
            raise InvalidInputError(
                "Scripts must be a list", context={"received": type(names).__name__},
            )
        return await self._execute(names, plan)

    async def run_script(self, name: str) -> RunOutcome:
        """One named script; the extension is appended when missing."""
        extension = self.settings.script_extension
        if not name.endswith(extension):
            name += extension
        log_file = self.sink.new_run_log(name)
        self.sink.write_report(f"🎯 SINGLE SCRIPT: Starting {name}")
        return await self._execute([name], Sequential(), log_file=log_file, announce=False)

    async def run_weekly(
        self, week: int, runs: int = 1, plan: ConcurrencyPlan | None = None,
    ) -> WeeklyOutcome:
        """Run every script ``runs`` times and save the week's data-gap report."""
        if runs < 1:
            raise InvalidInputError(f"runs must be >= 1, got {runs}")
        outcomes = []
        for _ in range(runs):
            outcomes.append(await self._execute(self.list_scripts(), plan or Sequential()))

        reporter = self.reporter()
        report = reporter.generate_weekly_report(
            build_week_data(week, [o.results for o in outcomes]),
        )
        path = reporter.save_weekly_report(report)
        self.sink.write_report(
            f"📊 WEEKLY REPORT: week {week} - {report['summary']['dataGapsCount']} data gap(s), "
            f"{report['summary']['alertsCount']} alert(s)",
        )
        return WeeklyOutcome(report=report, path=path, runs=outcomes)

    def summarize_weeks(self) -> tuple[dict[str, Any], Path]:
        """Roll saved weekly reports into the summary report."""
        reporter = self.reporter()
        summary = reporter.generate_summary_report(reporter.load_weekly_reports())
        return summary, reporter.save_summary_report(summary)

    def reporter(self) -> WeeklyReporter:
        return WeeklyReporter(
            self.settings.reports_dir,
            self.settings.weeks,
            DataGapThresholds(
                success_rate=self.settings.success_rate_threshold,
                error_rate=self.settings.error_rate_threshold,
            ),
        )

    # ── Internals ────────────────────────────────────────────────────

    async def _execute(
        self,
        names: list[str],
        plan: ConcurrencyPlan,
        *,
        log_file: str | None = None,
        announce: bool = True,
    ) -> RunOutcome:
        if not names:
            logger.warning("runner.no_scripts", scripts_dir=str(self.settings.scripts_dir))
            return RunOutcome(plan=plan)

        label = _PLAN_LABELS[type(plan)]
        detail = self._plan_detail(plan)
        log_file = log_file or self.sink.new_run_log()

        self.sink.append_line(log_file, f"Starting {label.lower()} execution of {len(names)} scripts{detail}")
        self.sink.append_line(log_file, f"Scripts to run: {', '.join(names)}")
        if announce:
            self.sink.write_report(f"🚀 {label} START: Running {len(names)} scripts{detail}")

        engine = ConcurrencyEngine(
            self.settings.engine_config(),
            executor=self._executor,
            observer=MultiObserver(
                LoggingObserver(self.sink, log_file, self.settings.scripts_dir),
                *self._observers,
            ),
            sleep=self._sleep,
        )

        started = time.monotonic()
        async with LogContext(run_id=log_file, plan=plan.name):
            results = await engine.run(self.jobs_for(names), plan)
        wall_ms = int((time.monotonic() - started) * 1000)

        summary = summarize(results)
        batches = self._batch_count(plan, len(names))
        self.sink.append_line(
            log_file,
            f"{label.capitalize()} execution completed: {summary.succeeded} successful, "
            f"{summary.failed} failed, {summary.total} total in {wall_ms}ms",
        )
        self.sink.write_report(
            f"🏁 {label} COMPLETE: {summary.succeeded}/{summary.total} successful "
            f"({summary.failed} failed) in {wall_ms}ms",
        )
        return RunOutcome(
            plan=plan,
            results=results,
            summary=summary,
            log_file=log_file,
            wall_ms=wall_ms,
            batches=batches,
        )

    @staticmethod
    def _plan_detail(plan: ConcurrencyPlan) -> str:
        if isinstance(plan, FixedBatch):
            return f" in batches of {plan.batch_size}"
        if isinstance(plan, BoundedCustom):
            return f" (max {plan.max_concurrent} concurrent)"
        return ""

    @staticmethod
    def _batch_count(plan: ConcurrencyPlan, jobs: int) -> int:
        if isinstance(plan, FixedBatch):
            return -(-jobs // plan.batch_size)
        if isinstance(plan, BoundedCustom):
            return -(-jobs // plan.max_concurrent)
        return 1 if jobs else 0


__all__ = ["CurlRunner", "RunOutcome", "WeeklyOutcome", "LoggingObserver", "MultiObserver"]
