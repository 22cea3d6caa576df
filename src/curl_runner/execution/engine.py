"""Concurrency engine - run jobs under a chosen plan.

Manifesto:
    A directory of curl scripts can be run one at a time, all at once, or
    in chunks.  Under every plan each job is attempted exactly once, one
    job's failure never stops another, and the returned list matches the
    input list position by position.

ARCHITECTURE
────────────
::

    ConcurrencyEngine(config, executor, classifier, observer, sleep)
      ├── .run(jobs, plan)          ─ dispatch on plan type
      │     Sequential   → one by one, delay between jobs
      │     Unlimited    → asyncio.gather(all)
      │     FixedBatch   → gather(chunk) … delay … gather(chunk)
      │     BoundedCustom→ gather(chunk) … [optional delay] …
      └── .run_job(job)             ─ missing? → execute → classify

    Per-job outcome:
      script missing        → Failure(NOT_FOUND, "<name> not found", 0ms)
      executor exit_error   → Failure(LAUNCH, exit_error)
      HTTP Status >= 400    → Failure(API_ERROR, message, http_status)
      otherwise             → Success(output, http_status)

Concurrent jobs report to the observer in completion order, so log lines from
one chunk interleave by finish time rather than input order.  Only the
returned result list is ordered.

Related modules:
    process.py     - ProcessExecutor (one subprocess)
    classifier.py  - HTTP status marker parsing
    aggregator.py  - BatchSummary fold

Example::

    engine = ConcurrencyEngine(EngineConfig(script_delay_ms=0))
    results = await engine.run(jobs, FixedBatch(batch_size=3, inter_batch_delay_ms=200))
    print(summarize(results).to_dict())

Tags:
    curl-runner, execution, concurrency, asyncio, fan-out, batching
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Protocol

from curl_runner.core.errors import InvalidInputError
from curl_runner.core.logging import get_logger
from curl_runner.execution.aggregator import summarize
from curl_runner.execution.classifier import OutputClassifier
from curl_runner.execution.models import (
    BatchSummary,
    BoundedCustom,
    ConcurrencyPlan,
    EngineConfig,
    ExecutionResult,
    Failure,
    FailureKind,
    FixedBatch,
    Job,
    Sequential,
    Success,
    Unlimited,
)
from curl_runner.execution.process import CommandExecutor, ProcessExecutor

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class RunObserver(Protocol):
    """Receives progress callbacks while a run is in flight."""

    def job_started(self, job: Job) -> None: ...

    def job_finished(self, job: Job, result: ExecutionResult) -> None: ...

    def batch_started(self, index: int, total: int, jobs: Sequence[Job]) -> None: ...

    def batch_finished(
        self, index: int, total: int, summary: BatchSummary, duration_ms: int,
    ) -> None: ...


class NullObserver:
    """Observer that ignores every callback."""

    def job_started(self, job: Job) -> None:
        pass

    def job_finished(self, job: Job, result: ExecutionResult) -> None:
        pass

    def batch_started(self, index: int, total: int, jobs: Sequence[Job]) -> None:
        pass

    def batch_finished(
        self, index: int, total: int, summary: BatchSummary, duration_ms: int,
    ) -> None:
        pass


def partition(jobs: Sequence[Job], size: int) -> list[list[Job]]:
    """Split ``jobs`` into consecutive chunks of ``size`` (last may be short)."""
    if size < 1:
        raise InvalidInputError(f"chunk size must be >= 1, got {size}")
    return [list(jobs[i:i + size]) for i in range(0, len(jobs), size)]


def _elapsed_ms(started: float) -> int:
    return max(0, int((time.monotonic() - started) * 1000))


class ConcurrencyEngine:
    """Executes jobs under a :data:`ConcurrencyPlan`.

    Parameters
    ----------
    config : EngineConfig
        Delays, interpreter and timeout.  Defaults to ``EngineConfig()``.
    executor : CommandExecutor
        Runs one command.  Defaults to a :class:`ProcessExecutor` honoring
        ``config.timeout_seconds``.
    classifier : OutputClassifier
        Turns captured output into a verdict.
    observer : RunObserver
        Progress callbacks (log sinks, progress bars).
    sleep : callable
        Coroutine used for the inter-job and inter-batch pauses.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        executor: CommandExecutor | None = None,
        classifier: OutputClassifier | None = None,
        observer: RunObserver | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._config = config or EngineConfig()
        self._executor = executor or ProcessExecutor(
            timeout_seconds=self._config.timeout_seconds,
        )
        self._classifier = classifier or OutputClassifier()
        self._observer = observer or NullObserver()
        self._sleep = sleep

    @property
    def config(self) -> EngineConfig:
        return self._config

    # ── Public API ───────────────────────────────────────────────────

    async def run(
        self, jobs: Iterable[Job], plan: ConcurrencyPlan,
    ) -> list[ExecutionResult]:
        """Run every job under ``plan`` and return results in input order.

        Raises:
            InvalidInputError: ``plan`` is not a known plan, or ``jobs`` is not
                a list under :class:`BoundedCustom`.  Raised before any job
                starts.
        """
        if isinstance(plan, BoundedCustom) and not isinstance(jobs, list):
            raise InvalidInputError(
                "Jobs must be a list",
                context={"plan": plan.name, "received": type(jobs).__name__},
            )
        if not isinstance(plan, Sequential | Unlimited | FixedBatch | BoundedCustom):
            raise InvalidInputError(f"Unknown concurrency plan: {plan!r}")

        job_list = list(jobs)
        started = time.monotonic()
        logger.info("engine.run_start", plan=plan.name, jobs=len(job_list))

        if isinstance(plan, Sequential):
            delay_ms = self._config.script_delay_ms if plan.delay_ms is None else plan.delay_ms
            results = await self._run_sequential(job_list, delay_ms)
        elif isinstance(plan, Unlimited):
            results = await self._run_group(job_list)
        elif isinstance(plan, FixedBatch):
            results = await self._run_batched(
                job_list, plan.batch_size, plan.inter_batch_delay_ms,
            )
        else:
            results = await self._run_batched(
                job_list, plan.max_concurrent, plan.delay_ms,
            )

        summary = summarize(results)
        logger.info(
            "engine.run_complete",
            plan=plan.name,
            total=summary.total,
            succeeded=summary.succeeded,
            failed=summary.failed,
            wall_ms=_elapsed_ms(started),
        )
        return results

    async def run_job(self, job: Job) -> ExecutionResult:
        """Run one job and classify its outcome.  Never raises."""
        self._observer.job_started(job)

        if not job.exists:
            result: ExecutionResult = Failure(
                job_name=job.name,
                error=f"{job.name} not found",
                kind=FailureKind.NOT_FOUND,
                duration_ms=0,
            )
        else:
            output = await self._executor.execute(job.command)
            if output.exit_error:
                result = Failure(
                    job_name=job.name,
                    error=output.exit_error,
                    kind=FailureKind.LAUNCH,
                    duration_ms=output.duration_ms,
                    output=output.stdout,
                )
            else:
                verdict = self._classifier.classify(output.stdout, output.stderr)
                if verdict.is_api_error:
                    result = Failure(
                        job_name=job.name,
                        error=verdict.error_message or f"HTTP {verdict.http_status} error",
                        kind=FailureKind.API_ERROR,
                        http_status=verdict.http_status,
                        duration_ms=output.duration_ms,
                        output=output.stdout,
                    )
                else:
                    result = Success(
                        job_name=job.name,
                        output=output.stdout,
                        http_status=verdict.http_status,
                        duration_ms=output.duration_ms,
                    )

        if isinstance(result, Failure):
            logger.warning(
                "engine.job_failed",
                job=job.name,
                kind=result.kind.value,
                http_status=result.http_status,
                error=result.error,
            )
        self._observer.job_finished(job, result)
        return result

    # ── Plans ────────────────────────────────────────────────────────

    async def _run_sequential(
        self, jobs: list[Job], delay_ms: int,
    ) -> list[ExecutionResult]:
        results: list[ExecutionResult] = []
        for position, job in enumerate(jobs):
            results.append(await self.run_job(job))
            if delay_ms > 0 and position < len(jobs) - 1:
                await self._sleep(delay_ms / 1000)
        return results

    async def _run_group(self, jobs: list[Job]) -> list[ExecutionResult]:
        # gather keeps positional order regardless of completion order
        return list(await asyncio.gather(*(self.run_job(job) for job in jobs)))

    async def _run_batched(
        self, jobs: list[Job], size: int, delay_ms: int,
    ) -> list[ExecutionResult]:
        chunks = partition(jobs, size)
        results: list[ExecutionResult] = []
        running = BatchSummary()

        for index, chunk in enumerate(chunks, start=1):
            self._observer.batch_started(index, len(chunks), chunk)
            started = time.monotonic()

            chunk_results = await self._run_group(chunk)
            chunk_summary = summarize(chunk_results)
            duration_ms = _elapsed_ms(started)

            results.extend(chunk_results)
            running = running + chunk_summary
            self._observer.batch_finished(index, len(chunks), chunk_summary, duration_ms)
            logger.info(
                "engine.batch_complete",
                batch=index,
                batches=len(chunks),
                succeeded=chunk_summary.succeeded,
                failed=chunk_summary.failed,
                running_succeeded=running.succeeded,
                running_failed=running.failed,
                duration_ms=duration_ms,
            )

            if delay_ms > 0 and index < len(chunks):
                await self._sleep(delay_ms / 1000)

        return results


__all__ = [
    "ConcurrencyEngine",
    "RunObserver",
    "NullObserver",
    "partition",
]
