"""Execution models - jobs, tagged outcomes, plans and summaries.

Manifesto:
    A result is either a :class:`Success` or a :class:`Failure`, never a
    "success flag plus maybe an error".  The tag makes the invariants
    structural: a ``Failure`` always carries a non-empty ``error`` and a
    ``Success`` never does.

ARCHITECTURE
────────────
::

    Job(name, path)                       ─ one script to run
      └── .command                        ─ "<interpreter> '<path>'"

    ExecutionResult = Success | Failure   ─ one per job execution
      Success(job_name, output, http_status?, duration_ms)
      Failure(job_name, error, kind, http_status?, duration_ms, output)

    ConcurrencyPlan = Sequential | Unlimited | FixedBatch | BoundedCustom
    BatchSummary(total, succeeded, failed, total_duration_ms)
    EngineConfig(script_delay_ms, interpreter, timeout_seconds)

Tags:
    curl-runner, execution, models, tagged-union, dataclasses

Doc-Types:
    api-reference
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar

from curl_runner.core.errors import InvalidInputError


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EngineConfig:
    """Explicit, immutable engine configuration.

    Attributes:
        script_delay_ms: Pause between jobs under the sequential plan.
        interpreter: Program used to run each script.
        timeout_seconds: Kill a job after this long.  ``None`` waits forever.
    """

    script_delay_ms: int = 100
    interpreter: str = "bash"
    timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.script_delay_ms < 0:
            raise InvalidInputError("script_delay_ms must be >= 0")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise InvalidInputError("timeout_seconds must be > 0")


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Job:
    """One script to execute, identified by name."""

    name: str
    path: Path
    interpreter: str = "bash"

    @classmethod
    def in_directory(cls, directory: str | Path, name: str, interpreter: str = "bash") -> Job:
        """Resolve ``name`` against a scripts directory."""
        return cls(name=name, path=Path(directory) / name, interpreter=interpreter)

    @property
    def exists(self) -> bool:
        return self.path.is_file()

    @property
    def command(self) -> str:
        """Fully quoted shell invocation for this job."""
        return f"{self.interpreter} {shlex.quote(str(self.path))}"


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

class FailureKind(str, Enum):
    """Why a job failed."""

    NOT_FOUND = "not_found"   # script missing on disk, never launched
    LAUNCH = "launch"         # process failed to start or exited non-zero
    API_ERROR = "api_error"   # process succeeded, output carries HTTP >= 400


@dataclass(frozen=True)
class Success:
    """A job that exited cleanly with no HTTP error status."""

    job_name: str
    output: str = ""
    http_status: int | None = None
    duration_ms: int = 0

    success: ClassVar[bool] = True
    error: ClassVar[None] = None

    def __post_init__(self) -> None:
        if self.duration_ms < 0:
            raise ValueError("duration_ms must be non-negative")

    def to_dict(self) -> dict[str, Any]:
        return {
            "jobName": self.job_name,
            "success": True,
            "output": self.output,
            "httpStatus": self.http_status,
            "error": None,
            "durationMs": self.duration_ms,
        }


@dataclass(frozen=True)
class Failure:
    """A job that could not run, exited badly, or reported an HTTP error."""

    job_name: str
    error: str
    kind: FailureKind
    http_status: int | None = None
    duration_ms: int = 0
    output: str = ""

    success: ClassVar[bool] = False

    def __post_init__(self) -> None:
        if not self.error:
            raise ValueError("Failure requires a non-empty error")
        if self.duration_ms < 0:
            raise ValueError("duration_ms must be non-negative")

    def to_dict(self) -> dict[str, Any]:
        return {
            "jobName": self.job_name,
            "success": False,
            "output": self.output,
            "httpStatus": self.http_status,
            "error": self.error,
            "durationMs": self.duration_ms,
            "kind": self.kind.value,
        }


ExecutionResult = Success | Failure


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BatchSummary:
    """Aggregate counts and timing over a list of results."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    total_duration_ms: int = 0

    @property
    def success_rate(self) -> float:
        return self.succeeded / self.total if self.total else 0.0

    def __add__(self, other: BatchSummary) -> BatchSummary:
        return BatchSummary(
            total=self.total + other.total,
            succeeded=self.succeeded + other.succeeded,
            failed=self.failed + other.failed,
            total_duration_ms=self.total_duration_ms + other.total_duration_ms,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "totalDurationMs": self.total_duration_ms,
        }


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------

def _check_delay(value: int, name: str) -> None:
    if value < 0:
        raise InvalidInputError(f"{name} must be >= 0, got {value}")


@dataclass(frozen=True)
class Sequential:
    """One job at a time, pausing between jobs.

    ``delay_ms=None`` uses :attr:`EngineConfig.script_delay_ms`.
    """

    delay_ms: int | None = None

    name: ClassVar[str] = "sequential"

    def __post_init__(self) -> None:
        if self.delay_ms is not None:
            _check_delay(self.delay_ms, "delay_ms")


@dataclass(frozen=True)
class Unlimited:
    """Every job launched at once."""

    name: ClassVar[str] = "unlimited"


@dataclass(frozen=True)
class FixedBatch:
    """Consecutive chunks of ``batch_size`` with a pause between chunks."""

    batch_size: int
    inter_batch_delay_ms: int = 0

    name: ClassVar[str] = "fixed_batch"

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise InvalidInputError(f"batch_size must be >= 1, got {self.batch_size}")
        _check_delay(self.inter_batch_delay_ms, "inter_batch_delay_ms")


@dataclass(frozen=True)
class BoundedCustom:
    """Chunks of ``max_concurrent`` with no pause unless ``delay_ms`` is set."""

    max_concurrent: int
    delay_ms: int = 0

    name: ClassVar[str] = "bounded_custom"

    def __post_init__(self) -> None:
        if self.max_concurrent < 1:
            raise InvalidInputError(f"max_concurrent must be >= 1, got {self.max_concurrent}")
        _check_delay(self.delay_ms, "delay_ms")


ConcurrencyPlan = Sequential | Unlimited | FixedBatch | BoundedCustom


__all__ = [
    "EngineConfig",
    "Job",
    "FailureKind",
    "Success",
    "Failure",
    "ExecutionResult",
    "BatchSummary",
    "Sequential",
    "Unlimited",
    "FixedBatch",
    "BoundedCustom",
    "ConcurrencyPlan",
]
