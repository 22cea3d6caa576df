"""
curl-runner - run directories of curl scripts and track API errors.

Scripts are executed one at a time, all at once, or in bounded batches; each
script's output is searched for an ``HTTP Status: <code>`` marker and every
run is recorded in append-only log files.  Repeated runs can be folded into
weekly data-gap reports.
"""

__version__ = "1.0.0"

from curl_runner.execution import (  # noqa: E402
    BatchSummary,
    BoundedCustom,
    ConcurrencyEngine,
    EngineConfig,
    ExecutionResult,
    Failure,
    FixedBatch,
    Job,
    Sequential,
    Success,
    Unlimited,
    summarize,
)
from curl_runner.runner import CurlRunner, RunOutcome  # noqa: E402

__all__ = [
    "__version__",
    "CurlRunner",
    "RunOutcome",
    "ConcurrencyEngine",
    "EngineConfig",
    "Job",
    "Success",
    "Failure",
    "ExecutionResult",
    "BatchSummary",
    "Sequential",
    "Unlimited",
    "FixedBatch",
    "BoundedCustom",
    "summarize",
]
