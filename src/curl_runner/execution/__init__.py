"""Execution: run scripts under a concurrency plan and classify the results.

Example::

    from curl_runner.execution import ConcurrencyEngine, EngineConfig, Job, Unlimited, summarize

    engine = ConcurrencyEngine(EngineConfig())
    results = await engine.run([Job.in_directory("./cURL_scripts", "health.sh")], Unlimited())
    summarize(results)
"""

from curl_runner.execution.aggregator import summarize
from curl_runner.execution.classifier import (
    Classification,
    OutputClassifier,
    StatusCategory,
    categorize_status,
    classify,
)
from curl_runner.execution.engine import ConcurrencyEngine, NullObserver, RunObserver, partition
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
from curl_runner.execution.process import CommandExecutor, ProcessExecutor, ProcessOutput

__all__ = [
    # Engine
    "ConcurrencyEngine",
    "RunObserver",
    "NullObserver",
    "partition",
    # Models
    "EngineConfig",
    "Job",
    "Success",
    "Failure",
    "FailureKind",
    "ExecutionResult",
    "BatchSummary",
    "ConcurrencyPlan",
    "Sequential",
    "Unlimited",
    "FixedBatch",
    "BoundedCustom",
    # Process
    "CommandExecutor",
    "ProcessExecutor",
    "ProcessOutput",
    # Classification / aggregation
    "Classification",
    "OutputClassifier",
    "StatusCategory",
    "categorize_status",
    "classify",
    "summarize",
]
