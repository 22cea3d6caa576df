"""Run aggregator - fold execution results into a :class:`BatchSummary`."""

from __future__ import annotations

from collections.abc import Iterable

from curl_runner.execution.models import BatchSummary, ExecutionResult


def summarize(results: Iterable[ExecutionResult]) -> BatchSummary:
    """Count successes and failures and total the durations.

    Pure function; an empty input yields an all-zero summary.
    """
    total = succeeded = total_duration_ms = 0
    for result in results:
        total += 1
        if result.success:
            succeeded += 1
        total_duration_ms += result.duration_ms

    return BatchSummary(
        total=total,
        succeeded=succeeded,
        failed=total - succeeded,
        total_duration_ms=total_duration_ms,
    )


__all__ = ["summarize"]
