"""
CLI utility helpers - console output and run rendering.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from curl_runner.execution.models import BatchSummary, ExecutionResult, Failure, Job
from curl_runner.runner import RunOutcome

console = Console()
err_console = Console(stderr=True)

_TITLES = {
    "sequential": "Summary",
    "unlimited": "Parallel Summary",
    "fixed_batch": "Concurrent Summary",
    "bounded_custom": "Concurrency Summary",
}


class ConsoleObserver:
    """Prints one line per job and batch as the engine reports progress."""

    def __init__(self, out: Console | None = None, show_output: bool = False) -> None:
        self._out = out or console
        self._show_output = show_output

    def job_started(self, job: Job) -> None:
        self._out.print(f"[cyan]🚀 Running script:[/cyan] {escape(job.name)}", highlight=False)

    def job_finished(self, job: Job, result: ExecutionResult) -> None:
        if isinstance(result, Failure):
            status = f" (HTTP {result.http_status})" if result.http_status else ""
            first_line = result.error.splitlines()[0]
            self._out.print(
                f"[red]❌ {escape(job.name)}{status}:[/red] {escape(first_line)}", highlight=False,
            )
            return
        self._out.print(
            f"[green]✅ {escape(job.name)} completed successfully in {result.duration_ms}ms[/green]",
            highlight=False,
        )
        if self._show_output and result.output.strip():
            self._out.print(result.output.rstrip(), markup=False, highlight=False)

    def batch_started(self, index: int, total: int, jobs: Sequence[Job]) -> None:
        self._out.print(f"\n[cyan]📦 Batch {index}/{total}:[/cyan] Running {len(jobs)} scripts...")

    def batch_finished(
        self, index: int, total: int, summary: BatchSummary, duration_ms: int,
    ) -> None:
        self._out.print(
            f"[green]Batch {index} complete:[/green] {summary.succeeded} successful, "
            f"{summary.failed} failed in {duration_ms}ms",
        )


def print_outcome(outcome: RunOutcome, *, logs_dir: str, report_log: str, error_log: str) -> None:
    """Render the run summary table and where the logs went."""
    summary = outcome.summary
    table = Table(title=_TITLES.get(outcome.plan.name, "Summary"), show_header=False)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("✅ Successful", f"[green]{summary.succeeded}[/green]")
    table.add_row("❌ Failed", f"[red]{summary.failed}[/red]")
    table.add_row("📁 Total", str(summary.total))
    table.add_row("⏱️ Duration", f"{outcome.wall_ms}ms")
    if outcome.plan.name in ("fixed_batch", "bounded_custom"):
        table.add_row("📦 Batches", str(outcome.batches))
    console.print()
    console.print(table)

    if outcome.log_file:
        console.print(f"[dim]📝 Log saved to: {logs_dir}/{outcome.log_file}[/dim]")
    console.print(f"[dim]📊 Report log: {logs_dir}/{report_log}[/dim]")
    console.print(f"[dim]🚨 Error log: {logs_dir}/{error_log}[/dim]")


def print_failures(results: Sequence[ExecutionResult]) -> None:
    failures = [r for r in results if isinstance(r, Failure)]
    if not failures:
        return
    table = Table(title="Failures")
    table.add_column("Script")
    table.add_column("Kind")
    table.add_column("HTTP", justify="right")
    table.add_column("Error")
    for failure in failures:
        table.add_row(
            escape(failure.job_name),
            failure.kind.value,
            str(failure.http_status or ""),
            escape(failure.error.splitlines()[0]),
        )
    console.print(table)


__all__ = ["console", "err_console", "ConsoleObserver", "print_outcome", "print_failures"]
