"""
Root Typer application for the curl-runner CLI.

Every command builds a :class:`~curl_runner.runner.CurlRunner` from the
settings prepared by the root callback, runs it under ``asyncio.run`` and
renders the outcome with rich.  Job failures are reported, never turned into
a non-zero exit code.
"""

from __future__ import annotations

import asyncio
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from pathlib import Path

import typer
from rich.markup import escape

from curl_runner import __version__
from curl_runner.cli.utils import ConsoleObserver, console, err_console, print_failures, print_outcome
from curl_runner.core.errors import ConfigError, CurlRunnerError
from curl_runner.core.logging import configure_logging
from curl_runner.core.settings import RunnerSettings, get_settings
from curl_runner.runner import CurlRunner, RunOutcome

app = typer.Typer(
    name="curl-runner",
    help="curl-runner - execute directories of curl scripts and track API errors.",
    rich_markup_mode="rich",
)


# ── Helpers ──────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("curl-runner")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"curl-runner {v}")
        raise typer.Exit()


def _settings(ctx: typer.Context) -> RunnerSettings:
    return ctx.obj["settings"]


def _runner(ctx: typer.Context) -> CurlRunner:
    return CurlRunner(
        _settings(ctx), observers=[ConsoleObserver(show_output=ctx.obj["verbose"])],
    )


def _render(ctx: typer.Context, outcome: RunOutcome) -> None:
    settings = _settings(ctx)
    if outcome.empty:
        console.print(
            f"[yellow]⚠️ No {settings.script_extension} scripts found in "
            f"{settings.scripts_dir}[/yellow]",
        )
        return
    print_outcome(
        outcome,
        logs_dir=str(settings.logs_dir),
        report_log=settings.report_log_file,
        error_log=settings.error_log_file,
    )
    if ctx.obj["verbose"]:
        print_failures(outcome.results)


def _run_all(ctx: typer.Context) -> None:
    settings = _settings(ctx)
    console.print(f"[bold]🔄 Running all scripts in {settings.scripts_dir}[/bold]")
    _render(ctx, asyncio.run(_runner(ctx).run_all()))


# ── Root callback ────────────────────────────────────────────────────────


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    scripts_dir: Path | None = typer.Option(
        None, "--dir", "-d", help="Directory containing the curl scripts.",
    ),
    logs_dir: Path | None = typer.Option(
        None, "--logs", "-l", help="Directory for run, report and error logs.",
    ),
    reports_dir: Path | None = typer.Option(
        None, "--reports", "-r", help="Directory for weekly JSON reports.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show script output and debug logging.",
    ),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """curl-runner CLI - run every script when no command is given."""
    try:
        settings = get_settings().with_overrides(
            scripts_dir=scripts_dir, logs_dir=logs_dir, reports_dir=reports_dir,
        )
    except ConfigError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc.message}", highlight=False)
        raise typer.Exit(2) from exc

    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.log_json,
    )
    ctx.obj = {"settings": settings, "verbose": verbose}

    if ctx.invoked_subcommand is None:
        _run_all(ctx)


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("run")
def run(ctx: typer.Context) -> None:
    """Run all scripts one at a time."""
    _run_all(ctx)


@app.command("run-script")
def run_script(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Script name; the extension is optional."),
) -> None:
    """Run a single script."""
    console.print(f"[bold]🎯 Running script {escape(name)}[/bold]")
    _render(ctx, asyncio.run(_runner(ctx).run_script(name)))


@app.command("run-parallel")
def run_parallel(ctx: typer.Context) -> None:
    """Run all scripts at once."""
    console.print("[bold]⚡ Running all scripts in parallel[/bold]")
    _render(ctx, asyncio.run(_runner(ctx).run_parallel()))


@app.command("run-concurrent")
def run_concurrent(
    ctx: typer.Context,
    batch_size: int | None = typer.Option(
        None, "--batch-size", "-b", min=1, help="Scripts per batch.",
    ),
    delay: int | None = typer.Option(
        None, "--delay", min=0, help="Pause between batches in milliseconds.",
    ),
) -> None:
    """Run all scripts in fixed-size batches."""
    settings = _settings(ctx)
    size = batch_size or settings.batch_size
    console.print(f"[bold]🔀 Running scripts in batches of {size}[/bold]")
    _render(ctx, asyncio.run(_runner(ctx).run_concurrent(size, delay)))


@app.command("run-concurrency")
def run_concurrency(
    ctx: typer.Context,
    max_concurrent: int = typer.Argument(..., min=1, help="Scripts allowed to run at once."),
) -> None:
    """Run all scripts with at most MAX_CONCURRENT running at once."""
    console.print(f"[bold]🎛️ Running scripts with max {max_concurrent} concurrent[/bold]")
    outcome = asyncio.run(_runner(ctx).run_with_concurrency(max_concurrent=max_concurrent))
    _render(ctx, outcome)


@app.command("list")
def list_scripts(ctx: typer.Context) -> None:
    """List the scripts that would run."""
    settings = _settings(ctx)
    names = CurlRunner(settings).list_scripts()
    if not names:
        console.print(
            f"[yellow]No {settings.script_extension} scripts found in "
            f"{settings.scripts_dir}[/yellow]",
        )
        return
    console.print(f"[bold]📁 Available scripts in {settings.scripts_dir}:[/bold]")
    for position, name in enumerate(names, start=1):
        console.print(f"  {position}. {name}", markup=False, highlight=False)


@app.command("weekly")
def weekly(
    ctx: typer.Context,
    week: int = typer.Option(1, "--week", min=1, help="Week number for the report."),
    runs: int = typer.Option(1, "--runs", min=1, help="How many times to run every script."),
) -> None:
    """Run all scripts and save a weekly data-gap report."""
    try:
        outcome = asyncio.run(_runner(ctx).run_weekly(week, runs))
    except CurlRunnerError as exc:
        err_console.print(f"[red]Weekly report failed:[/red] {exc.message}", highlight=False)
        raise typer.Exit(1) from exc

    summary = outcome.report["summary"]
    console.print(f"\n[bold]📊 Week {week} report[/bold]")
    console.print(
        f"  Scripts: {summary['totalScripts']}  "
        f"Success rate: {summary['overallSuccessRate'] * 100:.1f}%  "
        f"Data gaps: {summary['dataGapsCount']}  Alerts: {summary['alertsCount']}",
    )
    for rec in outcome.report["recommendations"]:
        console.print(f"  [yellow]• {rec['priority']}:[/yellow] {escape(rec['message'])}")
    console.print(f"[dim]💾 Saved to: {outcome.path}[/dim]")


@app.command("summary")
def summary(ctx: typer.Context) -> None:
    """Roll saved weekly reports into a summary report."""
    try:
        report, path = CurlRunner(_settings(ctx)).summarize_weeks()
    except CurlRunnerError as exc:
        err_console.print(f"[red]Summary failed:[/red] {exc.message}", highlight=False)
        raise typer.Exit(1) from exc

    metrics = report["overallMetrics"]
    trends = report["trends"]
    console.print(f"[bold]📈 Summary of {report['metadata']['totalWeeks']} week(s)[/bold]")
    console.print(f"  Average success rate: {metrics['averageSuccessRate'] * 100:.1f}%")
    console.print(f"  Data gaps: {metrics['totalDataGaps']}  Alerts: {metrics['totalAlerts']}")
    console.print(
        f"  Trends: success {trends['successRateTrend']}, "
        f"data gaps {trends['dataGapsTrend']}, errors {trends['errorRateTrend']}",
    )
    console.print(f"[dim]💾 Saved to: {path}[/dim]")
