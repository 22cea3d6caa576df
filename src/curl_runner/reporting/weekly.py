"""Weekly data-gap reporting.

Repeated runs of the same scripts over a week are folded into per-script
success rates.  Scripts that fall below the success threshold are *data gaps*;
scripts whose error rate exceeds the error threshold raise *alerts*.  Weekly
reports are saved as JSON and can be rolled up into a multi-week summary with
simple trend detection.

ARCHITECTURE
────────────
::

    [[ExecutionResult], ...]  (one list per run)
         │  build_week_data(week, runs)
         ▼
    WeekData(week, scripts=[ScriptHistory(name, results)])
         │  analyze_data_gaps()      success/error rates, gaps, alerts
         │  generate_recommendations()
         ▼
    weekly report dict ──save_weekly_report()──▶ weekly-report-YYYY-MM-DD-week-N.json

    weekly reports ──generate_summary_report()──▶ data-gap-summary.json

Severity rules:
    data gap     success_rate < 0.5 → critical, < 0.8 → high, else medium
    error alert  error_rate   > 0.2 → critical, else high
    overall      overall_rate < 0.5 → critical, else high

Tags:
    curl-runner, reporting, analytics, data-gaps, alerting, json
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

from curl_runner.core.logging import get_logger
from curl_runner.core.settings import MAX_WEEKS, MIN_WEEKS
from curl_runner.execution.models import ExecutionResult
from curl_runner.storage.reports import read_json, write_json

logger = get_logger(__name__)

REPORT_VERSION = "1.0.0"
SUMMARY_REPORT_FILE = "data-gap-summary.json"
WEEKLY_REPORT_GLOB = "weekly-report-*-week-*.json"

# Relative change in the recent average that counts as a trend.
TREND_TOLERANCE = 0.05


@dataclass(frozen=True)
class DataGapThresholds:
    success_rate: float = 0.95
    error_rate: float = 0.05


@dataclass
class ScriptHistory:
    """All results recorded for one script during a week."""

    name: str
    results: list[ExecutionResult] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if not self.results:
            return 0.0
        return sum(1 for r in self.results if r.success) / len(self.results)


@dataclass
class WeekData:
    week: int
    scripts: list[ScriptHistory] = field(default_factory=list)


def build_week_data(week: int, runs: Iterable[Sequence[ExecutionResult]]) -> WeekData:
    """Group results from several runs by script name, first-seen order."""
    by_name: dict[str, ScriptHistory] = {}
    for run in runs:
        for result in run:
            history = by_name.setdefault(result.job_name, ScriptHistory(result.job_name))
            history.results.append(result)
    return WeekData(week=week, scripts=list(by_name.values()))


def _gap_severity(success_rate: float) -> str:
    if success_rate < 0.5:
        return "critical"
    if success_rate < 0.8:
        return "high"
    return "medium"


def _trend(recent: float, older: float, *, higher_is_better: bool) -> str:
    if recent > older * (1 + TREND_TOLERANCE):
        return "improving" if higher_is_better else "declining"
    if recent < older * (1 - TREND_TOLERANCE):
        return "declining" if higher_is_better else "improving"
    return "stable"


class WeeklyReporter:
    """Builds, saves and rolls up weekly data-gap reports.

    Args:
        reports_dir: Where report JSON files are written.
        weeks: Reporting horizon, clamped to ``[1, 104]``.
        thresholds: Success / error rate thresholds.
    """

    def __init__(
        self,
        reports_dir: str | Path = "./var/reports",
        weeks: int = 52,
        thresholds: DataGapThresholds | None = None,
    ) -> None:
        self.reports_dir = Path(reports_dir)
        self.weeks = max(MIN_WEEKS, min(weeks, MAX_WEEKS))
        self.thresholds = thresholds or DataGapThresholds()

    # ── Analysis ─────────────────────────────────────────────────────

    def analyze_data_gaps(self, week_data: WeekData) -> dict[str, Any]:
        """Per-script rates, data gaps and alerts for one week."""
        analysis: dict[str, Any] = {
            "week": week_data.week,
            "totalScripts": len(week_data.scripts),
            "successfulScripts": 0,
            "failedScripts": 0,
            "dataGaps": [],
            "errorRates": {},
            "successRates": {},
            "alerts": [],
        }

        for script in week_data.scripts:
            success_rate = script.success_rate
            error_rate = 1 - success_rate
            analysis["successRates"][script.name] = success_rate
            analysis["errorRates"][script.name] = error_rate

            if success_rate >= self.thresholds.success_rate:
                analysis["successfulScripts"] += 1
            else:
                analysis["failedScripts"] += 1
                analysis["dataGaps"].append({
                    "script": script.name,
                    "successRate": success_rate,
                    "missingData": error_rate,
                    "severity": _gap_severity(success_rate),
                })

            if error_rate > self.thresholds.error_rate:
                analysis["alerts"].append({
                    "type": "error_rate",
                    "script": script.name,
                    "errorRate": error_rate,
                    "threshold": self.thresholds.error_rate,
                    "severity": "critical" if error_rate > 0.2 else "high",
                })

        total = analysis["totalScripts"]
        overall = analysis["successfulScripts"] / total if total else 0.0
        analysis["overallSuccessRate"] = overall
        analysis["overallErrorRate"] = 1 - overall

        if overall < self.thresholds.success_rate:
            analysis["alerts"].append({
                "type": "overall_performance",
                "overallSuccessRate": overall,
                "threshold": self.thresholds.success_rate,
                "severity": "critical" if overall < 0.5 else "high",
            })

        return analysis

    def generate_recommendations(self, analysis: dict[str, Any]) -> list[dict[str, Any]]:
        recommendations: list[dict[str, Any]] = []

        gaps = analysis["dataGaps"]
        critical_gaps = [g["script"] for g in gaps if g["severity"] == "critical"]
        high_gaps = [g["script"] for g in gaps if g["severity"] == "high"]

        if critical_gaps:
            recommendations.append({
                "priority": "critical",
                "category": "data_gaps",
                "message": f"Critical data gaps detected in {len(critical_gaps)} script(s)",
                "scripts": critical_gaps,
                "action": "Immediate investigation and remediation required",
            })
        if high_gaps:
            recommendations.append({
                "priority": "high",
                "category": "data_gaps",
                "message": f"High priority data gaps detected in {len(high_gaps)} script(s)",
                "scripts": high_gaps,
                "action": "Schedule investigation within 24 hours",
            })

        critical_errors = [
            a["script"] for a in analysis["alerts"]
            if a["type"] == "error_rate" and a["severity"] == "critical"
        ]
        if critical_errors:
            recommendations.append({
                "priority": "critical",
                "category": "error_rates",
                "message": f"Critical error rates detected in {len(critical_errors)} script(s)",
                "scripts": critical_errors,
                "action": "Check API endpoints and script configurations immediately",
            })

        if analysis["overallSuccessRate"] < 0.8:
            recommendations.append({
                "priority": "high",
                "category": "overall_performance",
                "message": f"Overall success rate is {analysis['overallSuccessRate'] * 100:.1f}%",
                "action": "Review all scripts and consider system-wide improvements",
            })

        return recommendations

    def generate_weekly_report(self, week_data: WeekData) -> dict[str, Any]:
        analysis = self.analyze_data_gaps(week_data)
        return {
            "metadata": {
                "generatedAt": datetime.now(UTC).isoformat(),
                "week": analysis["week"],
                "totalWeeks": self.weeks,
                "reportVersion": REPORT_VERSION,
            },
            "summary": {
                "totalScripts": analysis["totalScripts"],
                "successfulScripts": analysis["successfulScripts"],
                "failedScripts": analysis["failedScripts"],
                "overallSuccessRate": analysis["overallSuccessRate"],
                "overallErrorRate": analysis["overallErrorRate"],
                "dataGapsCount": len(analysis["dataGaps"]),
                "alertsCount": len(analysis["alerts"]),
            },
            "analysis": analysis,
            "recommendations": self.generate_recommendations(analysis),
        }

    def generate_summary_report(self, weekly_reports: Sequence[dict[str, Any]]) -> dict[str, Any]:
        """Roll several weekly reports up into one summary."""
        totals = {
            "totalScripts": 0,
            "totalSuccessfulScripts": 0,
            "totalFailedScripts": 0,
            "averageSuccessRate": 0.0,
            "totalDataGaps": 0,
            "totalAlerts": 0,
        }
        breakdown = []
        for report in weekly_reports:
            summary = report["summary"]
            totals["totalScripts"] += summary["totalScripts"]
            totals["totalSuccessfulScripts"] += summary["successfulScripts"]
            totals["totalFailedScripts"] += summary["failedScripts"]
            totals["totalDataGaps"] += summary["dataGapsCount"]
            totals["totalAlerts"] += summary["alertsCount"]
            breakdown.append({
                "week": report["analysis"]["week"],
                "successRate": summary["overallSuccessRate"],
                "errorRate": summary["overallErrorRate"],
                "dataGapsCount": summary["dataGapsCount"],
                "alertsCount": summary["alertsCount"],
            })

        if totals["totalScripts"]:
            totals["averageSuccessRate"] = (
                totals["totalSuccessfulScripts"] / totals["totalScripts"]
            )

        return {
            "metadata": {
                "generatedAt": datetime.now(UTC).isoformat(),
                "totalWeeks": len(weekly_reports),
                "reportVersion": REPORT_VERSION,
            },
            "overallMetrics": totals,
            "weeklyBreakdown": breakdown,
            "trends": self._trends(breakdown),
        }

    def _trends(self, breakdown: list[dict[str, Any]]) -> dict[str, str]:
        """Compare the last two weeks with the two before them."""
        trends = {
            "successRateTrend": "stable",
            "dataGapsTrend": "stable",
            "errorRateTrend": "stable",
        }
        if len(breakdown) < 4:
            return trends

        recent, older = breakdown[-2:], breakdown[-4:-2]

        def avg(rows: list[dict[str, Any]], key: str) -> float:
            return sum(row[key] for row in rows) / len(rows)

        trends["successRateTrend"] = _trend(
            avg(recent, "successRate"), avg(older, "successRate"), higher_is_better=True,
        )
        trends["dataGapsTrend"] = _trend(
            avg(recent, "dataGapsCount"), avg(older, "dataGapsCount"), higher_is_better=False,
        )
        trends["errorRateTrend"] = _trend(
            avg(recent, "errorRate"), avg(older, "errorRate"), higher_is_better=False,
        )
        return trends

    # ── Persistence ──────────────────────────────────────────────────

    def weekly_report_filename(self, week: int, on: date | None = None) -> str:
        day = on or date.today()
        return f"weekly-report-{day.isoformat()}-week-{week}.json"

    def save_weekly_report(self, report: dict[str, Any]) -> Path:
        path = self.reports_dir / self.weekly_report_filename(report["analysis"]["week"])
        write_json(path, report)
        logger.info("weekly.saved", path=str(path), week=report["analysis"]["week"])
        return path

    def load_weekly_reports(self) -> list[dict[str, Any]]:
        """Load saved weekly reports ordered by week, at most ``weeks`` of them."""
        if not self.reports_dir.is_dir():
            return []
        reports = [read_json(p) for p in sorted(self.reports_dir.glob(WEEKLY_REPORT_GLOB))]
        reports.sort(key=lambda r: (r["analysis"]["week"], r["metadata"]["generatedAt"]))
        return reports[-self.weeks:]

    def save_summary_report(self, summary: dict[str, Any]) -> Path:
        path = self.reports_dir / SUMMARY_REPORT_FILE
        write_json(path, summary)
        logger.info("weekly.summary_saved", path=str(path), weeks=summary["metadata"]["totalWeeks"])
        return path


__all__ = [
    "DataGapThresholds",
    "ScriptHistory",
    "WeekData",
    "WeeklyReporter",
    "build_week_data",
    "SUMMARY_REPORT_FILE",
]
