"""Tests for weekly data-gap analysis, reports and summaries."""

from datetime import date

import pytest

from curl_runner.execution.models import Failure, FailureKind, Success
from curl_runner.reporting.weekly import (
    SUMMARY_REPORT_FILE,
    DataGapThresholds,
    ScriptHistory,
    WeekData,
    WeeklyReporter,
    build_week_data,
)


def ok(name):
    return Success(job_name=name, http_status=200, duration_ms=10)


def bad(name, status=500):
    return Failure(
        job_name=name, error=f"HTTP {status} error", kind=FailureKind.API_ERROR,
        http_status=status, duration_ms=10,
    )


def history(name, successes, failures):
    return ScriptHistory(name, [ok(name)] * successes + [bad(name)] * failures)


@pytest.fixture
def reporter(tmp_path):
    return WeeklyReporter(tmp_path / "reports", weeks=52)


class TestBuildWeekData:
    def test_groups_runs_by_script(self):
        runs = [[ok("a.sh"), bad("b.sh")], [ok("a.sh"), ok("b.sh")]]
        week = build_week_data(3, runs)
        assert week.week == 3
        assert [s.name for s in week.scripts] == ["a.sh", "b.sh"]
        assert week.scripts[0].success_rate == 1.0
        assert week.scripts[1].success_rate == 0.5

    def test_empty_history_rate(self):
        assert ScriptHistory("x.sh").success_rate == 0.0


class TestAnalyzeDataGaps:
    def test_all_healthy(self, reporter):
        analysis = reporter.analyze_data_gaps(WeekData(1, [history("a.sh", 10, 0)]))
        assert analysis["successfulScripts"] == 1
        assert analysis["dataGaps"] == []
        assert analysis["alerts"] == []
        assert analysis["overallSuccessRate"] == 1.0

    @pytest.mark.parametrize(
        ("successes", "failures", "severity"),
        [(4, 6, "critical"), (7, 3, "high"), (9, 1, "medium")],
    )
    def test_gap_severity(self, reporter, successes, failures, severity):
        analysis = reporter.analyze_data_gaps(
            WeekData(1, [history("a.sh", successes, failures)]),
        )
        (gap,) = analysis["dataGaps"]
        assert gap["script"] == "a.sh"
        assert gap["severity"] == severity
        assert gap["missingData"] == pytest.approx(failures / 10)

    def test_error_rate_alerts(self, reporter):
        analysis = reporter.analyze_data_gaps(
            WeekData(1, [history("a.sh", 7, 3), history("b.sh", 9, 1)]),
        )
        by_script = {a["script"]: a for a in analysis["alerts"] if a["type"] == "error_rate"}
        assert by_script["a.sh"]["severity"] == "critical"
        assert by_script["b.sh"]["severity"] == "high"

    def test_overall_performance_alert(self, reporter):
        analysis = reporter.analyze_data_gaps(
            WeekData(1, [history("a.sh", 10, 0), history("b.sh", 0, 10), history("c.sh", 0, 10)]),
        )
        overall = [a for a in analysis["alerts"] if a["type"] == "overall_performance"]
        assert len(overall) == 1
        assert overall[0]["severity"] == "critical"
        assert analysis["overallSuccessRate"] == pytest.approx(1 / 3)

    def test_custom_thresholds(self, tmp_path):
        lenient = WeeklyReporter(tmp_path, thresholds=DataGapThresholds(0.5, 0.6))
        analysis = lenient.analyze_data_gaps(WeekData(1, [history("a.sh", 6, 4)]))
        assert analysis["dataGaps"] == []
        assert analysis["alerts"] == []

    def test_empty_week(self, reporter):
        analysis = reporter.analyze_data_gaps(WeekData(1, []))
        assert analysis["totalScripts"] == 0
        assert analysis["overallSuccessRate"] == 0.0


class TestRecommendations:
    def test_critical_and_high(self, reporter):
        analysis = reporter.analyze_data_gaps(
            WeekData(1, [history("a.sh", 2, 8), history("b.sh", 7, 3)]),
        )
        recs = reporter.generate_recommendations(analysis)
        categories = [(r["priority"], r["category"]) for r in recs]
        assert ("critical", "data_gaps") in categories
        assert ("high", "data_gaps") in categories
        assert ("critical", "error_rates") in categories
        assert ("high", "overall_performance") in categories

    def test_none_when_healthy(self, reporter):
        analysis = reporter.analyze_data_gaps(WeekData(1, [history("a.sh", 5, 0)]))
        assert reporter.generate_recommendations(analysis) == []


class TestWeeklyReport:
    def test_report_shape(self, reporter):
        report = reporter.generate_weekly_report(WeekData(4, [history("a.sh", 1, 1)]))
        assert set(report) == {"metadata", "summary", "analysis", "recommendations"}
        assert report["metadata"]["week"] == 4
        assert report["metadata"]["totalWeeks"] == 52
        assert report["summary"]["dataGapsCount"] == 1
        assert report["summary"]["alertsCount"] == 2

    def test_weeks_clamped(self, tmp_path):
        assert WeeklyReporter(tmp_path, weeks=0).weeks == 1
        assert WeeklyReporter(tmp_path, weeks=500).weeks == 104

    def test_filename(self, reporter):
        name = reporter.weekly_report_filename(7, on=date(2026, 10, 19))
        assert name == "weekly-report-2026-10-19-week-7.json"

    def test_save_and_load(self, reporter):
        for week in (2, 1):
            report = reporter.generate_weekly_report(WeekData(week, [history("a.sh", 1, 0)]))
            path = reporter.save_weekly_report(report)
            assert path.exists()
        loaded = reporter.load_weekly_reports()
        assert [r["analysis"]["week"] for r in loaded] == [1, 2]

    def test_load_respects_horizon(self, tmp_path):
        reporter = WeeklyReporter(tmp_path, weeks=2)
        for week in (1, 2, 3):
            reporter.save_weekly_report(
                reporter.generate_weekly_report(WeekData(week, [history("a.sh", 1, 0)])),
            )
        assert [r["analysis"]["week"] for r in reporter.load_weekly_reports()] == [2, 3]

    def test_load_without_directory(self, tmp_path):
        assert WeeklyReporter(tmp_path / "nope").load_weekly_reports() == []


class TestSummaryReport:
    def _reports(self, reporter, rates):
        reports = []
        for week, (successes, failures) in enumerate(rates, start=1):
            scripts = [history(f"s{i}.sh", 1, 0) for i in range(successes)]
            scripts += [history(f"f{i}.sh", 0, 1) for i in range(failures)]
            reports.append(reporter.generate_weekly_report(WeekData(week, scripts)))
        return reports

    def test_totals(self, reporter):
        summary = reporter.generate_summary_report(self._reports(reporter, [(3, 1), (2, 2)]))
        metrics = summary["overallMetrics"]
        assert metrics["totalScripts"] == 8
        assert metrics["totalSuccessfulScripts"] == 5
        assert metrics["totalFailedScripts"] == 3
        assert metrics["averageSuccessRate"] == pytest.approx(5 / 8)
        assert [w["week"] for w in summary["weeklyBreakdown"]] == [1, 2]

    def test_trends_need_four_weeks(self, reporter):
        summary = reporter.generate_summary_report(self._reports(reporter, [(1, 3), (4, 0)]))
        assert set(summary["trends"].values()) == {"stable"}

    def test_improving(self, reporter):
        reports = self._reports(reporter, [(1, 3), (1, 3), (4, 0), (4, 0)])
        trends = reporter.generate_summary_report(reports)["trends"]
        assert trends["successRateTrend"] == "improving"
        assert trends["dataGapsTrend"] == "improving"
        assert trends["errorRateTrend"] == "improving"

    def test_declining(self, reporter):
        reports = self._reports(reporter, [(4, 0), (4, 0), (1, 3), (1, 3)])
        trends = reporter.generate_summary_report(reports)["trends"]
        assert trends["successRateTrend"] == "declining"
        assert trends["dataGapsTrend"] == "declining"
        assert trends["errorRateTrend"] == "declining"

    def test_save_summary(self, reporter):
        path = reporter.save_summary_report(reporter.generate_summary_report([]))
        assert path.name == SUMMARY_REPORT_FILE
        assert path.exists()
