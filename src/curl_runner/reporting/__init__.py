"""Weekly data-gap reporting over repeated runs."""

from curl_runner.reporting.weekly import (
    SUMMARY_REPORT_FILE,
    DataGapThresholds,
    ScriptHistory,
    WeekData,
    WeeklyReporter,
    build_week_data,
)

__all__ = [
    "DataGapThresholds",
    "ScriptHistory",
    "WeekData",
    "WeeklyReporter",
    "build_week_data",
    "SUMMARY_REPORT_FILE",
]
