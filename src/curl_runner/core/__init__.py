"""Core primitives shared by every curl-runner layer: errors, logging, settings."""

from curl_runner.core.errors import (
    ConfigError,
    CurlRunnerError,
    DiscoveryError,
    ErrorCategory,
    InvalidInputError,
    ReportError,
)
from curl_runner.core.logging import LogContext, configure_logging, get_logger
from curl_runner.core.settings import RunnerSettings, clear_settings_cache, get_settings

__all__ = [
    "ErrorCategory",
    "CurlRunnerError",
    "InvalidInputError",
    "DiscoveryError",
    "ConfigError",
    "ReportError",
    "LogContext",
    "configure_logging",
    "get_logger",
    "RunnerSettings",
    "get_settings",
    "clear_settings_cache",
]
