"""
Centralized settings for curl-runner.

Manifesto:
    One validated, cached settings object holds every default the runner
    needs (directories, delays, batch sizes, reporting thresholds).  The
    engine never reads these directly; it receives an explicit
    :class:`~curl_runner.execution.models.EngineConfig` built by
    :meth:`RunnerSettings.engine_config`.

All fields can be set through ``CURL_RUNNER_*`` environment variables (e.g.
``CURL_RUNNER_BATCH_SIZE=3``) or a ``.env`` file.  The CLI layers its option
values on top with :meth:`RunnerSettings.with_overrides`.

Tags:
    curl-runner, configuration, settings, pydantic, caching, validation
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from curl_runner.core.errors import ConfigError

if TYPE_CHECKING:
    from curl_runner.execution.models import EngineConfig

MIN_WEEKS = 1
MAX_WEEKS = 104


class RunnerSettings(BaseSettings):
    """curl-runner configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CURL_RUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ── Directories ──────────────────────────────────────────────
    scripts_dir: Path = Field(default=Path("./cURL_scripts"))
    logs_dir: Path = Field(default=Path("./var/logs"))
    reports_dir: Path = Field(default=Path("./var/reports"))

    # ── Log files ────────────────────────────────────────────────
    report_log_file: str = "curl-runner-report.log"
    error_log_file: str = "curl-api-errors.log"

    # ── Execution ────────────────────────────────────────────────
    script_extension: str = ".sh"
    interpreter: str = "bash"
    script_delay_ms: int = Field(default=100, ge=0)
    batch_size: int = Field(default=5, ge=1)
    batch_delay_ms: int = Field(default=200, ge=0)
    max_concurrent: int = Field(default=10, ge=1)
    timeout_seconds: float | None = Field(default=None, gt=0)

    # ── Weekly reporting ─────────────────────────────────────────
    weeks: int = 52
    success_rate_threshold: float = Field(default=0.95, ge=0, le=1)
    error_rate_threshold: float = Field(default=0.05, ge=0, le=1)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "WARNING"
    log_json: bool | None = None

    @field_validator("weeks")
    @classmethod
    def _clamp_weeks(cls, value: int) -> int:
        return max(MIN_WEEKS, min(value, MAX_WEEKS))

    @field_validator("script_extension")
    @classmethod
    def _dotted_extension(cls, value: str) -> str:
        return value if value.startswith(".") else f".{value}"

    def engine_config(self) -> EngineConfig:
        """Build the immutable engine configuration from these settings."""
        from curl_runner.execution.models import EngineConfig

        return EngineConfig(
            script_delay_ms=self.script_delay_ms,
            interpreter=self.interpreter,
            timeout_seconds=self.timeout_seconds,
        )

    def with_overrides(self, **overrides: Any) -> RunnerSettings:
        """Return a validated copy with the non-``None`` overrides applied.

        Raises:
            ConfigError: If an override fails validation.
        """
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        try:
            return self.__class__.model_validate({**self.model_dump(), **updates})
        except ValidationError as exc:
            raise ConfigError(f"Invalid settings: {exc}", cause=exc) from exc


@lru_cache(maxsize=1)
def get_settings() -> RunnerSettings:
    """Load, validate, and cache settings from the environment.

    Raises:
        ConfigError: If the environment holds invalid values.
    """
    try:
        return RunnerSettings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}", cause=exc) from exc


def clear_settings_cache() -> None:
    """Reset the cached settings (tests and long-lived processes)."""
    get_settings.cache_clear()


__all__ = ["RunnerSettings", "get_settings", "clear_settings_cache", "MIN_WEEKS", "MAX_WEEKS"]
