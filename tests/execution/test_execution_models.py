"""Tests for jobs, tagged results, summaries and plans."""

from pathlib import Path

import pytest

from curl_runner.core.errors import InvalidInputError
from curl_runner.execution.models import (
    BatchSummary,
    BoundedCustom,
    EngineConfig,
    Failure,
    FailureKind,
    FixedBatch,
    Job,
    Sequential,
    Success,
    Unlimited,
)


class TestJob:
    def test_in_directory_resolves_path(self, tmp_path):
        job = Job.in_directory(tmp_path, "users.sh")
        assert job.path == tmp_path / "users.sh"
        assert job.name == "users.sh"

    def test_exists(self, tmp_path):
        (tmp_path / "users.sh").write_text("echo hi")
        assert Job.in_directory(tmp_path, "users.sh").exists
        assert not Job.in_directory(tmp_path, "missing.sh").exists

    def test_directory_is_not_a_job(self, tmp_path):
        (tmp_path / "dir.sh").mkdir()
        assert not Job.in_directory(tmp_path, "dir.sh").exists

    def test_command_quotes_path(self):
        job = Job(name="a b.sh", path=Path("/scripts/a b.sh"))
        assert job.command == "bash '/scripts/a b.sh'"

    def test_command_uses_interpreter(self):
        job = Job(name="a.sh", path=Path("/scripts/a.sh"), interpreter="sh")
        assert job.command == "sh /scripts/a.sh"


class TestResults:
    def test_success_shape(self):
        result = Success(job_name="a.sh", output="ok", http_status=200, duration_ms=12)
        assert result.success is True
        assert result.error is None
        assert result.to_dict() == {
            "jobName": "a.sh",
            "success": True,
            "output": "ok",
            "httpStatus": 200,
            "error": None,
            "durationMs": 12,
        }

    def test_failure_shape(self):
        result = Failure(
            job_name="b.sh", error="HTTP 404 error", kind=FailureKind.API_ERROR,
            http_status=404, duration_ms=8,
        )
        assert result.success is False
        data = result.to_dict()
        assert data["error"] == "HTTP 404 error"
        assert data["kind"] == "api_error"
        assert data["httpStatus"] == 404

    def test_failure_requires_error(self):
        with pytest.raises(ValueError):
            Failure(job_name="b.sh", error="", kind=FailureKind.LAUNCH)

    def test_negative_duration_rejected(self):
        with pytest.raises(ValueError):
            Success(job_name="a.sh", duration_ms=-1)

    def test_results_are_frozen(self):
        result = Success(job_name="a.sh")
        with pytest.raises(AttributeError):
            result.output = "changed"  # type: ignore[misc]


class TestBatchSummary:
    def test_success_rate(self):
        assert BatchSummary(total=4, succeeded=3, failed=1).success_rate == 0.75

    def test_success_rate_empty(self):
        assert BatchSummary().success_rate == 0.0

    def test_addition(self):
        combined = BatchSummary(2, 1, 1, 30) + BatchSummary(3, 3, 0, 20)
        assert combined == BatchSummary(5, 4, 1, 50)

    def test_to_dict(self):
        assert BatchSummary(1, 1, 0, 9).to_dict() == {
            "total": 1, "succeeded": 1, "failed": 0, "totalDurationMs": 9,
        }


class TestPlans:
    def test_plan_names(self):
        assert Sequential().name == "sequential"
        assert Unlimited().name == "unlimited"
        assert FixedBatch(3).name == "fixed_batch"
        assert BoundedCustom(2).name == "bounded_custom"

    @pytest.mark.parametrize("size", [0, -1])
    def test_fixed_batch_size_must_be_positive(self, size):
        with pytest.raises(InvalidInputError):
            FixedBatch(batch_size=size)

    @pytest.mark.parametrize("size", [0, -3])
    def test_bounded_custom_must_be_positive(self, size):
        with pytest.raises(InvalidInputError):
            BoundedCustom(max_concurrent=size)

    def test_negative_delays_rejected(self):
        with pytest.raises(InvalidInputError):
            Sequential(delay_ms=-1)
        with pytest.raises(InvalidInputError):
            FixedBatch(batch_size=2, inter_batch_delay_ms=-5)
        with pytest.raises(InvalidInputError):
            BoundedCustom(max_concurrent=2, delay_ms=-5)


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.script_delay_ms == 100
        assert config.interpreter == "bash"
        assert config.timeout_seconds is None

    def test_rejects_negative_delay(self):
        with pytest.raises(InvalidInputError):
            EngineConfig(script_delay_ms=-1)

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(InvalidInputError):
            EngineConfig(timeout_seconds=0)
