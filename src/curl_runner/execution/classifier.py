"""Output classifier - turn captured script output into a verdict.

Scripts report the HTTP status they received by printing a marker line::

    HTTP Status: 404

The classifier looks for the first such marker in stdout.  A status of 400 or
more is an API error regardless of any upper bound, so a nonsense status such
as 700 is still reported as an error.

Tags:
    curl-runner, execution, classifier, http-status, parsing
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

STATUS_MARKER = re.compile(r"HTTP Status: (\d+)")

API_ERROR_MIN_STATUS = 400


class StatusCategory(str, Enum):
    """Coarse HTTP status class used in error logs and failure details."""

    SUCCESS = "success"
    REDIRECTION = "redirection"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Classification:
    """Verdict for one job's output."""

    http_status: int | None = None
    is_api_error: bool = False
    error_message: str | None = None


def extract_http_status(stdout: str) -> int | None:
    """Return the first ``HTTP Status: <digits>`` value in ``stdout``."""
    match = STATUS_MARKER.search(stdout or "")
    return int(match.group(1)) if match else None


def classify(stdout: str, stderr: str) -> Classification:
    """Classify captured output.  Never raises."""
    http_status = extract_http_status(stdout)
    is_api_error = http_status is not None and http_status >= API_ERROR_MIN_STATUS

    if stderr:
        error_message: str | None = stderr
    elif is_api_error:
        error_message = f"HTTP {http_status} error"
    else:
        error_message = None

    return Classification(
        http_status=http_status,
        is_api_error=is_api_error,
        error_message=error_message,
    )


def categorize_status(status: int | None) -> StatusCategory:
    """Map a status code to its class; ``None`` and < 200 are unknown."""
    if status is None:
        return StatusCategory.UNKNOWN
    if status >= 500:
        return StatusCategory.SERVER_ERROR
    if status >= 400:
        return StatusCategory.CLIENT_ERROR
    if status >= 300:
        return StatusCategory.REDIRECTION
    if status >= 200:
        return StatusCategory.SUCCESS
    return StatusCategory.UNKNOWN


class OutputClassifier:
    """Object form of :func:`classify` so the engine can take a substitute."""

    def classify(self, stdout: str, stderr: str) -> Classification:
        return classify(stdout, stderr)


__all__ = [
    "STATUS_MARKER",
    "StatusCategory",
    "Classification",
    "OutputClassifier",
    "classify",
    "extract_http_status",
    "categorize_status",
]
