"""Whole-file JSON reads and writes for reports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from curl_runner.core.errors import ReportError
from curl_runner.core.logging import get_logger

logger = get_logger(__name__)


def write_json(path: str | Path, obj: Any) -> Path:
    """Write ``obj`` as indented JSON, creating parent directories.

    Raises:
        ReportError: The file could not be written.
    """
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(obj, indent=2, default=str), encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        raise ReportError(
            f"Failed to write {target}: {exc}", context={"path": str(target)}, cause=exc,
        ) from exc
    logger.info("report.written", path=str(target))
    return target


def read_json(path: str | Path) -> Any:
    """Read a JSON document.

    Raises:
        ReportError: The file is missing or not valid JSON.
    """
    source = Path(path)
    try:
        return json.loads(source.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ReportError(
            f"Failed to read {source}: {exc}", context={"path": str(source)}, cause=exc,
        ) from exc


__all__ = ["write_json", "read_json"]
