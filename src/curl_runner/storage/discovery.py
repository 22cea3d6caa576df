"""Script discovery - list the runnable scripts in a directory."""

from __future__ import annotations

from pathlib import Path

from curl_runner.core.errors import DiscoveryError
from curl_runner.core.logging import get_logger

logger = get_logger(__name__)


def scan_scripts(directory: str | Path, extension: str = ".sh") -> list[str]:
    """Return sorted script names in ``directory``.

    Raises:
        DiscoveryError: The directory exists but cannot be read, or it is
            missing and cannot be created.
    """
    path = Path(directory)
    try:
        if not path.exists():
            path.mkdir(parents=True, exist_ok=True)
            logger.info("discovery.created_directory", directory=str(path))
            return []
        names = sorted(
            entry.name
            for entry in path.iterdir()
            if entry.name.endswith(extension) and entry.is_file()
        )
    except OSError as exc:
        raise DiscoveryError(
            f"Cannot scan {path}: {exc}",
            context={"directory": str(path)},
            cause=exc,
        ) from exc

    logger.debug("discovery.scanned", directory=str(path), found=len(names))
    return names


def list_jobs(directory: str | Path, extension: str = ".sh") -> list[str]:
    """Like :func:`scan_scripts` but never raises; failures yield ``[]``."""
    try:
        return scan_scripts(directory, extension)
    except DiscoveryError as exc:
        logger.warning("discovery.failed", **exc.to_dict())
        return []


__all__ = ["scan_scripts", "list_jobs"]
