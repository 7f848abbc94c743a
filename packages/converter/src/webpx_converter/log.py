"""Per-conversion log, returned to the client and saved next to other logs."""

from __future__ import annotations

import logging
import time
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)


class ConversionLog:
    """Collects human-readable lines about one conversion."""

    def __init__(self) -> None:
        self._lines: list[str] = []

    def line(self, msg: str = "") -> None:
        self._lines.append(msg)
        if msg:
            logger.debug(msg)

    def text(self) -> str:
        return "\n".join(self._lines)


def log_filename(source: Path, log_dir: Path) -> Path:
    """Where the conversion log of a source goes."""
    rel = PurePosixPath(source).relative_to("/")
    return Path(log_dir) / "abs" / f"{rel}.md"


def save_log(source: Path, log_dir: Path, text: str, msg: str) -> Path | None:
    """Write the conversion log. Failure to write is logged, not raised."""
    path = log_filename(source, log_dir)
    stamp = time.strftime("%Y-%m-%d %H:%M:%S")
    content = f"Conversion of {source} at {stamp}\n\n{text}\n\n{msg}\n"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        logger.warning("Failed to save conversion log %s: %s", path, e)
        return None
    return path
