"""
Wrapper for the cwebp command-line tool.

This module provides a Python interface to cwebp with:
- Proper error handling and custom exceptions
- Lookup of the binary in common system paths
- Automatic retry with a partition limit on partition overflow errors
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
from pathlib import Path
from typing import Any, Mapping

from .base import DEFAULT_TIMEOUT, Converter, run_command
from .errors import ConverterError, ConverterNotOperational

logger = logging.getLogger(__name__)

COMMON_SYSTEM_PATHS = (
    "/usr/bin/cwebp",
    "/usr/local/bin/cwebp",
    "/usr/gnu/bin/cwebp",
    "/usr/syno/bin/cwebp",
    "/opt/homebrew/bin/cwebp",
)


class CwebpError(ConverterError):
    """Raised when cwebp fails to convert an image."""

    def __init__(self, command: list[str], returncode: int, stderr: str):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"cwebp failed (rc={returncode}): {stderr.strip()}")


def _is_partition_overflow(stderr: str) -> bool:
    """Check if error is a partition overflow (retry-able)."""
    if not stderr:
        return False
    return "PARTITION0_OVERFLOW" in stderr or "Error code: 6" in stderr


def find_binary(try_common_system_paths: bool = True) -> str | None:
    found = shutil.which("cwebp")
    if found:
        return found
    if try_common_system_paths:
        for candidate in COMMON_SYSTEM_PATHS:
            if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
                return candidate
    return None


def build_args(options: Mapping[str, Any]) -> list[str]:
    """Translate resolved conversion options to cwebp arguments."""
    args = ["-metadata", str(options.get("metadata", "none"))]

    if options.get("encoding") == "lossless":
        near_lossless = int(options.get("near-lossless", 100))
        if near_lossless < 100:
            args += ["-near_lossless", str(near_lossless)]
        else:
            args.append("-lossless")
    else:
        args += ["-q", str(options.get("quality", 75))]

    if "alpha-quality" in options:
        args += ["-alpha_q", str(options["alpha-quality"])]
    if "method" in options:
        args += ["-m", str(options["method"])]
    if options.get("low-memory"):
        args.append("-low_memory")

    extra = str(options.get("command-line-options") or "").strip()
    if extra:
        args += shlex.split(extra)

    return args


def convert_with_retry(
    binary: str,
    input_path: Path,
    output_path: Path,
    cwebp_args: list[str],
    max_retries: int = 4,
    timeout: float = DEFAULT_TIMEOUT,
    prefix: list[str] | None = None,
) -> None:
    """
    Convert an image to WebP, retrying with a partition limit on overflow.

    Raises:
        CwebpError: If all attempts fail
        FileNotFoundError: If input file doesn't exist
    """
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    cmd = list(prefix or []) + [binary, "-mt"] + cwebp_args + [str(input_path), "-o", str(output_path)]

    logger.debug("Running: %s", " ".join(cmd))
    returncode, stdout, stderr = run_command(cmd, timeout)

    if returncode == 0:
        return

    if not _is_partition_overflow(stderr):
        raise CwebpError(cmd, returncode, stderr)

    retry_cmd = list(cmd)
    for attempt in range(1, max_retries + 1):
        limit = min(100, attempt * 100 // max_retries)
        retry_cmd = cmd[:-3] + ["-partition_limit", str(limit)] + cmd[-3:]

        logger.info("Retry %d/%d with partition limit %d", attempt, max_retries, limit)
        returncode, stdout, stderr = run_command(retry_cmd, timeout)

        if returncode == 0:
            return

        if not _is_partition_overflow(stderr):
            raise CwebpError(retry_cmd, returncode, stderr)

    raise CwebpError(retry_cmd, returncode, stderr)


class CwebpConverter(Converter):
    """Converts by executing the cwebp binary."""

    id = "cwebp"

    def check_operationality(self) -> None:
        self.binary = find_binary(bool(self.options.get("try-common-system-paths", True)))
        if self.binary is None:
            raise ConverterNotOperational("cwebp binary not found")

    def do_convert(self, source: Path, destination: Path, options: Mapping[str, Any]) -> None:
        prefix = []
        if options.get("use-nice") and shutil.which("nice"):
            prefix = ["nice"]
        args = build_args(options)
        self.log.line(f"Executing cwebp: {self.binary} {' '.join(args)}")
        convert_with_retry(self.binary, source, destination, args, prefix=prefix)
