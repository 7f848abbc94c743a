"""Base class shared by the converters."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Mapping

from .errors import ConverterError
from .log import ConversionLog

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0


def run_command(args: list[str], timeout: float = DEFAULT_TIMEOUT) -> tuple[int, str, str]:
    """Run an external converter binary with the given arguments."""
    try:
        result = subprocess.run(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
            timeout=timeout,
        )
        return result.returncode, result.stdout, result.stderr
    except subprocess.TimeoutExpired:
        return 124, "", f"TimeoutExpired after {timeout}s"
    except FileNotFoundError:
        return 127, "", f"{args[0]} not found"


class Converter:
    """
    A backend able to write a WebP file.

    Subclasses implement check_operationality() and do_convert(). The options
    they receive are already resolved for the source's format: "quality" is a
    number, "encoding" is "lossy", "lossless" or "auto".
    """

    id: str = ""

    def __init__(self, options: Mapping[str, Any], log: ConversionLog):
        self.options = dict(options)
        self.log = log

    def check_operationality(self) -> None:
        """Raise ConverterNotOperational if the converter cannot run."""

    def do_convert(self, source: Path, destination: Path, options: Mapping[str, Any]) -> None:
        raise NotImplementedError

    def convert(self, source: Path, destination: Path) -> None:
        self.check_operationality()

        if self.options.get("encoding") == "auto":
            self._convert_auto_encoding(source, destination)
        else:
            self._convert_once(source, destination, self.options)

    def _convert_once(self, source: Path, destination: Path, options: Mapping[str, Any]) -> None:
        self.do_convert(source, destination, options)
        if not destination.exists():
            raise ConverterError(f"{self.id} did not produce {destination.name}")

    def _convert_auto_encoding(self, source: Path, destination: Path) -> None:
        """Convert both lossy and lossless, and keep the smaller file."""
        lossy = destination.with_name(destination.name + ".lossy.webp")
        lossless = destination.with_name(destination.name + ".lossless.webp")
        try:
            self.log.line("Encoding is set to auto - converting to both lossless and lossy")
            self._convert_once(source, lossy, {**self.options, "encoding": "lossy"})
            self._convert_once(source, lossless, {**self.options, "encoding": "lossless"})

            lossy_size = lossy.stat().st_size
            lossless_size = lossless.stat().st_size
            if lossless_size < lossy_size:
                self.log.line(f"Picking lossless ({lossless_size} bytes < {lossy_size} bytes)")
                os.replace(lossless, destination)
            else:
                self.log.line(f"Picking lossy ({lossy_size} bytes <= {lossless_size} bytes)")
                os.replace(lossy, destination)
        finally:
            for tmp in (lossy, lossless):
                if tmp.exists():
                    tmp.unlink()
