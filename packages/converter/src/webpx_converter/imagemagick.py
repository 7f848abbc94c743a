"""Converter that executes ImageMagick (magick, or convert on IM6)."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Mapping

from .base import DEFAULT_TIMEOUT, Converter, run_command
from .errors import ConverterError, ConverterNotOperational

logger = logging.getLogger(__name__)


def find_binary() -> list[str] | None:
    magick = shutil.which("magick")
    if magick:
        return [magick]
    convert = shutil.which("convert")
    if convert:
        return [convert]
    return None


def build_args(options: Mapping[str, Any]) -> list[str]:
    args: list[str] = []
    if options.get("encoding") == "lossless":
        args += ["-define", "webp:lossless=true", "-quality", "100"]
    else:
        args += ["-quality", str(options.get("quality", 75))]
    if "alpha-quality" in options:
        args += ["-define", f"webp:alpha-quality={options['alpha-quality']}"]
    args += ["-define", f"webp:method={options.get('method', 6)}"]
    if options.get("metadata", "none") == "none":
        args.append("-strip")
    return args


class ImageMagickConverter(Converter):
    """Converts with ImageMagick, which must be compiled with WebP support."""

    id = "imagemagick"

    def check_operationality(self) -> None:
        self.command = find_binary()
        if self.command is None:
            raise ConverterNotOperational("ImageMagick is not installed")

    def do_convert(self, source: Path, destination: Path, options: Mapping[str, Any]) -> None:
        prefix = []
        if options.get("use-nice") and shutil.which("nice"):
            prefix = ["nice"]
        cmd = prefix + self.command + [str(source)] + build_args(options) + [f"webp:{destination}"]
        self.log.line(f"Executing: {' '.join(cmd)}")

        returncode, stdout, stderr = run_command(cmd, DEFAULT_TIMEOUT)
        if returncode != 0:
            if "no encode delegate" in stderr.lower():
                raise ConverterNotOperational("ImageMagick was compiled without WebP support")
            raise ConverterError(f"imagemagick failed (rc={returncode}): {stderr.strip()}")
