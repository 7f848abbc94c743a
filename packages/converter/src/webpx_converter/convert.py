"""
Conversion delegate: turn one JPEG or PNG into a WebP.

This module handles the high-level conversion workflow:
1. Sniff the source format and resolve the options for it
2. Resolve "auto" quality from the JPEG's own quality
3. Try each converter of the stack until one produces the WebP
4. Save the conversion log
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from webpx_shared.converters import CONVERTER_IDS

from .analysis import ImageType, detect_image_type, estimate_jpeg_quality
from .base import Converter
from .cwebp import CwebpConverter
from .errors import ConverterError, ConverterNotOperational
from .imagemagick import ImageMagickConverter
from .log import ConversionLog, save_log
from .pillow import PillowConverter

logger = logging.getLogger(__name__)

CONVERTERS: dict[str, type[Converter]] = {
    "cwebp": CwebpConverter,
    "imagemagick": ImageMagickConverter,
    "pillow": PillowConverter,
}

DEFAULT_QUALITY = 75
_GROUP_KEYS = ("jpeg", "png", "converters")


def resolve_options(
    options: Mapping[str, Any],
    image_type: ImageType,
    source: Path,
    log: ConversionLog,
) -> dict[str, Any]:
    """Flatten the format group into the general options and settle quality."""
    resolved = {k: v for k, v in options.items() if k not in _GROUP_KEYS}
    group = options.get(image_type)
    if isinstance(group, Mapping):
        resolved.update(group)

    quality = resolved.get("quality", DEFAULT_QUALITY)
    if quality == "auto":
        default_quality = int(resolved.get("default-quality", DEFAULT_QUALITY))
        max_quality = int(resolved.get("max-quality", 100))
        detected = estimate_jpeg_quality(source) if image_type == "jpeg" else None
        if detected is None:
            log.line(f"Quality of source could not be detected. Using default quality ({default_quality})")
            quality = default_quality
        else:
            quality = min(detected, max_quality)
            log.line(f"Quality of source is {detected}. Using quality {quality} (max-quality: {max_quality})")
    resolved["quality"] = int(quality)
    resolved.setdefault("encoding", "lossy")
    return resolved


class ConversionStack:
    """
    Orchestrates the conversion of a single image to WebP.

    Converters are tried in order. A converter that is not operational or
    fails is logged and skipped. With a converter id, only that converter is
    tried, using the options as given.
    """

    def __init__(
        self,
        source: Path,
        destination: Path,
        options: Mapping[str, Any],
        converter_id: str | None = None,
    ):
        self.source = Path(source)
        self.destination = Path(destination)
        self.options = dict(options)
        self.converter_id = converter_id
        self.log = ConversionLog()

    def _stack(self) -> list[tuple[str, dict[str, Any]]]:
        if self.converter_id is not None:
            return [(self.converter_id, {})]
        entries = self.options.get("converters") or [{"converter": c} for c in CONVERTER_IDS]
        stack = []
        for entry in entries:
            if isinstance(entry, str):
                stack.append((entry, {}))
            else:
                stack.append((entry.get("converter", ""), dict(entry.get("options") or {})))
        return stack

    def run(self) -> str:
        """Execute the conversion. Returns a message, raises ConverterError on failure."""
        if self.options.get("log-call-arguments"):
            self.log.line(f"source: {self.source}")
            self.log.line(f"destination: {self.destination}")
            self.log.line(f"options: {json.dumps(self.options, default=str)}")
            self.log.line()

        image_type = detect_image_type(self.source)
        try:
            general = resolve_options(self.options, image_type, self.source, self.log)
        except (ValueError, TypeError) as e:
            raise ConverterError(f"Invalid conversion options: {e}") from e

        try:
            self.destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConverterError(f"Could not create destination folder: {e}") from e

        failures: list[tuple[str, str]] = []
        operational = 0
        for converter_id, converter_options in self._stack():
            cls = CONVERTERS.get(converter_id)
            if cls is None:
                self.log.line(f"Unknown converter: {converter_id}")
                failures.append((converter_id, "unknown converter"))
                continue

            self.log.line(f"Trying: {converter_id}")
            converter = cls({**general, **converter_options}, self.log)
            try:
                converter.convert(self.source, self.destination)
            except ConverterNotOperational as e:
                self.log.line(f"{converter_id} is not operational: {e}")
                failures.append((converter_id, str(e)))
                continue
            except ConverterError as e:
                operational += 1
                self.log.line(f"{converter_id} failed: {e}")
                failures.append((converter_id, str(e)))
                continue
            except (ValueError, TypeError) as e:
                # Converter options come from config.json unchecked
                operational += 1
                self.log.line(f"{converter_id} failed: invalid option: {e}")
                failures.append((converter_id, f"invalid option: {e}"))
                continue

            self.log.line(f"Converted with {converter_id}")
            logger.info("Converted %s with %s", self.source, converter_id)
            return "Success"

        if self.converter_id is not None and failures:
            raise ConverterError(failures[0][1])
        if operational == 0:
            raise ConverterNotOperational("None of the converters in the stack are operational")
        raise ConverterError("None of the converters in the stack could convert the image. " + "; ".join(f"{c}: {m}" for c, m in failures))


def convert(
    source: Path | str,
    destination: Path | str,
    options: Mapping[str, Any],
    log_dir: Path | str,
    converter_id: str | None = None,
) -> dict[str, Any]:
    """
    Convert source to destination and save the conversion log in log_dir.

    Never raises for conversion failures: the outcome is reported as
    {"success": bool, "msg": str, "log": str}.
    """
    stack = ConversionStack(Path(source), Path(destination), options, converter_id)
    success = False
    try:
        msg = stack.run()
        success = True
    except ConverterError as e:
        msg = str(e)
        logger.warning("Conversion of %s failed: %s", source, msg)

    save_log(Path(source), Path(log_dir), stack.log.text(), msg)
    return {"success": success, "msg": msg, "log": stack.log.text()}
