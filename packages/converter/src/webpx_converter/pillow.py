"""Converter that encodes in-process with Pillow's WebP plugin."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from PIL import Image, ImageOps, features

from .base import Converter
from .errors import ConverterError, ConverterNotOperational

logger = logging.getLogger(__name__)


class PillowConverter(Converter):
    """Converts with Pillow. Requires Pillow built with libwebp."""

    id = "pillow"

    def check_operationality(self) -> None:
        if not features.check("webp"):
            raise ConverterNotOperational("Pillow was built without WebP support")

    def do_convert(self, source: Path, destination: Path, options: Mapping[str, Any]) -> None:
        save_kwargs: dict[str, Any] = {
            "format": "WEBP",
            "method": int(options.get("method", 6)),
        }
        if options.get("encoding") == "lossless":
            save_kwargs["lossless"] = True
            save_kwargs["quality"] = 100
        else:
            save_kwargs["quality"] = int(options.get("quality", 75))

        metadata = options.get("metadata", "none")

        try:
            with Image.open(source) as img:
                if metadata in ("exif", "all") and "exif" in img.info:
                    save_kwargs["exif"] = img.info["exif"]
                if metadata in ("icc", "all") and "icc_profile" in img.info:
                    save_kwargs["icc_profile"] = img.info["icc_profile"]

                if metadata == "none":
                    img = ImageOps.exif_transpose(img)
                if img.mode not in ("RGB", "RGBA"):
                    img = img.convert("RGBA" if "transparency" in img.info or img.mode in ("LA", "PA") else "RGB")

                self.log.line(f"Saving with Pillow: {save_kwargs.get('quality')} quality, "
                              f"lossless={save_kwargs.get('lossless', False)}")
                img.save(destination, **save_kwargs)
        except OSError as e:
            raise ConverterError(f"pillow failed: {e}") from e
