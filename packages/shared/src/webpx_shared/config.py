"""
Plugin configuration (config.json) and the conversion options derived from it.

The file uses kebab-case keys. Loading never fails: a missing or corrupt file
gives the defaults, and invalid values are replaced by their defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Mapping

from .converters import CONVERTER_IDS, active_converters, default_converters

logger = logging.getLogger(__name__)

DestinationFolder = Literal["mingled", "separate", "custom"]
DestinationExtension = Literal["append", "set"]
Encoding = Literal["auto", "lossy", "lossless"]
Metadata = Literal["none", "exif", "icc", "all"]

DESTINATION_FOLDERS = ("mingled", "separate", "custom")
DESTINATION_EXTENSIONS = ("append", "set")
ENCODINGS = ("auto", "lossy", "lossless")
METADATA = ("none", "exif", "icc", "all")

PNG_LOSSY_QUALITY = 85

_CHOICES: dict[str, tuple[str, ...]] = {
    "destination_folder": DESTINATION_FOLDERS,
    "destination_extension": DESTINATION_EXTENSIONS,
    "jpeg_encoding": ENCODINGS,
    "png_encoding": ENCODINGS,
    "metadata": METADATA,
}
_PERCENTAGES = (
    "max_quality",
    "quality_specific",
    "jpeg_near_lossless",
    "png_near_lossless",
    "alpha_quality",
)
_FLAGS = (
    "quality_auto",
    "jpeg_enable_near_lossless",
    "png_enable_near_lossless",
    "log_call_arguments",
)


def _key(name: str) -> str:
    return name.replace("_", "-")


@dataclass(frozen=True)
class WebPExpressConfig:
    """Typed view of config.json."""

    destination_folder: DestinationFolder = "separate"
    destination_extension: DestinationExtension = "append"
    destination_folder_custom: str | None = None
    quality_auto: bool = True
    max_quality: int = 80
    quality_specific: int = 70
    jpeg_encoding: Encoding = "auto"
    jpeg_enable_near_lossless: bool = True
    jpeg_near_lossless: int = 60
    png_encoding: Encoding = "auto"
    png_enable_near_lossless: bool = True
    png_near_lossless: int = 60
    alpha_quality: int = 80
    metadata: Metadata = "none"
    log_call_arguments: bool = True
    converters: list[dict[str, Any]] = field(default_factory=default_converters)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WebPExpressConfig":
        """Build a config from a kebab-keyed mapping, fixing invalid values."""
        defaults = cls()
        known = {_key(f.name): f.name for f in fields(cls)}
        values: dict[str, Any] = {}

        for key, value in data.items():
            name = known.get(key)
            if name is None:
                logger.debug("Ignoring unknown config key: %s", key)
                continue
            fixed = _fix(name, value, getattr(defaults, name))
            values[name] = fixed

        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        d = {_key(f.name): getattr(self, f.name) for f in fields(self)}
        d["converters"] = json.loads(json.dumps(self.converters))
        return d

    def merged(self, overrides: Mapping[str, Any]) -> "WebPExpressConfig":
        """Shallow merge overrides on top of this config. Override keys win."""
        return type(self).from_dict({**self.to_dict(), **overrides})


def _fix(name: str, value: Any, default: Any) -> Any:
    if name in _CHOICES:
        if value in _CHOICES[name]:
            return value
    elif name in _PERCENTAGES:
        if isinstance(value, (int, float)) and not isinstance(value, bool) and 0 <= value <= 100:
            return int(value)
    elif name in _FLAGS:
        if isinstance(value, bool):
            return value
    elif name == "destination_folder_custom":
        if value is None or (isinstance(value, str) and value.startswith("/")):
            return value
    elif name == "converters":
        if isinstance(value, list):
            return _fix_converters(value)

    logger.warning("Invalid value for %s: %r. Using default: %r", _key(name), value, default)
    return default


def _fix_converters(entries: list[Any]) -> list[dict[str, Any]]:
    result = []
    for entry in entries:
        if not isinstance(entry, dict) or entry.get("converter") not in CONVERTER_IDS:
            logger.warning("Dropping unknown converter entry: %r", entry)
            continue
        options = entry.get("options")
        fixed = dict(entry)
        fixed["options"] = dict(options) if isinstance(options, dict) else {}
        fixed["deactivated"] = bool(entry.get("deactivated", False))
        result.append(fixed)
    return result


def load_config_and_fix(path: Path) -> WebPExpressConfig:
    """Load config.json. Returns the default config if it cannot be read."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.info("No config file at %s, using defaults", path)
        return WebPExpressConfig()
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Could not load config file %s: %s. Using defaults", path, e)
        return WebPExpressConfig()

    if not isinstance(data, dict):
        logger.warning("Config file %s is not a JSON object. Using defaults", path)
        return WebPExpressConfig()

    return WebPExpressConfig.from_dict(data)


def save_config(config: WebPExpressConfig, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")


def generate_wod_options(config: WebPExpressConfig) -> dict[str, Any]:
    """
    Generate the options handed to the conversion delegate.

    The result mirrors the webp-on-demand options file, so the conversion
    options live under ["webp-convert"]["convert"]. Near-lossless 100 means
    near-lossless is disabled.
    """
    jpeg: dict[str, Any] = {
        "encoding": config.jpeg_encoding,
        "near-lossless": config.jpeg_near_lossless if config.jpeg_enable_near_lossless else 100,
    }
    if config.quality_auto:
        jpeg["quality"] = "auto"
        jpeg["max-quality"] = config.max_quality
        jpeg["default-quality"] = config.quality_specific
    else:
        jpeg["quality"] = config.quality_specific

    png: dict[str, Any] = {
        "encoding": config.png_encoding,
        "quality": PNG_LOSSY_QUALITY,
        "near-lossless": config.png_near_lossless if config.png_enable_near_lossless else 100,
        "alpha-quality": config.alpha_quality,
    }

    convert = {
        "converters": active_converters(config),
        "metadata": config.metadata,
        "log-call-arguments": config.log_call_arguments,
        "jpeg": jpeg,
        "png": png,
    }
    return {"webp-convert": {"convert": convert}}
