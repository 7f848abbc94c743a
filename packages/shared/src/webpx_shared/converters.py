"""Registry of the converters the delegate knows how to run."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import WebPExpressConfig

# Order is the default try-order of the conversion stack
CONVERTER_IDS: tuple[str, ...] = ("cwebp", "imagemagick", "pillow")

DEFAULT_CONVERTERS: list[dict[str, Any]] = [
    {
        "converter": "cwebp",
        "deactivated": False,
        "options": {
            "use-nice": True,
            "try-common-system-paths": True,
            "command-line-options": "",
            "method": 6,
            "low-memory": True,
        },
    },
    {
        "converter": "imagemagick",
        "deactivated": False,
        "options": {
            "use-nice": True,
        },
    },
    {
        "converter": "pillow",
        "deactivated": False,
        "options": {
            "method": 6,
        },
    },
]


def default_converters() -> list[dict[str, Any]]:
    return copy.deepcopy(DEFAULT_CONVERTERS)


def get_converter_by_id(config: "WebPExpressConfig", converter_id: str) -> dict[str, Any] | None:
    """Return the config entry of a converter, or None if it is not configured."""
    for entry in config.converters:
        if entry.get("converter") == converter_id:
            result = copy.deepcopy(entry)
            result.setdefault("options", {})
            return result
    return None


def active_converters(config: "WebPExpressConfig") -> list[dict[str, Any]]:
    """Configured converters that are not deactivated, in try-order."""
    return [
        {"converter": e["converter"], "options": copy.deepcopy(e.get("options", {}))}
        for e in config.converters
        if not e.get("deactivated", False)
    ]
