"""Validation of business-level request fields."""

from __future__ import annotations

from typing import Any, Mapping

from .converters import CONVERTER_IDS
from .errors import ValidationError


def post_has_key(fields: Mapping[str, Any], key: str) -> None:
    if key not in fields or fields[key] is None:
        raise ValidationError(f"Expected parameter in POST: {key}")


def is_converter_id(value: Any) -> str:
    if not isinstance(value, str) or value not in CONVERTER_IDS:
        raise ValidationError("Not a valid converter id")
    return value
