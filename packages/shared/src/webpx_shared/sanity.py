"""
Sanity checks for untrusted paths and strings.

Each check returns the (normalized) value when it passes and raises
SanityCheckError with a human-readable reason when it does not.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

from .errors import SanityCheckError

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_STREAM_WRAPPER = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
_SLASHED = re.compile(r"\\(.?)", re.DOTALL)


def is_in_dir(base: Path, target: Path) -> bool:
    """Check if target path is in base dir."""
    try:
        target.resolve().relative_to(base.resolve())
        return True
    except ValueError:
        return False


def no_control_chars(value: Any) -> str:
    if not isinstance(value, str):
        raise SanityCheckError("Not a string")
    if _CONTROL_CHARS.search(value):
        raise SanityCheckError("Control characters are not allowed")
    return value


def non_empty_string(value: Any) -> str:
    if not isinstance(value, str):
        raise SanityCheckError("Not a string")
    if value == "":
        raise SanityCheckError("Must be non-empty")
    return value


def abs_path(value: Any) -> str:
    """
    Check that value looks like a sane absolute path.

    Rejects relative paths, directory traversal (".." segments) and stream
    wrappers such as phar:// or http://.
    """
    value = non_empty_string(value)
    no_control_chars(value)
    if _STREAM_WRAPPER.match(value):
        raise SanityCheckError("Stream wrappers are not allowed")
    if not os.path.isabs(value):
        raise SanityCheckError("Path must be absolute")
    if ".." in Path(value).parts:
        raise SanityCheckError("Directory traversal is not allowed")
    return os.path.normpath(value)


def abs_path_exists(value: Any) -> str:
    path = abs_path(value)
    if not os.path.exists(path):
        raise SanityCheckError("File does not exist")
    return path


def abs_path_exists_and_is_file(value: Any) -> str:
    path = abs_path_exists(value)
    if not os.path.isfile(path):
        raise SanityCheckError("Not a regular file")
    return path


def abs_path_is_in_doc_root(value: Any, doc_root: Path | str) -> str:
    """Check that value is a sane absolute path inside the document root."""
    path = abs_path(value)
    root = Path(doc_root)
    if not root.is_absolute():
        raise SanityCheckError("Document root is not absolute")
    if not is_in_dir(root, Path(path)):
        logger.warning("Rejected path outside document root: %s", path)
        raise SanityCheckError("Path is outside document root")
    return path


def is_json_object(value: Any) -> str:
    """Check that value is a JSON encoded object. Returns the JSON text."""
    value = non_empty_string(value)
    try:
        decoded = json.loads(value)
    except json.JSONDecodeError as e:
        raise SanityCheckError(f"JSON is invalid: {e.msg}") from e
    if not isinstance(decoded, dict):
        raise SanityCheckError("JSON must be an object")
    return value


def unslash(value: str) -> str:
    """Remove backslash escaping, like PHP's stripslashes()."""
    return _SLASHED.sub(lambda m: "\x00" if m.group(1) == "0" else m.group(1), value)
