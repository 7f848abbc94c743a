"""
Mapping between source images and their WebP destinations.

Destination folder modes:
    mingled:  logo.jpg -> logo.jpg.webp (or logo.webp) in the same folder
    separate: <content_dir>/webp-images/<mirror>/logo.jpg.webp
    custom:   <custom_dir>/<mirror>/logo.jpg.webp

The mirror is "uploads/<path relative to upload dir>" for uploads,
"doc-root/<path relative to doc root>" for other files in the document root
and "abs/<absolute path>" for everything else.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

IMAGE_ROOT_NAME = "webp-images"
SOURCE_EXTENSIONS: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".JPG", ".JPEG", ".PNG")

_SOURCE_EXT = re.compile(r"\.(jpe?g|png)$", re.IGNORECASE)
_WEBP_EXT = ".webp"


def _relative_to(path: PurePosixPath, base: Path | str | None) -> PurePosixPath | None:
    if base is None:
        return None
    try:
        return path.relative_to(PurePosixPath(base))
    except ValueError:
        return None


def _image_root(
    destination_folder: str, content_dir: Path | str, custom_dir: Path | str | None
) -> PurePosixPath:
    if destination_folder == "custom":
        if custom_dir is None:
            raise ValueError("custom destination folder mode requires a custom dir")
        return PurePosixPath(custom_dir)
    return PurePosixPath(content_dir) / IMAGE_ROOT_NAME


def _apply_extension(path: str, destination_extension: str) -> str:
    if destination_extension == "append":
        return path + _WEBP_EXT
    return _SOURCE_EXT.sub("", path) + _WEBP_EXT


def get_destination(
    source: Path | str,
    destination_folder: str,
    destination_extension: str,
    content_dir: Path | str,
    upload_dir: Path | str,
    doc_root: Path | str | None = None,
    custom_dir: Path | str | None = None,
) -> Path:
    """Compute where the WebP for source goes. Does not touch the filesystem."""
    src = PurePosixPath(source)

    if destination_folder == "mingled":
        result = str(src)
    else:
        root = _image_root(destination_folder, content_dir, custom_dir)
        rel = _relative_to(src, upload_dir)
        if rel is not None:
            result = str(root / "uploads" / rel)
        else:
            rel = _relative_to(src, doc_root)
            if rel is not None:
                result = str(root / "doc-root" / rel)
            else:
                result = str(root / "abs" / src.relative_to("/"))

    return Path(_apply_extension(result, destination_extension))


def _strip_extension(destination: str, destination_extension: str) -> list[str]:
    """Candidate source paths, before folder mapping is reversed."""
    if not destination.endswith(_WEBP_EXT):
        return []
    stem = destination[: -len(_WEBP_EXT)]
    if destination_extension == "append":
        return [stem]
    return [stem + ext for ext in SOURCE_EXTENSIONS]


def _unmirror(
    destination: PurePosixPath,
    root: PurePosixPath,
    upload_dir: Path | str | None,
    doc_root: Path | str | None,
) -> PurePosixPath | None:
    rel = _relative_to(destination, root)
    if rel is None or len(rel.parts) < 2:
        return None

    prefix, rest = rel.parts[0], PurePosixPath(*rel.parts[1:])
    if prefix == "uploads" and upload_dir is not None:
        return PurePosixPath(upload_dir) / rest
    if prefix == "doc-root" and doc_root is not None:
        return PurePosixPath(doc_root) / rest
    if prefix == "abs":
        return PurePosixPath("/") / rest
    return None


def find_source(
    destination: Path | str,
    destination_folder: str,
    destination_extension: str,
    content_dir: Path | str,
    upload_dir: Path | str | None = None,
    doc_root: Path | str | None = None,
    custom_dir: Path | str | None = None,
) -> Path | None:
    """
    Determine the source of a destination.

    For example, in mingled mode with the "append" extension policy,
    "/path/to/logo.jpg.webp" gives "/path/to/logo.jpg". The destination does
    not have to exist, but the source does. Returns None if no source exists.
    """
    dest = PurePosixPath(destination)
    located: list[PurePosixPath] = []

    if destination_folder == "mingled":
        located.append(dest)
        # Mingled mode also reads from the separate tree
        unmirrored = _unmirror(dest, _image_root("separate", content_dir, None), upload_dir, doc_root)
        if unmirrored is not None:
            located.append(unmirrored)
    else:
        try:
            root = _image_root(destination_folder, content_dir, custom_dir)
        except ValueError:
            logger.warning("Cannot find source: no custom dir configured")
            return None
        unmirrored = _unmirror(dest, root, upload_dir, doc_root)
        if unmirrored is not None:
            located.append(unmirrored)

    for path in located:
        for candidate in _strip_extension(str(path), destination_extension):
            if Path(candidate).is_file():
                return Path(candidate)

    logger.debug("No source found for %s", destination)
    return None
