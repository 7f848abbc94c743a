"""Unit tests for sanity checks and request field validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from webpx_shared import sanity, validate
from webpx_shared.errors import SanityCheckError, ValidationError


def test_abs_path_exists_and_is_file_accepts_file(tmp_path: Path) -> None:
    f = tmp_path / "a.jpg"
    f.write_bytes(b"x")
    assert sanity.abs_path_exists_and_is_file(str(f)) == str(f)


@pytest.mark.parametrize(
    ("value", "reason"),
    [
        ("relative/a.jpg", "absolute"),
        ("", "non-empty"),
        (None, "Not a string"),
        ("/tmp/a\x00.jpg", "Control characters"),
        ("phar:///tmp/a.jpg", "Stream wrappers"),
        ("/tmp/../etc/passwd", "traversal"),
    ],
)
def test_abs_path_rejects_insane_paths(value: object, reason: str) -> None:
    with pytest.raises(SanityCheckError, match=reason):
        sanity.abs_path_exists_and_is_file(value)


def test_abs_path_exists_and_is_file_rejects_missing_and_dirs(tmp_path: Path) -> None:
    with pytest.raises(SanityCheckError, match="does not exist"):
        sanity.abs_path_exists_and_is_file(str(tmp_path / "missing.jpg"))
    with pytest.raises(SanityCheckError, match="regular file"):
        sanity.abs_path_exists_and_is_file(str(tmp_path))


def test_abs_path_is_in_doc_root(tmp_path: Path) -> None:
    """Accept paths under the root, even if they do not exist yet."""
    inside = tmp_path / "wp-content" / "logo.jpg.webp"
    assert sanity.abs_path_is_in_doc_root(str(inside), tmp_path) == str(inside)


@pytest.mark.parametrize("path", ["/etc/passwd", "/", "/tmp"])
def test_abs_path_outside_doc_root_fails(tmp_path: Path, path: str) -> None:
    """Fail the containment check for any path outside the root."""
    root = tmp_path / "docroot"
    root.mkdir()
    with pytest.raises(SanityCheckError, match="outside document root"):
        sanity.abs_path_is_in_doc_root(path, root)


def test_abs_path_sibling_with_common_prefix_is_outside(tmp_path: Path) -> None:
    root = tmp_path / "docroot"
    root.mkdir()
    with pytest.raises(SanityCheckError):
        sanity.abs_path_is_in_doc_root(str(tmp_path / "docroot-evil" / "a.jpg"), root)


def test_abs_path_symlink_escaping_doc_root_fails(tmp_path: Path) -> None:
    root = tmp_path / "docroot"
    root.mkdir()
    outside = tmp_path / "outside"
    outside.mkdir()
    (root / "link").symlink_to(outside)
    with pytest.raises(SanityCheckError):
        sanity.abs_path_is_in_doc_root(str(root / "link" / "a.jpg"), root)


def test_no_control_chars() -> None:
    assert sanity.no_control_chars('{"a": 1}') == '{"a": 1}'
    for bad in ("a\nb", "a\tb", "a\x7fb"):
        with pytest.raises(SanityCheckError):
            sanity.no_control_chars(bad)


@pytest.mark.parametrize("value", ['[1, 2]', '"str"', "42", "{not json", ""])
def test_is_json_object_rejects_non_objects(value: str) -> None:
    with pytest.raises(SanityCheckError):
        sanity.is_json_object(value)


def test_is_json_object_accepts_object() -> None:
    assert sanity.is_json_object('{"max-quality": 90}') == '{"max-quality": 90}'


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("/var/www/it\\'s.jpg", "/var/www/it's.jpg"),
        ('a\\"b', 'a"b'),
        ("a\\\\b", "a\\b"),
        ("plain", "plain"),
    ],
)
def test_unslash(raw: str, expected: str) -> None:
    assert sanity.unslash(raw) == expected


def test_post_has_key() -> None:
    validate.post_has_key({"filename": "a.jpg"}, "filename")
    with pytest.raises(ValidationError, match="filename"):
        validate.post_has_key({}, "filename")


def test_is_converter_id() -> None:
    assert validate.is_converter_id("cwebp") == "cwebp"
    for bad in ("gd-evil", "", None):
        with pytest.raises(ValidationError):
            validate.is_converter_id(bad)
