"""Unit tests for source/destination path mapping."""

from __future__ import annotations

from pathlib import Path

import pytest

from webpx_shared.paths import find_source, get_destination

CONTENT = "/docroot/wp-content/webp-express"
UPLOADS = "/docroot/wp-content/uploads"


def test_mingled_append_keeps_source_extension() -> None:
    """Append .webp next to the source in mingled mode."""
    dest = get_destination("/docroot/img/logo.jpg", "mingled", "append", CONTENT, UPLOADS)
    assert dest == Path("/docroot/img/logo.jpg.webp")


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("/docroot/img/logo.jpg", "/docroot/img/logo.webp"),
        ("/docroot/img/logo.JPEG", "/docroot/img/logo.webp"),
        ("/docroot/img/logo.png", "/docroot/img/logo.webp"),
        ("/docroot/img/logo.gif", "/docroot/img/logo.gif.webp"),
    ],
)
def test_mingled_set_replaces_extension(source: str, expected: str) -> None:
    """Replace the image extension with .webp."""
    assert get_destination(source, "mingled", "set", CONTENT, UPLOADS) == Path(expected)


def test_separate_mirrors_upload_dir() -> None:
    """Store uploads under webp-images/uploads."""
    dest = get_destination(
        f"{UPLOADS}/2024/05/logo.jpg", "separate", "append", CONTENT, UPLOADS, doc_root="/docroot"
    )
    assert dest == Path(f"{CONTENT}/webp-images/uploads/2024/05/logo.jpg.webp")


def test_separate_mirrors_doc_root_for_other_files() -> None:
    """Store non-upload files in the document root under webp-images/doc-root."""
    dest = get_destination(
        "/docroot/themes/x/bg.png", "separate", "set", CONTENT, UPLOADS, doc_root="/docroot"
    )
    assert dest == Path(f"{CONTENT}/webp-images/doc-root/themes/x/bg.webp")


def test_separate_uses_abs_outside_doc_root() -> None:
    """Store files outside the document root by their absolute path."""
    dest = get_destination("/srv/img/a.jpg", "separate", "append", CONTENT, UPLOADS, doc_root="/docroot")
    assert dest == Path(f"{CONTENT}/webp-images/abs/srv/img/a.jpg.webp")


def test_custom_mode_roots_at_custom_dir() -> None:
    dest = get_destination(
        f"{UPLOADS}/logo.jpg", "custom", "append", CONTENT, UPLOADS, custom_dir="/docroot/webp"
    )
    assert dest == Path("/docroot/webp/uploads/logo.jpg.webp")


def test_custom_mode_without_custom_dir_raises() -> None:
    with pytest.raises(ValueError):
        get_destination(f"{UPLOADS}/logo.jpg", "custom", "append", CONTENT, UPLOADS)


def test_find_source_mingled_append_round_trip(tmp_path: Path) -> None:
    """Recover the source from its mingled destination."""
    source = tmp_path / "img" / "logo.jpg"
    source.parent.mkdir()
    source.write_bytes(b"jpeg")
    content = tmp_path / "wp-content" / "webp-express"

    dest = get_destination(source, "mingled", "append", content, tmp_path / "uploads")
    assert dest == tmp_path / "img" / "logo.jpg.webp"
    assert not dest.exists()
    assert find_source(dest, "mingled", "append", content) == source


@pytest.mark.parametrize("name", ["logo.jpeg", "logo.png", "logo.JPG"])
def test_find_source_set_tries_source_extensions(tmp_path: Path, name: str) -> None:
    source = tmp_path / name
    source.write_bytes(b"img")
    assert find_source(tmp_path / "logo.webp", "mingled", "set", tmp_path / "content") == source


def test_find_source_separate_round_trip(tmp_path: Path) -> None:
    """Reverse the uploads and doc-root mirrors."""
    doc_root = tmp_path / "docroot"
    uploads = doc_root / "wp-content" / "uploads"
    content = doc_root / "wp-content" / "webp-express"
    upload_src = uploads / "2024" / "logo.png"
    theme_src = doc_root / "themes" / "bg.jpg"
    for src in (upload_src, theme_src):
        src.parent.mkdir(parents=True)
        src.write_bytes(b"img")

    for src in (upload_src, theme_src):
        dest = get_destination(src, "separate", "set", content, uploads, doc_root=doc_root)
        assert find_source(dest, "separate", "set", content, uploads, doc_root) == src


def test_find_source_mingled_also_reads_separate_tree(tmp_path: Path) -> None:
    uploads = tmp_path / "uploads"
    content = tmp_path / "content"
    source = uploads / "a.jpg"
    source.parent.mkdir()
    source.write_bytes(b"img")

    dest = content / "webp-images" / "uploads" / "a.jpg.webp"
    assert find_source(dest, "mingled", "append", content, uploads) == source


def test_find_source_returns_none_when_source_missing(tmp_path: Path) -> None:
    """Return None, without raising, when nothing exists."""
    content = tmp_path / "content"
    assert find_source(tmp_path / "missing.jpg.webp", "mingled", "append", content) is None
    assert find_source(tmp_path / "missing.webp", "mingled", "set", content) is None
    assert find_source(content / "webp-images" / "uploads" / "x.jpg.webp", "separate", "append", content) is None


def test_find_source_ignores_non_webp_destination(tmp_path: Path) -> None:
    source = tmp_path / "logo.jpg"
    source.write_bytes(b"img")
    assert find_source(source, "mingled", "append", tmp_path / "content") is None


def test_find_source_custom_without_custom_dir_is_none(tmp_path: Path) -> None:
    assert find_source(tmp_path / "a.jpg.webp", "custom", "append", tmp_path) is None
