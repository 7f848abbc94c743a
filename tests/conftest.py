"""Shared pytest configuration, markers and fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from webpx_backend.config import Config


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        if "unit_tests" in path.parts:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """A document root with the WordPress folders the backend expects."""
    root = tmp_path / "docroot"
    (root / "wp-content" / "uploads").mkdir(parents=True)
    (root / "wp-content" / "webp-express" / "log").mkdir(parents=True)
    (root / "wp-content" / "webp-express" / "config").mkdir(parents=True)
    return root


@pytest.fixture
def backend_config(doc_root: Path) -> Config:
    return Config(document_root=doc_root, nonce_secret="test-secret")


def write_jpeg(path: Path, quality: int = 85, size: tuple[int, int] = (32, 24)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, (200, 120, 40)).save(path, format="JPEG", quality=quality)
    return path


def write_png(path: Path, size: tuple[int, int] = (32, 24)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", size, (10, 120, 240, 128)).save(path, format="PNG")
    return path


@pytest.fixture
def jpeg_in_uploads(doc_root: Path) -> Path:
    return write_jpeg(doc_root / "wp-content" / "uploads" / "2024" / "05" / "logo.jpg")


@pytest.fixture
def make_jpeg():
    return write_jpeg


@pytest.fixture
def make_png():
    return write_png
