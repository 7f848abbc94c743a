"""Unit tests for the webpx command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from webpx_backend.nonce import CONVERT_NONCE_ACTION, NonceManager
from webpx_backend.services import convert_service
from webpx_cli.cli import cli


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    for name in ("WEBPX_DOCUMENT_ROOT", "WEBPX_CONTENT_DIR", "WEBPX_UPLOAD_DIR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("WEBPX_NONCE_SECRET", "cli-secret")
    return CliRunner()


def test_destination(runner: CliRunner, doc_root: Path, jpeg_in_uploads: Path) -> None:
    result = runner.invoke(cli, ["--document-root", str(doc_root), "destination", str(jpeg_in_uploads)])

    assert result.exit_code == 0, result.output
    expected = doc_root / "wp-content" / "webp-express" / "webp-images" / "uploads" / "2024" / "05" / "logo.jpg.webp"
    assert result.stdout.strip() == str(expected)


def test_find_source(runner: CliRunner, doc_root: Path, jpeg_in_uploads: Path) -> None:
    dest = doc_root / "wp-content" / "webp-express" / "webp-images" / "uploads" / "2024" / "05" / "logo.jpg.webp"

    result = runner.invoke(cli, ["--document-root", str(doc_root), "find-source", str(dest)])

    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == str(jpeg_in_uploads)


def test_find_source_not_found(runner: CliRunner, doc_root: Path) -> None:
    dest = doc_root / "wp-content" / "webp-express" / "webp-images" / "uploads" / "gone.jpg.webp"

    result = runner.invoke(cli, ["--document-root", str(doc_root), "find-source", str(dest)])

    assert result.exit_code == 1
    assert "No source found" in result.output


def test_nonce_verifies(runner: CliRunner, doc_root: Path) -> None:
    result = runner.invoke(cli, ["--document-root", str(doc_root), "nonce"])

    assert result.exit_code == 0
    assert NonceManager("cli-secret").verify(result.stdout.strip(), CONVERT_NONCE_ACTION)


def test_convert(
    runner: CliRunner, monkeypatch: pytest.MonkeyPatch, doc_root: Path, jpeg_in_uploads: Path
) -> None:
    calls: list[tuple] = []

    def fake_convert(source, destination, options, log_dir, converter_id=None):
        calls.append((source, destination, converter_id))
        return {"success": True, "msg": "Success", "log": "ok"}

    monkeypatch.setattr(convert_service, "convert", fake_convert)
    relative = jpeg_in_uploads.relative_to(doc_root)

    result = runner.invoke(
        cli, ["--document-root", str(doc_root), "convert", str(relative), "--converter", "pillow"]
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["success"] is True
    assert len(calls) == 1
    assert Path(calls[0][0]) == jpeg_in_uploads
    assert calls[0][2] is None


def test_convert_failure_exits_nonzero(
    runner: CliRunner, monkeypatch: pytest.MonkeyPatch, doc_root: Path
) -> None:
    monkeypatch.setattr(
        convert_service, "convert", lambda *args, **kwargs: pytest.fail("delegate must not be called")
    )

    result = runner.invoke(cli, ["--document-root", str(doc_root), "convert", "wp-content/uploads/missing.jpg"])

    assert result.exit_code == 1
    body = json.loads(result.stdout)
    assert body["success"] is False
    assert body["msg"] == "Sanitation check failed for source path: File does not exist"
