"""Configuration management for the WebP Express backend."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Config:
    """
    Backend configuration loaded from environment variables.

    Also the paths provider: the content dir and the uploads dir default to
    their WordPress locations below the document root.
    """

    document_root: Path = Path("/var/www/html")
    content_dir: Path | None = None
    upload_dir: Path | None = None
    nonce_secret: str = "webp-express"
    nonce_max_age: int = 86400
    host: str = "127.0.0.1"
    port: int = 5001

    def __post_init__(self) -> None:
        if self.content_dir is None:
            object.__setattr__(self, "content_dir", self.document_root / "wp-content" / "webp-express")
        if self.upload_dir is None:
            object.__setattr__(self, "upload_dir", self.document_root / "wp-content" / "uploads")

    @classmethod
    def load(cls, document_root: Path | None = None) -> Config:
        """Load configuration from environment variables."""
        if document_root is None:
            document_root = Path(os.getenv("WEBPX_DOCUMENT_ROOT", "/var/www/html"))
        content_dir = os.getenv("WEBPX_CONTENT_DIR")
        upload_dir = os.getenv("WEBPX_UPLOAD_DIR")
        return cls(
            document_root=document_root,
            content_dir=Path(content_dir) if content_dir else None,
            upload_dir=Path(upload_dir) if upload_dir else None,
            nonce_secret=os.getenv("WEBPX_NONCE_SECRET", "webp-express"),
            nonce_max_age=int(os.getenv("WEBPX_NONCE_MAX_AGE", "86400")),
            host=os.getenv("WEBPX_HOST", "127.0.0.1"),
            port=int(os.getenv("WEBPX_PORT", "5001")),
        )

    @property
    def log_dir(self) -> Path:
        return self.content_dir / "log"

    @property
    def config_file(self) -> Path:
        return self.content_dir / "config" / "config.json"

    def ensure_directories(self) -> None:
        """Create the log and config directories."""
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
