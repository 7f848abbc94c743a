"""Flask application factory for the WebP Express backend."""

from __future__ import annotations

import logging
import sys

from flask import Flask
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .config import Config
from .routes import ajax_bp
from .services import ConvertService

logger = logging.getLogger(__name__)


def create_app(config: Config | None = None) -> Flask:
    """Create and configure the Flask application."""
    if config is None:
        config = Config.load()

    config.ensure_directories()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    app = Flask(__name__)
    CORS(app, resources={r"/api/*": {"origins": "*"}}, send_wildcard=True)

    app.config["convert_service"] = ConvertService(config)

    app.register_blueprint(ajax_bp)

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return {"success": False, "data": e.description}, e.code

    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info("WebP Express backend initialized (document root: %s)", config.document_root)
    return app


def main() -> None:
    """Entry point for running the development server."""
    config = Config.load()
    app = create_app(config)
    app.run(host=config.host, port=config.port, debug=True, use_reloader=False)


if __name__ == "__main__":
    main()
