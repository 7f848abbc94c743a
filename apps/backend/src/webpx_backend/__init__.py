"""
WebP Express Backend - Flask API for on-request conversions

This app is deployed next to the WordPress site. It:
1. Accepts the convert-file AJAX request
2. Checks the nonce, the fields and the paths
3. Runs the conversion and returns the result as JSON

Deployment:
    pip install webp-express
    flask --app webpx_backend.app:create_app run
"""

from .app import create_app
from .config import Config

__all__ = ["create_app", "Config"]
