"""
Command line counterpart of the WebP Express admin. It:
1. Converts single files, with the same checks as the AJAX endpoint
2. Maps sources to destinations and back
3. Issues nonces and runs the backend for development

Deployment:
    pip install webp-express
    apt install webp  # for cwebp command
    webpx --document-root /var/www/html convert wp-content/uploads/logo.jpg
"""

from .cli import cli, main

__all__ = ["cli", "main"]
