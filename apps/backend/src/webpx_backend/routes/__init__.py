"""Backend HTTP routes."""

from .ajax import ajax_bp

__all__ = ["ajax_bp"]
