"""Backend services."""

from .convert_service import ConvertService, merge_converter_options

__all__ = ["ConvertService", "merge_converter_options"]
