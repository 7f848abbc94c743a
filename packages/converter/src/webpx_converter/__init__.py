"""
WebP Conversion Delegate.

This package performs the actual image-webp conversion for the backend and
the CLI, by driving cwebp, ImageMagick or Pillow.

Deployment:
    pip install webp-express
    apt install webp  # for cwebp command

"""

from .analysis import detect_image_type, estimate_jpeg_quality
from .convert import CONVERTERS, ConversionStack, convert
from .cwebp import CwebpError
from .errors import ConverterError, ConverterNotOperational, UnsupportedSource

__all__ = [
    "detect_image_type",
    "estimate_jpeg_quality",
    "CONVERTERS",
    "ConversionStack",
    "convert",
    "CwebpError",
    "ConverterError",
    "ConverterNotOperational",
    "UnsupportedSource",
]
