"""Converter failures. The conversion stack catches these and moves on."""


class ConverterError(RuntimeError):
    """Raised when a converter fails to convert an image."""


class ConverterNotOperational(ConverterError):
    """Raised when a converter cannot run on this system."""


class UnsupportedSource(ConverterError):
    """Raised when the source is not an image we can convert."""
