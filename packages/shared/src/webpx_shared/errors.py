"""Exceptions raised by the sanity and validation checks."""


class WebPExpressError(Exception):
    """Base class for request checks that failed."""


class SanityCheckError(WebPExpressError):
    """Raised when a path or value is malformed or unsafe."""


class ValidationError(WebPExpressError):
    """Raised when a business-level request field is missing or invalid."""
