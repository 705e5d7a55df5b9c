"""Exception types raised by the try-on service."""

from typing import List, Optional


class TryOnError(Exception):
    """Base class for errors raised by the try-on service."""


class ValidationError(TryOnError):
    """Request input is missing, malformed or not allowed.

    Args:
        message: Human readable reason
        field: Name of the offending form field, if any
        required: Form fields the client must send, echoed back when some are missing
    """

    def __init__(self, message: str, field: Optional[str] = None, required: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.required = required


class ProcessingError(TryOnError):
    """Decoding, resizing, compositing or encoding failed.

    The underlying exception is chained as ``__cause__`` and also kept on
    ``cause`` so the HTTP layer can log it.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
