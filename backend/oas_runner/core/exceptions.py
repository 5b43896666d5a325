"""
Exceptions raised by the test harness.
"""
from typing import Any, Optional


class SpecificationError(ValueError):
    """The specification document is missing, unreadable or malformed."""


class AuthConfigError(ValueError):
    """An auth configuration is missing fields required by its type."""


class TransportError(Exception):
    """
    A request could not be completed or returned a non-2xx status.

    Args:
        message: Human readable error message
        status: HTTP status code, if a response was received
        data: Decoded response body, if a response was received
    """

    def __init__(self, message: str, status: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data
