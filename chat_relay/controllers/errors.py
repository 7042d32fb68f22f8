"""
Relay error taxonomy.

Every failure a request can end in is one of these; the API layer renders
them as ``{"error": message}`` with ``status_code``.
"""
from typing import Optional

from fastapi import status


class RelayError(Exception):
    """Base class for terminal request failures."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidInputError(RelayError):
    """Malformed or missing ``messages``; the caller must resubmit."""

    status_code = status.HTTP_400_BAD_REQUEST


class MisconfigurationError(RelayError):
    """Server-side configuration is incomplete; needs operator action."""


class UpstreamFailureError(RelayError):
    """The provider rejected the request; carries the provider's status."""


class TransportFailureError(RelayError):
    """Network, timeout or decoding failure talking to the provider."""
