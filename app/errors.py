"""Error types shared by the registration and assistant handlers.

Each error carries the HTTP status the API layer answers with. Client faults
(validation, conflict) are raised before any write or upstream call.
"""

from __future__ import annotations

from typing import Optional


class PortalError(Exception):
    http_status: int = 500

    def __init__(self, message: str, http_status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status


class ValidationError(PortalError):
    """Required input is missing or empty."""

    http_status = 400


class ConflictError(PortalError):
    """The identity key is already taken."""

    http_status = 400


class ConfigurationError(PortalError):
    """The server is missing configuration needed for this call."""

    http_status = 500


class StoreError(PortalError):
    """The record store failed. The message stays in the server logs."""

    http_status = 500


class UpstreamError(PortalError):
    """The language service could not be reached or answered with an error.

    ``status_code`` is the upstream HTTP status and is reused as the status of
    our own response. ``upstream_message`` is the provider's error message
    when it sent one.
    """

    def __init__(self, status_code: int, upstream_message: Optional[str] = None):
        super().__init__(upstream_message or f"upstream returned {status_code}", status_code)
        self.status_code = status_code
        self.upstream_message = upstream_message


class DuplicateAccountError(Exception):
    """Raised by a store when a unique-key constraint rejects a create."""
