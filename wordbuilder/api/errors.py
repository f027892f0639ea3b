"""
Remote Errors - Failure taxonomy for the builder and dictionary services.

The HTTP clients translate every failure into one of these:
- TransportFailure: network error, timeout, 5xx, undecodable body
- DomainRejection: the service understood the request and refused it
- NotFound: the service does not know the resource, for the builder
  service that means the session token is unknown (HTTP 404)

The session controller catches them and turns them into user-visible
messages. Nothing above the controller sees these exceptions.
"""

from __future__ import annotations


class BuilderServiceError(Exception):
    """Base class for failures talking to the remote services."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportFailure(BuilderServiceError):
    """The request did not produce a usable response."""


class DomainRejection(BuilderServiceError):
    """The service rejected the operation with an explanatory message."""


class NotFound(BuilderServiceError):
    """The service does not know the session token (or word, for images)."""

    def __init__(self, message: str = "Session not found", status_code: int | None = 404):
        super().__init__(message, status_code)
