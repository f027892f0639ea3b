"""
API Module - Access to the remote word builder and dictionary services.

The builder service is the sole authority on the game:
1. Creates sessions
2. Validates and applies letter additions/removals
3. Computes the prefix/suffix letter sets and completions

This module only speaks its HTTP contract.
"""

from .schemas import (
    # Snapshot
    BuilderState,
    Position,
    # Requests
    AddLetterRequest,
    RemoveLetterRequest,
    ResetRequest,
    # Responses
    InitResponse,
    StateResponse,
    MutationResponse,
    ErrorBody,
    # Dictionary
    WordDetails,
    ImageResponse,
)
from .errors import BuilderServiceError, TransportFailure, DomainRejection, NotFound
from .client import BuilderClient, DictionaryClient

__all__ = [
    # Snapshot
    "BuilderState",
    "Position",
    # Requests
    "AddLetterRequest",
    "RemoveLetterRequest",
    "ResetRequest",
    # Responses
    "InitResponse",
    "StateResponse",
    "MutationResponse",
    "ErrorBody",
    # Dictionary
    "WordDetails",
    "ImageResponse",
    # Errors
    "BuilderServiceError",
    "TransportFailure",
    "DomainRejection",
    "NotFound",
    # Clients
    "BuilderClient",
    "DictionaryClient",
]
