"""
Session Module - Client-side lifecycle of a word builder session.

A session is owned by the remote builder service; the client only holds:
- The opaque session token (persisted across restarts)
- The last snapshot the service returned
- Details for the current word, when it is a real word

Sessions are recovered transparently: an unknown persisted token is
replaced by a fresh session at startup.
"""

from .controller import ErrorCode, OperationResult, SessionController
from .details import WordDetailsFetcher, should_fetch_details
from .identity import FileIdentityStore, MemoryIdentityStore, SessionIdentityStore
from .phase import InvalidTransition, PhaseEvent, PhaseKind, SessionPhase, advance
from .recovery import RecoveryHandler

__all__ = [
    # Controller
    "SessionController",
    "OperationResult",
    "ErrorCode",
    # Phase
    "SessionPhase",
    "PhaseKind",
    "PhaseEvent",
    "InvalidTransition",
    "advance",
    # Recovery
    "RecoveryHandler",
    # Details
    "WordDetailsFetcher",
    "should_fetch_details",
    # Identity
    "SessionIdentityStore",
    "MemoryIdentityStore",
    "FileIdentityStore",
]
