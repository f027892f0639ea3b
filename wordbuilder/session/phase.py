"""
Session Phase - The controller's lifecycle as an explicit tagged variant.

    UNINITIALIZED --BEGIN_INIT--> INITIALIZING --INIT_OK--> READY
    INITIALIZING --INIT_FAILED--> FAILED --BEGIN_INIT--> INITIALIZING
    READY --BEGIN_MUTATION--> MUTATING --SETTLED--> READY
    MUTATING/INITIALIZING --SESSION_LOST--> UNINITIALIZED

READY and MUTATING always carry a snapshot; the other phases never do.
All phase changes go through advance(), so combinations such as
"mutating without a snapshot" cannot be built.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from ..api.schemas import BuilderState


class PhaseKind(Enum):
    """Lifecycle phase of a session controller."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    MUTATING = "mutating"
    FAILED = "failed"


class PhaseEvent(Enum):
    """Inputs to the phase transition function."""
    BEGIN_INIT = "begin_init"
    INIT_OK = "init_ok"
    INIT_FAILED = "init_failed"
    BEGIN_MUTATION = "begin_mutation"
    SETTLED = "settled"
    SESSION_LOST = "session_lost"


class InvalidTransition(Exception):
    """An event was applied in a phase that does not accept it."""


_TRANSITIONS: dict[tuple[PhaseKind, PhaseEvent], PhaseKind] = {
    (PhaseKind.UNINITIALIZED, PhaseEvent.BEGIN_INIT): PhaseKind.INITIALIZING,
    (PhaseKind.FAILED, PhaseEvent.BEGIN_INIT): PhaseKind.INITIALIZING,
    (PhaseKind.READY, PhaseEvent.BEGIN_INIT): PhaseKind.INITIALIZING,
    (PhaseKind.INITIALIZING, PhaseEvent.INIT_OK): PhaseKind.READY,
    (PhaseKind.INITIALIZING, PhaseEvent.INIT_FAILED): PhaseKind.FAILED,
    (PhaseKind.INITIALIZING, PhaseEvent.SESSION_LOST): PhaseKind.UNINITIALIZED,
    (PhaseKind.READY, PhaseEvent.BEGIN_MUTATION): PhaseKind.MUTATING,
    (PhaseKind.MUTATING, PhaseEvent.SETTLED): PhaseKind.READY,
    (PhaseKind.MUTATING, PhaseEvent.SESSION_LOST): PhaseKind.UNINITIALIZED,
}


@dataclass(frozen=True)
class SessionPhase:
    """Current phase plus the data that phase carries."""
    kind: PhaseKind = PhaseKind.UNINITIALIZED
    state: BuilderState | None = None
    reason: str | None = None

    @property
    def is_loading(self) -> bool:
        return self.kind in {PhaseKind.INITIALIZING, PhaseKind.MUTATING}

    @classmethod
    def uninitialized(cls) -> SessionPhase:
        return cls()


def advance(
    phase: SessionPhase,
    event: PhaseEvent,
    state: BuilderState | None = None,
    reason: str | None = None,
) -> SessionPhase:
    """
    Apply an event to a phase.

    Args:
        phase: Current phase
        event: What happened
        state: Snapshot to carry; INIT_OK requires one, SETTLED falls back
            to the snapshot held while mutating
        reason: Failure text for INIT_FAILED

    Returns:
        The next phase

    Raises:
        InvalidTransition: if the event is not accepted in this phase
    """
    target = _TRANSITIONS.get((phase.kind, event))
    if target is None:
        raise InvalidTransition(f"{event.value} not allowed while {phase.kind.value}")

    if target == PhaseKind.READY:
        carried = state if state is not None else phase.state
        if carried is None:
            raise InvalidTransition(f"{event.value} requires a builder state")
        return SessionPhase(kind=target, state=carried)

    if target == PhaseKind.MUTATING:
        return SessionPhase(kind=target, state=phase.state)

    if target == PhaseKind.FAILED:
        return SessionPhase(kind=target, reason=reason)

    return SessionPhase(kind=target)
