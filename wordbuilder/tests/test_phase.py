"""
Tests for the session phase transition function.
"""

import pytest

from ..api.schemas import BuilderState
from ..session.phase import (
    InvalidTransition,
    PhaseEvent,
    PhaseKind,
    SessionPhase,
    advance,
)


@pytest.fixture
def initial_state() -> BuilderState:
    return BuilderState(answer="", prefix_set=["a"], suffix_set=["a"])


@pytest.fixture
def ready(initial_state) -> SessionPhase:
    phase = advance(SessionPhase.uninitialized(), PhaseEvent.BEGIN_INIT)
    return advance(phase, PhaseEvent.INIT_OK, state=initial_state)


class TestTransitions:
    """Tests for advance()."""

    def test_happy_path(self, ready, initial_state):
        """Init then a mutation round-trip."""
        assert ready.kind == PhaseKind.READY
        assert ready.state is initial_state

        mutating = advance(ready, PhaseEvent.BEGIN_MUTATION)
        assert mutating.kind == PhaseKind.MUTATING
        assert mutating.state is initial_state
        assert mutating.is_loading

        new_state = BuilderState(answer="a", step=1)
        settled = advance(mutating, PhaseEvent.SETTLED, state=new_state)
        assert settled.kind == PhaseKind.READY
        assert settled.state is new_state
        assert not settled.is_loading

    def test_settled_without_state_keeps_snapshot(self, ready, initial_state):
        """A failed mutation settles back onto the previous snapshot."""
        mutating = advance(ready, PhaseEvent.BEGIN_MUTATION)

        settled = advance(mutating, PhaseEvent.SETTLED)

        assert settled.state is initial_state

    def test_init_failure_carries_reason(self):
        """FAILED holds the reason and no state."""
        phase = advance(SessionPhase.uninitialized(), PhaseEvent.BEGIN_INIT)

        failed = advance(phase, PhaseEvent.INIT_FAILED, reason="boom")

        assert failed.kind == PhaseKind.FAILED
        assert failed.reason == "boom"
        assert failed.state is None
        assert advance(failed, PhaseEvent.BEGIN_INIT).kind == PhaseKind.INITIALIZING

    def test_session_lost_drops_state(self, ready):
        """Losing the session during a mutation returns to UNINITIALIZED."""
        mutating = advance(ready, PhaseEvent.BEGIN_MUTATION)

        lost = advance(mutating, PhaseEvent.SESSION_LOST)

        assert lost.kind == PhaseKind.UNINITIALIZED
        assert lost.state is None

    @pytest.mark.parametrize("event", [
        PhaseEvent.BEGIN_MUTATION,
        PhaseEvent.SETTLED,
        PhaseEvent.INIT_OK,
        PhaseEvent.SESSION_LOST,
    ])
    def test_uninitialized_rejects(self, event):
        """Only BEGIN_INIT leaves UNINITIALIZED."""
        with pytest.raises(InvalidTransition):
            advance(SessionPhase.uninitialized(), event)

    def test_cannot_mutate_while_mutating(self, ready):
        """Overlapping mutations are impossible at the phase level."""
        mutating = advance(ready, PhaseEvent.BEGIN_MUTATION)

        with pytest.raises(InvalidTransition):
            advance(mutating, PhaseEvent.BEGIN_MUTATION)

    def test_ready_requires_state(self):
        """INIT_OK without a snapshot is refused."""
        phase = advance(SessionPhase.uninitialized(), PhaseEvent.BEGIN_INIT)

        with pytest.raises(InvalidTransition):
            advance(phase, PhaseEvent.INIT_OK)
