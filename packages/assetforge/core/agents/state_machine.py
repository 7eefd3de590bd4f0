"""Asset session state machine with transition history."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Asset session states.

    There is no cancelled state: a request either reaches READY or FAILED.
    """

    IDLE = "idle"
    RESOLVING = "resolving"
    READY = "ready"
    FAILED = "failed"


@dataclass
class StateTransition:
    """Record of a state transition."""

    from_state: SessionState
    to_state: SessionState
    timestamp: float
    context: dict[str, Any] = field(default_factory=dict)
    reason: str | None = None


class InvalidTransitionError(Exception):
    """Raised when invalid state transition is attempted."""

    pass


class SessionStateMachine:
    """State machine for one asset session.

    Idle → Resolving → (Ready | Failed). Ready and Failed both accept a new
    request, which moves the session back to Resolving.
    """

    VALID_TRANSITIONS: dict[SessionState, list[SessionState]] = {
        SessionState.IDLE: [SessionState.RESOLVING],
        SessionState.RESOLVING: [SessionState.READY, SessionState.FAILED],
        SessionState.READY: [SessionState.RESOLVING],
        SessionState.FAILED: [SessionState.RESOLVING],
    }

    def __init__(self) -> None:
        self.current_state = SessionState.IDLE
        self.history: list[StateTransition] = []

    def transition(
        self,
        to_state: SessionState,
        context: dict[str, Any] | None = None,
        reason: str | None = None,
    ) -> None:
        """Transition to a new state.

        Args:
            to_state: Target state
            context: Optional context data for the transition
            reason: Optional reason for the transition

        Raises:
            InvalidTransitionError: If the transition is not allowed
        """
        if not self.can_transition_to(to_state):
            raise InvalidTransitionError(
                f"Invalid transition: {self.current_state.value} → {to_state.value}. "
                f"Valid transitions: "
                f"{[s.value for s in self.VALID_TRANSITIONS.get(self.current_state, [])]}"
            )

        self.history.append(
            StateTransition(
                from_state=self.current_state,
                to_state=to_state,
                timestamp=time.time(),
                context=context or {},
                reason=reason,
            )
        )

        old_state = self.current_state
        self.current_state = to_state

        logger.info(
            "State transition: %s → %s (reason: %s)",
            old_state.value,
            to_state.value,
            reason or "none",
        )

    def can_transition_to(self, state: SessionState) -> bool:
        """Check if transition to state is valid."""
        return state in self.VALID_TRANSITIONS.get(self.current_state, [])

    @property
    def is_busy(self) -> bool:
        """True while a request is in flight."""
        return self.current_state == SessionState.RESOLVING

    def get_transition_history(self) -> list[StateTransition]:
        """Get a copy of the transition history."""
        return self.history.copy()

    def reset(self) -> None:
        """Reset state machine to initial state."""
        self.current_state = SessionState.IDLE
        self.history.clear()
