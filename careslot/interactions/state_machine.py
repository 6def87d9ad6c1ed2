"""
Finite state machine for one entity's optimistic toggle lifecycle.

    IDLE -> PENDING -> (RECONCILED | ROLLED_BACK) -> IDLE

Every transition is explicit. A second toggle while PENDING has no valid
transition, which is what serializes toggles on the same entity id.

Usage:
    lifecycle = EntityLifecycle("review-42")
    lifecycle.transition(InteractionTrigger.DISPATCHED)
    assert lifecycle.is_pending()
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class InteractionState(str, Enum):
    """All states of a single entity's toggle lifecycle."""
    IDLE = "idle"
    PENDING = "pending"
    RECONCILED = "reconciled"
    ROLLED_BACK = "rolled_back"


class InteractionTrigger(str, Enum):
    """Events that cause lifecycle transitions."""
    DISPATCHED = "dispatched"
    SERVER_CONFIRMED = "server_confirmed"
    SERVER_FAILED = "server_failed"
    CANCELLED = "cancelled"
    SETTLED = "settled"


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: InteractionState
    to_state: InteractionState
    trigger: InteractionTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: InteractionState
    entered_at: datetime
    trigger: Optional[InteractionTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


class EntityLifecycle:
    """Deterministic lifecycle for one entity id."""

    TRANSITIONS: list[Transition] = [
        Transition(InteractionState.IDLE, InteractionState.PENDING,
                   InteractionTrigger.DISPATCHED),

        # --- Settlement ---
        Transition(InteractionState.PENDING, InteractionState.RECONCILED,
                   InteractionTrigger.SERVER_CONFIRMED),
        Transition(InteractionState.PENDING, InteractionState.ROLLED_BACK,
                   InteractionTrigger.SERVER_FAILED),
        Transition(InteractionState.PENDING, InteractionState.IDLE,
                   InteractionTrigger.CANCELLED),

        # --- Back to rest ---
        Transition(InteractionState.RECONCILED, InteractionState.IDLE,
                   InteractionTrigger.SETTLED),
        Transition(InteractionState.ROLLED_BACK, InteractionState.IDLE,
                   InteractionTrigger.SETTLED),
    ]

    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        self._current_state = InteractionState.IDLE
        self._history: list[StateEntry] = [
            StateEntry(state=InteractionState.IDLE, entered_at=datetime.now(timezone.utc))
        ]
        self._rollback_count: int = 0

    @property
    def current_state(self) -> InteractionState:
        return self._current_state

    @property
    def rollback_count(self) -> int:
        return self._rollback_count

    def transition(self, trigger: InteractionTrigger) -> InteractionState:
        """
        Execute a state transition.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state
                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))
                if t.to_state == InteractionState.ROLLED_BACK:
                    self._rollback_count += 1

                logger.debug(
                    "Entity %s: %s -> %s (trigger: %s)",
                    self.entity_id, old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition for entity '{self.entity_id}' from "
            f"'{self._current_state.value}' with trigger '{trigger.value}'. "
            f"Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[InteractionTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StateEntry]:
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_pending(self) -> bool:
        return self._current_state == InteractionState.PENDING
