from careslot.interactions.coordinator import (
    OptimisticInteractionCoordinator,
    ToggleOutcome,
    ToggleStatus,
)
from careslot.interactions.entity import EntityKind, InteractionResult, OptimisticEntity
from careslot.interactions.state_machine import (
    EntityLifecycle,
    InteractionState,
    InteractionTrigger,
    InvalidTransitionError,
)

__all__ = [
    "OptimisticInteractionCoordinator",
    "ToggleOutcome",
    "ToggleStatus",
    "OptimisticEntity",
    "EntityKind",
    "InteractionResult",
    "EntityLifecycle",
    "InteractionState",
    "InteractionTrigger",
    "InvalidTransitionError",
]
