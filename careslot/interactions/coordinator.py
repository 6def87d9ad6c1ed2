"""
Optimistic coordinator for toggle-style interactions.

A toggle is applied to local state immediately, then the remote call is
awaited. On success the server's authoritative fields are merged in; on
failure the exact pre-toggle value is restored and a classified message
is sent to the notifier. Nothing here ever leaves an entity half-updated.

Toggles on different entity ids run concurrently. Toggles on the same id
are serialized: a second toggle while one is in flight is rejected.

Usage:
    coordinator = OptimisticInteractionCoordinator(
        action=interaction_client.action_for(EntityKind.REVIEW_LIKE),
        current_user=lambda: session.user_id,
        notifier=toast,
    )
    coordinator.register(OptimisticEntity(id="r1", kind=EntityKind.REVIEW_LIKE, count=3))
    outcome = await coordinator.toggle("r1", cancel_token=view_token)
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Awaitable, Callable, Iterable, Optional

from careslot.cancellation import CancellationToken, OperationCancelled, is_cancelled
from careslot.errors import SIGN_IN_MESSAGE, FailureKind, classify_failure
from careslot.interactions.entity import (
    InteractionResult,
    OptimisticEntity,
    apply_optimistic,
    reconcile,
)
from careslot.interactions.state_machine import (
    EntityLifecycle,
    InteractionState,
    InteractionTrigger,
)
from careslot.logging_context import get_request_logger, new_request_id

logger = get_request_logger(__name__)

ALREADY_IN_PROGRESS_MESSAGE = "Already in progress."

# (entity_id, desired_flag, cancel_token) -> server result
ToggleAction = Callable[[str, bool, Optional[CancellationToken]], Awaitable[InteractionResult]]
Notifier = Callable[[str, str], None]
SuccessMessage = Callable[[OptimisticEntity], Optional[str]]


def log_notifier(level: str, message: str) -> None:
    """Default notifier: route user-facing messages to the log."""
    logger.log(logging.ERROR if level == "error" else logging.INFO, "Notify [%s]: %s", level, message)


class ToggleStatus(str, Enum):
    RECONCILED = "reconciled"
    ROLLED_BACK = "rolled_back"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ToggleOutcome:
    """What happened to one toggle request."""

    status: ToggleStatus
    entity: Optional[OptimisticEntity]
    message: Optional[str] = None
    failure: Optional[FailureKind] = None


class OptimisticInteractionCoordinator:
    """Two-phase toggle engine shared by likes, saves and favorites."""

    def __init__(
        self,
        action: ToggleAction,
        current_user: Callable[[], Optional[str]],
        notifier: Optional[Notifier] = None,
        success_message: Optional[SuccessMessage] = None,
    ) -> None:
        self._action = action
        self._current_user = current_user
        self._notify = notifier or log_notifier
        self._success_message = success_message
        self._entities: dict[str, OptimisticEntity] = {}
        self._lifecycles: dict[str, EntityLifecycle] = {}

    # ------------------------------------------------------------------ #
    # Registry
    # ------------------------------------------------------------------ #

    def register(self, entity: OptimisticEntity) -> None:
        """Track an entity, or refresh it from a newer server read.

        A refresh that lands while a toggle is in flight keeps the entity
        marked pending.
        """
        lifecycle = self._lifecycles.setdefault(entity.id, EntityLifecycle(entity.id))
        self._entities[entity.id] = replace(entity, pending=lifecycle.is_pending())

    def register_many(self, entities: Iterable[OptimisticEntity]) -> None:
        for entity in entities:
            self.register(entity)

    def get(self, entity_id: str) -> OptimisticEntity:
        return self._entities[entity_id]

    @property
    def entities(self) -> dict[str, OptimisticEntity]:
        return dict(self._entities)

    def is_pending(self, entity_id: str) -> bool:
        lifecycle = self._lifecycles.get(entity_id)
        return lifecycle is not None and lifecycle.is_pending()

    def lifecycle(self, entity_id: str) -> EntityLifecycle:
        return self._lifecycles[entity_id]

    # ------------------------------------------------------------------ #
    # Toggle
    # ------------------------------------------------------------------ #

    def _reject(self, entity_id: str, message: str, failure: Optional[FailureKind] = None) -> ToggleOutcome:
        self._notify("error", message)
        return ToggleOutcome(ToggleStatus.REJECTED, self._entities.get(entity_id), message, failure)

    def _settle_cancelled(self, entity_id: str) -> ToggleOutcome:
        self._lifecycles[entity_id].transition(InteractionTrigger.CANCELLED)
        entity = replace(self._entities[entity_id], pending=False)
        self._entities[entity_id] = entity
        logger.info("Toggle on %s settled after cancellation; result discarded", entity_id)
        return ToggleOutcome(ToggleStatus.CANCELLED, entity)

    async def toggle(
        self, entity_id: str, cancel_token: Optional[CancellationToken] = None
    ) -> ToggleOutcome:
        """Flip an entity optimistically and reconcile or roll back.

        Raises:
            KeyError: If the entity was never registered.
        """
        if is_cancelled(cancel_token):
            return ToggleOutcome(ToggleStatus.CANCELLED, self._entities.get(entity_id))

        entity = self._entities[entity_id]
        user_id = self._current_user()
        if not user_id:
            return self._reject(entity_id, SIGN_IN_MESSAGE, FailureKind.AUTH)

        lifecycle = self._lifecycles[entity_id]
        if lifecycle.is_pending():
            logger.debug("Toggle on %s rejected: request already in flight", entity_id)
            return ToggleOutcome(ToggleStatus.REJECTED, entity, ALREADY_IN_PROGRESS_MESSAGE)

        # Optimistic phase: must complete before the first await.
        snapshot = entity.snapshot()
        optimistic = apply_optimistic(entity, user_id)
        self._entities[entity_id] = optimistic
        lifecycle.transition(InteractionTrigger.DISPATCHED)
        new_request_id(f"{entity.kind.value}-{entity_id}")
        logger.info(
            "Toggle %s %s -> %s (count %d -> %d)",
            entity.kind.value, entity_id, optimistic.toggled, entity.count, optimistic.count,
        )

        try:
            result = await self._action(entity_id, optimistic.toggled, cancel_token)
        except OperationCancelled:
            # Nothing reached the server.
            self._entities[entity_id] = snapshot
            lifecycle.transition(InteractionTrigger.CANCELLED)
            return ToggleOutcome(ToggleStatus.CANCELLED, snapshot)
        except Exception as exc:
            self._entities[entity_id] = snapshot
            lifecycle.transition(InteractionTrigger.SERVER_FAILED)
            lifecycle.transition(InteractionTrigger.SETTLED)
            failure = classify_failure(exc)
            logger.warning(
                "Toggle on %s rolled back (%s): %s", entity_id, failure.kind.value, exc
            )
            if is_cancelled(cancel_token):
                # Caller has gone away: roll back without notifying.
                return ToggleOutcome(ToggleStatus.CANCELLED, snapshot, failure=failure.kind)
            self._notify("error", failure.message)
            return ToggleOutcome(ToggleStatus.ROLLED_BACK, snapshot, failure.message, failure.kind)

        if is_cancelled(cancel_token):
            return self._settle_cancelled(entity_id)

        reconciled = reconcile(self._entities[entity_id], result, user_id)
        self._entities[entity_id] = reconciled
        lifecycle.transition(InteractionTrigger.SERVER_CONFIRMED)
        lifecycle.transition(InteractionTrigger.SETTLED)
        logger.info(
            "Toggle on %s reconciled: flag=%s count=%d", entity_id, reconciled.toggled, reconciled.count
        )

        message = self._success_message(reconciled) if self._success_message else None
        if message:
            self._notify("success", message)
        return ToggleOutcome(ToggleStatus.RECONCILED, reconciled, message)

    def state_of(self, entity_id: str) -> InteractionState:
        return self._lifecycles[entity_id].current_state
