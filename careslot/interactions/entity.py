"""
Tagged entity model for toggle-style interactions.

Likes, saves and favorites all share one shape: a boolean flag for the
current user, the set of users who have toggled it on, and a display
count. Entities are immutable values; every change produces a new one,
which makes snapshot rollback a plain reassignment.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class EntityKind(str, Enum):
    REVIEW_LIKE = "review_like"
    REVIEW_SAVE = "review_save"
    PROVIDER_FAVORITE = "provider_favorite"


@dataclass(frozen=True)
class OptimisticEntity:
    """One toggle target as the UI currently shows it."""

    id: str
    kind: EntityKind
    toggled: bool = False
    participant_ids: frozenset[str] = field(default_factory=frozenset)
    count: int = 0
    pending: bool = False

    @classmethod
    def from_participants(
        cls, entity_id: str, kind: EntityKind, participants: frozenset[str], user_id: Optional[str]
    ) -> "OptimisticEntity":
        """Build an entity from a server read of who has toggled it on."""
        return cls(
            id=entity_id,
            kind=kind,
            toggled=user_id is not None and user_id in participants,
            participant_ids=frozenset(participants),
            count=len(participants),
        )

    def snapshot(self) -> "OptimisticEntity":
        """The value to restore if the in-flight toggle fails."""
        return replace(self, pending=False)


@dataclass(frozen=True)
class InteractionResult:
    """Authoritative fields returned by the server. None means omitted."""

    flag: Optional[bool] = None
    participant_ids: Optional[frozenset[str]] = None
    count: Optional[int] = None


def apply_optimistic(entity: OptimisticEntity, user_id: str) -> OptimisticEntity:
    """Flip the flag, add or remove the user, and move the count by one."""
    toggled = not entity.toggled
    if toggled:
        participants = entity.participant_ids | {user_id}
        count = entity.count + 1
    else:
        participants = entity.participant_ids - {user_id}
        count = max(0, entity.count - 1)
    return replace(entity, toggled=toggled, participant_ids=participants, count=count, pending=True)


def reconcile(
    entity: OptimisticEntity, result: InteractionResult, user_id: Optional[str]
) -> OptimisticEntity:
    """Merge server-authoritative fields over the optimistic value.

    Fields the server omits keep their optimistic value, except that a
    missing count or flag is derived from server participants when those
    are present.
    """
    participants = entity.participant_ids
    if result.participant_ids is not None:
        participants = frozenset(result.participant_ids)

    if result.count is not None:
        count = max(0, result.count)
    elif result.participant_ids is not None:
        count = len(participants)
    else:
        count = entity.count

    if result.flag is not None:
        toggled = result.flag
    elif result.participant_ids is not None and user_id is not None:
        toggled = user_id in participants
    else:
        toggled = entity.toggled

    return replace(entity, toggled=toggled, participant_ids=participants, count=count, pending=False)
