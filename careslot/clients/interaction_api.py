"""
Interaction API client for likes, saves and favorites.

Review like/save endpoints are server-side toggles: the desired flag is
not sent, the server flips it and returns the new participant list.
Favorites use POST to add and DELETE to remove.
"""

import logging
from typing import Any, Optional

from careslot.cancellation import CancellationToken
from careslot.clients.api_client import ApiClient
from careslot.interactions.coordinator import ToggleAction
from careslot.interactions.entity import EntityKind, InteractionResult
from careslot.schemas.interaction_schema import ToggleResponse, participant_ids

logger = logging.getLogger(__name__)


def _result_from_body(body: dict[str, Any]) -> InteractionResult:
    response = ToggleResponse.model_validate(body)
    data = response.data
    if data is None:
        return InteractionResult()
    participants = participant_ids(data.likes if data.likes is not None else data.saved_by)
    return InteractionResult(flag=data.is_favorite, participant_ids=participants, count=data.count)


class InteractionApiClient:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def like_review(
        self, review_id: str, cancel_token: Optional[CancellationToken] = None
    ) -> InteractionResult:
        body = await self.api.post(f"/api/v1/reviews/{review_id}/like", cancel_token=cancel_token)
        return _result_from_body(body)

    async def save_review(
        self, review_id: str, cancel_token: Optional[CancellationToken] = None
    ) -> InteractionResult:
        body = await self.api.post(f"/api/v1/reviews/{review_id}/save", cancel_token=cancel_token)
        return _result_from_body(body)

    async def add_favorite(
        self, provider_id: str, cancel_token: Optional[CancellationToken] = None
    ) -> InteractionResult:
        body = await self.api.post(f"/api/v1/favorites/{provider_id}", cancel_token=cancel_token)
        result = _result_from_body(body)
        if result.flag is None:
            result = InteractionResult(flag=True, count=result.count)
        return result

    async def remove_favorite(
        self, provider_id: str, cancel_token: Optional[CancellationToken] = None
    ) -> InteractionResult:
        body = await self.api.delete(f"/api/v1/favorites/{provider_id}", cancel_token=cancel_token)
        result = _result_from_body(body)
        if result.flag is None:
            result = InteractionResult(flag=False, count=result.count)
        return result

    def action_for(self, kind: EntityKind) -> ToggleAction:
        """Adapt one endpoint family to the coordinator's action signature."""

        async def like(entity_id: str, desired: bool, token: Optional[CancellationToken]) -> InteractionResult:
            return await self.like_review(entity_id, cancel_token=token)

        async def save(entity_id: str, desired: bool, token: Optional[CancellationToken]) -> InteractionResult:
            return await self.save_review(entity_id, cancel_token=token)

        async def favorite(entity_id: str, desired: bool, token: Optional[CancellationToken]) -> InteractionResult:
            if desired:
                return await self.add_favorite(entity_id, cancel_token=token)
            return await self.remove_favorite(entity_id, cancel_token=token)

        actions = {
            EntityKind.REVIEW_LIKE: like,
            EntityKind.REVIEW_SAVE: save,
            EntityKind.PROVIDER_FAVORITE: favorite,
        }
        logger.debug("Using interaction action for %s", kind.value)
        return actions[kind]
