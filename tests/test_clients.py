"""Tests for the httpx-based collaborator API clients."""

import json

import httpx
import pytest

from careslot.cancellation import CancellationToken, OperationCancelled
from careslot.clients.interaction_api import InteractionApiClient
from careslot.clients.provider_directory import ProviderDirectoryClient
from careslot.errors import (
    AuthError,
    NetworkOrServerError,
    PermissionDeniedError,
    RequestRejectedError,
)
from careslot.interactions.coordinator import OptimisticInteractionCoordinator, ToggleStatus
from careslot.interactions.entity import EntityKind, OptimisticEntity
from careslot.scheduling.time_model import WeekDay
from tests.conftest import make_api, make_working_hours


def _json(status: int, body) -> httpx.Response:
    return httpx.Response(status, json=body)


class TestApiClient:
    @pytest.mark.asyncio
    async def test_sends_bearer_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            return _json(200, {"ok": True})

        assert await make_api(handler, token="abc").get("/ping") == {"ok": True}
        assert seen["auth"] == "Bearer abc"

    @pytest.mark.asyncio
    async def test_no_token_no_header(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            return _json(200, {})

        await make_api(handler, token=None).get("/ping")
        assert seen["auth"] is None

    @pytest.mark.parametrize("status, error", [
        (401, AuthError),
        (403, PermissionDeniedError),
        (404, RequestRejectedError),
        (409, RequestRejectedError),
        (500, NetworkOrServerError),
        (503, NetworkOrServerError),
    ])
    @pytest.mark.asyncio
    async def test_status_mapping(self, status, error):
        api = make_api(lambda request: _json(status, {"message": "server says no"}))
        with pytest.raises(error) as exc_info:
            await api.get("/thing")
        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_rejection_keeps_server_message(self):
        api = make_api(lambda request: _json(400, {"message": "Slot is outside working hours"}))
        with pytest.raises(RequestRejectedError, match="outside working hours"):
            await api.post("/api/v1/appointments/book", json={})

    @pytest.mark.asyncio
    async def test_timeout_is_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(NetworkOrServerError, match="timed out"):
            await make_api(handler).get("/slow")

    @pytest.mark.asyncio
    async def test_connect_error_is_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(NetworkOrServerError):
            await make_api(handler).get("/down")

    @pytest.mark.asyncio
    async def test_non_object_body_rejected(self):
        api = make_api(lambda request: _json(200, [1, 2, 3]))
        with pytest.raises(NetworkOrServerError, match="Unexpected response shape"):
            await api.get("/list")

    @pytest.mark.asyncio
    async def test_empty_body_is_empty_dict(self):
        api = make_api(lambda request: httpx.Response(204))
        assert await api.delete("/api/v1/favorites/p1") == {}

    @pytest.mark.asyncio
    async def test_post_without_body_sends_empty_object(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return _json(200, {})

        await make_api(handler).post("/api/v1/reviews/r1/like")
        assert seen["body"] == {}

    @pytest.mark.asyncio
    async def test_cancelled_token_sends_nothing(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return _json(200, {})

        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelled):
            await make_api(handler).get("/ping", cancel_token=token)
        assert calls == []

    @pytest.mark.asyncio
    async def test_async_context_manager_closes(self):
        async with make_api(lambda request: _json(200, {})) as api:
            await api.get("/ping")
        assert api._client.is_closed


class TestProviderDirectoryClient:
    PROVIDER = {
        "_id": "p1",
        "provider_name": "Harbourside Clinic",
        "services": ["Consultation", {"id": "svc-2", "name": "Follow-up"}],
        "working_hours": make_working_hours(open_days=["Monday"]),
    }

    @pytest.mark.asyncio
    async def test_fetch_provider(self):
        api = make_api(lambda request: _json(200, {"success": True, "data": self.PROVIDER}))
        provider = await ProviderDirectoryClient(api).fetch_provider("p1")
        assert provider.id == "p1"
        assert [s.name for s in provider.services] == ["Consultation", "Follow-up"]

    @pytest.mark.asyncio
    async def test_fetch_provider_not_found(self):
        api = make_api(lambda request: _json(404, {"message": "Provider not found"}))
        assert await ProviderDirectoryClient(api).fetch_provider("ghost") is None

    @pytest.mark.asyncio
    async def test_fetch_provider_other_error_propagates(self):
        api = make_api(lambda request: _json(400, {"message": "bad id"}))
        with pytest.raises(RequestRejectedError):
            await ProviderDirectoryClient(api).fetch_provider("???")

    @pytest.mark.asyncio
    async def test_fetch_schedule(self):
        api = make_api(lambda request: _json(200, {"data": self.PROVIDER}))
        schedule = await ProviderDirectoryClient(api).fetch_schedule("p1")
        assert schedule[WeekDay.MONDAY].is_available
        assert not schedule[WeekDay.TUESDAY].is_available

    @pytest.mark.asyncio
    async def test_fetch_all_skips_malformed(self):
        body = {"data": [self.PROVIDER, {"provider_name": "No id"}]}
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            return _json(200, body)

        providers = await ProviderDirectoryClient(make_api(handler)).fetch_all()
        assert seen["path"] == "/api/v1/providers/all"
        assert [p.id for p in providers] == ["p1"]


class TestInteractionApiClient:
    @pytest.mark.asyncio
    async def test_like_returns_participants(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["call"] = (request.method, request.url.path)
            return _json(200, {"success": True, "data": {"likes": ["a", {"_id": "b"}]}})

        result = await InteractionApiClient(make_api(handler)).like_review("r1")
        assert seen["call"] == ("POST", "/api/v1/reviews/r1/like")
        assert result.participant_ids == frozenset({"a", "b"})
        assert result.flag is None

    @pytest.mark.asyncio
    async def test_save_returns_saved_by(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/v1/reviews/r1/save"
            return _json(200, {"data": {"saved_by": ["me"]}})

        result = await InteractionApiClient(make_api(handler)).save_review("r1")
        assert result.participant_ids == frozenset({"me"})

    @pytest.mark.asyncio
    async def test_favorite_add_and_remove(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.method)
            if request.method == "POST":
                return _json(200, {"data": {"isFavorite": True}})
            return _json(200, {"success": True})

        client = InteractionApiClient(make_api(handler))
        assert (await client.add_favorite("p1")).flag is True
        assert (await client.remove_favorite("p1")).flag is False
        assert calls == ["POST", "DELETE"]

    @pytest.mark.asyncio
    async def test_favorite_action_follows_desired_flag(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.url.path))
            return _json(200, {"data": {"isFavorite": request.method == "POST"}})

        action = InteractionApiClient(make_api(handler)).action_for(EntityKind.PROVIDER_FAVORITE)
        assert (await action("p1", True, None)).flag is True
        assert (await action("p1", False, None)).flag is False
        assert calls == [("POST", "/api/v1/favorites/p1"), ("DELETE", "/api/v1/favorites/p1")]


class TestCoordinatorOverHttp:
    @pytest.mark.asyncio
    async def test_like_failure_rolls_back(self):
        api = make_api(lambda request: _json(503, {"message": "Service unavailable"}))
        coordinator = OptimisticInteractionCoordinator(
            action=InteractionApiClient(api).action_for(EntityKind.REVIEW_LIKE),
            current_user=lambda: "me",
            notifier=lambda level, message: None,
        )
        original = OptimisticEntity(
            id="r1", kind=EntityKind.REVIEW_LIKE, participant_ids=frozenset({"a", "b", "c"}), count=3
        )
        coordinator.register(original)
        outcome = await coordinator.toggle("r1")
        assert outcome.status == ToggleStatus.ROLLED_BACK
        assert coordinator.get("r1") == original

    @pytest.mark.asyncio
    async def test_save_success_reconciles(self):
        api = make_api(lambda request: _json(200, {"data": {"saved_by": ["x", "me"]}}))
        coordinator = OptimisticInteractionCoordinator(
            action=InteractionApiClient(api).action_for(EntityKind.REVIEW_SAVE),
            current_user=lambda: "me",
        )
        coordinator.register(OptimisticEntity(id="r1", kind=EntityKind.REVIEW_SAVE))
        outcome = await coordinator.toggle("r1")
        assert outcome.status == ToggleStatus.RECONCILED
        assert outcome.entity.toggled
        assert outcome.entity.count == 2
