"""Tests for interaction recording."""

import pytest

from app.domain.errors import ClientInputError, UpstreamDataError
from app.services.interaction import InteractionService


@pytest.mark.asyncio
async def test_records_interaction_and_creates_user(catalog):
    service = InteractionService(catalog)
    event = await service.record("u9", "p04", "add_to_cart", name="Ada", email="ada@example.com")

    assert event.action_kind == "add_to_cart"
    assert event.category == "Home"
    users = await catalog.list_users()
    assert [(u.id, u.name, u.email) for u in users] == [("u9", "Ada", "ada@example.com")]

    history = await catalog.fetch_recent_interactions("u9", limit=10)
    assert [(e.product_id, e.action_kind) for e in history] == [("p04", "add_to_cart")]


@pytest.mark.asyncio
async def test_unknown_identity_gets_placeholder_name(catalog):
    await InteractionService(catalog).record("u9", "p01", "view")
    users = await catalog.list_users()
    assert users[0].name == "Unknown User"
    assert users[0].email == ""


@pytest.mark.asyncio
async def test_existing_user_is_not_duplicated(catalog):
    service = InteractionService(catalog)
    await service.record("u9", "p01", "view", name="Ada")
    await service.record("u9", "p02", "purchase", name="Someone Else")
    users = await catalog.list_users()
    assert [u.name for u in users] == ["Ada"]


@pytest.mark.parametrize(
    "user_id, product_id, action",
    [(None, "p01", "view"), ("u1", "", "view"), ("u1", "p01", None)],
)
@pytest.mark.asyncio
async def test_missing_fields_are_rejected(catalog, user_id, product_id, action):
    with pytest.raises(ClientInputError):
        await InteractionService(catalog).record(user_id, product_id, action)


@pytest.mark.asyncio
async def test_unknown_action_is_rejected(catalog):
    with pytest.raises(ClientInputError, match="Invalid action_type"):
        await InteractionService(catalog).record("u1", "p01", "wishlist")


class UserCreationFails:
    def __init__(self, catalog) -> None:
        self._catalog = catalog

    async def ensure_user(self, user_id, name, email):
        raise UpstreamDataError("users table unavailable")

    async def record_interaction(self, user_id, product_id, action_kind):
        return await self._catalog.record_interaction(user_id, product_id, action_kind)


@pytest.mark.asyncio
async def test_user_creation_failure_does_not_block(catalog):
    service = InteractionService(UserCreationFails(catalog))
    event = await service.record("u9", "p01", "view")
    assert event.product_id == "p01"


@pytest.mark.asyncio
async def test_store_failure_surfaces(failing_catalog):
    with pytest.raises(UpstreamDataError):
        await InteractionService(failing_catalog).record("u1", "p01", "view")
