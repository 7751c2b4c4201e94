"""Tests for UserService (identity store)."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from authz.application.dtos import UserResult
from authz.application.services import UserService
from authz.domain.exceptions import (
    AuthorizationException,
    ConflictError,
    NotFoundError,
    ValidationException,
)
from tests.fakes import InMemoryStore, Services, build_services, seed_role

T0 = datetime(2024, 1, 1, tzinfo=UTC)


async def test_provision_is_idempotent_and_case_insensitive(services: Services) -> None:
    first = await services.users.provision_user("JDoe", "Jane Doe")
    again = await services.users.provision_user(" jdoe ")

    assert again.id == first.id
    assert first.username == "JDoe"
    assert first.display_name == "Jane Doe"
    assert (await services.users.get_by_username("JDOE")).id == first.id


@pytest.mark.parametrize("username", ["", "   ", "x" * 256])
async def test_provision_rejects_invalid_username(
    services: Services, username: str
) -> None:
    with pytest.raises(ValidationException):
        await services.users.provision_user(username)


async def test_provision_race_returns_the_winner() -> None:
    winner = UserResult(id="user-1", username="jdoe", display_name=None, is_active=True)
    repo = AsyncMock()
    repo.get_by_username.side_effect = [None, winner]
    repo.create_user.side_effect = ConflictError("taken", conflict_type="user")

    result = await UserService(repo).provision_user("jdoe")

    assert result == winner


async def test_provision_does_not_reactivate(services: Services) -> None:
    user = await services.users.provision_user("former")
    await services.users.deactivate_user(user.id)

    again = await services.users.provision_user("former")

    assert again.id == user.id
    assert again.is_active is False


async def test_deactivated_user_loses_every_permission(cached_services: Services) -> None:
    user = await cached_services.users.provision_user("erin")
    role = await seed_role(cached_services, "R", ["REPORTS"])
    await cached_services.ledger.grant(user.id, role.id, "sys", valid_from=T0)
    auth = cached_services.authorization
    assert await auth.has_permission(user.id, "REPORTS")

    await cached_services.users.deactivate_user(user.id)
    assert not await cached_services.users.is_active(user.id)
    assert not await auth.has_permission(user.id, "REPORTS")

    await cached_services.users.activate_user(user.id)
    assert await auth.has_permission(user.id, "REPORTS")


async def test_unknown_user(services: Services) -> None:
    assert await services.users.get_user("missing") is None
    assert await services.users.is_active("missing") is False
    with pytest.raises(NotFoundError) as exc_info:
        await services.users.deactivate_user("missing")
    assert exc_info.value.details["resource_type"] == "user"


async def test_guarded_deactivation_requires_user_mgmt(store: InMemoryStore) -> None:
    setup = build_services(store)
    role_admin = await setup.users.provision_user("role-admin")
    user_admin = await setup.users.provision_user("user-admin")
    target = await setup.users.provision_user("target")
    await setup.ledger.grant(
        role_admin.id, (await seed_role(setup, "RA", ["ROLE_MGMT"])).id, "sys", T0
    )
    await setup.ledger.grant(
        user_admin.id, (await seed_role(setup, "UA", ["USER_MGMT"])).id, "sys", T0
    )
    gated = build_services(store, guarded=True)

    with pytest.raises(AuthorizationException):
        await gated.users.deactivate_user(target.id, actor_id=role_admin.id)

    result = await gated.users.deactivate_user(target.id, actor_id=user_admin.id)
    assert result.is_active is False
