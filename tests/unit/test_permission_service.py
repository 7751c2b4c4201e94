"""Tests for PermissionService."""

from datetime import UTC, datetime

import pytest

from authz.domain.exceptions import (
    AuthorizationException,
    ConflictError,
    NotFoundError,
    ValidationException,
)
from tests.fakes import InMemoryStore, Services, build_services, seed_role

T0 = datetime(2024, 1, 1, tzinfo=UTC)


async def test_create_permission(services: Services) -> None:
    perm = await services.permissions.create_permission(
        "REPORTS.DEPT_VIEW", " Department reports ", component_reference="page:42"
    )

    assert perm.permission_key == "REPORTS.DEPT_VIEW"
    assert perm.display_name == "Department reports"
    assert perm.component_reference == "page:42"
    assert perm.is_active


@pytest.mark.parametrize("key", ["reports", "USER-MGMT", "", "A" * 101])
async def test_create_permission_rejects_malformed_key(
    services: Services, key: str
) -> None:
    with pytest.raises(ValidationException):
        await services.permissions.create_permission(key, "Name")
    assert await services.permissions.list_permissions(include_inactive=True) == []


async def test_create_permission_requires_display_name(services: Services) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await services.permissions.create_permission("REPORTS", "  ")
    assert exc_info.value.details == {"field": "display_name"}


async def test_duplicate_key_conflicts(services: Services) -> None:
    await services.permissions.create_permission("REPORTS", "Reports")

    with pytest.raises(ConflictError) as exc_info:
        await services.permissions.create_permission("REPORTS", "Other")
    assert exc_info.value.details["permission_key"] == "REPORTS"


async def test_update_changes_display_fields_only(services: Services) -> None:
    created = await services.permissions.create_permission("REPORTS", "Reports")

    updated = await services.permissions.update_permission(
        "REPORTS", display_name="All reports", component_reference="page:7"
    )

    assert updated.id == created.id
    assert updated.permission_key == "REPORTS"
    assert updated.display_name == "All reports"
    assert updated.component_reference == "page:7"


async def test_update_unknown_permission(services: Services) -> None:
    with pytest.raises(NotFoundError):
        await services.permissions.update_permission("MISSING", display_name="x")


async def test_deactivation_removes_key_from_holders(cached_services: Services) -> None:
    user = await cached_services.users.provision_user("dave")
    role = await seed_role(cached_services, "R", ["REPORTS", "EXPORT"])
    await cached_services.ledger.grant(user.id, role.id, "sys", valid_from=T0)
    auth = cached_services.authorization
    assert await auth.has_permission(user.id, "EXPORT")

    await cached_services.permissions.deactivate_permission("EXPORT")
    assert not await auth.has_permission(user.id, "EXPORT")
    assert await auth.has_permission(user.id, "REPORTS")

    await cached_services.permissions.activate_permission("EXPORT")
    assert await auth.has_permission(user.id, "EXPORT")


async def test_list_permissions_ordered_by_key(services: Services) -> None:
    await services.permissions.create_permission("ZETA", "Zeta")
    await services.permissions.create_permission("ALPHA", "Alpha")
    await services.permissions.deactivate_permission("ZETA")

    active = await services.permissions.list_permissions()
    everything = await services.permissions.list_permissions(include_inactive=True)

    assert [p.permission_key for p in active] == ["ALPHA"]
    assert [p.permission_key for p in everything] == ["ALPHA", "ZETA"]


async def test_guarded_create_requires_admin(store: InMemoryStore) -> None:
    setup = build_services(store)
    admin = await setup.users.provision_user("admin")
    clerk = await setup.users.provision_user("clerk")
    role = await seed_role(setup, "ADMIN", ["ROLE_MGMT"])
    await setup.ledger.grant(admin.id, role.id, "sys", valid_from=T0)
    gated = build_services(store, guarded=True)

    with pytest.raises(AuthorizationException):
        await gated.permissions.create_permission("REPORTS", "Reports", actor_id=clerk.id)

    created = await gated.permissions.create_permission(
        "REPORTS", "Reports", actor_id=admin.id
    )
    assert created.permission_key == "REPORTS"
