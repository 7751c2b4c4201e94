"""Tests for AdminGuard."""

from unittest.mock import AsyncMock

import pytest

from authz.application.services import AdminGuard
from authz.domain.exceptions import AuthorizationException


async def test_allows_actor_holding_key() -> None:
    authorization = AsyncMock()
    authorization.has_permission.return_value = True
    guard = AdminGuard(authorization)

    await guard.check("admin-1")

    authorization.has_permission.assert_awaited_once_with("admin-1", "ROLE_MGMT")


async def test_denies_actor_without_key() -> None:
    authorization = AsyncMock()
    authorization.has_permission.return_value = False
    guard = AdminGuard(authorization, permission_key="USER_MGMT")

    with pytest.raises(AuthorizationException):
        await guard.check("clerk-1")
    authorization.has_permission.assert_awaited_once_with("clerk-1", "USER_MGMT")


async def test_missing_actor_is_denied_without_lookup() -> None:
    authorization = AsyncMock()
    guard = AdminGuard(authorization)

    with pytest.raises(AuthorizationException):
        await guard.check(None)
    authorization.has_permission.assert_not_awaited()
