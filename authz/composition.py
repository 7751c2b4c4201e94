"""Composition root: wire repositories, cache and services for one unit of work.

Callers open a session (database.session_scope or transactional_session),
pick a cache (the shared Redis cache if connected, otherwise a fresh
SessionPermissionCache) and build the services for that session here. Nothing
is held at module level.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from authz.application.interfaces.repositories import (
    IPermissionRepository,
    IRoleAssignmentRepository,
    IRolePermissionRepository,
    IRoleRepository,
    IUserRepository,
)
from authz.application.interfaces.services import ICacheService
from authz.application.services import (
    AdminGuard,
    AssignmentService,
    AuthorizationService,
    PermissionResolver,
    PermissionService,
    RoleService,
    UserService,
)
from authz.core.config import Settings, get_settings
from authz.core.constants import USER_ADMIN_PERMISSION_KEY
from authz.infrastructure.cache import RedisCacheService, SessionPermissionCache
from authz.infrastructure.persistence.repositories import (
    PermissionRepository,
    RoleAssignmentRepository,
    RolePermissionRepository,
    RoleRepository,
    UserRepository,
)
from authz.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AuthzServices:
    """Every service of the core, sharing one set of repositories and one cache."""

    users: UserService
    roles: RoleService
    permissions: PermissionService
    ledger: AssignmentService
    resolver: PermissionResolver
    authorization: AuthorizationService


def compose(
    user_repo: IUserRepository,
    role_repo: IRoleRepository,
    permission_repo: IPermissionRepository,
    role_permission_repo: IRolePermissionRepository,
    assignment_repo: IRoleAssignmentRepository,
    *,
    cache: ICacheService | None = None,
    guarded: bool = False,
    settings: Settings | None = None,
) -> AuthzServices:
    """Build the service graph over any repositories satisfying the protocols.

    With guarded=True, catalog and ledger mutations require
    settings.admin_permission_key and identity mutations require USER_MGMT.
    The resolver always reads through ungated services.
    """
    settings = settings or get_settings()

    ledger = AssignmentService(user_repo, role_repo, assignment_repo, cache=cache)
    catalog = RoleService(
        role_repo,
        permission_repo,
        role_permission_repo,
        assignment_repo,
        user_repo,
        cache=cache,
    )
    resolver = PermissionResolver(user_repo, ledger, catalog)
    authorization = AuthorizationService(
        resolver,
        cache=cache,
        cache_ttl=settings.permission_cache_ttl,
        bucket_seconds=settings.permission_cache_bucket_seconds,
        user_repo=user_repo,
    )

    role_guard: AdminGuard | None = None
    user_guard: AdminGuard | None = None
    if guarded:
        role_guard = AdminGuard(authorization, settings.admin_permission_key)
        user_guard = AdminGuard(authorization, USER_ADMIN_PERMISSION_KEY)
        ledger = AssignmentService(
            user_repo, role_repo, assignment_repo, cache=cache, guard=role_guard
        )
        catalog = RoleService(
            role_repo,
            permission_repo,
            role_permission_repo,
            assignment_repo,
            user_repo,
            cache=cache,
            guard=role_guard,
        )

    return AuthzServices(
        users=UserService(user_repo, cache=cache, guard=user_guard),
        roles=catalog,
        permissions=PermissionService(
            permission_repo,
            role_permission_repo,
            assignment_repo,
            user_repo,
            cache=cache,
            guard=role_guard,
        ),
        ledger=ledger,
        resolver=resolver,
        authorization=authorization,
    )


def services_for_session(
    session: AsyncSession,
    *,
    cache: ICacheService | None = None,
    guarded: bool = True,
    settings: Settings | None = None,
) -> AuthzServices:
    """Build services over SQL repositories sharing session."""
    return compose(
        UserRepository(session),
        RoleRepository(session),
        PermissionRepository(session),
        RolePermissionRepository(session),
        RoleAssignmentRepository(session),
        cache=cache,
        guarded=guarded,
        settings=settings,
    )


async def connect_shared_cache(
    settings: Settings | None = None,
) -> RedisCacheService | None:
    """Connect the Redis cache when enabled; None when disabled or unreachable.

    Call once at startup and disconnect() the result at shutdown.
    """
    settings = settings or get_settings()
    if not settings.redis_enabled:
        return None
    cache = RedisCacheService(settings=settings)
    await cache.connect()
    if not cache.is_available():
        logger.warning("Redis enabled but unreachable; using per-session caches")
        return None
    return cache


def permission_cache_for_session(shared: ICacheService | None) -> ICacheService:
    """Return the shared cache if usable, else a fresh per-session cache."""
    if shared is not None and shared.is_available():
        return shared
    return SessionPermissionCache()
