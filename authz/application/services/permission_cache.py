"""Permission cache key layout and invalidation.

Resolved permission sets are cached per (user, permission revision, as_of
bucket). Every write that can change a user's effective set (grant, revoke,
role or permission activation, role-permission links, user activation)
bumps the user's revision in the write's own transaction, so entries cached
by any session before the commit are never read again. The writer also
drops the user's entries from its own cache to free the space early.

Key components must not contain CACHE_KEY_SEP to avoid colliding keys.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from authz.application.interfaces.repositories import IUserRepository
from authz.application.interfaces.services import ICacheService
from authz.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_PERMISSION
from authz.shared.telemetry.logging import get_logger
from authz.shared.utils.datetime import ensure_utc

logger = get_logger(__name__)


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or contains the cache key separator."""
    if not value or CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must be non-empty and must not contain "
            f"separator {CACHE_KEY_SEP!r}"
        )


def as_of_bucket(as_of: datetime, bucket_seconds: int) -> int:
    """Return the bucket number for as_of (floor of epoch seconds / bucket width)."""
    moment = ensure_utc(as_of)
    return int(moment.timestamp()) // bucket_seconds


def permission_cache_key(user_id: str, revision: int, bucket: int) -> str:
    """Cache key for one user's resolved permissions at one revision and time bucket."""
    _validate_key_component(user_id, "user_id")
    sep = CACHE_KEY_SEP
    return f"{CACHE_PREFIX_PERMISSION}{sep}{user_id}{sep}{revision}{sep}{bucket}"


def permission_cache_pattern(user_id: str) -> str:
    """Glob pattern matching every entry cached for the user."""
    _validate_key_component(user_id, "user_id")
    return f"{CACHE_PREFIX_PERMISSION}{CACHE_KEY_SEP}{user_id}{CACHE_KEY_SEP}*"


def all_permissions_pattern() -> str:
    return f"{CACHE_PREFIX_PERMISSION}{CACHE_KEY_SEP}*"


async def invalidate_user_permissions(
    cache: ICacheService | None, user_ids: Iterable[str]
) -> int:
    """Drop cached permission sets for each user; return number of keys removed."""
    if cache is None or not cache.is_available():
        return 0
    removed = 0
    for user_id in user_ids:
        removed += await cache.delete_pattern(permission_cache_pattern(user_id))
    if removed:
        logger.debug("Invalidated %s cached permission set(s)", removed)
    return removed


async def permissions_changed(
    user_repo: IUserRepository,
    cache: ICacheService | None,
    user_ids: Iterable[str],
) -> None:
    """Record that the effective permissions of user_ids changed.

    The revision bump is part of the caller's write and propagates errors;
    the local cache eviction is best effort.
    """
    affected = sorted(set(user_ids))
    if not affected:
        return
    await user_repo.bump_permission_revision(affected)
    try:
        await invalidate_user_permissions(cache, affected)
    except Exception:
        logger.warning(
            "Cache eviction failed for %s user(s); revision bump still applies",
            len(affected),
            exc_info=True,
        )
