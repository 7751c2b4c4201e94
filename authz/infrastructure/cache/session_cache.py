"""In-memory permission cache scoped to one request or session.

Create one per caller context and drop it when the context ends; nothing
is shared between instances, so results never leak across sessions. Keys
carry the user's permission revision, so a write committed by another
session makes this cache's older entries unreachable.
"""

from __future__ import annotations

import copy
import time
from collections.abc import Callable
from fnmatch import fnmatchcase
from typing import Any


class SessionPermissionCache:
    """Dict-backed ICacheService with per-entry TTL.

    Expiry uses time.monotonic so wall-clock jumps do not extend or cut
    entries short. Not safe to share across event loops or threads.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def is_available(self) -> bool:
        return True

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return copy.deepcopy(value)

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        if ttl <= 0:
            return False
        self._entries[key] = (self._clock() + ttl, copy.deepcopy(value))
        return True

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def delete_pattern(self, pattern: str) -> int:
        """Remove keys matching a Redis-style glob; return count removed."""
        doomed = [k for k in self._entries if fnmatchcase(k, pattern)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def __len__(self) -> int:
        return len(self._entries)
