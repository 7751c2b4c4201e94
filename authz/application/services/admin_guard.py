"""Administrative gate for catalog, ledger and identity mutations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from authz.core.constants import ADMIN_PERMISSION_KEY
from authz.domain.exceptions import AuthorizationException
from authz.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from authz.application.services.authorization_service import AuthorizationService

logger = get_logger(__name__)


class AdminGuard:
    """Require the acting user to hold an administrative permission.

    Injected into the mutating services. Services built without a guard
    (bootstrap, system jobs) are ungated.
    """

    def __init__(
        self,
        authorization: AuthorizationService,
        permission_key: str = ADMIN_PERMISSION_KEY,
    ) -> None:
        self.authorization = authorization
        self.permission_key = permission_key

    async def check(self, actor_id: str | None) -> None:
        """Raise AuthorizationException unless actor_id holds permission_key."""
        if actor_id is None or not await self.authorization.has_permission(
            actor_id, self.permission_key
        ):
            logger.info(
                "Administrative action denied (actor=%s, requires=%s)",
                actor_id,
                self.permission_key,
            )
            raise AuthorizationException()
