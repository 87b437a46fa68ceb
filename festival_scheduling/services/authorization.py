"""Role/scope authorization for festival resources."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from festival_scheduling.models.enums import FestivalRole, PermissionScope
from festival_scheduling.stores.permissions import PermissionStore

logger = logging.getLogger(__name__)


class FestivalAuthorizer:
    """
    Answers "may this user do X on this festival" from their active permission.

    Every check is read-only and fails closed: no active permission means no
    access. Pending and revoked permissions are never consulted.
    """

    def __init__(self, db_session: AsyncSession):
        self.permissions = PermissionStore(db_session)

    async def get_role(self, user_id: UUID, festival_id: UUID) -> Optional[FestivalRole]:
        permission = await self.permissions.get_active(user_id, festival_id)
        return permission.role if permission else None

    async def has_scope(
        self, user_id: UUID, festival_id: UUID, required_scope: PermissionScope
    ) -> bool:
        """Administrators and owners pass any scope; others need All or an exact match."""
        permission = await self.permissions.get_active(user_id, festival_id)
        allowed = permission is not None and permission.grants_scope(required_scope)
        logger.debug(
            f"Scope check {required_scope.name} for user {user_id} on festival {festival_id}: {allowed}"
        )
        return allowed

    async def has_role_at_least(
        self, user_id: UUID, festival_id: UUID, minimum_role: FestivalRole
    ) -> bool:
        role = await self.get_role(user_id, festival_id)
        allowed = role is not None and role >= minimum_role
        logger.debug(
            f"Role check >= {minimum_role.name} for user {user_id} on festival {festival_id}: {allowed}"
        )
        return allowed

    async def can_modify(
        self, user_id: UUID, festival_id: UUID, scope: PermissionScope
    ) -> bool:
        """Write gate: Manager or higher, and the scope must cover the area."""
        permission = await self.permissions.get_active(user_id, festival_id)
        if permission is None:
            return False
        return permission.role >= FestivalRole.MANAGER and permission.grants_scope(scope)

    async def can_view_festival(self, user_id: UUID, festival_id: UUID) -> bool:
        return await self.get_role(user_id, festival_id) is not None

    async def can_edit_festival(self, user_id: UUID, festival_id: UUID) -> bool:
        return await self.has_role_at_least(user_id, festival_id, FestivalRole.MANAGER)

    async def can_delete_festival(self, user_id: UUID, festival_id: UUID) -> bool:
        return await self.has_role_at_least(user_id, festival_id, FestivalRole.OWNER)

    async def can_manage_permissions(self, user_id: UUID, festival_id: UUID) -> bool:
        return await self.has_role_at_least(user_id, festival_id, FestivalRole.ADMINISTRATOR)

    async def can_transfer_ownership(self, user_id: UUID, festival_id: UUID) -> bool:
        return await self.has_role_at_least(user_id, festival_id, FestivalRole.OWNER)

    async def can_publish_schedule(self, user_id: UUID, festival_id: UUID) -> bool:
        return await self.can_modify(user_id, festival_id, PermissionScope.SCHEDULE)
