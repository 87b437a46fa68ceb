"""Permission store."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select

from festival_scheduling.models.enums import FestivalRole
from festival_scheduling.models.permission import FestivalPermission

from .base import BaseStore


class PermissionStore(BaseStore[FestivalPermission]):
    """Lookups over festival permissions, keyed by user and festival."""

    model = FestivalPermission

    @staticmethod
    def _active():
        return (
            FestivalPermission.is_pending.is_(False),
            FestivalPermission.is_revoked.is_(False),
            FestivalPermission.accepted_at.is_not(None),
        )

    async def get(self, record_id: UUID) -> Optional[FestivalPermission]:
        """Fetch by id, including pending and revoked rows."""
        result = await self.session.execute(
            select(FestivalPermission).where(FestivalPermission.id == record_id)
        )
        return result.scalar_one_or_none()

    async def get_active(self, user_id: UUID, festival_id: UUID) -> Optional[FestivalPermission]:
        """The user's accepted, non-revoked permission on the festival, if any."""
        result = await self.session.execute(
            select(FestivalPermission).where(
                FestivalPermission.user_id == user_id,
                FestivalPermission.festival_id == festival_id,
                *self._active(),
            )
        )
        return result.scalar_one_or_none()

    async def get_current(self, user_id: UUID, festival_id: UUID) -> Optional[FestivalPermission]:
        """The user's non-revoked permission, whether pending or active."""
        result = await self.session.execute(
            select(FestivalPermission).where(
                FestivalPermission.user_id == user_id,
                FestivalPermission.festival_id == festival_id,
                FestivalPermission.is_revoked.is_(False),
            )
        )
        return result.scalar_one_or_none()

    async def get_owner(self, festival_id: UUID) -> Optional[FestivalPermission]:
        result = await self.session.execute(
            select(FestivalPermission).where(
                FestivalPermission.festival_id == festival_id,
                FestivalPermission.role == FestivalRole.OWNER,
                FestivalPermission.is_revoked.is_(False),
            )
        )
        return result.scalar_one_or_none()

    async def list_active_for_festival(self, festival_id: UUID) -> List[FestivalPermission]:
        """Active permissions on a festival, highest role first."""
        result = await self.session.execute(
            select(FestivalPermission)
            .where(FestivalPermission.festival_id == festival_id, *self._active())
            .order_by(FestivalPermission.role.desc(), FestivalPermission.created_at)
        )
        return list(result.scalars().all())

    async def list_pending_for_user(self, user_id: UUID) -> List[FestivalPermission]:
        """Invitations still waiting for the user's answer."""
        result = await self.session.execute(
            select(FestivalPermission)
            .where(
                FestivalPermission.user_id == user_id,
                FestivalPermission.is_pending.is_(True),
                FestivalPermission.is_revoked.is_(False),
            )
            .order_by(FestivalPermission.created_at.desc())
        )
        return list(result.scalars().all())
