"""Engagement store."""

from typing import Optional
from uuid import UUID

from sqlalchemy import exists, select

from festival_scheduling.models.engagement import Engagement

from .base import BaseStore


class EngagementStore(BaseStore[Engagement]):
    """Persistence for artist-to-slot bindings."""

    model = Engagement

    async def get_for_time_slot(self, time_slot_id: UUID) -> Optional[Engagement]:
        result = await self.session.execute(
            select(Engagement).where(
                Engagement.time_slot_id == time_slot_id,
                Engagement.is_deleted.is_(False),
            )
        )
        return result.scalar_one_or_none()

    async def exists_for_time_slot(self, time_slot_id: UUID) -> bool:
        result = await self.session.execute(
            select(
                exists().where(
                    Engagement.time_slot_id == time_slot_id,
                    Engagement.is_deleted.is_(False),
                )
            )
        )
        return bool(result.scalar())
