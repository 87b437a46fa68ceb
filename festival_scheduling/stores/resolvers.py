"""Resource-chain resolution to the festival that owns a resource.

Permissions are only ever held on festivals, so every authorization
decision first walks a resource up to its festival. Each walk is one joined
query; a soft-deleted link anywhere on the chain resolves to ``None``.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from festival_scheduling.models.engagement import Engagement
from festival_scheduling.models.festival import Festival, FestivalEdition
from festival_scheduling.models.time_slot import TimeSlot
from festival_scheduling.models.venue import Stage, Venue


class ResourceResolver:
    """Resolves stages, editions, time slots, and engagements to their festival id."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _scalar(self, query) -> Optional[UUID]:
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def festival_for_stage(self, stage_id: UUID) -> Optional[UUID]:
        """stage -> venue -> festival"""
        return await self._scalar(
            select(Festival.id)
            .join(Venue, Venue.festival_id == Festival.id)
            .join(Stage, Stage.venue_id == Venue.id)
            .where(
                Stage.id == stage_id,
                Stage.is_deleted.is_(False),
                Venue.is_deleted.is_(False),
                Festival.is_deleted.is_(False),
            )
        )

    async def festival_for_edition(self, edition_id: UUID) -> Optional[UUID]:
        """edition -> festival"""
        return await self._scalar(
            select(Festival.id)
            .join(FestivalEdition, FestivalEdition.festival_id == Festival.id)
            .where(
                FestivalEdition.id == edition_id,
                FestivalEdition.is_deleted.is_(False),
                Festival.is_deleted.is_(False),
            )
        )

    async def festival_for_time_slot(self, time_slot_id: UUID) -> Optional[UUID]:
        """time slot -> edition -> festival"""
        return await self._scalar(
            select(Festival.id)
            .join(FestivalEdition, FestivalEdition.festival_id == Festival.id)
            .join(TimeSlot, TimeSlot.edition_id == FestivalEdition.id)
            .where(
                TimeSlot.id == time_slot_id,
                TimeSlot.is_deleted.is_(False),
                FestivalEdition.is_deleted.is_(False),
                Festival.is_deleted.is_(False),
            )
        )

    async def festival_for_engagement(self, engagement_id: UUID) -> Optional[UUID]:
        """engagement -> time slot -> edition -> festival"""
        return await self._scalar(
            select(Festival.id)
            .join(FestivalEdition, FestivalEdition.festival_id == Festival.id)
            .join(TimeSlot, TimeSlot.edition_id == FestivalEdition.id)
            .join(Engagement, Engagement.time_slot_id == TimeSlot.id)
            .where(
                Engagement.id == engagement_id,
                Engagement.is_deleted.is_(False),
                TimeSlot.is_deleted.is_(False),
                FestivalEdition.is_deleted.is_(False),
                Festival.is_deleted.is_(False),
            )
        )
