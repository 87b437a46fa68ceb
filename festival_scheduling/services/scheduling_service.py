"""Scheduling service: time slots and artist engagements.

Every mutation follows the same shape: resolve the resource to its
festival, check the caller may modify the Schedule area there, validate,
then write through the stores and commit once.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from festival_scheduling.models.base import utcnow
from festival_scheduling.models.engagement import Engagement
from festival_scheduling.models.enums import PermissionScope, SlotType
from festival_scheduling.models.festival import Artist
from festival_scheduling.models.time_slot import TimeSlot
from festival_scheduling.stores.catalog import ArtistStore, EditionStore
from festival_scheduling.stores.engagements import EngagementStore
from festival_scheduling.stores.resolvers import ResourceResolver
from festival_scheduling.stores.time_slots import TimeSlotStore

from .authorization import FestivalAuthorizer
from .base import BaseService
from .business_rules import TimeSlotRules, ValidationError
from .errors import (
    ArtistNotFoundError,
    DomainValidationError,
    EditionNotFoundError,
    EngagementNotFoundError,
    ForbiddenError,
    StageNotFoundError,
    TimeSlotAlreadyEngagedError,
    TimeSlotNotFoundError,
    TimeSlotOverlapError,
)

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)


class SchedulingService(BaseService):
    """Time slot and engagement management for festival editions."""

    def __init__(self, db_session: AsyncSession, authorizer: Optional[FestivalAuthorizer] = None):
        super().__init__(db_session)
        self.resolver = ResourceResolver(db_session)
        self.authorizer = authorizer or FestivalAuthorizer(db_session)
        self.time_slots = TimeSlotStore(db_session)
        self.engagements = EngagementStore(db_session)
        self.editions = EditionStore(db_session)
        self.artists = ArtistStore(db_session)

    # Time slots

    async def create_time_slot(
        self,
        stage_id: UUID,
        actor_id: UUID,
        edition_id: UUID,
        start_utc: datetime,
        end_utc: datetime,
        slot_type: str = SlotType.PERFORMANCE.value,
    ) -> TimeSlot:
        """
        Book a new interval on a stage.

        Raises:
            StageNotFoundError, EditionNotFoundError: Unknown stage or edition
            ForbiddenError: Caller may not edit the schedule
            DomainValidationError: Bad interval, or edition of another festival
            TimeSlotOverlapError: Interval intersects an active slot
        """
        festival_id = await self.resolver.festival_for_stage(stage_id)
        if festival_id is None:
            raise StageNotFoundError(stage_id)
        await self._authorize(actor_id, festival_id)

        edition = await self.editions.get(edition_id)
        if edition is None:
            raise EditionNotFoundError(edition_id)
        if edition.festival_id != festival_id:
            raise DomainValidationError(
                "Stage and edition belong to different festivals",
                [ValidationError(field="edition_id", code="EDITION_FESTIVAL_MISMATCH",
                                 message="Edition must belong to the stage's festival")],
            )

        self._validate_interval(start_utc, end_utc, slot_type)
        start_utc, end_utc = _as_utc(start_utc), _as_utc(end_utc)

        async with self._writing():
            await self.time_slots.lock_stage_edition(stage_id, edition_id)
            if await self.time_slots.has_overlap(stage_id, edition_id, start_utc, end_utc):
                logger.warning(
                    f"Overlap rejected on stage {stage_id} edition {edition_id}: "
                    f"[{start_utc.isoformat()}, {end_utc.isoformat()})"
                )
                raise TimeSlotOverlapError(stage_id, edition_id)

            time_slot = TimeSlot(
                stage_id=stage_id,
                edition_id=edition_id,
                start_utc=start_utc,
                end_utc=end_utc,
                slot_type=slot_type,
                created_by=actor_id,
            )
            await self.time_slots.add(time_slot)
            await self.db.commit()

        logger.info(f"User {actor_id} created time slot {time_slot.id} on stage {stage_id}")
        return time_slot

    async def update_time_slot(
        self,
        time_slot_id: UUID,
        actor_id: UUID,
        start_utc: Optional[datetime] = None,
        end_utc: Optional[datetime] = None,
        slot_type: Optional[str] = None,
    ) -> TimeSlot:
        """Move or resize a slot. Omitted fields keep their current value."""
        time_slot = await self._get_time_slot(time_slot_id)
        festival_id = await self.resolver.festival_for_time_slot(time_slot_id)
        if festival_id is None:
            raise TimeSlotNotFoundError(time_slot_id)
        await self._authorize(actor_id, festival_id)

        new_start = start_utc if start_utc is not None else time_slot.start_utc
        new_end = end_utc if end_utc is not None else time_slot.end_utc
        self._validate_interval(new_start, new_end, slot_type)
        new_start, new_end = _as_utc(new_start), _as_utc(new_end)

        async with self._writing():
            await self.time_slots.lock_stage_edition(time_slot.stage_id, time_slot.edition_id)
            if await self.time_slots.has_overlap(
                time_slot.stage_id,
                time_slot.edition_id,
                new_start,
                new_end,
                exclude_id=time_slot.id,
            ):
                raise TimeSlotOverlapError(time_slot.stage_id, time_slot.edition_id)

            time_slot.start_utc = new_start
            time_slot.end_utc = new_end
            if slot_type is not None:
                time_slot.slot_type = slot_type
            time_slot.updated_by = actor_id
            await self.db.commit()

        logger.info(f"User {actor_id} updated time slot {time_slot_id}")
        return time_slot

    async def delete_time_slot(self, time_slot_id: UUID, actor_id: UUID) -> None:
        """Soft-delete a slot together with its active engagement."""
        festival_id = await self.resolver.festival_for_time_slot(time_slot_id)
        if festival_id is None:
            raise TimeSlotNotFoundError(time_slot_id)
        await self._authorize(actor_id, festival_id)

        time_slot = await self._get_time_slot(time_slot_id)
        deleted_at = utcnow()
        time_slot.soft_delete(deleted_at)
        time_slot.updated_by = actor_id

        engagement = await self.engagements.get_for_time_slot(time_slot_id)
        if engagement is not None:
            engagement.soft_delete(deleted_at)
            engagement.updated_by = actor_id

        await self._commit()
        logger.info(f"User {actor_id} deleted time slot {time_slot_id}")

    async def get_time_slot(self, time_slot_id: UUID) -> TimeSlot:
        return await self._get_time_slot(time_slot_id)

    async def list_time_slots(self, stage_id: UUID, edition_id: UUID) -> List[TimeSlot]:
        if await self.resolver.festival_for_stage(stage_id) is None:
            raise StageNotFoundError(stage_id)
        return await self.time_slots.list_for_stage(stage_id, edition_id)

    # Engagements

    async def create_engagement(
        self,
        time_slot_id: UUID,
        actor_id: UUID,
        artist_id: UUID,
        notes: Optional[str] = None,
    ) -> Engagement:
        """
        Book an artist into an empty slot.

        Raises:
            TimeSlotNotFoundError, ArtistNotFoundError: Unknown slot or artist
            ForbiddenError: Caller may not edit the schedule
            DomainValidationError: Artist belongs to another festival
            TimeSlotAlreadyEngagedError: Slot already has an active engagement
        """
        await self._get_time_slot(time_slot_id)
        festival_id = await self.resolver.festival_for_time_slot(time_slot_id)
        if festival_id is None:
            raise TimeSlotNotFoundError(time_slot_id)
        await self._authorize(actor_id, festival_id)

        await self._get_artist_for_festival(artist_id, festival_id)

        if await self.engagements.exists_for_time_slot(time_slot_id):
            raise TimeSlotAlreadyEngagedError(time_slot_id)

        engagement = Engagement(
            time_slot_id=time_slot_id,
            artist_id=artist_id,
            notes=notes,
            created_by=actor_id,
        )
        async with self._writing():
            await self.engagements.add(engagement)
            await self.db.commit()

        logger.info(f"User {actor_id} engaged artist {artist_id} for time slot {time_slot_id}")
        return engagement

    async def update_engagement(
        self,
        engagement_id: UUID,
        actor_id: UUID,
        artist_id: Optional[UUID] = None,
        notes: Optional[str] = None,
    ) -> Engagement:
        """Swap the artist and/or replace the notes on an existing engagement."""
        festival_id = await self.resolver.festival_for_engagement(engagement_id)
        if festival_id is None:
            raise EngagementNotFoundError(engagement_id)
        await self._authorize(actor_id, festival_id)

        engagement = await self._get_engagement(engagement_id)
        if artist_id is not None:
            await self._get_artist_for_festival(artist_id, festival_id)
            engagement.artist_id = artist_id
        if notes is not None:
            engagement.notes = notes
        engagement.updated_by = actor_id

        await self._commit()
        logger.info(f"User {actor_id} updated engagement {engagement_id}")
        return engagement

    async def delete_engagement(self, engagement_id: UUID, actor_id: UUID) -> None:
        festival_id = await self.resolver.festival_for_engagement(engagement_id)
        if festival_id is None:
            raise EngagementNotFoundError(engagement_id)
        await self._authorize(actor_id, festival_id)

        engagement = await self._get_engagement(engagement_id)
        engagement.soft_delete()
        engagement.updated_by = actor_id

        await self._commit()
        logger.info(f"User {actor_id} deleted engagement {engagement_id}")

    async def get_engagement(self, engagement_id: UUID) -> Engagement:
        return await self._get_engagement(engagement_id)

    # Helpers

    async def _authorize(self, actor_id: UUID, festival_id: UUID) -> None:
        if not await self.authorizer.can_modify(actor_id, festival_id, PermissionScope.SCHEDULE):
            logger.warning(f"User {actor_id} denied schedule access on festival {festival_id}")
            raise ForbiddenError("You do not have permission to edit this schedule")

    @staticmethod
    def _validate_interval(start_utc: datetime, end_utc: datetime, slot_type: Optional[str]) -> None:
        validation = TimeSlotRules.validate_interval(start_utc, end_utc, slot_type)
        if not validation.is_valid:
            raise DomainValidationError(validation.errors[0].message, validation.errors)

    async def _get_time_slot(self, time_slot_id: UUID) -> TimeSlot:
        time_slot = await self.time_slots.get(time_slot_id)
        if time_slot is None:
            raise TimeSlotNotFoundError(time_slot_id)
        return time_slot

    async def _get_engagement(self, engagement_id: UUID) -> Engagement:
        engagement = await self.engagements.get(engagement_id)
        if engagement is None:
            raise EngagementNotFoundError(engagement_id)
        return engagement

    async def _get_artist_for_festival(self, artist_id: UUID, festival_id: UUID) -> Artist:
        artist = await self.artists.get(artist_id)
        if artist is None:
            raise ArtistNotFoundError(artist_id)
        if artist.festival_id != festival_id:
            raise DomainValidationError(
                "Artist belongs to a different festival",
                [ValidationError(field="artist_id", code="ARTIST_FESTIVAL_MISMATCH",
                                 message="Artist must be booked through the slot's festival")],
            )
        return artist
