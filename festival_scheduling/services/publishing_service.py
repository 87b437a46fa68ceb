"""Schedule publishing and versioning."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from festival_scheduling.models.base import utcnow
from festival_scheduling.models.enums import EditionStatus, PermissionScope
from festival_scheduling.models.schedule import Schedule
from festival_scheduling.stores.catalog import EditionStore
from festival_scheduling.stores.resolvers import ResourceResolver
from festival_scheduling.stores.schedules import ScheduleStore

from .authorization import FestivalAuthorizer
from .base import BaseService
from .errors import EditionNotFoundError, ForbiddenError
from .events import ChangeType, ScheduleChange, ScheduleNotifier

logger = logging.getLogger(__name__)


@dataclass
class ScheduleItem:
    """One row of a schedule: a slot, where it is, and who plays it."""
    time_slot_id: UUID
    stage_id: UUID
    stage_name: str
    start_utc: datetime
    end_utc: datetime
    slot_type: str
    engagement_id: Optional[UUID] = None
    artist_id: Optional[UUID] = None
    artist_name: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class ScheduleDetail:
    edition_id: UUID
    version: int
    published_at: Optional[datetime]
    published_by: Optional[UUID]
    items: List[ScheduleItem] = field(default_factory=list)

    @property
    def is_published(self) -> bool:
        return self.published_at is not None


class PublishingService(BaseService):
    """
    Publishes an edition's schedule and reports the change downstream.

    Publishing bumps the schedule version and marks the edition Published in
    one transaction. The notifier runs only after that commit; its failure is
    logged and never undoes the publish.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        notifier: Optional[ScheduleNotifier] = None,
        authorizer: Optional[FestivalAuthorizer] = None,
    ):
        super().__init__(db_session)
        self.notifier = notifier
        self.authorizer = authorizer or FestivalAuthorizer(db_session)
        self.resolver = ResourceResolver(db_session)
        self.schedules = ScheduleStore(db_session)
        self.editions = EditionStore(db_session)

    async def publish_schedule(self, edition_id: UUID, actor_id: UUID) -> Schedule:
        """
        Publish (or republish) the schedule of an edition.

        The first publish stays at version 1; each republish adds one.

        Raises:
            EditionNotFoundError: Unknown or deleted edition
            ForbiddenError: Caller may not edit the schedule
        """
        festival_id = await self.resolver.festival_for_edition(edition_id)
        if festival_id is None:
            raise EditionNotFoundError(edition_id)
        if not await self.authorizer.can_modify(actor_id, festival_id, PermissionScope.SCHEDULE):
            logger.warning(f"User {actor_id} denied publishing edition {edition_id}")
            raise ForbiddenError("You do not have permission to publish this schedule")

        edition = await self.editions.get(edition_id)
        if edition is None:
            raise EditionNotFoundError(edition_id)

        async with self._writing():
            schedule = await self.schedules.get_or_create(edition_id)
            schedule = await self.schedules.publish(schedule, actor_id, utcnow())
            edition.status = EditionStatus.PUBLISHED
            await self.db.commit()

        logger.info(
            f"User {actor_id} published schedule for edition {edition_id} (version {schedule.version})"
        )
        await self._notify(edition_id, schedule)
        return schedule

    async def get_schedule(self, edition_id: UUID) -> Schedule:
        """
        Current schedule of an edition.

        An edition that was never published reads as an unpublished version 1;
        nothing is written.
        """
        edition = await self.editions.get(edition_id)
        if edition is None:
            raise EditionNotFoundError(edition_id)

        schedule = await self.schedules.get_for_edition(edition_id)
        if schedule is None:
            schedule = Schedule(edition_id=edition_id, version=1)
        return schedule

    async def get_schedule_detail(self, edition_id: UUID) -> ScheduleDetail:
        schedule = await self.get_schedule(edition_id)
        rows = await self.schedules.list_entries(edition_id)
        return ScheduleDetail(
            edition_id=edition_id,
            version=schedule.version,
            published_at=schedule.published_at,
            published_by=schedule.published_by,
            items=[ScheduleItem(**row._mapping) for row in rows],
        )

    async def _notify(self, edition_id: UUID, schedule: Schedule) -> None:
        if self.notifier is None:
            return
        change = ScheduleChange(
            change_type=ChangeType.SCHEDULE_PUBLISHED,
            version=schedule.version,
            message=f"The schedule has been published (version {schedule.version}).",
            published_by=schedule.published_by,
        )
        try:
            await self.notifier.notify_schedule_changed(edition_id, change)
        except Exception as e:
            # CancelledError is not an Exception and still propagates.
            logger.error(f"Schedule notification failed for edition {edition_id}: {e}")
