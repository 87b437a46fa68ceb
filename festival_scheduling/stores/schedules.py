"""Schedule store: the per-edition aggregate and its version counter."""

import uuid
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import Row, and_, case, select, update
from sqlalchemy.dialects import postgresql, sqlite

from festival_scheduling.models.engagement import Engagement
from festival_scheduling.models.festival import Artist
from festival_scheduling.models.schedule import Schedule
from festival_scheduling.models.time_slot import TimeSlot
from festival_scheduling.models.venue import Stage

from .base import BaseStore


class ScheduleStore(BaseStore[Schedule]):
    """Persistence for schedule aggregates."""

    model = Schedule

    async def get_for_edition(self, edition_id: UUID) -> Optional[Schedule]:
        result = await self.session.execute(
            select(Schedule).where(Schedule.edition_id == edition_id)
        )
        return result.scalar_one_or_none()

    async def get_or_create(self, edition_id: UUID) -> Schedule:
        """
        Return the edition's schedule, creating it at version 1 if absent.

        The insert is ``ON CONFLICT DO NOTHING`` on ``edition_id`` so two
        first-time publishers converge on the same row.
        """
        schedule = await self.get_for_edition(edition_id)
        if schedule is not None:
            return schedule

        insert = postgresql.insert if self.dialect_name == "postgresql" else sqlite.insert
        statement = insert(Schedule).values(
            id=uuid.uuid4(),
            edition_id=edition_id,
            version=1,
        ).on_conflict_do_nothing(index_elements=["edition_id"])
        await self.session.execute(statement)

        return await self.get_for_edition(edition_id)

    async def publish(self, schedule: Schedule, published_by: UUID, published_at: datetime) -> Schedule:
        """
        Stamp a publish in one statement.

        The first publish of an unpublished schedule keeps version 1 rather
        than bumping to 2, so after N publishes the version is N. Every later
        publish adds exactly one. The new version is computed by the
        database from the row it locks, never from a value read earlier.
        """
        await self.session.execute(
            update(Schedule)
            .where(Schedule.id == schedule.id)
            .values(
                version=case(
                    (Schedule.published_at.is_(None), Schedule.version),
                    else_=Schedule.version + 1,
                ),
                published_at=published_at,
                published_by=published_by,
                updated_at=published_at,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.refresh(schedule)
        return schedule

    async def list_entries(self, edition_id: UUID) -> List[Row]:
        """
        Active slots of an edition with their stage and, if booked, the artist.

        A soft-deleted artist keeps its engagement and id but loses its name.
        Ordered by start time, then stage name.
        """
        query = (
            select(
                TimeSlot.id.label("time_slot_id"),
                TimeSlot.stage_id,
                Stage.name.label("stage_name"),
                TimeSlot.start_utc,
                TimeSlot.end_utc,
                TimeSlot.slot_type,
                Engagement.id.label("engagement_id"),
                Engagement.artist_id,
                Artist.name.label("artist_name"),
                Engagement.notes,
            )
            .join(Stage, Stage.id == TimeSlot.stage_id)
            .outerjoin(
                Engagement,
                and_(
                    Engagement.time_slot_id == TimeSlot.id,
                    Engagement.is_deleted.is_(False),
                ),
            )
            .outerjoin(
                Artist,
                and_(
                    Artist.id == Engagement.artist_id,
                    Artist.is_deleted.is_(False),
                ),
            )
            .where(
                TimeSlot.edition_id == edition_id,
                TimeSlot.is_deleted.is_(False),
                Stage.is_deleted.is_(False),
            )
            .order_by(TimeSlot.start_utc, Stage.name)
        )
        result = await self.session.execute(query)
        return list(result.all())
