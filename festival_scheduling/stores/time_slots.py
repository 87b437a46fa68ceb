"""Time slot store: interval persistence and overlap detection."""

import hashlib
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import exists, func, select

from festival_scheduling.models.time_slot import TimeSlot

from .base import BaseStore


def stage_edition_lock_key(stage_id: UUID, edition_id: UUID) -> int:
    """Stable signed 64-bit key for ``pg_advisory_xact_lock``."""
    digest = hashlib.blake2b(
        stage_id.bytes + edition_id.bytes, digest_size=8
    ).digest()
    return int.from_bytes(digest, "big", signed=True)


class TimeSlotStore(BaseStore[TimeSlot]):
    """Persistence for time slots scoped to a (stage, edition) pair."""

    model = TimeSlot

    async def list_for_stage(self, stage_id: UUID, edition_id: UUID) -> List[TimeSlot]:
        """Active slots on a stage for an edition, in running order."""
        result = await self.session.execute(
            select(TimeSlot)
            .where(
                TimeSlot.stage_id == stage_id,
                TimeSlot.edition_id == edition_id,
                TimeSlot.is_deleted.is_(False),
            )
            .order_by(TimeSlot.start_utc)
        )
        return list(result.scalars().all())

    async def has_overlap(
        self,
        stage_id: UUID,
        edition_id: UUID,
        start_utc: datetime,
        end_utc: datetime,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        """
        True if any active slot on (stage, edition) intersects ``[start_utc, end_utc)``.

        Uses the half-open rule ``start < other_end AND end > other_start`` so
        a slot ending exactly when another begins is not a conflict.
        """
        conditions = [
            TimeSlot.stage_id == stage_id,
            TimeSlot.edition_id == edition_id,
            TimeSlot.is_deleted.is_(False),
            TimeSlot.start_utc < end_utc,
            TimeSlot.end_utc > start_utc,
        ]
        if exclude_id is not None:
            conditions.append(TimeSlot.id != exclude_id)

        result = await self.session.execute(select(exists().where(*conditions)))
        return bool(result.scalar())

    async def lock_stage_edition(self, stage_id: UUID, edition_id: UUID) -> None:
        """
        Serialize writers for one (stage, edition) until the transaction ends.

        PostgreSQL only; other backends rely on their own write serialization
        and the store constraints.
        """
        if self.dialect_name != "postgresql":
            return
        await self.session.execute(
            select(func.pg_advisory_xact_lock(stage_edition_lock_key(stage_id, edition_id)))
        )
