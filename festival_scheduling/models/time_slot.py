"""Time slot model."""

from sqlalchemy import CheckConstraint, Column, DDL, ForeignKey, Index, String, UUID, event, text

from .base import BaseModel, SoftDeleteMixin, UTCDateTime


class TimeSlot(BaseModel, SoftDeleteMixin):
    """
    A half-open interval ``[start_utc, end_utc)`` on one stage within one edition.

    Two active slots on the same (stage, edition) may touch but never overlap.
    On PostgreSQL that is enforced by the ``ex_time_slots_no_overlap``
    exclusion constraint attached below.
    """

    __tablename__ = "time_slots"

    stage_id = Column(
        UUID(as_uuid=True),
        ForeignKey("stages.id", ondelete="CASCADE"),
        nullable=False,
        comment="Stage the slot is booked on"
    )
    edition_id = Column(
        UUID(as_uuid=True),
        ForeignKey("festival_editions.id", ondelete="CASCADE"),
        nullable=False,
        comment="Edition the slot belongs to"
    )
    start_utc = Column(
        UTCDateTime,
        nullable=False,
        comment="Inclusive start"
    )
    end_utc = Column(
        UTCDateTime,
        nullable=False,
        comment="Exclusive end"
    )
    slot_type = Column(
        String(20),
        nullable=False,
        default="performance",
        comment="performance or changeover"
    )
    created_by = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    updated_by = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    __table_args__ = (
        CheckConstraint("end_utc > start_utc", name="ck_time_slots_valid_range"),
        CheckConstraint(
            "slot_type IN ('performance', 'changeover')",
            name="ck_time_slots_slot_type"
        ),
        Index(
            "idx_time_slots_stage_edition_start",
            "stage_id",
            "edition_id",
            "start_utc",
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("NOT is_deleted"),
        ),
        Index(
            "idx_time_slots_edition_start",
            "edition_id",
            "start_utc",
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("NOT is_deleted"),
        ),
    )

    def overlaps(self, start_utc, end_utc) -> bool:
        """Half-open overlap test; touching endpoints do not overlap."""
        return self.start_utc < end_utc and self.end_utc > start_utc


event.listen(
    TimeSlot.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    TimeSlot.__table__,
    "after_create",
    DDL(
        "ALTER TABLE time_slots ADD CONSTRAINT ex_time_slots_no_overlap "
        "EXCLUDE USING gist (stage_id WITH =, edition_id WITH =, "
        "tstzrange(start_utc, end_utc, '[)') WITH &&) WHERE (NOT is_deleted)"
    ).execute_if(dialect="postgresql"),
)
