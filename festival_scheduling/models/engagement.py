"""Engagement model binding an artist to a time slot."""

from sqlalchemy import Column, ForeignKey, Index, Text, UUID, text

from .base import BaseModel, SoftDeleteMixin


class Engagement(BaseModel, SoftDeleteMixin):
    """
    One artist booked into one time slot.

    At most one active engagement may exist per slot; the partial unique
    index ``uq_engagements_active_time_slot`` is the authoritative guard.
    """

    __tablename__ = "engagements"

    time_slot_id = Column(
        UUID(as_uuid=True),
        ForeignKey("time_slots.id", ondelete="CASCADE"),
        nullable=False,
        comment="Slot the artist performs in"
    )
    artist_id = Column(
        UUID(as_uuid=True),
        ForeignKey("artists.id", ondelete="RESTRICT"),
        nullable=False,
        comment="Booked artist"
    )
    notes = Column(
        Text,
        nullable=True,
        comment="Organizer notes (rider, set length, etc.)"
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
        Index(
            "uq_engagements_active_time_slot",
            "time_slot_id",
            unique=True,
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("NOT is_deleted"),
        ),
        Index(
            "idx_engagements_artist",
            "artist_id",
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("NOT is_deleted"),
        ),
    )
