"""Venue and stage models."""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, UUID, text

from .base import BaseModel, SoftDeleteMixin


class Venue(BaseModel, SoftDeleteMixin):
    """A physical location belonging to a festival."""

    __tablename__ = "venues"

    festival_id = Column(
        UUID(as_uuid=True),
        ForeignKey("festivals.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning festival"
    )
    name = Column(String(200), nullable=False)
    address = Column(String(500), nullable=True)

    __table_args__ = (
        Index(
            "idx_venues_festival",
            "festival_id",
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("NOT is_deleted"),
        ),
    )


class Stage(BaseModel, SoftDeleteMixin):
    """A performance area within a venue; time slots are laid out per stage."""

    __tablename__ = "stages"

    venue_id = Column(
        UUID(as_uuid=True),
        ForeignKey("venues.id", ondelete="CASCADE"),
        nullable=False,
        comment="Venue the stage sits in"
    )
    name = Column(String(200), nullable=False)
    sort_order = Column(
        Integer,
        nullable=False,
        default=0,
        comment="Display order within the venue"
    )

    __table_args__ = (
        Index(
            "idx_stages_venue",
            "venue_id",
            "sort_order",
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("NOT is_deleted"),
        ),
    )
