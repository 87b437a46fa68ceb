"""Schedule aggregate model."""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, UUID

from .base import BaseModel, UTCDateTime


class Schedule(BaseModel):
    """
    Publish state of an edition's schedule.

    One row per edition. ``version`` starts at 1 and only moves forward;
    the schedule counts as published once ``published_at`` is set.
    """

    __tablename__ = "schedules"

    edition_id = Column(
        UUID(as_uuid=True),
        ForeignKey("festival_editions.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        comment="Edition this schedule belongs to"
    )
    version = Column(
        Integer,
        nullable=False,
        default=1,
        comment="Published version number"
    )
    published_at = Column(
        UTCDateTime,
        nullable=True,
        comment="Last publish time; null while unpublished"
    )
    published_by = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="User who last published"
    )

    __table_args__ = (
        CheckConstraint("version >= 1", name="ck_schedules_version_positive"),
    )

    @property
    def is_published(self) -> bool:
        return self.published_at is not None
