"""Festival, edition, and artist models.

These are maintained by the catalog side of the platform; the scheduling
engine only reads them, apart from the edition status transition on publish.
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, String, Text, UUID, text

from .base import BaseModel, IntEnumType, SoftDeleteMixin, UTCDateTime
from .enums import EditionStatus


class Festival(BaseModel, SoftDeleteMixin):
    """A recurring festival brand; the root every permission hangs off."""

    __tablename__ = "festivals"

    name = Column(
        String(200),
        nullable=False,
        comment="Festival display name"
    )
    description = Column(
        Text,
        nullable=True,
        comment="Long-form festival description"
    )
    owner_user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        comment="Current owner; mirrors the active Owner permission"
    )

    __table_args__ = (
        Index(
            "idx_festivals_owner",
            "owner_user_id",
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("NOT is_deleted"),
        ),
    )


class FestivalEdition(BaseModel, SoftDeleteMixin):
    """A dated instance of a festival whose schedule gets published."""

    __tablename__ = "festival_editions"

    festival_id = Column(
        UUID(as_uuid=True),
        ForeignKey("festivals.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning festival"
    )
    name = Column(
        String(200),
        nullable=False,
        comment="Edition name, e.g. 'Summer 2026'"
    )
    start_date_utc = Column(UTCDateTime, nullable=True)
    end_date_utc = Column(UTCDateTime, nullable=True)
    timezone_id = Column(
        String(100),
        nullable=False,
        default="UTC",
        comment="IANA timezone the edition is presented in"
    )
    status = Column(
        IntEnumType(EditionStatus),
        nullable=False,
        default=EditionStatus.DRAFT,
        comment="0 = draft, 1 = published, 2 = archived"
    )

    __table_args__ = (
        CheckConstraint("status IN (0, 1, 2)", name="ck_festival_editions_status"),
        Index(
            "idx_festival_editions_festival",
            "festival_id",
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("NOT is_deleted"),
        ),
    )

    @property
    def is_published(self) -> bool:
        return self.status == EditionStatus.PUBLISHED


class Artist(BaseModel, SoftDeleteMixin):
    """A performer, scoped to a festival and reusable across its editions."""

    __tablename__ = "artists"

    festival_id = Column(
        UUID(as_uuid=True),
        ForeignKey("festivals.id", ondelete="CASCADE"),
        nullable=False,
        comment="Festival the artist is booked through"
    )
    name = Column(
        String(200),
        nullable=False,
        comment="Artist display name"
    )
    genre = Column(String(100), nullable=True)

    __table_args__ = (
        Index(
            "idx_artists_festival",
            "festival_id",
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("NOT is_deleted"),
        ),
    )
