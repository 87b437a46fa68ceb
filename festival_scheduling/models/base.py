"""Base model classes, mixins, and column types."""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional, Type

from sqlalchemy import Boolean, Column, DateTime, Integer, UUID
from sqlalchemy.types import TypeDecorator

from festival_scheduling.core.database import Base


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime column normalised to UTC.

    Values are converted to UTC on the way in and always come back aware,
    including on backends (SQLite) that drop the offset on storage.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("Naive datetimes are not accepted; supply an aware UTC value")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class IntEnumType(TypeDecorator):
    """Stores an ``enum.IntEnum`` as its integer value so ordering survives in SQL."""

    impl = Integer
    cache_ok = True

    def __init__(self, enum_class: Type[enum.IntEnum], *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enum_class = enum_class

    def process_bind_param(self, value, dialect) -> Optional[int]:
        if value is None:
            return None
        return int(self.enum_class(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self.enum_class(value)


class TimestampMixin:
    """Mixin for adding created_at and updated_at timestamps."""

    created_at = Column(
        UTCDateTime,
        default=utcnow,
        nullable=False,
        comment="Record creation timestamp"
    )
    updated_at = Column(
        UTCDateTime,
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        comment="Record last update timestamp"
    )


class SoftDeleteMixin:
    """Mixin for records that are tombstoned rather than removed."""

    is_deleted = Column(
        Boolean,
        default=False,
        nullable=False,
        comment="True once the record has been soft-deleted"
    )
    deleted_at = Column(
        UTCDateTime,
        nullable=True,
        comment="Soft-delete timestamp"
    )

    def soft_delete(self, at: Optional[datetime] = None) -> None:
        """Mark the record deleted."""
        self.is_deleted = True
        self.deleted_at = at or utcnow()


class BaseModel(Base, TimestampMixin):
    """
    Base model class with a UUID primary key and timestamp tracking.
    """

    __abstract__ = True

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Primary key UUID"
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"
