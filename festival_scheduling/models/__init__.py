"""Database models for the festival scheduling service."""

from .base import BaseModel, SoftDeleteMixin, TimestampMixin
from .enums import EditionStatus, FestivalRole, PermissionScope, SlotType
from .user import User
from .festival import Artist, Festival, FestivalEdition
from .venue import Stage, Venue
from .permission import FestivalPermission
from .time_slot import TimeSlot
from .engagement import Engagement
from .schedule import Schedule

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "SoftDeleteMixin",
    "EditionStatus",
    "FestivalRole",
    "PermissionScope",
    "SlotType",
    "User",
    "Festival",
    "FestivalEdition",
    "Artist",
    "Venue",
    "Stage",
    "FestivalPermission",
    "TimeSlot",
    "Engagement",
    "Schedule",
]
