"""Entity stores and resource-chain resolution."""

from .base import BaseStore
from .catalog import ArtistStore, EditionStore, FestivalStore, UserStore
from .engagements import EngagementStore
from .permissions import PermissionStore
from .resolvers import ResourceResolver
from .schedules import ScheduleStore
from .time_slots import TimeSlotStore

__all__ = [
    "BaseStore",
    "ArtistStore",
    "EditionStore",
    "FestivalStore",
    "UserStore",
    "EngagementStore",
    "PermissionStore",
    "ResourceResolver",
    "ScheduleStore",
    "TimeSlotStore",
]
