"""Enumerations shared by the permission and scheduling models."""

import enum


class FestivalRole(enum.IntEnum):
    """
    Ordered standing of a user on a festival.

    Integer backed so that ``role >= FestivalRole.ADMINISTRATOR`` is a plain
    comparison both in Python and in SQL.
    """

    VIEWER = 0
    MANAGER = 1
    ADMINISTRATOR = 2
    OWNER = 3

    def can_manage(self, other: "FestivalRole") -> bool:
        """True when this role strictly outranks ``other``."""
        return self > other

    @property
    def has_full_access(self) -> bool:
        """Administrators and owners are never narrowed by a scope."""
        return self >= FestivalRole.ADMINISTRATOR


class PermissionScope(enum.IntEnum):
    """Functional area a Manager or Viewer is restricted to. Unordered."""

    ALL = 0
    VENUES = 1
    SCHEDULE = 2
    ARTISTS = 3
    EDITIONS = 4
    INTEGRATIONS = 5


class EditionStatus(enum.IntEnum):
    DRAFT = 0
    PUBLISHED = 1
    ARCHIVED = 2


class SlotType(str, enum.Enum):
    PERFORMANCE = "performance"
    CHANGEOVER = "changeover"
