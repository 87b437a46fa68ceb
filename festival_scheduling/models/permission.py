"""Festival permission model for role/scope access control."""

from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, UUID, text

from .base import BaseModel, IntEnumType, UTCDateTime, utcnow
from .enums import FestivalRole, PermissionScope


class FestivalPermission(BaseModel):
    """
    One user's standing on one festival.

    A permission is created pending by an invitation (or directly active for
    the owner at festival creation), becomes active when the invitee accepts,
    and ends as a revoked tombstone. Rows are never deleted so the history of
    who held what stays auditable.

    Role is ordered (Viewer < Manager < Administrator < Owner). Scope narrows
    Managers and Viewers to a single functional area and is ignored once the
    role is Administrator or higher.

    Store-level guarantees:
    - at most one non-revoked permission per (user, festival)
    - at most one non-revoked Owner permission per festival
    """

    __tablename__ = "festival_permissions"

    festival_id = Column(
        UUID(as_uuid=True),
        ForeignKey("festivals.id", ondelete="CASCADE"),
        nullable=False,
        comment="Festival this permission grants access to"
    )
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="User holding the permission"
    )
    role = Column(
        IntEnumType(FestivalRole),
        nullable=False,
        comment="0 = viewer, 1 = manager, 2 = administrator, 3 = owner"
    )
    scope = Column(
        IntEnumType(PermissionScope),
        nullable=False,
        default=PermissionScope.ALL,
        comment="0 = all, 1 = venues, 2 = schedule, 3 = artists, 4 = editions, 5 = integrations"
    )

    # Invitation lifecycle
    invited_by_user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="User who sent the invitation"
    )
    accepted_at = Column(
        UTCDateTime,
        nullable=True,
        comment="When the invitee accepted"
    )
    is_pending = Column(
        Boolean,
        nullable=False,
        default=True,
        comment="True until the invitation is accepted"
    )
    is_revoked = Column(
        Boolean,
        nullable=False,
        default=False,
        comment="Tombstone flag set by revoke or decline"
    )
    revoked_at = Column(UTCDateTime, nullable=True)
    revoked_by_user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="User who revoked or declined"
    )

    __table_args__ = (
        CheckConstraint("role IN (0, 1, 2, 3)", name="ck_festival_permissions_role"),
        CheckConstraint("scope IN (0, 1, 2, 3, 4, 5)", name="ck_festival_permissions_scope"),
        Index(
            "uq_festival_permissions_user_festival",
            "user_id",
            "festival_id",
            unique=True,
            postgresql_where=text("NOT is_revoked"),
            sqlite_where=text("NOT is_revoked"),
        ),
        Index(
            "uq_festival_permissions_owner",
            "festival_id",
            unique=True,
            postgresql_where=text("role = 3 AND NOT is_revoked"),
            sqlite_where=text("role = 3 AND NOT is_revoked"),
        ),
        Index(
            "idx_festival_permissions_festival",
            "festival_id",
            postgresql_where=text("NOT is_revoked"),
            sqlite_where=text("NOT is_revoked"),
        ),
    )

    @property
    def is_active(self) -> bool:
        return not self.is_pending and not self.is_revoked and self.accepted_at is not None

    def grants_scope(self, required: PermissionScope) -> bool:
        """Scope rule: role dominance, then the All wildcard, then an exact match."""
        if not self.is_active:
            return False
        return (
            self.role.has_full_access
            or self.scope == PermissionScope.ALL
            or self.scope == required
        )

    def accept(self) -> None:
        self.accepted_at = utcnow()
        self.is_pending = False

    def revoke(self, by_user_id=None) -> None:
        self.is_revoked = True
        self.revoked_at = utcnow()
        self.revoked_by_user_id = by_user_id

    def activate_as_owner(self) -> None:
        """Promote to Owner with full scope, activating a pending row if needed."""
        self.role = FestivalRole.OWNER
        self.scope = PermissionScope.ALL
        if self.is_pending or self.accepted_at is None:
            self.accept()

    @property
    def status(self) -> str:
        if self.is_revoked:
            return "revoked"
        if self.is_pending:
            return "pending"
        return "active"

    def __repr__(self) -> str:
        return (
            f"<FestivalPermission(id={self.id}, user_id={self.user_id}, "
            f"festival_id={self.festival_id}, role={self.role!r}, status={self.status})>"
        )
