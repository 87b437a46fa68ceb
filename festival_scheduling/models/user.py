"""User model.

Accounts are owned by the identity service; this table is the local
projection needed to resolve invitees by email.
"""

from sqlalchemy import Column, Index, String, text

from .base import BaseModel, SoftDeleteMixin


class User(BaseModel, SoftDeleteMixin):
    """A person who can hold festival permissions."""

    __tablename__ = "users"

    email = Column(
        String(256),
        nullable=False,
        comment="Email address as entered"
    )
    email_normalized = Column(
        String(256),
        nullable=False,
        comment="Lower-cased email used for lookups"
    )
    display_name = Column(
        String(100),
        nullable=False,
        comment="Name shown to collaborators"
    )

    __table_args__ = (
        Index(
            "uq_users_email_normalized",
            "email_normalized",
            unique=True,
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("NOT is_deleted"),
        ),
    )

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()
