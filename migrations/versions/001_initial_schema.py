"""Initial schema: festivals, permissions, time slots, engagements, schedules

Revision ID: 001
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _soft_delete():
    return [
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _uuid_pk():
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True)


def upgrade() -> None:
    # Needed for UUID equality inside the gist exclusion constraint
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    # Users (local projection of identity accounts)
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("email", sa.String(256), nullable=False),
        sa.Column("email_normalized", sa.String(256), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        *_timestamps(),
        *_soft_delete(),
    )
    op.create_index(
        "uq_users_email_normalized", "users", ["email_normalized"],
        unique=True, postgresql_where=sa.text("NOT is_deleted"),
    )

    # Festivals
    op.create_table(
        "festivals",
        _uuid_pk(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("owner_user_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        *_timestamps(),
        *_soft_delete(),
    )
    op.create_index("idx_festivals_owner", "festivals", ["owner_user_id"],
                    postgresql_where=sa.text("NOT is_deleted"))

    op.create_table(
        "festival_editions",
        _uuid_pk(),
        sa.Column("festival_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("festivals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("start_date_utc", sa.DateTime(timezone=True)),
        sa.Column("end_date_utc", sa.DateTime(timezone=True)),
        sa.Column("timezone_id", sa.String(100), nullable=False, server_default="UTC"),
        sa.Column("status", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
        *_soft_delete(),
        sa.CheckConstraint("status IN (0, 1, 2)", name="ck_festival_editions_status"),
    )
    op.create_index("idx_festival_editions_festival", "festival_editions", ["festival_id"],
                    postgresql_where=sa.text("NOT is_deleted"))

    op.create_table(
        "artists",
        _uuid_pk(),
        sa.Column("festival_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("festivals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("genre", sa.String(100)),
        *_timestamps(),
        *_soft_delete(),
    )
    op.create_index("idx_artists_festival", "artists", ["festival_id"],
                    postgresql_where=sa.text("NOT is_deleted"))

    # Venues and stages
    op.create_table(
        "venues",
        _uuid_pk(),
        sa.Column("festival_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("festivals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("address", sa.String(500)),
        *_timestamps(),
        *_soft_delete(),
    )
    op.create_index("idx_venues_festival", "venues", ["festival_id"],
                    postgresql_where=sa.text("NOT is_deleted"))

    op.create_table(
        "stages",
        _uuid_pk(),
        sa.Column("venue_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
        *_soft_delete(),
    )
    op.create_index("idx_stages_venue", "stages", ["venue_id", "sort_order"],
                    postgresql_where=sa.text("NOT is_deleted"))

    # Festival permissions
    op.create_table(
        "festival_permissions",
        _uuid_pk(),
        sa.Column("festival_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("festivals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.Integer, nullable=False),
        sa.Column("scope", sa.Integer, nullable=False, server_default="0"),
        sa.Column("invited_by_user_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("accepted_at", sa.DateTime(timezone=True)),
        sa.Column("is_pending", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("is_revoked", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("revoked_at", sa.DateTime(timezone=True)),
        sa.Column("revoked_by_user_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="SET NULL")),
        *_timestamps(),
        sa.CheckConstraint("role IN (0, 1, 2, 3)", name="ck_festival_permissions_role"),
        sa.CheckConstraint("scope IN (0, 1, 2, 3, 4, 5)", name="ck_festival_permissions_scope"),
    )
    op.create_index(
        "uq_festival_permissions_user_festival", "festival_permissions", ["user_id", "festival_id"],
        unique=True, postgresql_where=sa.text("NOT is_revoked"),
    )
    op.create_index(
        "uq_festival_permissions_owner", "festival_permissions", ["festival_id"],
        unique=True, postgresql_where=sa.text("role = 3 AND NOT is_revoked"),
    )
    op.create_index("idx_festival_permissions_festival", "festival_permissions", ["festival_id"],
                    postgresql_where=sa.text("NOT is_revoked"))

    # Time slots
    op.create_table(
        "time_slots",
        _uuid_pk(),
        sa.Column("stage_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("stages.id", ondelete="CASCADE"), nullable=False),
        sa.Column("edition_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("festival_editions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("start_utc", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_utc", sa.DateTime(timezone=True), nullable=False),
        sa.Column("slot_type", sa.String(20), nullable=False, server_default="performance"),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("updated_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL")),
        *_timestamps(),
        *_soft_delete(),
        sa.CheckConstraint("end_utc > start_utc", name="ck_time_slots_valid_range"),
        sa.CheckConstraint("slot_type IN ('performance', 'changeover')", name="ck_time_slots_slot_type"),
    )
    op.create_index("idx_time_slots_stage_edition_start", "time_slots",
                    ["stage_id", "edition_id", "start_utc"], postgresql_where=sa.text("NOT is_deleted"))
    op.create_index("idx_time_slots_edition_start", "time_slots",
                    ["edition_id", "start_utc"], postgresql_where=sa.text("NOT is_deleted"))
    op.execute("""
        ALTER TABLE time_slots ADD CONSTRAINT ex_time_slots_no_overlap
        EXCLUDE USING gist (
            stage_id WITH =,
            edition_id WITH =,
            tstzrange(start_utc, end_utc, '[)') WITH &&
        ) WHERE (NOT is_deleted)
    """)

    # Engagements
    op.create_table(
        "engagements",
        _uuid_pk(),
        sa.Column("time_slot_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("time_slots.id", ondelete="CASCADE"), nullable=False),
        sa.Column("artist_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("artists.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("notes", sa.Text),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("updated_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL")),
        *_timestamps(),
        *_soft_delete(),
    )
    op.create_index("uq_engagements_active_time_slot", "engagements", ["time_slot_id"],
                    unique=True, postgresql_where=sa.text("NOT is_deleted"))
    op.create_index("idx_engagements_artist", "engagements", ["artist_id"],
                    postgresql_where=sa.text("NOT is_deleted"))

    # Schedules
    op.create_table(
        "schedules",
        _uuid_pk(),
        sa.Column("edition_id", postgresql.UUID(as_uuid=True),
                  sa.ForeignKey("festival_editions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("published_at", sa.DateTime(timezone=True)),
        sa.Column("published_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL")),
        *_timestamps(),
        sa.UniqueConstraint("edition_id"),
        sa.CheckConstraint("version >= 1", name="ck_schedules_version_positive"),
    )


def downgrade() -> None:
    op.drop_table("schedules")
    op.drop_table("engagements")
    op.drop_table("time_slots")
    op.drop_table("festival_permissions")
    op.drop_table("stages")
    op.drop_table("venues")
    op.drop_table("artists")
    op.drop_table("festival_editions")
    op.drop_table("festivals")
    op.drop_table("users")
