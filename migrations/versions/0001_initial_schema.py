"""initial schema: events, time_slots, page_views

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-06-02 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("short_description", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("event_type", sa.String(length=100), nullable=True),
        sa.Column("age_category", sa.String(length=10), nullable=True),
        sa.Column("bg_image", sa.String(length=1024), nullable=True),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("payment_type", sa.String(length=20), nullable=False, server_default="free"),
        sa.Column("price", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("currency", sa.String(length=10), nullable=True),
        sa.Column("couple_discount", sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column("child_half_price", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("adults_only", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("payment_link", sa.String(length=1024), nullable=True),
        sa.Column("languages", JSONType, nullable=False, server_default="[]"),
        sa.Column("speakers", JSONType, nullable=False, server_default="[]"),
        sa.Column("registrations", JSONType, nullable=True),
        sa.Column("max_registrations", sa.Integer(), nullable=True),
        sa.Column("current_registration_count", sa.Integer(), nullable=True),
        sa.Column("registrations_list", JSONType, nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.CheckConstraint("price IS NULL OR price >= 0", name="ck_events_price_non_negative"),
        sa.CheckConstraint(
            "couple_discount IS NULL OR (couple_discount >= 0 AND couple_discount <= 100)",
            name="ck_events_couple_discount_range",
        ),
        sa.CheckConstraint("version > 0", name="ck_events_version_positive"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_events_id"), "events", ["id"], unique=False)
    op.create_index(op.f("ix_events_title"), "events", ["title"], unique=False)
    op.create_index(op.f("ix_events_date"), "events", ["date"], unique=False)
    op.create_index(op.f("ix_events_status"), "events", ["status"], unique=False)

    op.create_table(
        "time_slots",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
        sa.Column("slot_details", JSONType, nullable=False, server_default="{}"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_time_slots_id"), "time_slots", ["id"], unique=False)
    op.create_index(op.f("ix_time_slots_date"), "time_slots", ["date"], unique=False)

    op.create_table(
        "page_views",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("path", sa.String(length=1024), nullable=False),
        sa.Column("session_id", sa.String(length=255), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("time_spent", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_page_views_id"), "page_views", ["id"], unique=False)
    op.create_index(op.f("ix_page_views_path"), "page_views", ["path"], unique=False)
    op.create_index(op.f("ix_page_views_session_id"), "page_views", ["session_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_page_views_session_id"), table_name="page_views")
    op.drop_index(op.f("ix_page_views_path"), table_name="page_views")
    op.drop_index(op.f("ix_page_views_id"), table_name="page_views")
    op.drop_table("page_views")

    op.drop_index(op.f("ix_time_slots_date"), table_name="time_slots")
    op.drop_index(op.f("ix_time_slots_id"), table_name="time_slots")
    op.drop_table("time_slots")

    op.drop_index(op.f("ix_events_status"), table_name="events")
    op.drop_index(op.f("ix_events_date"), table_name="events")
    op.drop_index(op.f("ix_events_title"), table_name="events")
    op.drop_index(op.f("ix_events_id"), table_name="events")
    op.drop_table("events")
