"""bookings table

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_WHERE = sa.text("status IN ('pending', 'confirmed')")


def upgrade() -> None:
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("group_id", sa.Text(), nullable=False),
        sa.Column("booking_number", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=False),
        sa.Column("date", sa.Text(), nullable=False),
        sa.Column("time", sa.Text(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("total_slots", sa.Integer(), nullable=False),
        sa.Column("slot_index", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Text(), nullable=False),
        sa.Column("end_time", sa.Text(), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("price", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("created_at", sa.Text(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.Text(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("expires_at", sa.Text()),
        sa.Column("confirmed_at", sa.Text()),
        sa.Column("declined_at", sa.Text()),
        sa.Column("expired_at", sa.Text()),
        sa.Column("is_recurring", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("recurring_weeks", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("booking_dates", sa.Text(), nullable=False, server_default=sa.text("'[]'")),
    )
    op.create_index(
        "uq_bookings_active_slot",
        "bookings",
        ["date", "time"],
        unique=True,
        sqlite_where=ACTIVE_WHERE,
        postgresql_where=ACTIVE_WHERE,
    )
    op.create_index("ix_bookings_group_id", "bookings", ["group_id"])
    op.create_index("ix_bookings_booking_number", "bookings", ["booking_number"])
    op.create_index("ix_bookings_phone_date", "bookings", ["phone", "date"])


def downgrade() -> None:
    op.drop_index("ix_bookings_phone_date", table_name="bookings")
    op.drop_index("ix_bookings_booking_number", table_name="bookings")
    op.drop_index("ix_bookings_group_id", table_name="bookings")
    op.drop_index("uq_bookings_active_slot", table_name="bookings")
    op.drop_table("bookings")
