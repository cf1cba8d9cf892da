"""Initial schema: admins, events, bookings and the issued ticket number registry.

Revision ID: 001
Revises: None
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "admins",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_admins_email", "admins", ["email"], unique=True)
    op.create_index("ix_admins_created_at", "admins", ["created_at"])

    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.String(2000), nullable=False),
        sa.Column("date", sa.String(50), nullable=False),
        sa.Column("event_time", sa.String(100), nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("standard_price", sa.String(50), nullable=True),
        sa.Column("vip_price", sa.String(50), nullable=True),
        sa.Column("refreshments", sa.String(255), nullable=True),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column("sponsor_logos", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_events_created_at", "events", ["created_at"])

    # Bookings reference events by id only: deleting an event must not
    # cascade into bookings, and verification degrades to empty event fields.
    op.create_table(
        "bookings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("ticket_number", sa.String(6), nullable=False),
        sa.Column("event_id", sa.String(64), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("contact_number", sa.String(50), nullable=False),
        sa.Column("email_address", sa.String(255), nullable=False),
        sa.Column("city_name", sa.String(100), nullable=False),
        sa.Column("ticket_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'Pending'")),
        sa.Column("receipt_image", sa.String(1024), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("ticket_number", name="uq_bookings_ticket_number"),
        sa.CheckConstraint(
            "status IN ('Pending', 'Paid', 'Unpaid', 'Cancelled')", name="check_booking_status"
        ),
        sa.CheckConstraint("ticket_type IN ('Standard', 'VIP')", name="check_booking_ticket_type"),
    )
    op.create_index("ix_bookings_event_id", "bookings", ["event_id"])
    # Admin listing is always newest first
    op.create_index("ix_bookings_created_at", "bookings", ["created_at"])

    # Append-only: rows are never deleted, so a ticket number is never reissued
    op.create_table(
        "issued_ticket_numbers",
        sa.Column("ticket_number", sa.String(6), primary_key=True),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("issued_ticket_numbers")
    op.drop_table("bookings")
    op.drop_table("events")
    op.drop_table("admins")
