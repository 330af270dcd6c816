"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates all tables for the Kmer Stays marketplace:
- Profiles (mirrored from the identity provider)
- Listings
- Bookings, with the no-overlap exclusion constraint
- Conversations and messages
- Reviews and favorites
"""

from typing import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # Needed for "listing_id WITH =" inside a GiST exclusion constraint
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    # ==================== PROFILES ====================
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("email", sa.String(255), index=True),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("avatar_url", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
    )

    # ==================== LISTINGS ====================
    op.create_table(
        "listings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("host_id", sa.String(64), nullable=False, index=True),
        sa.Column("title", sa.String(120), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False, index=True),
        sa.Column("region", sa.String(2), nullable=False),
        sa.Column("latitude", sa.Numeric(10, 7)),
        sa.Column("longitude", sa.Numeric(10, 7)),
        sa.Column("max_guests", sa.Integer, nullable=False, server_default="1"),
        sa.Column("bedrooms", sa.Integer, server_default="0"),
        sa.Column("beds", sa.Integer, server_default="1"),
        sa.Column("bathrooms", sa.Integer, server_default="0"),
        sa.Column("price_per_night", sa.Integer, nullable=False),
        sa.Column("amenities", sa.JSON, server_default="[]"),
        sa.Column("images", sa.JSON, server_default="[]"),
        sa.Column("status", sa.String(20), server_default="pending_review", index=True),
        sa.Column("rejection_reason", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("listing_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("guest_id", sa.String(64), nullable=False, index=True),
        sa.Column("host_id", sa.String(64), nullable=False, index=True),
        sa.Column("check_in", sa.Date, nullable=False, index=True),
        sa.Column("check_out", sa.Date, nullable=False, index=True),
        sa.Column("num_guests", sa.Integer, nullable=False, server_default="1"),
        sa.Column("nights", sa.Integer, nullable=False),
        sa.Column("nightly_rate", sa.Integer, nullable=False),
        sa.Column("subtotal", sa.Integer, nullable=False),
        sa.Column("service_fee", sa.Integer, nullable=False),
        sa.Column("total_price", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), server_default="pending", index=True),
        sa.Column("payment_status", sa.String(20), server_default="pending"),
        sa.Column("stripe_payment_intent_id", sa.String(255)),
        sa.Column("cancelled_by", sa.String(10)),
        sa.Column("confirmed_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint("check_out > check_in", name="ck_bookings_dates"),
    )

    # Two live bookings of one listing may not share a date, boundaries
    # included. Cancelled bookings release their dates.
    op.execute(
        """
        ALTER TABLE bookings
        ADD CONSTRAINT ex_bookings_no_overlap
        EXCLUDE USING gist (
            listing_id WITH =,
            daterange(check_in, check_out, '[]') WITH &&
        )
        WHERE (status <> 'cancelled')
        """
    )

    # ==================== MESSAGING ====================
    op.create_table(
        "conversations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("listing_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("listings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("guest_id", sa.String(64), nullable=False, index=True),
        sa.Column("host_id", sa.String(64), nullable=False, index=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_conversations_triple", "conversations", ["listing_id", "guest_id", "host_id"])

    op.create_table(
        "messages",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("conversation_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("sender_id", sa.String(64), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )

    # ==================== REVIEWS ====================
    op.create_table(
        "reviews",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("booking_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("listing_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("reviewer_id", sa.String(64), nullable=False),
        sa.Column("overall_rating", sa.Integer, nullable=False),
        sa.Column("cleanliness_rating", sa.Integer, nullable=False),
        sa.Column("communication_rating", sa.Integer, nullable=False),
        sa.Column("location_rating", sa.Integer, nullable=False),
        sa.Column("value_rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== FAVORITES ====================
    op.create_table(
        "favorites",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False, index=True),
        sa.Column("listing_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("listings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "listing_id", name="uq_favorites_user_listing"),
    )


def downgrade() -> None:
    """Drop all database tables in reverse order."""
    op.drop_table("favorites")
    op.drop_table("reviews")
    op.drop_table("messages")
    op.drop_index("ix_conversations_triple", table_name="conversations")
    op.drop_table("conversations")
    op.drop_table("bookings")
    op.drop_table("listings")
    op.drop_table("profiles")
