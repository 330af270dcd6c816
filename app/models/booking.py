"""Booking database model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base

if TYPE_CHECKING:
    from app.models.listing import Listing
    from app.models.review import Review


class Booking(Base):
    """Whole-unit reservation of one listing for a date range."""

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_bookings_dates"),
        # Postgres additionally carries an exclusion constraint on
        # (listing_id, daterange(check_in, check_out, '[]')) for
        # non-cancelled rows; see alembic/versions/001_initial_schema.py
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    guest_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    host_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # Dates (check_out exclusive)
    check_in: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    check_out: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    num_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Pricing (whole XAF)
    nights: Mapped[int] = mapped_column(Integer, nullable=False)
    nightly_rate: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal: Mapped[int] = mapped_column(Integer, nullable=False)
    service_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price: Mapped[int] = mapped_column(Integer, nullable=False)

    # Status
    status: Mapped[str] = mapped_column(
        String(20), default="pending", index=True
    )  # pending, confirmed, cancelled
    payment_status: Mapped[str] = mapped_column(
        String(20), default="pending"
    )  # pending, paid, failed
    stripe_payment_intent_id: Mapped[str | None] = mapped_column(String(255))

    # Cancellation
    cancelled_by: Mapped[str | None] = mapped_column(String(10))  # guest, host, admin

    # Timestamps
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    listing: Mapped["Listing"] = relationship("Listing", back_populates="bookings")
    review: Mapped["Review | None"] = relationship(
        "Review", back_populates="booking", uselist=False, cascade="all, delete-orphan"
    )
