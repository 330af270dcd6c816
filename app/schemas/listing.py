"""Listing-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.constants import AMENITIES, REGIONS

Category = Literal["apartment", "house", "villa", "room", "studio", "guesthouse"]


def _check_region(v: str | None) -> str | None:
    if v is not None and v not in REGIONS:
        raise ValueError(f"Unknown region code '{v}'")
    return v


def _check_amenities(v: list[str] | None) -> list[str] | None:
    if v is None:
        return v
    unknown = [a for a in v if a not in AMENITIES]
    if unknown:
        raise ValueError(f"Unknown amenities: {', '.join(unknown)}")
    # Keep order, drop duplicates
    return list(dict.fromkeys(v))


class ListingBase(BaseModel):
    """Base listing schema."""

    title: str = Field(..., min_length=5, max_length=120)
    description: str = Field(..., min_length=20, max_length=5000)
    category: Category

    # Location
    address: str = Field(..., min_length=5, max_length=255)
    city: str = Field(..., min_length=2, max_length=100)
    region: str = Field(..., min_length=2, max_length=2)
    latitude: Decimal | None = Field(None, ge=-90, le=90)
    longitude: Decimal | None = Field(None, ge=-180, le=180)

    # Capacity
    max_guests: int = Field(..., ge=1, le=50)
    bedrooms: int = Field(default=0, ge=0, le=30)
    beds: int = Field(default=1, ge=1, le=50)
    bathrooms: int = Field(default=0, ge=0, le=30)

    # Pricing (whole XAF, no decimals)
    price_per_night: int = Field(..., ge=1000, le=10_000_000)

    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list, max_length=30)

    @field_validator("region")
    @classmethod
    def validate_region(cls, v: str) -> str:
        return _check_region(v)

    @field_validator("amenities")
    @classmethod
    def validate_amenities(cls, v: list[str]) -> list[str]:
        return _check_amenities(v)


class ListingCreate(ListingBase):
    """Schema for submitting a listing."""


class ListingUpdate(BaseModel):
    """Schema for updating a listing."""

    title: str | None = Field(None, min_length=5, max_length=120)
    description: str | None = Field(None, min_length=20, max_length=5000)
    category: Category | None = None

    # Location
    address: str | None = Field(None, min_length=5, max_length=255)
    city: str | None = Field(None, min_length=2, max_length=100)
    region: str | None = Field(None, min_length=2, max_length=2)
    latitude: Decimal | None = Field(None, ge=-90, le=90)
    longitude: Decimal | None = Field(None, ge=-180, le=180)

    # Capacity
    max_guests: int | None = Field(None, ge=1, le=50)
    bedrooms: int | None = Field(None, ge=0, le=30)
    beds: int | None = Field(None, ge=1, le=50)
    bathrooms: int | None = Field(None, ge=0, le=30)

    # Pricing
    price_per_night: int | None = Field(None, ge=1000, le=10_000_000)

    amenities: list[str] | None = None
    images: list[str] | None = Field(None, max_length=30)

    @field_validator("region")
    @classmethod
    def validate_region(cls, v: str | None) -> str | None:
        return _check_region(v)

    @field_validator("amenities")
    @classmethod
    def validate_amenities(cls, v: list[str] | None) -> list[str] | None:
        return _check_amenities(v)


class ListingRejectRequest(BaseModel):
    """Schema for rejecting a listing."""

    reason: str | None = Field(None, max_length=1000)


class ListingSummary(BaseModel):
    """Compact listing data embedded in bookings, favorites and threads."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    city: str
    region: str
    price_per_night: int
    cover_image_url: str | None = None


class ListingResponse(BaseModel):
    """Schema for listing response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    host_id: str
    title: str
    description: str
    category: str
    address: str
    city: str
    region: str
    latitude: Decimal | None
    longitude: Decimal | None
    max_guests: int
    bedrooms: int
    beds: int
    bathrooms: int
    price_per_night: int
    amenities: list[str]
    images: list[str]
    status: str
    rejection_reason: str | None
    created_at: datetime
    updated_at: datetime


class RatingSummaryResponse(BaseModel):
    """Average overall rating of a listing."""

    model_config = ConfigDict(from_attributes=True)

    average: Decimal
    count: int


class HostProfileResponse(BaseModel):
    """Public host page."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    avatar_url: str | None
    joined_at: int | None
    listings: list[ListingResponse]
    total_listings: int
    total_reviews: int
    average_rating: float
