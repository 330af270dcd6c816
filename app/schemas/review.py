"""Review-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    """Schema for creating a review."""

    booking_id: UUID
    overall_rating: int = Field(..., ge=1, le=5)
    cleanliness_rating: int = Field(..., ge=1, le=5)
    communication_rating: int = Field(..., ge=1, le=5)
    location_rating: int = Field(..., ge=1, le=5)
    value_rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)

    def ratings(self) -> dict[str, int]:
        return self.model_dump(include={
            "overall_rating",
            "cleanliness_rating",
            "communication_rating",
            "location_rating",
            "value_rating",
        })


class ReviewResponse(BaseModel):
    """Schema for review response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    listing_id: UUID
    reviewer_id: str
    overall_rating: int
    cleanliness_rating: int
    communication_rating: int
    location_rating: int
    value_rating: int
    comment: str | None
    created_at: datetime
