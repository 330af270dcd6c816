"""Favorite-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.schemas.listing import ListingResponse


class FavoriteToggleResponse(BaseModel):
    """Result of toggling a favorite."""

    listing_id: UUID
    is_favorited: bool


class FavoriteResponse(BaseModel):
    """Schema for a saved listing."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    listing_id: UUID
    created_at: datetime
    listing: ListingResponse
