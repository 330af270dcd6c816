"""Messaging-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.listing import ListingSummary


class ConversationCreate(BaseModel):
    """Schema for opening a thread with a listing's host."""

    listing_id: UUID


class ConversationResponse(BaseModel):
    """Schema for conversation response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    listing_id: UUID
    guest_id: str
    host_id: str
    created_at: datetime
    listing: ListingSummary | None = None


class MessageCreate(BaseModel):
    """Schema for sending a message."""

    # Length is checked after trimming by the service
    content: str = Field(..., max_length=10000)


class MessageResponse(BaseModel):
    """Schema for message response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    conversation_id: UUID
    sender_id: str
    content: str
    created_at: datetime
