"""Support request schemas."""

from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class SupportRequest(BaseModel):
    """Schema for contacting support."""

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=3, max_length=200)
    category: Literal["booking", "payment", "listing", "account", "other"]
    message: str = Field(..., min_length=10, max_length=5000)
