"""Database models."""

from app.models.booking import Booking
from app.models.favorite import Favorite
from app.models.listing import Listing
from app.models.message import Conversation, Message
from app.models.profile import Profile
from app.models.review import Review

__all__ = [
    # Profile
    "Profile",
    # Listing
    "Listing",
    # Booking
    "Booking",
    # Message
    "Conversation",
    "Message",
    # Review
    "Review",
    # Favorite
    "Favorite",
]
