"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import (
    admin,
    bookings,
    favorites,
    hosts,
    listings,
    messages,
    payments,
    reviews,
    support,
    webhooks,
)

api_router = APIRouter()

# Listings
api_router.include_router(listings.router, prefix="/listings", tags=["Listings"])

# Hosts
api_router.include_router(hosts.router, prefix="/hosts", tags=["Hosts"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Payments
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])

# Messages
api_router.include_router(messages.router, prefix="/conversations", tags=["Messages"])

# Reviews
api_router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])

# Favorites
api_router.include_router(favorites.router, prefix="/favorites", tags=["Favorites"])

# Support
api_router.include_router(support.router, prefix="/support", tags=["Support"])

# Admin
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])

# Webhooks
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
