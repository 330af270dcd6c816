"""Public host profile endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, get_identity_provider
from app.core.identity import IdentityProvider
from app.schemas.listing import HostProfileResponse
from app.services import listing_service
from app.services.listing_service import HostProfile

router = APIRouter()


@router.get("/{host_id}", response_model=HostProfileResponse)
async def get_host_profile(
    host_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> HostProfile:
    """Get a host's public profile with approved listings and ratings."""
    result = await listing_service.get_host_profile(db, identity, host_id)
    return result.unwrap()
