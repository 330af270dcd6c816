"""Identity provider port and its Clerk adapter.

Users, roles and bans live in the identity provider. The API never caches a
role: every authorization decision asks the provider again.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from app.config import settings
from app.core.exceptions import ExternalServiceError, NotFoundError

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Closed set of platform roles."""

    GUEST = "guest"
    HOST = "host"
    ADMIN = "admin"


def role_from_metadata(metadata: dict[str, Any] | None) -> Role:
    """Read ``role`` from public metadata; unknown or missing means guest."""
    raw = (metadata or {}).get("role")
    try:
        return Role(raw)
    except ValueError:
        return Role.GUEST


@dataclass
class IdentityUser:
    """User record as seen by the identity provider."""

    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None
    role: Role = Role.GUEST
    banned: bool = False
    created_at: int | None = None  # epoch milliseconds

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.last_name]
        return " ".join(p for p in parts if p) or "Host"


def parse_user(data: dict[str, Any]) -> IdentityUser:
    """Build an IdentityUser from a Clerk user object (API or webhook)."""
    addresses = data.get("email_addresses") or []
    primary_id = data.get("primary_email_address_id")
    email = None
    for address in addresses:
        if address.get("id") == primary_id:
            email = address.get("email_address")
            break
    if email is None and addresses:
        email = addresses[0].get("email_address")

    return IdentityUser(
        id=data["id"],
        email=email,
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        image_url=data.get("image_url"),
        role=role_from_metadata(data.get("public_metadata")),
        banned=bool(data.get("banned", False)),
        created_at=data.get("created_at"),
    )


class IdentityProvider(ABC):
    """Operations the API needs from the identity provider."""

    @abstractmethod
    async def get_role(self, user_id: str) -> Role:
        """Current role of a user (guest when unknown)."""
        pass

    @abstractmethod
    async def get_user(self, user_id: str) -> IdentityUser | None:
        """Fetch a user, or None if it does not exist."""
        pass

    @abstractmethod
    async def list_users(self, limit: int = 500) -> list[IdentityUser]:
        """List users, newest first."""
        pass

    @abstractmethod
    async def set_role(self, user_id: str, role: Role) -> None:
        pass

    @abstractmethod
    async def ban_user(self, user_id: str) -> None:
        pass

    @abstractmethod
    async def unban_user(self, user_id: str) -> None:
        pass


class ClerkIdentityProvider(IdentityProvider):
    """Clerk Backend API over httpx."""

    def __init__(self) -> None:
        self.base_url = settings.clerk_api_url.rstrip("/")
        self.secret_key = settings.clerk_secret_key
        self._http_client: httpx.AsyncClient | None = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-load HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=15.0,
                headers={"Authorization": f"Bearer {self.secret_key}"},
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if not self.secret_key:
            raise ExternalServiceError("identity provider", "not configured")
        try:
            response = await self.http_client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Identity provider request %s %s failed: %s", method, path, e)
            raise ExternalServiceError("identity provider") from e

        if response.status_code >= 400 and response.status_code != 404:
            logger.error(
                "Identity provider %s %s returned %s: %s",
                method,
                path,
                response.status_code,
                response.text[:500],
            )
            raise ExternalServiceError("identity provider", f"HTTP {response.status_code}")
        return response

    async def get_user(self, user_id: str) -> IdentityUser | None:
        response = await self._request("GET", f"/users/{user_id}")
        if response.status_code == 404:
            return None
        return parse_user(response.json())

    async def get_role(self, user_id: str) -> Role:
        user = await self.get_user(user_id)
        return user.role if user else Role.GUEST

    async def list_users(self, limit: int = 500) -> list[IdentityUser]:
        response = await self._request(
            "GET", "/users", params={"limit": limit, "order_by": "-created_at"}
        )
        return [parse_user(item) for item in response.json()]

    async def set_role(self, user_id: str, role: Role) -> None:
        response = await self._request(
            "PATCH",
            f"/users/{user_id}/metadata",
            json={"public_metadata": {"role": role.value}},
        )
        if response.status_code == 404:
            raise NotFoundError("User", user_id)
        logger.info("Role of user %s set to %s", user_id, role.value)

    async def ban_user(self, user_id: str) -> None:
        response = await self._request("POST", f"/users/{user_id}/ban")
        if response.status_code == 404:
            raise NotFoundError("User", user_id)
        logger.info("User %s banned", user_id)

    async def unban_user(self, user_id: str) -> None:
        response = await self._request("POST", f"/users/{user_id}/unban")
        if response.status_code == 404:
            raise NotFoundError("User", user_id)
        logger.info("User %s unbanned", user_id)


# Singleton instance
identity_provider = ClerkIdentityProvider()


def get_identity_provider() -> IdentityProvider:
    """Dependency returning the configured identity provider."""
    return identity_provider
