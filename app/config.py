"""Application configuration via pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Kmer Stays"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Public base URL of the web app (checkout redirects, email links)
    app_base_url: str = "http://localhost:3000"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4

    # Database
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "kmer"
    postgres_password: str = Field(default="kmer_secret")
    postgres_db: str = "kmer_stays"
    db_pool_size: int = 20
    db_max_overflow: int = 10
    database_url_override: Optional[str] = None

    @computed_field
    @property
    def database_url(self) -> str:
        """Async PostgreSQL connection URL."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @computed_field
    @property
    def sync_database_url(self) -> str:
        """Sync PostgreSQL connection URL for Alembic."""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0

    @computed_field
    @property
    def redis_url(self) -> str:
        """Redis connection URL."""
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # Identity provider (Clerk)
    # Session tokens are RS256 JWTs; the PEM public key comes from the Clerk dashboard.
    auth_jwt_key: str = Field(default="change-me")
    auth_jwt_algorithm: str = "RS256"
    auth_jwt_issuer: Optional[str] = None
    clerk_api_url: str = "https://api.clerk.com/v1"
    clerk_secret_key: Optional[str] = None
    clerk_webhook_secret: Optional[str] = None

    # Payments (Stripe)
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    stripe_currency: str = "xaf"  # zero-decimal

    # Email (Resend)
    resend_api_key: Optional[str] = None
    resend_api_url: str = "https://api.resend.com"
    email_from_address: str = "Kmer Stays <noreply@kmerstays.cm>"
    admin_email: str = "admin@kmerstays.cm"
    support_email: str = "support@kmerstays.cm"

    # Platform fee: charged to guests on top of the subtotal and
    # deducted again from host payouts (see app.domain.pricing)
    service_fee_percent: int = 14

    # Rate Limiting
    rate_limit_per_minute: int = 100

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
