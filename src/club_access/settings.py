"""
club_access.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Every field reads from a `CLUB_`-prefixed environment variable, e.g.
    `CLUB_JWT_SECRET`, `CLUB_DATABASE_URL`, `CLUB_BCRYPT_ROUNDS`.
    """

    model_config = SettingsConfigDict(env_prefix="CLUB_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "club-access"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "club-access"
    jwt_audience: str = "club-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    bcrypt_rounds: int = Field(default=10, ge=10, le=16)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./club.db"

    # Revocation sweep; 0 disables the background task.
    revocation_cleanup_interval_seconds: int = Field(default=900, ge=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Token lifetime is fixed, not configurable; see `club_access.auth.jwt.TOKEN_TTL`.
