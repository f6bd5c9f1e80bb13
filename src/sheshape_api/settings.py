"""
sheshape_api.settings

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
    Env-driven configuration, one object injected across layers.
    Defaults are safe for local dev only.
    """

    model_config = SettingsConfigDict(env_prefix="SHESHAPE_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "sheshape-api"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "sheshape-api"
    jwt_audience: str = "sheshape-web"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    access_token_ttl_minutes: int = Field(default=24 * 60, ge=1)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./sheshape.db"

    # CORS (the web front-end runs on a separate origin)
    cors_allowed_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()
