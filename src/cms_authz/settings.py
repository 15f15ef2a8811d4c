"""
cms_authz.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration shared by the API, the gate and the persistence layer.
    """

    model_config = SettingsConfigDict(env_prefix="CMS_AUTHZ_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables and dev tokens.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "cms-authz"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "cms-authz"
    jwt_audience: str = "cms-admin"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./cms_authz.db"

    # Authorization
    # Logs swallowed condition/validator errors when enabled.
    authz_debug: bool = False
    enabled_features: list[str] = Field(default_factory=list)
    # user id -> grant keys replacing that user's role defaults (e.g. ["pages:read"]).
    permission_overrides: dict[str, list[str]] = Field(default_factory=dict)
    business_hours_start: int = Field(default=9, ge=0, le=23)
    business_hours_end: int = Field(default=17, ge=1, le=24)
    audit_enabled: bool = True

    @model_validator(mode="after")
    def check_business_hours(self) -> Settings:
        if self.business_hours_start >= self.business_hours_end:
            raise ValueError(
                "business_hours_start must be earlier than business_hours_end "
                f"(got {self.business_hours_start}..{self.business_hours_end})"
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# `enabled_features` accepts a JSON list from the environment, e.g.
# CMS_AUTHZ_ENABLED_FEATURES='["bulk_edit"]'.
