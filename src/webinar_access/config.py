"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    identity_jwt_secret: str
    identity_jwt_algorithm: str = "HS256"
    conferencing_signing_key: str
    conferencing_signing_algorithm: str = "HS256"
    conferencing_key_id: str | None = None
    conferencing_app_id: str
    conferencing_issuer: str = "webinar-access"
    conferencing_audience: str = "jitsi"
    conferencing_url: str = "https://meet.jit.si"
    join_buffer_minutes: int = 30
    store_timeout_seconds: float = 5.0
    roster_conflict_retries: int = 3
    group_cache_ttl_seconds: int = 30
    require_preregistration: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
