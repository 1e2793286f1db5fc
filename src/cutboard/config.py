"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    photos_bucket: str = "cutboard-photos"
    photos_public_url: str | None = None
    user_data_table: str = "user_data"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def config_flags(self) -> dict[str, bool]:
        """Return which optional and secret settings are present."""
        return {
            "SUPABASE_URL": bool(self.supabase_url),
            "SUPABASE_SERVICE_KEY": bool(self.supabase_service_key),
            "ADMIN_TOKEN": bool(self.admin_token),
            "PHOTOS_PUBLIC_URL": bool(self.photos_public_url),
        }
