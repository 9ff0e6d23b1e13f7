"""Application configuration from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Settings loaded from environment (and .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Measures API"
    log_level: str = "INFO"

    # Comma-separated list of allowed origins; "*" allows any
    cors_origins: str = "*"

    # Decoded size limit for uploaded avatars
    max_avatar_bytes: int = 1024 * 1024

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> AppSettings:
    """Cached settings instance."""
    return AppSettings()
