"""Application configuration using Pydantic settings."""

from datetime import date
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables (INVOICE_PARSER_*)."""

    model_config = SettingsConfigDict(
        env_prefix="INVOICE_PARSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    # Input
    max_input_mb: int = 25
    text_encoding: str = "utf-8"

    # Year used for year-less dates when the invoice header carries none.
    # None means the current processing year.
    fallback_year: int | None = None

    @property
    def max_input_bytes(self) -> int:
        return self.max_input_mb * 1024 * 1024

    def resolve_fallback_year(self) -> int:
        return self.fallback_year or date.today().year


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
