"""Core configuration and settings.

Handles environment variables, data directories and I/O defaults.
"""
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load environment variables
ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=ROOT / ".env", override=False)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
COMPRESSION_SCHEMES = ("gzip", "bzip2", "bz2", "xz", "none")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        populate_by_name=True,
        extra="ignore",
    )

    # Application Settings
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # I/O defaults
    data_dir: Path = Field(default=Path("data"), alias="DATA_DIR")
    default_encoding: str = Field(default="utf-8", alias="DEFAULT_ENCODING")
    http_timeout: float = Field(default=30.0, alias="HTTP_TIMEOUT")
    snapshot_compression: str = Field(default="gzip", alias="SNAPSHOT_COMPRESSION")
    max_preview_rows: int = Field(default=100, alias="MAX_PREVIEW_ROWS")

    # Remote download cache (Redis)
    remote_cache_enabled: bool = Field(default=False, alias="REMOTE_CACHE_ENABLED")
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_password: Optional[str] = Field(default=None, alias="REDIS_PASSWORD")
    redis_db: int = Field(default=0, alias="REDIS_DB")
    cache_ttl_hours: int = Field(default=24, alias="CACHE_TTL_HOURS")

    # API Settings
    api_prefix: str = Field(default="", alias="API_PREFIX")
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:8000",
            "http://127.0.0.1:8000"
        ],
        alias="CORS_ORIGINS"
    )

    def validate_required_settings(self):
        """Validate that settings hold usable values."""
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)} "
                f"(got {self.log_level!r})."
            )
        if self.snapshot_compression.lower() not in COMPRESSION_SCHEMES:
            raise ValueError(
                f"SNAPSHOT_COMPRESSION must be one of {', '.join(COMPRESSION_SCHEMES)} "
                f"(got {self.snapshot_compression!r})."
            )
        if self.max_preview_rows <= 0:
            raise ValueError("MAX_PREVIEW_ROWS must be positive.")

    def resolve_data_path(self, name: str | Path) -> Path:
        """Resolve ``name`` against the data directory, refusing escapes.

        Raises:
            PermissionError: If the resolved path lies outside ``data_dir``.
        """
        base = self.data_dir.resolve()
        candidate = Path(name)
        path = (candidate if candidate.is_absolute() else base / candidate).resolve()
        if path != base and base not in path.parents:
            raise PermissionError(f"'{name}' is outside the data directory")
        return path


# Global settings instance
settings = Settings()


# Validate settings on module import (only in non-test environments)
if settings.environment != "test":
    try:
        settings.validate_required_settings()
    except ValueError as e:
        print(f"Configuration Error: {e}")
        # Don't raise in development to allow partial setup
        if settings.environment == "production":
            raise
