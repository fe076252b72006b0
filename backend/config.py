"""
Configuration management for the Pickup Point Orders service.

Loads settings from .env via pydantic-settings.
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/pickup_point.db"

    # ── Cache ───────────────────────────────────────────────────────
    cache_backend: str = "memory"        # memory | redis | none
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl_seconds: int = 60

    # ── Requests ────────────────────────────────────────────────────
    request_timeout_seconds: float = 5.0  # 0 disables the per-call deadline

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:8080,http://127.0.0.1:8080,http://localhost:3000,http://127.0.0.1:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # allow unknown .env keys without crashing
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def request_timeout(self) -> float | None:
        """Per-call deadline for order operations, or None when disabled."""
        if self.request_timeout_seconds <= 0:
            return None
        return self.request_timeout_seconds

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup.
        """
        if self.cache_backend not in ("memory", "redis", "none"):
            raise ValueError(
                f"CACHE_BACKEND must be one of memory, redis, none (got {self.cache_backend!r})"
            )
        if self.cache_ttl_seconds <= 0:
            raise ValueError("CACHE_TTL_SECONDS must be positive")

        if self.environment == "production":
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            # SQLite serialises every store call behind one lock
            if self.database_url.startswith("sqlite"):
                raise ValueError(
                    "DATABASE_URL must point to PostgreSQL in production. "
                    "SQLite serialises all order operations."
                )
            # A per-process cache is not shared between workers
            if self.cache_backend != "redis":
                raise ValueError(
                    "CACHE_BACKEND must be 'redis' in production. "
                    "Invalidation of a process-local cache does not reach other workers."
                )
            logger.info("✅ Production settings validated")
        else:
            warnings = []
            if self.database_url.startswith("sqlite"):
                warnings.append("DATABASE_URL is SQLite (store access is serialised)")
            if self.cache_backend == "none":
                warnings.append("CACHE_BACKEND=none (listings always hit the database)")
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            for w in warnings:
                logger.warning(f"⚠️  {w}")


# Global settings instance
settings = Settings()
