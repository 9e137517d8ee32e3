"""
Application Settings (Pydantic Settings).

Loads configuration from environment variables (.env file or system env).

List settings (the default enrichment parts) accept JSON arrays, e.g.
DEFAULT_VIDEO_PARTS='["snippet", "statistics"]'.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Upstream list endpoints (videos.list, channels.list, playlists.list) accept
# at most 50 ids per call.
YOUTUBE_API_BATCH_SIZE = 50


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings documented in .env.example.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # ========================================================================
    # YOUTUBE DATA API
    # ========================================================================
    YOUTUBE_API_KEY: str = Field(default="", description="YouTube Data API v3 key")
    YOUTUBE_BASE_URL: str = Field(default="https://www.googleapis.com/youtube/v3")
    YOUTUBE_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)

    # ========================================================================
    # ENRICHMENT
    # ========================================================================
    DEFAULT_VIDEO_PARTS: list[str] = Field(
        default=["snippet", "statistics", "contentDetails", "status", "topicDetails"],
        description="Parts used when an enrichment request lists no video parts",
    )
    DEFAULT_CHANNEL_PARTS: list[str] = Field(
        default=["snippet", "statistics", "contentDetails", "brandingSettings", "topicDetails"],
        description="Parts used when an enrichment request lists no channel parts",
    )
    DEFAULT_PLAYLIST_PARTS: list[str] = Field(
        default=["snippet", "contentDetails", "status"],
        description="Parts used when an enrichment request lists no playlist parts",
    )
    ENRICHMENT_BATCH_SIZE: int = Field(
        default=YOUTUBE_API_BATCH_SIZE,
        ge=1,
        le=YOUTUBE_API_BATCH_SIZE,
        description="Ids per upstream list call (upstream ceiling is 50)",
    )
    ENRICHMENT_CONCURRENCY: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Max batch fetches in flight; 1 keeps batches sequential",
    )

    # ========================================================================
    # QUOTA (advisory only, never enforced)
    # ========================================================================
    DAILY_QUOTA_LIMIT: int = Field(default=10_000, ge=0)

    # ========================================================================
    # TOOL EXECUTION
    # ========================================================================
    TOOL_TIMEOUT_SECONDS: float | None = Field(
        default=None,
        description="Per-call deadline applied by the registry; unset means no deadline",
    )

    # ========================================================================
    # OPENTELEMETRY
    # ========================================================================
    OTEL_EXPORTER_OTLP_ENDPOINT: str = Field(default="http://localhost:4317")
    OTEL_SERVICE_NAME: str = Field(default="tube-scout")
    OTEL_TRACES_ENABLED: bool = Field(default=False)

    # ========================================================================
    # LOGGING
    # ========================================================================
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    LOG_FORMAT: str = Field(default="json", pattern="^(json|text)$")

    # ========================================================================
    # DEPLOYMENT
    # ========================================================================
    ENVIRONMENT: str = Field(
        default="development", pattern="^(development|staging|production)$"
    )

    def default_parts_for(self, resource_type: str) -> list[str]:
        """Configured default enrichment parts for a resource type."""
        defaults = {
            "video": self.DEFAULT_VIDEO_PARTS,
            "channel": self.DEFAULT_CHANNEL_PARTS,
            "playlist": self.DEFAULT_PLAYLIST_PARTS,
        }
        return list(defaults[resource_type])


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings instance."""
    return Settings()
