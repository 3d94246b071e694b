"""
Configuration settings for the Fitness Tracker backend.
Uses pydantic-settings for type-safe environment variable management.
"""
from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App Info
    app_name: str = "Fitness Tracker API"
    app_version: str = "1.0.0"
    git_commit: Optional[str] = None  # Git commit hash from environment
    build_date: Optional[str] = None  # Build timestamp from environment
    debug: bool = False
    log_level: str = "INFO"

    # Local store (on-device cache)
    database_url: str = "sqlite:///./fittrack.db"

    # Hosted REST data API (PostgREST style: <remote_url>/rest/v1/<table>)
    remote_url: Optional[str] = None
    remote_api_key: Optional[str] = None
    remote_timeout_seconds: float = 10.0

    # CORS - comma-separated list in environment variable
    # Example: CORS_ORIGINS="http://localhost:5173,http://localhost:3000"
    cors_origins_str: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        validation_alias="CORS_ORIGINS"
    )

    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    # OpenAI
    openai_api_key: Optional[str] = None
    # Optional model id from env (e.g., model_id=gpt-4o)
    model_id: Optional[str] = None

    # Analytics
    recent_window: int = Field(default=7, ge=2)
    broad_window: int = Field(default=30, ge=2)
    weekly_rate_method: Literal["endpoints", "regression"] = "endpoints"
    goal_horizon_weeks: float = Field(default=26.0, gt=0)
    goal_weight: Optional[float] = Field(default=None, gt=0)  # lbs

    # First-run placeholder data when every store is empty or unreachable
    seed_demo_data: bool = True

    # Pydantic v2 settings config
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars so unexpected keys don't crash
    )


# Global settings instance
settings = Settings()
