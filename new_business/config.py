"""
Configuration management using Pydantic Settings.
Loads environment variables from .env file with validation.
"""

from pathlib import Path
from functools import lru_cache
from typing import List, Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = Field(default="New Business Tracker")

    # Storage
    storage_backend: Literal["file", "mongodb"] = Field(
        default="file",
        description="'file' keeps the whole collection in one JSON document on disk"
    )
    data_file: Optional[Path] = Field(
        default=None,
        description="Policy store for the file backend (defaults to <project>/data/policies.json)"
    )
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    mongodb_database: str = Field(
        default="new_business_tracker",
        description="MongoDB database name"
    )

    # Vertex AI (email drafting)
    vertex_project_id: Optional[str] = Field(
        default=None,
        description="Google Cloud Project ID"
    )
    vertex_location: str = Field(
        default="us-central1",
        description="Vertex AI Location"
    )
    gemini_model_id: str = Field(
        default="gemini-2.0-flash",
        description="Gemini Model ID"
    )
    draft_temperature: float = Field(default=0.7)
    draft_max_output_tokens: int = Field(default=2048)
    draft_timeout_seconds: float = Field(
        default=30.0,
        description="Seconds to wait for a draft before giving up"
    )
    draft_max_attempts: int = Field(
        default=1,
        ge=1,
        description="Total drafting attempts; 1 means failures are not retried"
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    cors_origins: List[str] = Field(
        default=["*"],
        description="Origins allowed to call the API from a browser (JSON list)"
    )

    # Logging
    log_level: str = Field(default="INFO")

    # Paths (computed)
    @property
    def project_root(self) -> Path:
        """Get project root directory."""
        return Path(__file__).parent.parent

    @property
    def data_dir(self) -> Path:
        """Get data directory path."""
        return self.project_root / "data"

    @property
    def policies_file(self) -> Path:
        """Location of the file backend's policy store."""
        return self.data_file or self.data_dir / "policies.json"

    @property
    def vertex_configured(self) -> bool:
        return bool(self.vertex_project_id)

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
