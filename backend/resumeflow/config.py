"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development.

    Environment Variables:
        MAX_UPLOAD_SIZE_BYTES: Largest accepted resume (default 5 MiB)
        ANALYSIS_WORKERS: Number of concurrent analysis workers
        ANALYSIS_TIMEOUT_SECONDS: Per-document analysis time limit
        TRANSFER_CHUNK_SIZE: Bytes read per chunk while transferring to storage
        STORAGE_BACKEND: "memory" or "s3"
        S3_ENDPOINT_URL: S3-compatible endpoint (MinIO in dev, unset for AWS)
        S3_ACCESS_KEY_ID / S3_SECRET_ACCESS_KEY: S3 credentials
        S3_BUCKET_NAME: Bucket for resume bytes
        LOG_LEVEL: Logging level (default INFO)
        LOG_JSON: Emit JSON log lines (default True)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Upload gateway
    MAX_UPLOAD_SIZE_BYTES: int = Field(default=5_242_880, gt=0)

    # Analysis queue
    ANALYSIS_WORKERS: int = Field(default=2, ge=1)
    ANALYSIS_TIMEOUT_SECONDS: float = Field(default=60.0, gt=0)

    # Transfer
    TRANSFER_CHUNK_SIZE: int = Field(default=64 * 1024, gt=0)

    # Object Storage
    STORAGE_BACKEND: str = "memory"
    S3_ENDPOINT_URL: Optional[str] = None
    S3_ACCESS_KEY_ID: str = "minioadmin"
    S3_SECRET_ACCESS_KEY: str = "minioadmin"
    S3_BUCKET_NAME: str = "resumeflow-documents"
    S3_REGION: str = "us-east-1"

    # Application
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
