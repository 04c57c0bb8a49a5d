"""Storage configuration for resume byte storage.

Supports MinIO (development), AWS S3 (production) and an in-memory
backend for local runs and tests.
"""

from dataclasses import dataclass
from typing import Optional

from ...config import Settings
from ...domain.documents.ports import ObjectStoragePort

SUPPORTED_BACKENDS = ("memory", "s3")


@dataclass
class StorageConfig:
    """Configuration for object storage.

    Attributes:
        backend: "memory" or "s3"
        endpoint_url: S3 endpoint URL (None for AWS S3 regional endpoints)
        access_key: S3 access key ID
        secret_key: S3 secret access key
        bucket_name: S3 bucket name for storing resumes
        region: AWS region (default: 'us-east-1')
    """
    backend: str
    endpoint_url: Optional[str]
    access_key: str
    secret_key: str
    bucket_name: str
    region: str = "us-east-1"


def load_storage_config(settings: Settings) -> StorageConfig:
    return StorageConfig(
        backend=settings.STORAGE_BACKEND.lower(),
        endpoint_url=settings.S3_ENDPOINT_URL or None,
        access_key=settings.S3_ACCESS_KEY_ID,
        secret_key=settings.S3_SECRET_ACCESS_KEY,
        bucket_name=settings.S3_BUCKET_NAME,
        region=settings.S3_REGION,
    )


def validate_storage_config(config: StorageConfig) -> None:
    """Validate storage configuration.

    Raises:
        ValueError: If configuration is invalid
    """
    if config.backend not in SUPPORTED_BACKENDS:
        raise ValueError(
            f"Unsupported STORAGE_BACKEND '{config.backend}'. "
            f"Use one of: {', '.join(SUPPORTED_BACKENDS)}"
        )

    if config.backend == "memory":
        return

    if not config.access_key:
        raise ValueError("Storage access_key is required")

    if not config.secret_key:
        raise ValueError("Storage secret_key is required")

    if not config.bucket_name:
        raise ValueError("Storage bucket_name is required")

    if config.endpoint_url:
        # MinIO configuration
        if not config.endpoint_url.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid endpoint_url: {config.endpoint_url}. "
                "Must start with http:// or https://"
            )
    elif not config.region:
        raise ValueError("AWS region is required when using S3 without S3_ENDPOINT_URL")


def build_storage(settings: Settings) -> ObjectStoragePort:
    """Create the storage adapter selected by STORAGE_BACKEND."""
    config = load_storage_config(settings)
    validate_storage_config(config)

    if config.backend == "s3":
        from .s3_storage_adapter import S3StorageAdapter

        return S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
            chunk_size=settings.TRANSFER_CHUNK_SIZE,
        )

    from .memory_storage_adapter import InMemoryStorageAdapter

    return InMemoryStorageAdapter(chunk_size=settings.TRANSFER_CHUNK_SIZE)
