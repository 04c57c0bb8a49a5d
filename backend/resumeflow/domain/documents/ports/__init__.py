from .object_storage_port import (
    ObjectStoragePort,
    ProgressCallback,
    StorageError,
    StoredFile,
    generate_storage_key,
)

__all__ = [
    "ObjectStoragePort",
    "ProgressCallback",
    "StorageError",
    "StoredFile",
    "generate_storage_key",
]
