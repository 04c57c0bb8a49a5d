from .memory_storage_adapter import InMemoryStorageAdapter
from .storage_config import StorageConfig, build_storage, load_storage_config, validate_storage_config

__all__ = [
    "InMemoryStorageAdapter",
    "StorageConfig",
    "build_storage",
    "load_storage_config",
    "validate_storage_config",
]
