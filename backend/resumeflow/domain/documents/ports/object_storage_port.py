"""Object Storage Port - Domain interface for resume byte storage.

The pipeline only keeps a storage_key on the Document; the bytes live
behind this port. Adapters provide S3-compatible or in-memory backends.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Callable, Optional
from uuid import UUID


# Called with the cumulative number of bytes consumed from the source stream
ProgressCallback = Callable[[int], None]


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


@dataclass
class StoredFile:
    """Metadata for a file stored in object storage.

    Attributes:
        storage_key: Unique key in object storage (format: resumes/{year}/{month}/{document_id}{ext})
        sha256: SHA256 hash of file content (hex format)
        size_bytes: File size in bytes
        mime_type: MIME type of the file
    """
    storage_key: str
    sha256: str
    size_bytes: int
    mime_type: str


def generate_storage_key(document_id: UUID, filename: str, now: Optional[datetime] = None) -> str:
    """Generate storage key in format: resumes/{year}/{month}/{document_id}{ext}

    Example:
        >>> generate_storage_key(
        ...     UUID('a1b2c3d4-e5f6-7890-abcd-ef1234567890'),
        ...     'cv.pdf',
        ...     now=datetime(2025, 3, 1),
        ... )
        'resumes/2025/03/a1b2c3d4-e5f6-7890-abcd-ef1234567890.pdf'
    """
    now = now or datetime.now(timezone.utc)
    ext = Path(filename).suffix.lower()
    return f"resumes/{now.year}/{now.month:02d}/{document_id}{ext}"


class ObjectStoragePort(ABC):
    """Port interface for document byte storage.

    Key Design Principles:
    - Storage keys are derived from the document id (one object per document)
    - SHA256 calculated while streaming for integrity checks
    - Source streams are consumed in chunks so callers can observe progress
    """

    @abstractmethod
    async def store_file(
        self,
        file: BinaryIO,
        document_id: UUID,
        filename: str,
        mime_type: str,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> StoredFile:
        """Store a file in object storage.

        Args:
            file: Binary file stream to store (must be readable)
            document_id: Owning document (determines the storage key)
            filename: Sanitized filename (for extension extraction)
            mime_type: MIME type of the file
            progress_callback: Invoked with cumulative bytes read after each chunk

        Returns:
            StoredFile: Metadata about stored file

        Raises:
            StorageError: If upload fails or storage is unavailable
            ValueError: If file is empty
        """
        pass

    @abstractmethod
    async def retrieve_file(self, storage_key: str) -> bytes:
        """Retrieve a file's content by its storage key.

        Raises:
            FileNotFoundError: If file doesn't exist in storage
            StorageError: If retrieval fails
        """
        pass

    @abstractmethod
    async def delete_file(self, storage_key: str) -> bool:
        """Delete a file from object storage.

        Returns:
            bool: True if file was deleted, False if it didn't exist

        Raises:
            StorageError: If deletion fails
        """
        pass

    @abstractmethod
    async def file_exists(self, storage_key: str) -> bool:
        """Check if a file exists in object storage."""
        pass

    async def check_health(self) -> None:
        """Raise StorageError if the backend is unreachable."""
        return None
