"""In-memory storage adapter for local runs and tests.

Keeps stored objects in a dict. Supports an optional per-chunk delay to
simulate a slow network, which makes transfer progress observable.
"""

import asyncio
import hashlib
import logging
from typing import BinaryIO, Dict, Optional, Tuple
from uuid import UUID

from ...domain.documents.ports import (
    ObjectStoragePort,
    ProgressCallback,
    StoredFile,
    generate_storage_key,
)

logger = logging.getLogger(__name__)


class InMemoryStorageAdapter(ObjectStoragePort):
    """Dict-backed ObjectStoragePort.

    Configuration:
        - chunk_size: Bytes read from the source per step (default: 64KB)
        - write_delay_seconds: Sleep between chunks to simulate latency (default: 0)
    """

    def __init__(self, chunk_size: int = 64 * 1024, write_delay_seconds: float = 0.0):
        self.chunk_size = chunk_size
        self.write_delay_seconds = write_delay_seconds
        self._objects: Dict[str, Tuple[bytes, str]] = {}

    async def store_file(
        self,
        file: BinaryIO,
        document_id: UUID,
        filename: str,
        mime_type: str,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> StoredFile:
        sha256_hash = hashlib.sha256()
        chunks = []
        size_bytes = 0

        while True:
            chunk = file.read(self.chunk_size)
            if not chunk:
                break
            sha256_hash.update(chunk)
            chunks.append(chunk)
            size_bytes += len(chunk)
            if progress_callback is not None:
                progress_callback(size_bytes)
            await asyncio.sleep(self.write_delay_seconds)

        if size_bytes == 0:
            raise ValueError("Cannot store empty file")

        storage_key = generate_storage_key(document_id, filename)
        self._objects[storage_key] = (b"".join(chunks), mime_type)

        logger.debug(f"Stored object in memory: storage_key={storage_key}, size={size_bytes}")

        return StoredFile(
            storage_key=storage_key,
            sha256=sha256_hash.hexdigest(),
            size_bytes=size_bytes,
            mime_type=mime_type,
        )

    async def retrieve_file(self, storage_key: str) -> bytes:
        try:
            content, _ = self._objects[storage_key]
        except KeyError:
            raise FileNotFoundError(f"File not found: {storage_key}")
        return content

    async def delete_file(self, storage_key: str) -> bool:
        return self._objects.pop(storage_key, None) is not None

    async def file_exists(self, storage_key: str) -> bool:
        return storage_key in self._objects

    def __len__(self) -> int:
        return len(self._objects)
