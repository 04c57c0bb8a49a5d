"""Transfer tracker - moves accepted resume bytes into storage.

Each accepted upload gets one background task that streams the bytes into
the ObjectStoragePort while reporting progress to the registry. A
successful transfer fires exactly one completion callback, which hands the
document to the analysis queue.
"""

import asyncio
import logging
import time
from io import BytesIO
from typing import Callable, Dict, Optional, Set
from uuid import UUID

from ..domain.documents import (
    Document,
    DocumentNotFoundError,
    DocumentStatus,
    FailureReason,
    InvalidTransitionError,
)
from ..domain.documents.ports import ObjectStoragePort, StorageError, StoredFile
from ..observability import metrics
from ..observability.request_id import set_document_id
from .registry import DocumentRegistry

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[UUID], None]


class TransferTracker:
    """Runs and tracks storage transfers, one asyncio task per document."""

    def __init__(
        self,
        registry: DocumentRegistry,
        storage: ObjectStoragePort,
        on_complete: CompletionCallback,
    ):
        self._registry = registry
        self._storage = storage
        self._on_complete = on_complete
        self._tasks: Dict[UUID, asyncio.Task] = {}
        self._completed: Set[UUID] = set()

    def start(self, document: Document, content: bytes) -> asyncio.Task:
        """Begin transferring content for a document in UPLOADING state."""
        if document.id in self._tasks:
            raise ValueError(f"Transfer already running for document {document.id}")

        task = asyncio.create_task(
            self._run(document, content),
            name=f"transfer-{document.id}",
        )
        self._tasks[document.id] = task
        task.add_done_callback(lambda _t, document_id=document.id: self._tasks.pop(document_id, None))
        return task

    def is_active(self, document_id: UUID) -> bool:
        task = self._tasks.get(document_id)
        return task is not None and not task.done()

    def has_completed(self, document_id: UUID) -> bool:
        return document_id in self._completed

    async def cancel(self, document_id: UUID) -> bool:
        """Stop a running transfer.

        Returns:
            True if the transfer was stopped before its completion event
            fired, False if there was nothing left to stop.
        """
        task = self._tasks.get(document_id)
        if task is None:
            return False

        if not task.done():
            task.cancel()
            await asyncio.wait({task})

        return task.cancelled() and document_id not in self._completed

    def forget(self, document_id: UUID) -> None:
        self._completed.discard(document_id)

    @property
    def active_count(self) -> int:
        return sum(1 for task in self._tasks.values() if not task.done())

    async def stop(self) -> None:
        """Cancel every running transfer (service shutdown)."""
        tasks = [task for task in self._tasks.values() if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.wait(tasks)

    async def _run(self, document: Document, content: bytes) -> None:
        set_document_id(str(document.id))
        total = len(content)
        started = time.monotonic()

        def report(bytes_read: int) -> None:
            self._registry.record_progress(document.id, bytes_read * 100 // total)

        stored: Optional[StoredFile] = None
        try:
            stored = await self._storage.store_file(
                BytesIO(content),
                document_id=document.id,
                filename=document.filename,
                mime_type=document.mime_type,
                progress_callback=report,
            )
            await self._registry.transition(
                document.id,
                DocumentStatus.QUEUED,
                progress=100,
                storage_key=stored.storage_key,
            )
        except asyncio.CancelledError:
            logger.info(f"Transfer cancelled for document {document.id}")
            if stored is not None:
                await self._discard_object(stored.storage_key)
            raise
        except (DocumentNotFoundError, InvalidTransitionError) as e:
            # Deleted or failed while the bytes were in flight
            logger.info(f"Transfer result discarded for document {document.id}: {e}")
            if stored is not None:
                await self._discard_object(stored.storage_key)
            return
        except (StorageError, OSError, ValueError) as e:
            logger.error(f"Transfer failed for document {document.id}: {e}")
            await self._fail(document.id, str(e))
            return
        except Exception as e:
            logger.error(f"Unexpected transfer error for document {document.id}: {e}", exc_info=True)
            await self._fail(document.id, f"Unexpected transfer error: {e}")
            return

        self._completed.add(document.id)
        metrics.transfer_duration_seconds.observe(time.monotonic() - started)
        logger.info(
            f"Transfer complete: document={document.id}, storage_key={stored.storage_key}, "
            f"sha256={stored.sha256}, size={stored.size_bytes}"
        )
        self._on_complete(document.id)

    async def _fail(self, document_id: UUID, detail: str) -> None:
        try:
            await self._registry.transition(
                document_id,
                DocumentStatus.FAILED,
                error_reason=FailureReason.TRANSFER_ERROR,
                error_detail=detail,
            )
        except (DocumentNotFoundError, InvalidTransitionError) as e:
            logger.info(f"Transfer failure not recorded for document {document_id}: {e}")
            return
        metrics.documents_finished_total.labels(
            status=DocumentStatus.FAILED.value,
            reason=FailureReason.TRANSFER_ERROR.value,
        ).inc()

    async def _discard_object(self, storage_key: str) -> None:
        try:
            await self._storage.delete_file(storage_key)
        except StorageError as e:
            logger.warning(f"Could not remove orphaned object {storage_key}: {e}")
