"""Document registry - the shared store of Document records.

Every status change, result attachment and deletion goes through a
per-document asyncio.Lock, so a delete racing a worker's completion write
cannot lose either update. Readers always receive snapshots.

The registry is confined to the event loop that runs the pipeline.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

from ..domain.documents import (
    Document,
    DocumentNotFoundError,
    DocumentStatus,
    InvalidTransitionError,
    can_transition,
    is_terminal,
)
from ..domain.documents.models import utcnow

logger = logging.getLogger(__name__)

# Receives a snapshot after every change; the flag is True when the record was removed
ChangeListener = Callable[[Document, bool], None]

# Fields that may be set alongside a transition
TRANSITION_FIELDS = frozenset({
    "progress",
    "storage_key",
    "analysis_score",
    "feedback",
    "suggestions",
    "error_reason",
    "error_detail",
})


class DocumentRegistry:
    """In-memory, concurrency-safe Document store.

    Usage:
        registry = DocumentRegistry()
        await registry.add(document)
        await registry.transition(document.id, DocumentStatus.QUEUED, progress=100)
        done = await registry.wait_for(document.id, lambda d: d.status.value == "COMPLETED")
    """

    def __init__(self):
        self._documents: Dict[UUID, Document] = {}
        self._locks: Dict[UUID, asyncio.Lock] = {}
        self._listeners: List[ChangeListener] = []
        self._sequence = 0
        self._changed = asyncio.Event()

    async def add(self, document: Document) -> Document:
        """Register a freshly created document (status UPLOADING)."""
        if document.id in self._documents:
            raise ValueError(f"Document {document.id} already registered")
        if not can_transition(None, document.status):
            raise InvalidTransitionError(document.id, document.status, document.status)

        self._sequence += 1
        document.sequence = self._sequence
        self._documents[document.id] = document
        self._locks[document.id] = asyncio.Lock()

        snapshot = document.snapshot()
        self._publish(snapshot, removed=False)
        return snapshot

    async def get(self, document_id: UUID) -> Document:
        return self._require(document_id).snapshot()

    def contains(self, document_id: UUID) -> bool:
        return document_id in self._documents

    async def list(self, status: Optional[DocumentStatus] = None) -> List[Document]:
        """All documents, most recent upload first."""
        documents = [
            document for document in self._documents.values()
            if status is None or document.status == status
        ]
        documents.sort(key=lambda d: (d.uploaded_at, d.sequence), reverse=True)
        return [document.snapshot() for document in documents]

    async def transition(self, document_id: UUID, to_status: DocumentStatus, **changes: Any) -> Document:
        """Move a document to a new status and apply accompanying field changes.

        Raises:
            DocumentNotFoundError: If the document no longer exists
            InvalidTransitionError: If the state machine forbids the change
        """
        unknown = set(changes) - TRANSITION_FIELDS
        if unknown:
            raise ValueError(f"Unsupported transition fields: {sorted(unknown)}")

        lock = self._lock_for(document_id)
        async with lock:
            document = self._require(document_id)
            if not can_transition(document.status, to_status):
                raise InvalidTransitionError(document_id, document.status, to_status)

            for name, value in changes.items():
                setattr(document, name, value)
            document.status = to_status
            document.status_history.append(to_status)
            document.updated_at = utcnow()

            snapshot = document.snapshot()

        logger.info(
            f"Document {document_id} -> {to_status.value}",
            extra={"document_id": str(document_id), "status": to_status.value},
        )
        self._publish(snapshot, removed=False)
        return snapshot

    def record_progress(self, document_id: UUID, progress: int) -> Optional[Document]:
        """Record transfer progress.

        Progress only moves forward and only while UPLOADING. Returns the
        updated snapshot, or None when nothing changed.
        """
        document = self._documents.get(document_id)
        if document is None or document.status != DocumentStatus.UPLOADING:
            return None

        progress = max(0, min(100, int(progress)))
        if progress <= document.progress:
            return None

        document.progress = progress
        document.updated_at = utcnow()
        snapshot = document.snapshot()
        self._publish(snapshot, removed=False)
        return snapshot

    async def remove(self, document_id: UUID) -> Document:
        """Delete a document record.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        lock = self._lock_for(document_id)
        async with lock:
            document = self._require(document_id)
            del self._documents[document_id]
            self._locks.pop(document_id, None)
            snapshot = document.snapshot()

        logger.info(
            f"Document {document_id} removed",
            extra={"document_id": str(document_id), "status": snapshot.status.value},
        )
        self._publish(snapshot, removed=True)
        return snapshot

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def wait_for(
        self,
        document_id: UUID,
        predicate: Callable[[Document], bool],
        timeout: Optional[float] = None,
    ) -> Document:
        """Wait until predicate(document) holds.

        Raises:
            DocumentNotFoundError: If the document is (or becomes) absent
            asyncio.TimeoutError: If timeout elapses first
        """

        async def _wait() -> Document:
            while True:
                event = self._changed
                document = self._require(document_id)
                if predicate(document):
                    return document.snapshot()
                await event.wait()

        return await asyncio.wait_for(_wait(), timeout)

    async def wait_for_terminal(self, document_id: UUID, timeout: Optional[float] = None) -> Document:
        return await self.wait_for(document_id, lambda d: is_terminal(d.status), timeout)

    def count_by_status(self) -> Dict[DocumentStatus, int]:
        counts = {status: 0 for status in DocumentStatus}
        for document in self._documents.values():
            counts[document.status] += 1
        return counts

    def __len__(self) -> int:
        return len(self._documents)

    def _require(self, document_id: UUID) -> Document:
        document = self._documents.get(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    def _lock_for(self, document_id: UUID) -> asyncio.Lock:
        lock = self._locks.get(document_id)
        if lock is None:
            raise DocumentNotFoundError(document_id)
        return lock

    def _publish(self, snapshot: Document, removed: bool) -> None:
        for listener in list(self._listeners):
            try:
                listener(snapshot, removed)
            except Exception:
                logger.exception(f"Change listener failed for document {snapshot.id}")

        # Wake every waiter, then arm a fresh event for the next change
        self._changed.set()
        self._changed = asyncio.Event()
