"""Document pipeline service.

Wires the registry, transfer tracker, analysis queue and upload gateway
together and exposes the operations callers use: submit, list, get,
progress, cancel and delete.
"""

import logging
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

from ..config import Settings
from ..domain.analysis import AnalysisEnginePort
from ..domain.documents import (
    Document,
    DocumentStateError,
    DocumentStatus,
    FailureReason,
    InvalidTransitionError,
    MAX_FILE_SIZE,
)
from ..domain.documents.ports import ObjectStoragePort, StorageError
from ..observability import metrics
from .analysis_queue import AnalysisQueue
from .gateway import UploadGateway
from .registry import ChangeListener, DocumentRegistry
from .transfer import TransferTracker

logger = logging.getLogger(__name__)

CANCELLABLE_AFTER_TRANSFER = (DocumentStatus.QUEUED, DocumentStatus.ANALYZING)


class DocumentPipeline:
    """Resume ingestion and analysis pipeline.

    Example:
        pipeline = DocumentPipeline(storage=InMemoryStorageAdapter(), engine=KeywordAnalysisEngine())
        await pipeline.start()
        document = await pipeline.submit_document(content, "resume.pdf", "application/pdf")
        document = await pipeline.wait_for_terminal(document.id, timeout=30)
        await pipeline.stop()
    """

    def __init__(
        self,
        storage: ObjectStoragePort,
        engine: AnalysisEnginePort,
        max_file_size: int = MAX_FILE_SIZE,
        worker_count: int = 2,
        analysis_timeout_seconds: float = 60.0,
    ):
        self.storage = storage
        self.engine = engine
        self.registry = DocumentRegistry()
        self.queue = AnalysisQueue(
            self.registry,
            storage,
            engine,
            worker_count=worker_count,
            timeout_seconds=analysis_timeout_seconds,
        )
        self.transfers = TransferTracker(self.registry, storage, on_complete=self.queue.enqueue)
        self.gateway = UploadGateway(self.registry, self.transfers, max_file_size=max_file_size)
        self._started = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        storage: ObjectStoragePort,
        engine: AnalysisEnginePort,
    ) -> "DocumentPipeline":
        return cls(
            storage=storage,
            engine=engine,
            max_file_size=settings.MAX_UPLOAD_SIZE_BYTES,
            worker_count=settings.ANALYSIS_WORKERS,
            analysis_timeout_seconds=settings.ANALYSIS_TIMEOUT_SECONDS,
        )

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        await self.queue.start()
        self._started = True

    async def stop(self) -> None:
        self._started = False
        await self.transfers.stop()
        await self.queue.stop()

    async def submit_document(self, content: bytes, filename: str, mime_type: str) -> Document:
        """Validate and accept a resume; transfer and analysis continue in the background.

        Raises:
            ValidationError: If the upload is rejected (no Document is created)
        """
        return await self.gateway.submit(content, filename, mime_type)

    async def list_documents(self, status: Optional[DocumentStatus] = None) -> List[Document]:
        return await self.registry.list(status)

    async def get_document(self, document_id: UUID) -> Document:
        return await self.registry.get(document_id)

    async def get_progress(self, document_id: UUID) -> Document:
        return await self.registry.get(document_id)

    async def wait_for_terminal(self, document_id: UUID, timeout: Optional[float] = None) -> Document:
        return await self.registry.wait_for_terminal(document_id, timeout)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        return self.registry.subscribe(listener)

    async def cancel_document(self, document_id: UUID) -> Optional[Document]:
        """Cancel processing of a document.

        UPLOADING documents are discarded entirely (returns None). QUEUED and
        ANALYZING documents become FAILED with reason CANCELLED; an in-flight
        analysis is cancelled best-effort.

        Raises:
            DocumentNotFoundError: If the document does not exist
            DocumentStateError: If the document is already terminal
        """
        document = await self.registry.get(document_id)

        if document.status == DocumentStatus.UPLOADING:
            if await self.transfers.cancel(document_id):
                await self.registry.remove(document_id)
                self.transfers.forget(document_id)
                metrics.documents_discarded_total.labels(operation="cancel").inc()
                logger.info(f"Cancelled document {document_id} before it was queued; record discarded")
                return None
            # Transfer finished (or failed) before the cancel landed
            document = await self.registry.get(document_id)

        if document.status in CANCELLABLE_AFTER_TRANSFER:
            try:
                cancelled = await self.registry.transition(
                    document_id,
                    DocumentStatus.FAILED,
                    error_reason=FailureReason.CANCELLED,
                    error_detail="Cancelled by caller",
                )
            except InvalidTransitionError:
                document = await self.registry.get(document_id)
            else:
                self.queue.abort(document_id)
                metrics.documents_finished_total.labels(
                    status=DocumentStatus.FAILED.value,
                    reason=FailureReason.CANCELLED.value,
                ).inc()
                return cancelled

        raise DocumentStateError(
            document_id,
            document.status,
            f"Document {document_id} is already {document.status.value} and cannot be cancelled",
        )

    async def delete_document(self, document_id: UUID) -> None:
        """Remove a document and its stored bytes.

        Running transfer or analysis work for the document is stopped first.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        document = await self.registry.get(document_id)

        if document.status == DocumentStatus.UPLOADING:
            await self.transfers.cancel(document_id)
        elif document.status == DocumentStatus.ANALYZING:
            self.queue.abort(document_id)

        removed = await self.registry.remove(document_id)
        self.transfers.forget(document_id)
        metrics.documents_discarded_total.labels(operation="delete").inc()

        if removed.storage_key:
            try:
                await self.storage.delete_file(removed.storage_key)
            except StorageError as e:
                logger.warning(f"Stored bytes for document {document_id} not removed: {e}")

    def stats(self) -> Dict[str, Any]:
        counts = self.registry.count_by_status()
        return {
            "started": self._started,
            "workers": self.queue.worker_count,
            "workers_running": self.queue.running,
            "busy_workers": self.queue.busy_workers,
            "queue_depth": self.queue.depth,
            "active_transfers": self.transfers.active_count,
            "documents": {status.value: count for status, count in counts.items()},
        }
