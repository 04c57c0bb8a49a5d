"""Analysis queue - bounded worker pool running the Analysis Engine.

Documents arrive QUEUED from the transfer tracker and are served strictly
FIFO by a fixed number of workers. Each worker moves one document at a
time through ANALYZING to COMPLETED or FAILED. There are no retries.
"""

import asyncio
import logging
import time
from typing import Dict, List, Optional, Set
from uuid import UUID

from ..domain.analysis import AnalysisEnginePort, AnalysisError, AnalysisResult, check_result
from ..domain.documents import (
    Document,
    DocumentNotFoundError,
    DocumentStatus,
    FailureReason,
    InvalidTransitionError,
)
from ..domain.documents.ports import ObjectStoragePort, StorageError
from ..observability import metrics
from ..observability.request_id import set_document_id
from .registry import DocumentRegistry

logger = logging.getLogger(__name__)


class AnalysisQueue:
    """FIFO queue served by `worker_count` concurrent analysis workers.

    Usage:
        queue = AnalysisQueue(registry, storage, engine, worker_count=2, timeout_seconds=60)
        await queue.start()
        queue.enqueue(document_id)       # called by the transfer tracker
        queue.abort(document_id)         # best-effort stop of an in-flight analysis
        await queue.stop()
    """

    def __init__(
        self,
        registry: DocumentRegistry,
        storage: ObjectStoragePort,
        engine: AnalysisEnginePort,
        worker_count: int,
        timeout_seconds: float,
    ):
        if worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

        self._registry = registry
        self._storage = storage
        self._engine = engine
        self.worker_count = worker_count
        self.timeout_seconds = timeout_seconds

        self._queue: "asyncio.Queue[UUID]" = asyncio.Queue()
        self._workers: List[asyncio.Task] = []
        self._in_flight: Dict[UUID, asyncio.Task] = {}
        self._aborted: Set[UUID] = set()

    @property
    def running(self) -> bool:
        return bool(self._workers) and all(not worker.done() for worker in self._workers)

    @property
    def depth(self) -> int:
        return self._queue.qsize()

    @property
    def busy_workers(self) -> int:
        return len(self._in_flight)

    async def start(self) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._worker(index), name=f"analysis-worker-{index}")
            for index in range(self.worker_count)
        ]
        logger.info(
            f"Analysis queue started: workers={self.worker_count}, "
            f"timeout={self.timeout_seconds}s, engine={self._engine.name}"
        )

    async def stop(self) -> None:
        """Cancel workers and any in-flight analysis (service shutdown)."""
        for task in list(self._in_flight.values()):
            task.cancel()
        for worker in self._workers:
            worker.cancel()
        if self._workers:
            await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._in_flight.clear()
        metrics.analysis_workers_busy.set(0)
        logger.info("Analysis queue stopped")

    def enqueue(self, document_id: UUID) -> None:
        self._queue.put_nowait(document_id)
        metrics.analysis_queue_depth.set(self._queue.qsize())

    def abort(self, document_id: UUID) -> bool:
        """Cancel the engine call for a document, if one is running.

        The caller is responsible for the document's status; a late engine
        result is dropped because the record is already terminal.
        """
        task = self._in_flight.get(document_id)
        if task is None or task.done():
            return False
        self._aborted.add(document_id)
        task.cancel()
        return True

    async def _worker(self, index: int) -> None:
        while True:
            document_id = await self._queue.get()
            metrics.analysis_queue_depth.set(self._queue.qsize())
            try:
                await self._process(document_id)
            except Exception:
                logger.exception(f"Worker {index} crashed while processing document {document_id}")
            finally:
                self._queue.task_done()

    async def _process(self, document_id: UUID) -> None:
        set_document_id(str(document_id))

        try:
            document = await self._registry.transition(document_id, DocumentStatus.ANALYZING)
        except DocumentNotFoundError:
            logger.info(f"Skipping deleted document {document_id}")
            return
        except InvalidTransitionError as e:
            # Cancelled while waiting in the queue
            logger.info(f"Skipping document {document_id}: {e}")
            return

        try:
            content = await self._storage.retrieve_file(document.storage_key)
        except (StorageError, FileNotFoundError) as e:
            logger.error(f"Could not load stored bytes for document {document_id}: {e}")
            await self._fail(document_id, FailureReason.ANALYSIS_ERROR, f"Stored document unavailable: {e}")
            return

        result = await self._run_engine(document, content)
        if result is None:
            return

        try:
            await self._registry.transition(
                document_id,
                DocumentStatus.COMPLETED,
                analysis_score=result.score,
                feedback=list(result.feedback),
                suggestions=list(result.suggestions),
            )
        except (DocumentNotFoundError, InvalidTransitionError) as e:
            logger.info(f"Analysis result discarded for document {document_id}: {e}")
            return

        metrics.analysis_score_histogram.observe(result.score)
        metrics.documents_finished_total.labels(status=DocumentStatus.COMPLETED.value, reason="").inc()

    async def _run_engine(self, document: Document, content: bytes) -> Optional[AnalysisResult]:
        """Run the engine under the timeout; record failures on the document.

        Returns None when the document did not complete.
        """
        task = asyncio.create_task(
            asyncio.wait_for(self._engine.analyze(content, document.mime_type), self.timeout_seconds),
            name=f"analysis-{document.id}",
        )
        self._in_flight[document.id] = task
        metrics.analysis_workers_busy.set(len(self._in_flight))
        started = time.monotonic()

        try:
            result = await task
            check_result(result)
            return result
        except asyncio.CancelledError:
            if document.id in self._aborted:
                logger.info(f"Analysis aborted for document {document.id}")
                return None
            raise
        except asyncio.TimeoutError:
            logger.warning(f"Analysis timed out after {self.timeout_seconds}s for document {document.id}")
            await self._fail(
                document.id,
                FailureReason.TIMEOUT,
                f"Analysis exceeded {self.timeout_seconds} seconds",
            )
        except AnalysisError as e:
            logger.warning(f"Analysis failed for document {document.id}: {e}")
            await self._fail(document.id, FailureReason.ANALYSIS_ERROR, str(e))
        except Exception as e:
            logger.error(f"Analysis engine error for document {document.id}: {e}", exc_info=True)
            await self._fail(document.id, FailureReason.ANALYSIS_ERROR, f"Analysis engine error: {e}")
        finally:
            self._in_flight.pop(document.id, None)
            self._aborted.discard(document.id)
            metrics.analysis_workers_busy.set(len(self._in_flight))
            metrics.analysis_duration_seconds.labels(engine=self._engine.name).observe(
                time.monotonic() - started
            )
        return None

    async def _fail(self, document_id: UUID, reason: FailureReason, detail: str) -> None:
        try:
            await self._registry.transition(
                document_id,
                DocumentStatus.FAILED,
                error_reason=reason,
                error_detail=detail,
            )
        except (DocumentNotFoundError, InvalidTransitionError) as e:
            logger.info(f"Failure not recorded for document {document_id}: {e}")
            return
        metrics.documents_finished_total.labels(status=DocumentStatus.FAILED.value, reason=reason.value).inc()
