"""Unit tests for the AnalysisQueue worker pool"""

import asyncio
from io import BytesIO

import pytest
import pytest_asyncio

from resumeflow.domain.analysis import AnalysisError, AnalysisResult
from resumeflow.domain.documents import Document, DocumentStatus, FailureReason
from resumeflow.pipeline import AnalysisQueue, DocumentRegistry


@pytest.fixture
def registry():
    return DocumentRegistry()


@pytest_asyncio.fixture
async def make_queue(registry, storage):
    """Factory for started queues; all are stopped after the test"""
    queues = []

    async def factory(engine, worker_count=2, timeout_seconds=5.0):
        queue = AnalysisQueue(
            registry,
            storage,
            engine,
            worker_count=worker_count,
            timeout_seconds=timeout_seconds,
        )
        await queue.start()
        queues.append(queue)
        return queue

    yield factory

    for queue in queues:
        await queue.stop()


async def queued_document(registry, storage, content: bytes = b"resume body") -> Document:
    """Put a document into QUEUED state the way a finished transfer does"""
    document = await registry.add(
        Document(filename="resume.pdf", size_bytes=len(content), mime_type="application/pdf")
    )
    stored = await storage.store_file(BytesIO(content), document.id, "resume.pdf", "application/pdf")
    return await registry.transition(
        document.id,
        DocumentStatus.QUEUED,
        progress=100,
        storage_key=stored.storage_key,
    )


class TestAnalysisOutcomes:
    """Test how engine outcomes land on the document"""

    @pytest.mark.asyncio
    async def test_success_completes_document(self, registry, storage, make_queue, make_engine):
        engine = make_engine()
        queue = await make_queue(engine)
        document = await queued_document(registry, storage, b"my resume")

        queue.enqueue(document.id)
        done = await registry.wait_for_terminal(document.id, timeout=2)

        assert done.status == DocumentStatus.COMPLETED
        assert done.analysis_score == 82
        assert done.feedback == ["Clear structure"]
        assert done.suggestions == ["Quantify achievements"]
        assert done.error_reason is None
        assert done.status_history == [
            DocumentStatus.UPLOADING,
            DocumentStatus.QUEUED,
            DocumentStatus.ANALYZING,
            DocumentStatus.COMPLETED,
        ]
        assert engine.calls == [b"my resume"]

    @pytest.mark.asyncio
    async def test_engine_error_fails_document(self, registry, storage, make_queue, make_engine):
        queue = await make_queue(make_engine(error=AnalysisError("unreadable scan")))
        document = await queued_document(registry, storage)

        queue.enqueue(document.id)
        done = await registry.wait_for_terminal(document.id, timeout=2)

        assert done.status == DocumentStatus.FAILED
        assert done.error_reason == FailureReason.ANALYSIS_ERROR
        assert done.error_detail == "unreadable scan"
        assert done.analysis_score is None
        assert done.feedback is None

    @pytest.mark.asyncio
    async def test_unexpected_engine_exception(self, registry, storage, make_queue, make_engine):
        queue = await make_queue(make_engine(error=RuntimeError("model crashed")))
        document = await queued_document(registry, storage)

        queue.enqueue(document.id)
        done = await registry.wait_for_terminal(document.id, timeout=2)

        assert done.error_reason == FailureReason.ANALYSIS_ERROR
        assert "model crashed" in done.error_detail
        assert queue.running

    @pytest.mark.asyncio
    async def test_contract_violation_fails_document(self, registry, storage, make_queue, make_engine):
        bad = AnalysisResult(score=150, feedback=["x"], suggestions=["y"])
        queue = await make_queue(make_engine(result=bad))
        document = await queued_document(registry, storage)

        queue.enqueue(document.id)
        done = await registry.wait_for_terminal(document.id, timeout=2)

        assert done.status == DocumentStatus.FAILED
        assert done.error_reason == FailureReason.ANALYSIS_ERROR
        assert done.analysis_score is None

    @pytest.mark.asyncio
    async def test_timeout(self, registry, storage, make_queue, make_engine):
        engine = make_engine(delay=2.0)
        queue = await make_queue(engine, timeout_seconds=0.05)
        document = await queued_document(registry, storage)

        queue.enqueue(document.id)
        done = await registry.wait_for_terminal(document.id, timeout=2)

        assert done.status == DocumentStatus.FAILED
        assert done.error_reason == FailureReason.TIMEOUT
        assert engine.cancelled == 1

    @pytest.mark.asyncio
    async def test_missing_stored_bytes(self, registry, storage, make_queue, make_engine):
        engine = make_engine()
        queue = await make_queue(engine)
        document = await queued_document(registry, storage)
        await storage.delete_file(document.storage_key)

        queue.enqueue(document.id)
        done = await registry.wait_for_terminal(document.id, timeout=2)

        assert done.error_reason == FailureReason.ANALYSIS_ERROR
        assert engine.calls == []


class TestWorkerPool:
    """Test bounded concurrency and FIFO order"""

    @pytest.mark.asyncio
    async def test_exactly_n_analyzing_rest_queued_in_order(self, registry, storage, make_queue, make_engine):
        engine = make_engine(gated=True)
        queue = await make_queue(engine, worker_count=2)
        documents = [await queued_document(registry, storage, f"resume {i}".encode()) for i in range(5)]

        for document in documents:
            queue.enqueue(document.id)

        for document in documents[:2]:
            await registry.wait_for(
                document.id, lambda d: d.status == DocumentStatus.ANALYZING, timeout=2
            )
        await asyncio.sleep(0.05)

        statuses = [(await registry.get(d.id)).status for d in documents]
        assert statuses == [
            DocumentStatus.ANALYZING,
            DocumentStatus.ANALYZING,
            DocumentStatus.QUEUED,
            DocumentStatus.QUEUED,
            DocumentStatus.QUEUED,
        ]
        assert queue.busy_workers == 2
        assert queue.depth == 3

        engine.release()
        for document in documents:
            done = await registry.wait_for_terminal(document.id, timeout=2)
            assert done.status == DocumentStatus.COMPLETED

        assert queue.depth == 0
        assert sorted(engine.calls) == sorted(f"resume {i}".encode() for i in range(5))

    def test_worker_count_must_be_positive(self, registry, storage, make_engine):
        with pytest.raises(ValueError):
            AnalysisQueue(registry, storage, make_engine(), worker_count=0, timeout_seconds=1)

    def test_timeout_must_be_positive(self, registry, storage, make_engine):
        with pytest.raises(ValueError):
            AnalysisQueue(registry, storage, make_engine(), worker_count=1, timeout_seconds=0)

    @pytest.mark.asyncio
    async def test_stop(self, registry, storage, make_engine):
        queue = AnalysisQueue(registry, storage, make_engine(), worker_count=3, timeout_seconds=1)
        assert not queue.running

        await queue.start()
        assert queue.running

        await queue.stop()
        assert not queue.running


class TestCancellationInQueue:
    """Test documents that leave the happy path while queued or analyzing"""

    @pytest.mark.asyncio
    async def test_abort_in_flight_analysis(self, registry, storage, make_queue, make_engine):
        engine = make_engine(gated=True)
        queue = await make_queue(engine, worker_count=1)
        document = await queued_document(registry, storage)

        queue.enqueue(document.id)
        await registry.wait_for(document.id, lambda d: d.status == DocumentStatus.ANALYZING, timeout=2)

        await registry.transition(
            document.id,
            DocumentStatus.FAILED,
            error_reason=FailureReason.CANCELLED,
        )
        assert queue.abort(document.id) is True
        await asyncio.sleep(0.05)

        done = await registry.get(document.id)
        assert done.error_reason == FailureReason.CANCELLED
        assert engine.cancelled == 1
        assert queue.busy_workers == 0
        assert queue.running

    @pytest.mark.asyncio
    async def test_abort_nothing_running(self, registry, storage, make_queue, make_engine):
        queue = await make_queue(make_engine())
        document = await queued_document(registry, storage)

        assert queue.abort(document.id) is False

    @pytest.mark.asyncio
    async def test_cancelled_while_queued_is_skipped(self, registry, storage, make_queue, make_engine):
        engine = make_engine(gated=True)
        queue = await make_queue(engine, worker_count=1)
        first = await queued_document(registry, storage, b"first")
        second = await queued_document(registry, storage, b"second")

        queue.enqueue(first.id)
        queue.enqueue(second.id)
        await registry.wait_for(first.id, lambda d: d.status == DocumentStatus.ANALYZING, timeout=2)
        await registry.transition(second.id, DocumentStatus.FAILED, error_reason=FailureReason.CANCELLED)

        engine.release()
        await registry.wait_for_terminal(first.id, timeout=2)
        await asyncio.sleep(0.05)

        skipped = await registry.get(second.id)
        assert skipped.status == DocumentStatus.FAILED
        assert skipped.error_reason == FailureReason.CANCELLED
        assert DocumentStatus.ANALYZING not in skipped.status_history
        assert engine.calls == [b"first"]

    @pytest.mark.asyncio
    async def test_deleted_while_analyzing_result_discarded(self, registry, storage, make_queue, make_engine):
        engine = make_engine(gated=True)
        queue = await make_queue(engine, worker_count=1)
        document = await queued_document(registry, storage)

        queue.enqueue(document.id)
        await registry.wait_for(document.id, lambda d: d.status == DocumentStatus.ANALYZING, timeout=2)
        await registry.remove(document.id)

        engine.release()
        await asyncio.sleep(0.05)

        assert not registry.contains(document.id)
        assert queue.running
