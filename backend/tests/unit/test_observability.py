"""Unit tests for logging, correlation ids and health checks"""

import json
import logging

import pytest

from resumeflow.domain.documents.ports import StorageError
from resumeflow.infrastructure.storage import InMemoryStorageAdapter
from resumeflow.observability.health import (
    ComponentHealth,
    HealthStatus,
    check_object_storage_health,
    check_worker_pool_health,
    get_overall_health,
)
from resumeflow.observability.logging_config import JSONFormatter, RequestIDFilter
from resumeflow.observability.middleware import resolve_request_id
from resumeflow.observability.request_id import (
    get_document_id,
    get_request_id,
    set_document_id,
    set_request_id,
)
from resumeflow.pipeline import DocumentPipeline


class UnreachableStorage(InMemoryStorageAdapter):
    async def check_health(self) -> None:
        raise StorageError("connection refused")


def make_record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="resumeflow.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONLogging:
    """Test JSON formatter and correlation filter"""

    def test_formats_json_with_request_id(self):
        set_request_id("req-123")
        set_document_id(None)
        record = make_record("Document moved", status="QUEUED")
        RequestIDFilter().filter(record)

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Document moved"
        assert data["level"] == "INFO"
        assert data["request_id"] == "req-123"
        assert data["status"] == "QUEUED"
        assert "document_id" not in data

    def test_document_id_from_context(self):
        set_document_id("doc-42")
        record = make_record()
        RequestIDFilter().filter(record)
        set_document_id(None)

        data = json.loads(JSONFormatter().format(record))
        assert data["document_id"] == "doc-42"

    def test_explicit_document_id_wins(self):
        set_document_id("from-context")
        record = make_record(document_id="explicit")
        RequestIDFilter().filter(record)
        set_document_id(None)

        assert record.document_id == "explicit"

    def test_request_id_default(self):
        set_request_id(None)
        assert get_request_id() == "no-request-id"
        assert get_document_id() is None


class TestHealthChecks:
    """Test component health evaluation"""

    @pytest.mark.asyncio
    async def test_storage_healthy(self):
        health = await check_object_storage_health(InMemoryStorageAdapter())
        assert health.status == HealthStatus.HEALTHY
        assert health.latency_ms is not None

    @pytest.mark.asyncio
    async def test_storage_unhealthy(self):
        health = await check_object_storage_health(UnreachableStorage())
        assert health.status == HealthStatus.UNHEALTHY
        assert "connection refused" in health.message

    @pytest.mark.asyncio
    async def test_worker_pool(self, storage, engine):
        pipeline = DocumentPipeline(storage=storage, engine=engine)
        assert check_worker_pool_health(pipeline).status == HealthStatus.UNHEALTHY

        await pipeline.start()
        assert check_worker_pool_health(pipeline).status == HealthStatus.HEALTHY
        await pipeline.stop()

    def test_overall_health(self):
        healthy = ComponentHealth(status=HealthStatus.HEALTHY)
        degraded = ComponentHealth(status=HealthStatus.DEGRADED)
        unhealthy = ComponentHealth(status=HealthStatus.UNHEALTHY)

        assert get_overall_health({"a": healthy, "b": healthy}) == HealthStatus.HEALTHY
        assert get_overall_health({"a": healthy, "b": degraded}) == HealthStatus.DEGRADED
        assert get_overall_health({"a": degraded, "b": unhealthy}) == HealthStatus.UNHEALTHY


class TestRequestIDResolution:
    """Test which caller-supplied request ids are kept"""

    @pytest.mark.parametrize("value", ["abc-123", "trace:42.7_a", "a" * 128])
    def test_well_formed_ids_kept(self, value):
        assert resolve_request_id(value) == value

    @pytest.mark.parametrize("value", [None, "", "has spaces", "a" * 129, "semi;colon"])
    def test_malformed_ids_replaced(self, value):
        resolved = resolve_request_id(value)

        assert resolved != value
        assert len(resolved) == 36
