"""Pytest fixtures for API tests.

The application is started through TestClient's context manager so the
lifespan builds the pipeline and background work runs on the client's
event loop thread.
"""

import time
from typing import Callable, Iterable

import pytest
from fastapi.testclient import TestClient

from resumeflow.config import Settings
from resumeflow.infrastructure.analysis import KeywordAnalysisEngine
from resumeflow.main import create_app


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        LOG_JSON=False,
        LOG_LEVEL="WARNING",
        ANALYSIS_WORKERS=2,
        ANALYSIS_TIMEOUT_SECONDS=5.0,
    )


@pytest.fixture
def make_client(settings):
    """Factory for started TestClients; closed after the test"""
    clients = []

    def factory(storage=None, engine=None) -> TestClient:
        app = create_app(settings=settings, storage=storage, engine=engine or KeywordAnalysisEngine())
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, storage) -> TestClient:
    return make_client(storage=storage)


@pytest.fixture
def wait_for_status() -> Callable[..., dict]:
    """Poll GET /documents/{id} until the status is one of `statuses`"""

    def wait(client: TestClient, document_id: str, statuses: Iterable[str], timeout: float = 5.0) -> dict:
        wanted = set(statuses)
        deadline = time.monotonic() + timeout
        last = None
        while time.monotonic() < deadline:
            response = client.get(f"/api/v1/documents/{document_id}")
            if response.status_code == 200:
                last = response.json()
                if last["status"] in wanted:
                    return last
            time.sleep(0.02)
        raise AssertionError(f"Document {document_id} never reached {sorted(wanted)}; last seen {last}")

    return wait
