"""Pytest fixtures for the resume pipeline.

Provides reusable test fixtures for:
- A controllable analysis engine (StubAnalysisEngine)
- Sample resumes (opaque bytes, real PDF and DOCX renderings)
- In-memory storage
- A started DocumentPipeline

Usage:
    @pytest.mark.asyncio
    async def test_completes(pipeline, resume_bytes):
        document = await pipeline.submit_document(resume_bytes, "resume.pdf", "application/pdf")
        done = await pipeline.wait_for_terminal(document.id, timeout=5)
        assert done.status == DocumentStatus.COMPLETED
"""

import asyncio
import io
from typing import List, Optional

import docx
import pytest
import pytest_asyncio
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from resumeflow.domain.analysis import AnalysisEnginePort, AnalysisResult
from resumeflow.infrastructure.storage import InMemoryStorageAdapter
from resumeflow.pipeline import DocumentPipeline


SAMPLE_RESUME_TEXT = (
    "Jane Doe\n"
    "jane.doe@example.com | +1 555 123 4567 | linkedin.com/in/janedoe\n"
    "Experience\n"
    "Senior Engineer at Acme - grew revenue 25% and cut costs by 1.5 million\n"
    "Education\n"
    "BSc Computer Science, State University\n"
    "Skills: python, sql, docker, aws, leadership, communication\n"
    "Certifications: AWS Certified Developer\n"
)


class StubAnalysisEngine(AnalysisEnginePort):
    """AnalysisEnginePort whose behaviour each test controls.

    Args:
        result: Result to return (a valid default when omitted)
        error: Exception to raise instead of returning
        gated: Block every call until release() is called
        delay: Seconds to sleep before answering
    """

    name = "stub"

    def __init__(
        self,
        result: Optional[AnalysisResult] = None,
        error: Optional[Exception] = None,
        gated: bool = False,
        delay: float = 0.0,
    ):
        self.result = result or AnalysisResult(
            score=82,
            feedback=["Clear structure"],
            suggestions=["Quantify achievements"],
        )
        self.error = error
        self.gate = asyncio.Event() if gated else None
        self.delay = delay
        self.calls: List[bytes] = []
        self.cancelled = 0

    async def analyze(self, content: bytes, mime_type: str) -> AnalysisResult:
        self.calls.append(content)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise

        if self.error is not None:
            raise self.error
        return self.result

    def release(self) -> None:
        self.gate.set()


def render_pdf(lines: List[str]) -> bytes:
    """Render lines of text onto a single A4 page"""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4, pageCompression=1)
    y = A4[1] - 60
    for line in lines:
        pdf.drawString(50, y, line)
        y -= 16
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def render_docx(lines: List[str]) -> bytes:
    """Write lines of text as DOCX paragraphs"""
    document = docx.Document()
    for line in lines:
        document.add_paragraph(line)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def resume_bytes() -> bytes:
    """Opaque document bytes for tests whose engine does not parse content"""
    return b"%PDF-1.4\n" + SAMPLE_RESUME_TEXT.encode("utf-8")


@pytest.fixture
def make_pdf():
    """Factory rendering lines of text into a real PDF"""
    return render_pdf


@pytest.fixture
def make_docx():
    """Factory rendering lines of text into a real DOCX"""
    return render_docx


@pytest.fixture
def resume_pdf() -> bytes:
    """The sample resume as a real, compressed PDF"""
    return render_pdf(SAMPLE_RESUME_TEXT.splitlines())


@pytest.fixture
def resume_docx() -> bytes:
    return render_docx(SAMPLE_RESUME_TEXT.splitlines())


@pytest.fixture
def storage() -> InMemoryStorageAdapter:
    return InMemoryStorageAdapter()


@pytest.fixture
def engine() -> StubAnalysisEngine:
    return StubAnalysisEngine()


@pytest_asyncio.fixture
async def pipeline(storage, engine):
    """Started pipeline with two workers on in-memory storage"""
    pipeline = DocumentPipeline(
        storage=storage,
        engine=engine,
        worker_count=2,
        analysis_timeout_seconds=5.0,
    )
    await pipeline.start()
    yield pipeline
    await pipeline.stop()


@pytest.fixture
def make_engine():
    """Factory for StubAnalysisEngine instances"""
    return StubAnalysisEngine
