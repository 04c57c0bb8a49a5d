"""Resume text extraction.

PDFs are read with pdfplumber and Word documents with python-docx. Legacy
binary .doc files are only readable when they are really OOXML packages
saved under the old extension; anything else is reported as unreadable.

Extraction is blocking and CPU bound. Callers on the event loop run it in a
worker thread.
"""

import io
import logging
from typing import List

import docx
import pdfplumber

from ...domain.analysis import AnalysisError
from ...domain.documents.validation import DOC_MIME_TYPE, DOCX_MIME_TYPE, PDF_MIME_TYPE

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF-"
ZIP_SIGNATURE = b"PK\x03\x04"


def extract_pdf_text(content: bytes) -> str:
    """Extract text from every page of a text-based PDF.

    Raises:
        AnalysisError: If the bytes are not a readable PDF
    """
    try:
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            page_count = len(pdf.pages)
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        raise AnalysisError(f"Could not read PDF: {e}") from e

    text = "\n".join(pages)
    logger.debug(f"Extracted PDF text: pages={page_count}, chars={len(text.strip())}")
    return text


def extract_docx_text(content: bytes) -> str:
    """Extract paragraph and table text from a DOCX package.

    Raises:
        AnalysisError: If the bytes are not a readable DOCX package
    """
    try:
        document = docx.Document(io.BytesIO(content))
    except Exception as e:
        raise AnalysisError(f"Could not read Word document: {e}") from e

    lines: List[str] = [paragraph.text for paragraph in document.paragraphs if paragraph.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                lines.append(" | ".join(cells))

    logger.debug(f"Extracted DOCX text: paragraphs={len(document.paragraphs)}, tables={len(document.tables)}")
    return "\n".join(lines)


def extract_text(content: bytes, mime_type: str) -> str:
    """Extract plain text from an accepted resume.

    Args:
        content: Stored document bytes
        mime_type: Resolved MIME type recorded at upload

    Raises:
        AnalysisError: If the format cannot be read
    """
    if mime_type == PDF_MIME_TYPE:
        return extract_pdf_text(content)

    if mime_type == DOCX_MIME_TYPE:
        return extract_docx_text(content)

    if mime_type == DOC_MIME_TYPE:
        if content.startswith(ZIP_SIGNATURE):
            return extract_docx_text(content)
        if content.startswith(PDF_SIGNATURE):
            return extract_pdf_text(content)
        raise AnalysisError("Legacy .doc files cannot be analyzed; convert the resume to .docx or PDF")

    raise AnalysisError(f"No text extractor for {mime_type}")
