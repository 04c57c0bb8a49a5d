"""Document API endpoints.

Provides listing, retrieval, progress, cancellation and deletion of
resume documents. DocumentNotFoundError and DocumentStateError raised by
the pipeline are mapped to 404 and 409 by the application's exception
handlers.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ....dependencies import get_pipeline
from ....domain.documents import DocumentStatus
from ....pipeline import DocumentPipeline
from .schemas import (
    DocumentListResponse,
    DocumentProgressResponse,
    DocumentResponse,
    DocumentSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    status_filter: Optional[DocumentStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    pipeline: DocumentPipeline = Depends(get_pipeline),
):
    """List documents, most recent upload first.

    Args:
        status_filter: Only return documents in this status
        limit: Maximum number of documents to return
        offset: Number of documents to skip
    """
    documents = await pipeline.list_documents(status_filter)
    page = documents[offset:offset + limit]

    return DocumentListResponse(
        items=[DocumentSummary.model_validate(document) for document in page],
        total=len(documents),
        limit=limit,
        offset=offset,
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: UUID,
    pipeline: DocumentPipeline = Depends(get_pipeline),
):
    """Get a document with its analysis results or failure reason."""
    document = await pipeline.get_document(document_id)
    return DocumentResponse.model_validate(document)


@router.get("/{document_id}/progress", response_model=DocumentProgressResponse)
async def get_document_progress(
    document_id: UUID,
    pipeline: DocumentPipeline = Depends(get_pipeline),
):
    document = await pipeline.get_progress(document_id)
    return DocumentProgressResponse.model_validate(document)


@router.post(
    "/{document_id}/cancel",
    response_model=DocumentResponse,
    responses={204: {"description": "Cancelled during upload; the document was discarded"}},
)
async def cancel_document(
    document_id: UUID,
    pipeline: DocumentPipeline = Depends(get_pipeline),
):
    """Cancel processing of a document.

    A document still uploading is discarded (204). A queued or analyzing
    document becomes FAILED with reason CANCELLED (200). Finished
    documents cannot be cancelled (409).
    """
    document = await pipeline.cancel_document(document_id)
    if document is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    logger.info(f"Document {document_id} cancelled by caller")
    return DocumentResponse.model_validate(document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: UUID,
    pipeline: DocumentPipeline = Depends(get_pipeline),
):
    """Delete a document and its stored file.

    Any transfer or analysis still running for the document is stopped.
    """
    await pipeline.delete_document(document_id)
    logger.info(f"Deleted document {document_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
