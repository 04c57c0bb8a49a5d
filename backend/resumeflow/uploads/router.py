"""Upload API endpoints for ResumeFlow

Provides POST /uploads for submitting a single resume. The response is
returned as soon as the document exists; transfer and analysis continue
in the background and are observed through the documents API.
"""

import logging
from typing import Annotated, Dict

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse

from ..dependencies import get_pipeline
from ..domain.documents import ValidationError, ValidationErrorCode
from ..pipeline import DocumentPipeline
from .schemas import DocumentResponse, UploadErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["Uploads"])

VALIDATION_STATUS_CODES: Dict[ValidationErrorCode, int] = {
    ValidationErrorCode.UNSUPPORTED_TYPE: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    ValidationErrorCode.TOO_LARGE: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    ValidationErrorCode.EMPTY_FILE: status.HTTP_400_BAD_REQUEST,
    ValidationErrorCode.INVALID_FILENAME: status.HTTP_400_BAD_REQUEST,
}


@router.post(
    "",
    response_model=DocumentResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        400: {"model": UploadErrorResponse},
        413: {"model": UploadErrorResponse},
        415: {"model": UploadErrorResponse},
    },
)
async def upload_resume(
    file: Annotated[UploadFile, File(...)],
    pipeline: Annotated[DocumentPipeline, Depends(get_pipeline)],
):
    """Upload a resume for analysis

    Supported file types:
    - PDF (application/pdf)
    - Word (.doc, .docx)

    Validation (before any document is created):
    - Filename sanity checks
    - File type (declared MIME type, or the extension when it is generic)
    - File size (max 5 MiB by default, configurable via MAX_UPLOAD_SIZE_BYTES)

    Returns:
        DocumentResponse: The new document in UPLOADING state (202 Accepted)

    Example:
        curl -X POST http://localhost:8000/api/v1/uploads -F "file=@resume.pdf"
    """
    content = await file.read()

    try:
        document = await pipeline.submit_document(
            content,
            filename=file.filename or "",
            mime_type=file.content_type or "",
        )
    except ValidationError as e:
        error = UploadErrorResponse(
            code=e.code.value,
            message=e.message,
            max_size_bytes=e.max_size_bytes,
        )
        return JSONResponse(
            status_code=VALIDATION_STATUS_CODES[e.code],
            content=error.model_dump(),
        )
    finally:
        await file.close()

    return DocumentResponse.model_validate(document)
