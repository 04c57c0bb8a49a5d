"""Domain exceptions for the resume pipeline.

Validation errors are raised synchronously before a Document exists.
Failures after creation are recorded on the Document instead of being raised.
"""

from enum import Enum
from typing import Optional
from uuid import UUID

from .document_status import DocumentStatus


class ValidationErrorCode(str, Enum):
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    TOO_LARGE = "TOO_LARGE"
    EMPTY_FILE = "EMPTY_FILE"
    INVALID_FILENAME = "INVALID_FILENAME"


class ResumeFlowError(Exception):
    """Base exception for the pipeline"""
    pass


class ValidationError(ResumeFlowError):
    """Upload rejected by the gateway.

    Attributes:
        code: Machine readable rejection code
        message: Human readable explanation
        max_size_bytes: Size limit, set for TOO_LARGE rejections
    """

    def __init__(
        self,
        code: ValidationErrorCode,
        message: str,
        max_size_bytes: Optional[int] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.max_size_bytes = max_size_bytes


class DocumentNotFoundError(ResumeFlowError):
    """No document with the given id exists"""

    def __init__(self, document_id: UUID):
        super().__init__(f"Document {document_id} not found")
        self.document_id = document_id


class InvalidTransitionError(ResumeFlowError):
    """A status change would violate the state machine"""

    def __init__(
        self,
        document_id: UUID,
        from_status: DocumentStatus,
        to_status: DocumentStatus,
    ):
        super().__init__(
            f"Invalid transition for document {document_id}: "
            f"{from_status.value} -> {to_status.value}"
        )
        self.document_id = document_id
        self.from_status = from_status
        self.to_status = to_status


class DocumentStateError(ResumeFlowError):
    """Caller asked for an operation the document's current state does not allow"""

    def __init__(self, document_id: UUID, status: DocumentStatus, message: str):
        super().__init__(message)
        self.document_id = document_id
        self.status = status
        self.message = message
