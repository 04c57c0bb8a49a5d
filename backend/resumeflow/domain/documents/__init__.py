"""Documents domain module - document lifecycle, status management, upload validation"""

from .document_status import (
    DocumentStatus,
    FailureReason,
    can_transition,
    get_allowed_transitions,
    is_terminal,
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
)
from .errors import (
    ResumeFlowError,
    ValidationError,
    ValidationErrorCode,
    DocumentNotFoundError,
    DocumentStateError,
    InvalidTransitionError,
)
from .models import Document
from .validation import (
    is_supported_mime_type,
    resolve_mime_type,
    validate_file_size,
    validate_filename,
    validate_upload,
    sanitize_filename,
    SUPPORTED_MIME_TYPES,
    MAX_FILE_SIZE,
)

__all__ = [
    "DocumentStatus",
    "FailureReason",
    "can_transition",
    "get_allowed_transitions",
    "is_terminal",
    "ALLOWED_TRANSITIONS",
    "TERMINAL_STATUSES",
    "ResumeFlowError",
    "ValidationError",
    "ValidationErrorCode",
    "DocumentNotFoundError",
    "DocumentStateError",
    "InvalidTransitionError",
    "Document",
    "is_supported_mime_type",
    "resolve_mime_type",
    "validate_file_size",
    "validate_filename",
    "validate_upload",
    "sanitize_filename",
    "SUPPORTED_MIME_TYPES",
    "MAX_FILE_SIZE",
]
