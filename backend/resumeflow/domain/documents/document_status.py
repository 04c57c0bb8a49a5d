"""DocumentStatus state machine for the resume analysis lifecycle

State flow:
UPLOADING → QUEUED → ANALYZING → COMPLETED
Any non-terminal state may move to FAILED (transfer error, analysis error,
timeout or explicit cancel).
"""

from enum import Enum
from typing import Optional, Dict, List


class DocumentStatus(str, Enum):
    """Document processing status enum"""
    UPLOADING = "UPLOADING"    # Bytes are being transferred into storage
    QUEUED = "QUEUED"          # Stored, waiting for a free analysis worker
    ANALYZING = "ANALYZING"    # Analysis Engine is running
    COMPLETED = "COMPLETED"    # Score and feedback attached (terminal)
    FAILED = "FAILED"          # Transfer/analysis failed or cancelled (terminal)


class FailureReason(str, Enum):
    """Why a document ended up FAILED"""
    TRANSFER_ERROR = "TRANSFER_ERROR"
    ANALYSIS_ERROR = "ANALYSIS_ERROR"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"


# State transition rules. No retries: FAILED is terminal.
ALLOWED_TRANSITIONS: Dict[Optional[DocumentStatus], List[DocumentStatus]] = {
    None: [DocumentStatus.UPLOADING],
    DocumentStatus.UPLOADING: [DocumentStatus.QUEUED, DocumentStatus.FAILED],
    DocumentStatus.QUEUED: [DocumentStatus.ANALYZING, DocumentStatus.FAILED],
    DocumentStatus.ANALYZING: [DocumentStatus.COMPLETED, DocumentStatus.FAILED],
    DocumentStatus.COMPLETED: [],
    DocumentStatus.FAILED: [],
}

TERMINAL_STATUSES = frozenset({DocumentStatus.COMPLETED, DocumentStatus.FAILED})


def can_transition(from_status: Optional[DocumentStatus], to_status: DocumentStatus) -> bool:
    """Validate if status transition is allowed

    Args:
        from_status: Current status (None for new documents)
        to_status: Target status

    Returns:
        True if transition is allowed, False otherwise

    Example:
        >>> can_transition(DocumentStatus.UPLOADING, DocumentStatus.QUEUED)
        True
        >>> can_transition(DocumentStatus.COMPLETED, DocumentStatus.ANALYZING)
        False
    """
    allowed = ALLOWED_TRANSITIONS.get(from_status, [])
    return to_status in allowed


def get_allowed_transitions(from_status: Optional[DocumentStatus]) -> List[DocumentStatus]:
    """Get list of allowed transitions from current status

    Example:
        >>> get_allowed_transitions(DocumentStatus.QUEUED)
        [DocumentStatus.ANALYZING, DocumentStatus.FAILED]
    """
    return list(ALLOWED_TRANSITIONS.get(from_status, []))


def is_terminal(status: DocumentStatus) -> bool:
    return status in TERMINAL_STATUSES
