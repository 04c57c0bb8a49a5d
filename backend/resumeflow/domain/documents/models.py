"""Document domain model

Document represents one submitted resume/CV and tracks its storage
location, processing status and analysis results.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from ..analysis.rating import ScoreRating, rate_score
from .document_status import DocumentStatus, FailureReason


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Document:
    """A resume tracked through transfer and analysis.

    Result fields (analysis_score, feedback, suggestions) are only set in
    COMPLETED; error fields only in FAILED. The registry is the only place
    that mutates a Document; callers get copies.
    """

    filename: str
    size_bytes: int
    mime_type: str
    id: UUID = field(default_factory=uuid4)
    uploaded_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    sequence: int = 0  # creation order, breaks uploaded_at ties
    status: DocumentStatus = DocumentStatus.UPLOADING
    progress: int = 0
    storage_key: Optional[str] = None
    analysis_score: Optional[int] = None
    feedback: Optional[List[str]] = None
    suggestions: Optional[List[str]] = None
    error_reason: Optional[FailureReason] = None
    error_detail: Optional[str] = None
    status_history: List[DocumentStatus] = field(default_factory=list)

    def __post_init__(self):
        if not self.status_history:
            self.status_history = [self.status]

    @property
    def rating(self) -> Optional[ScoreRating]:
        if self.status != DocumentStatus.COMPLETED or self.analysis_score is None:
            return None
        return rate_score(self.analysis_score)

    def snapshot(self) -> "Document":
        """Deep copy safe to hand out to callers"""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert document to dictionary representation"""
        rating = self.rating
        return {
            "id": str(self.id),
            "filename": self.filename,
            "size_bytes": self.size_bytes,
            "mime_type": self.mime_type,
            "uploaded_at": self.uploaded_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "status": self.status.value,
            "progress": self.progress,
            "storage_key": self.storage_key,
            "analysis_score": self.analysis_score,
            "rating": rating.value if rating else None,
            "feedback": list(self.feedback) if self.feedback is not None else None,
            "suggestions": list(self.suggestions) if self.suggestions is not None else None,
            "error_reason": self.error_reason.value if self.error_reason else None,
            "error_detail": self.error_detail,
            "status_history": [status.value for status in self.status_history],
        }
