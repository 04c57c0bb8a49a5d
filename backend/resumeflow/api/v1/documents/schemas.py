"""Document API response schemas"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ....domain.analysis import ScoreRating
from ....domain.documents import DocumentStatus, FailureReason


class DocumentResponse(BaseModel):
    """Full view of a resume document"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Document UUID")
    filename: str = Field(..., description="Sanitized original filename")
    size_bytes: int = Field(..., description="File size in bytes")
    mime_type: str = Field(..., description="Resolved MIME type")
    status: DocumentStatus = Field(..., description="Processing status")
    progress: int = Field(..., ge=0, le=100, description="Transfer progress percentage")
    uploaded_at: datetime
    updated_at: datetime
    analysis_score: Optional[int] = Field(None, description="Score 0-100, set when COMPLETED")
    rating: Optional[ScoreRating] = Field(None, description="Label derived from the score")
    feedback: Optional[List[str]] = None
    suggestions: Optional[List[str]] = None
    error_reason: Optional[FailureReason] = Field(None, description="Set when FAILED")
    error_detail: Optional[str] = None
    status_history: List[DocumentStatus] = Field(default_factory=list)


class DocumentSummary(BaseModel):
    """Compact list entry"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    filename: str
    status: DocumentStatus
    progress: int
    uploaded_at: datetime
    analysis_score: Optional[int] = None
    rating: Optional[ScoreRating] = None
    error_reason: Optional[FailureReason] = None


class DocumentListResponse(BaseModel):
    """Paginated document list, most recent upload first"""
    items: List[DocumentSummary]
    total: int = Field(..., description="Documents matching the filter before pagination")
    limit: int
    offset: int


class DocumentProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: DocumentStatus
    progress: int
