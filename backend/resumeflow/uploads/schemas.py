"""Upload API request/response schemas"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..api.v1.documents.schemas import DocumentResponse


class UploadErrorResponse(BaseModel):
    """Error response for upload validation failures"""
    model_config = ConfigDict(from_attributes=True)

    code: str = Field(..., description="Error code (UNSUPPORTED_TYPE, TOO_LARGE, EMPTY_FILE, INVALID_FILENAME)")
    message: str = Field(..., description="Human-readable error message")
    max_size_bytes: Optional[int] = Field(None, description="Maximum allowed file size (for TOO_LARGE errors)")


__all__ = ["DocumentResponse", "UploadErrorResponse"]
