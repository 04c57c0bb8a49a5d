"""File validation utilities for resume uploads

All checks run before a Document record is created, so a rejected
upload never leaves state behind.
"""

import mimetypes
import os
import re
from typing import Optional

from .errors import ValidationError, ValidationErrorCode


PDF_MIME_TYPE = 'application/pdf'
DOC_MIME_TYPE = 'application/msword'
DOCX_MIME_TYPE = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'

# Supported MIME types (pdf, doc, docx)
SUPPORTED_MIME_TYPES = {
    PDF_MIME_TYPE,
    DOC_MIME_TYPE,
    DOCX_MIME_TYPE,
}

# Extension fallback for clients that send no usable content type
EXTENSION_MIME_TYPES = {
    '.pdf': PDF_MIME_TYPE,
    '.doc': DOC_MIME_TYPE,
    '.docx': DOCX_MIME_TYPE,
}

GENERIC_MIME_TYPES = {'', 'application/octet-stream', 'binary/octet-stream'}

# 5 MiB
MAX_FILE_SIZE = 5 * 1024 * 1024

MAX_FILENAME_LENGTH = 255


def is_supported_mime_type(mime_type: Optional[str]) -> bool:
    """Check if MIME type is supported for upload

    Example:
        >>> is_supported_mime_type('application/pdf')
        True
        >>> is_supported_mime_type('application/x-msdownload')
        False
    """
    return mime_type in SUPPORTED_MIME_TYPES


def resolve_mime_type(filename: str, declared: Optional[str]) -> str:
    """Pick the MIME type to validate against.

    The declared type wins unless it is missing or generic, in which case
    the filename extension decides.

    Example:
        >>> resolve_mime_type('cv.docx', 'application/octet-stream')
        'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
        >>> resolve_mime_type('cv.pdf', 'application/pdf')
        'application/pdf'
    """
    normalized = (declared or '').split(';')[0].strip().lower()
    if normalized not in GENERIC_MIME_TYPES:
        return normalized

    ext = os.path.splitext(filename or '')[1].lower()
    if ext in EXTENSION_MIME_TYPES:
        return EXTENSION_MIME_TYPES[ext]

    guessed, _ = mimetypes.guess_type(filename or '')
    return guessed or 'application/octet-stream'


def validate_mime_type(mime_type: str) -> None:
    if not is_supported_mime_type(mime_type):
        raise ValidationError(
            ValidationErrorCode.UNSUPPORTED_TYPE,
            f"Unsupported MIME type: {mime_type}. Supported types: PDF, DOC, DOCX",
        )


def validate_file_size(size_bytes: int, max_size: Optional[int] = None) -> None:
    """Validate file size is within limits

    Raises:
        ValidationError: EMPTY_FILE for 0 bytes, TOO_LARGE above max_size
    """
    if max_size is None:
        max_size = MAX_FILE_SIZE

    if size_bytes == 0:
        raise ValidationError(ValidationErrorCode.EMPTY_FILE, "File is empty (0 bytes)")

    if size_bytes > max_size:
        raise ValidationError(
            ValidationErrorCode.TOO_LARGE,
            f"File exceeds maximum size of {max_size} bytes (got {size_bytes} bytes)",
            max_size_bytes=max_size,
        )


def validate_filename(filename: Optional[str]) -> None:
    """Validate the original filename

    Path components are not rejected here; sanitize_filename strips them.

    Raises:
        ValidationError: INVALID_FILENAME when the name is unusable
    """
    if not filename or len(filename.strip()) == 0:
        raise ValidationError(ValidationErrorCode.INVALID_FILENAME, "Filename cannot be empty")

    if len(filename) > MAX_FILENAME_LENGTH:
        raise ValidationError(
            ValidationErrorCode.INVALID_FILENAME,
            f"Filename exceeds {MAX_FILENAME_LENGTH} characters (got {len(filename)})",
        )

    if any(ord(c) < 32 for c in filename):
        raise ValidationError(
            ValidationErrorCode.INVALID_FILENAME,
            "Filename contains control characters",
        )


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage

    Example:
        >>> sanitize_filename('../../resume.pdf')
        'resume.pdf'
        >>> sanitize_filename('my resume (final).pdf')
        'my_resume_final_.pdf'
    """
    # Remove path components (both separators, whatever the host OS)
    filename = re.split(r'[\\/]', filename)[-1]

    filename = re.sub(r'[^\w\s.-]', '_', filename)
    filename = re.sub(r'[\s_]+', '_', filename)
    filename = filename.lstrip('.') or 'document'

    if len(filename) > MAX_FILENAME_LENGTH:
        name, ext = os.path.splitext(filename)
        filename = name[:MAX_FILENAME_LENGTH - len(ext)] + ext

    return filename


def validate_upload(
    filename: Optional[str],
    mime_type: Optional[str],
    size_bytes: int,
    max_size: Optional[int] = None,
) -> str:
    """Run every gateway check in order: filename, type, size.

    Returns:
        The resolved MIME type of the accepted upload

    Raises:
        ValidationError: On the first failing check
    """
    validate_filename(filename)
    resolved = resolve_mime_type(filename, mime_type)
    validate_mime_type(resolved)
    validate_file_size(size_bytes, max_size)
    return resolved
