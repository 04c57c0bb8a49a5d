"""Upload gateway - validates submissions and creates Document records."""

import logging

from ..domain.documents import (
    Document,
    MAX_FILE_SIZE,
    ValidationError,
    sanitize_filename,
    validate_upload,
)
from ..observability import metrics
from .registry import DocumentRegistry
from .transfer import TransferTracker

logger = logging.getLogger(__name__)


class UploadGateway:
    """Entry point for new resumes.

    Validation happens before anything is created, so a rejected upload
    leaves no Document behind.
    """

    def __init__(
        self,
        registry: DocumentRegistry,
        transfers: TransferTracker,
        max_file_size: int = MAX_FILE_SIZE,
    ):
        self._registry = registry
        self._transfers = transfers
        self.max_file_size = max_file_size

    async def submit(self, content: bytes, filename: str, mime_type: str) -> Document:
        """Accept a resume and start its transfer.

        Args:
            content: Raw file bytes
            filename: Original client filename
            mime_type: Declared content type (may be generic)

        Returns:
            Snapshot of the new Document in UPLOADING state

        Raises:
            ValidationError: UNSUPPORTED_TYPE, TOO_LARGE, EMPTY_FILE or INVALID_FILENAME
        """
        try:
            resolved_mime_type = validate_upload(filename, mime_type, len(content), self.max_file_size)
        except ValidationError as e:
            metrics.uploads_rejected_total.labels(code=e.code.value).inc()
            logger.info(f"Upload rejected: filename={filename!r}, code={e.code.value}, reason={e.message}")
            raise

        document = Document(
            filename=sanitize_filename(filename),
            size_bytes=len(content),
            mime_type=resolved_mime_type,
        )
        snapshot = await self._registry.add(document)
        self._transfers.start(snapshot, content)

        metrics.documents_submitted_total.labels(mime_type=resolved_mime_type).inc()
        logger.info(
            f"Accepted document: id={snapshot.id}, filename={snapshot.filename}, "
            f"size={snapshot.size_bytes}, mime_type={snapshot.mime_type}",
            extra={"document_id": str(snapshot.id)},
        )
        return snapshot
