"""S3 Storage Adapter - Implementation of ObjectStoragePort using boto3.

Provides S3-compatible storage operations for AWS S3, MinIO, and other
S3-compatible services. boto3 calls are blocking, so they run in a worker
thread to keep the event loop free for the rest of the pipeline.
"""

import asyncio
import hashlib
import logging
import threading
from io import BytesIO
from typing import BinaryIO, Optional
from uuid import UUID

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from ...domain.documents.ports import (
    ObjectStoragePort,
    ProgressCallback,
    StorageError,
    StoredFile,
    generate_storage_key,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192


class S3StorageAdapter(ObjectStoragePort):
    """S3-compatible storage adapter using boto3.

    Features:
    - SHA256 computed while streaming the source
    - Progress reported as boto3 sends the bytes
    - Storage key format: resumes/{year}/{month}/{document_id}{ext}

    Example:
        storage = S3StorageAdapter(
            endpoint_url="http://localhost:9000",
            access_key="minioadmin",
            secret_key="minioadmin",
            bucket_name="resumeflow-documents",
        )
        stored = await storage.store_file(
            file=BytesIO(content),
            document_id=document.id,
            filename="resume.pdf",
            mime_type="application/pdf",
        )
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """Initialize S3 storage adapter.

        Raises:
            StorageError: If S3 client initialization fails
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
        except NoCredentialsError as e:
            raise StorageError(f"Invalid S3 credentials: {e}")
        except (BotoCoreError, ValueError) as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

        self.bucket_name = bucket_name
        self.region = region
        self.chunk_size = chunk_size

        logger.info(
            f"Initialized S3 storage adapter: bucket={bucket_name}, "
            f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
        )

    async def store_file(
        self,
        file: BinaryIO,
        document_id: UUID,
        filename: str,
        mime_type: str,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> StoredFile:
        """Store a file in S3.

        Implementation:
        1. Reads file in chunks while calculating SHA256
        2. Generates storage key from the document id
        3. Uploads with upload_fileobj; progress follows the bytes boto3 sends

        If the caller is cancelled mid-upload, the upload thread is allowed to
        finish and the object is deleted before CancelledError propagates.

        Raises:
            StorageError: If upload fails
            ValueError: If file is empty
        """
        sha256_hash = hashlib.sha256()
        chunks = []
        size_bytes = 0

        while True:
            chunk = file.read(self.chunk_size)
            if not chunk:
                break
            sha256_hash.update(chunk)
            chunks.append(chunk)
            size_bytes += len(chunk)
            await asyncio.sleep(0)

        if size_bytes == 0:
            raise ValueError("Cannot store empty file")

        sha256_hex = sha256_hash.hexdigest()
        storage_key = generate_storage_key(document_id, filename)
        reporter = UploadProgress(size_bytes, asyncio.get_running_loop(), progress_callback)

        upload = asyncio.ensure_future(asyncio.to_thread(
            self.s3_client.upload_fileobj,
            BytesIO(b"".join(chunks)),
            self.bucket_name,
            storage_key,
            ExtraArgs={
                "ContentType": mime_type,
                "Metadata": {
                    "sha256": sha256_hex,
                    "original_filename": filename,
                    "document_id": str(document_id),
                },
            },
            Callback=reporter,
        ))

        try:
            await asyncio.shield(upload)
        except asyncio.CancelledError:
            logger.info(f"S3 upload cancelled: storage_key={storage_key}")
            await self._remove_cancelled_upload(upload, storage_key)
            raise
        except S3UploadFailedError as e:
            logger.error(f"S3 upload failed: storage_key={storage_key}, error={e}")
            raise StorageError(f"Failed to upload file: {e}")
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 upload failed: storage_key={storage_key}, "
                f"error={error_code}, message={e}"
            )
            raise StorageError(f"Failed to upload file: {error_code}")
        except BotoCoreError as e:
            logger.error(f"S3 upload failed: storage_key={storage_key}, error={e}")
            raise StorageError(f"Failed to upload file: {e}")

        reporter.finish()

        logger.info(
            f"Uploaded file: storage_key={storage_key}, "
            f"sha256={sha256_hex}, size={size_bytes}, mime_type={mime_type}"
        )

        return StoredFile(
            storage_key=storage_key,
            sha256=sha256_hex,
            size_bytes=size_bytes,
            mime_type=mime_type,
        )

    async def _remove_cancelled_upload(self, upload: "asyncio.Future[None]", storage_key: str) -> None:
        """Wait out an abandoned upload, then delete whatever it wrote."""
        try:
            await upload
        except (S3UploadFailedError, ClientError, BotoCoreError) as e:
            logger.info(f"Cancelled upload did not complete: storage_key={storage_key}, error={e}")
            return

        try:
            await asyncio.to_thread(
                self.s3_client.delete_object,
                Bucket=self.bucket_name,
                Key=storage_key,
            )
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Could not remove cancelled upload: storage_key={storage_key}, error={e}")
            return

        logger.info(f"Removed cancelled upload: storage_key={storage_key}")

    async def retrieve_file(self, storage_key: str) -> bytes:
        """Retrieve a file's bytes from S3.

        Raises:
            FileNotFoundError: If file doesn't exist
            StorageError: If retrieval fails
        """
        try:
            response = await asyncio.to_thread(
                self.s3_client.get_object,
                Bucket=self.bucket_name,
                Key=storage_key,
            )
            body = response["Body"]
            try:
                content = await asyncio.to_thread(body.read)
            finally:
                body.close()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("NoSuchKey", "404"):
                logger.warning(f"File not found: storage_key={storage_key}")
                raise FileNotFoundError(f"File not found: {storage_key}")
            logger.error(
                f"S3 retrieval failed: storage_key={storage_key}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to retrieve file: {error_code}")
        except BotoCoreError as e:
            logger.error(f"S3 retrieval failed: storage_key={storage_key}, error={e}")
            raise StorageError(f"Failed to retrieve file: {e}")

        logger.info(f"Retrieved file: storage_key={storage_key}")
        return content

    async def delete_file(self, storage_key: str) -> bool:
        """Delete a file from S3.

        Returns:
            bool: True if deleted, False if didn't exist

        Raises:
            StorageError: If deletion fails
        """
        if not await self.file_exists(storage_key):
            logger.info(f"File not found for deletion: storage_key={storage_key}")
            return False

        try:
            await asyncio.to_thread(
                self.s3_client.delete_object,
                Bucket=self.bucket_name,
                Key=storage_key,
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 deletion failed: storage_key={storage_key}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to delete file: {error_code}")
        except BotoCoreError as e:
            logger.error(f"S3 deletion failed: storage_key={storage_key}, error={e}")
            raise StorageError(f"Failed to delete file: {e}")

        logger.info(f"Deleted file: storage_key={storage_key}")
        return True

    async def file_exists(self, storage_key: str) -> bool:
        """Check if a file exists in S3 (HEAD request)."""
        try:
            await asyncio.to_thread(
                self.s3_client.head_object,
                Bucket=self.bucket_name,
                Key=storage_key,
            )
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey", "NotFound"):
                return False
            logger.warning(
                f"Error checking file existence: storage_key={storage_key}, "
                f"error={error_code}"
            )
            return False
        except BotoCoreError as e:
            logger.warning(f"Error checking file existence: storage_key={storage_key}, error={e}")
            return False

    async def check_health(self) -> None:
        try:
            await asyncio.to_thread(self.s3_client.head_bucket, Bucket=self.bucket_name)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Bucket {self.bucket_name} unreachable: {e}")


class UploadProgress:
    """boto3 transfer callback that forwards cumulative byte counts to the loop.

    boto3 calls it from its transfer threads with byte deltas, which can be
    negative when a part is retried. Reports reach progress_callback on the
    event loop thread, never decrease, and never exceed the file size.
    """

    def __init__(
        self,
        total: int,
        loop: asyncio.AbstractEventLoop,
        progress_callback: Optional[ProgressCallback],
    ):
        self.total = total
        self._loop = loop
        self._progress_callback = progress_callback
        self._lock = threading.Lock()
        self._sent = 0
        self._reported = 0

    def __call__(self, bytes_amount: int) -> None:
        with self._lock:
            self._sent = max(0, min(self.total, self._sent + bytes_amount))
            sent = self._sent
        self._loop.call_soon_threadsafe(self._report, sent)

    def finish(self) -> None:
        self._report(self.total)

    def _report(self, sent: int) -> None:
        if self._progress_callback is None or sent <= self._reported:
            return
        self._reported = sent
        self._progress_callback(sent)
