"""
Storage service: uploaded and written-back spreadsheets.

Files live in Supabase Storage. The result of processing an upload is
stored under the upload's key with the result prefix in front
("uploads/manifest.xlsx" -> "results/uploads/manifest.xlsx"), so the
same upload always maps to the same result file.
"""

from typing import Optional
import structlog

from config import get_supabase_client, settings
from exceptions import StoredFileNotFoundError, StorageError

logger = structlog.get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"


def upload_key_for(filename: str) -> str:
    """Storage key for an uploaded file (directory parts are dropped)."""
    name = filename.replace("\\", "/").rsplit("/", 1)[-1].strip()
    return f"{settings.upload_key_prefix}{name}"


def result_key_for(file_key: str) -> str:
    """Storage key of the written-back spreadsheet for an upload."""
    return f"{settings.result_key_prefix}{file_key}"


def result_metadata_key_for(result_file_key: str) -> str:
    """Storage key of the stored processing response."""
    return f"{result_file_key}.json"


class StorageService:
    """Read and write files in the upload and result buckets."""

    def __init__(self):
        self.db = get_supabase_client()
        self.upload_bucket = settings.upload_bucket
        self.result_bucket = settings.result_bucket

    # ===================
    # LOW LEVEL
    # ===================

    def put(self, bucket: str, key: str, content: bytes, content_type: str) -> str:
        """
        Store bytes under a key, replacing any previous file.

        Raises:
            StorageError: If the upload fails
        """
        logger.debug("storing_file", bucket=bucket, key=key, size_bytes=len(content))

        try:
            self.db.storage.from_(bucket).upload(
                key,
                content,
                file_options={"content-type": content_type, "upsert": "true"}
            )
        except Exception as e:
            logger.error("store_file_failed", bucket=bucket, key=key, error=str(e))
            raise StorageError(
                message="Failed to store file",
                details={"bucket": bucket, "key": key, "original_error": str(e)}
            )

        logger.info("file_stored", bucket=bucket, key=key)
        return key

    def get(self, bucket: str, key: str) -> bytes:
        """
        Read a stored file.

        Raises:
            StoredFileNotFoundError: If no file exists under the key
            StorageError: If the download fails for another reason
        """
        logger.debug("loading_file", bucket=bucket, key=key)

        try:
            return self.db.storage.from_(bucket).download(key)
        except Exception as e:
            error = str(e).lower()
            if "not found" in error or "not_found" in error or "404" in error:
                logger.warning("file_not_found", bucket=bucket, key=key)
                raise StoredFileNotFoundError(bucket, key)
            logger.error("load_file_failed", bucket=bucket, key=key, error=str(e))
            raise StorageError(
                message="Failed to load file",
                details={"bucket": bucket, "key": key, "original_error": str(e)}
            )

    # ===================
    # UPLOADS / RESULTS
    # ===================

    def save_upload(self, filename: str, content: bytes, content_type: str) -> str:
        """Store an uploaded spreadsheet and return its file key."""
        return self.put(self.upload_bucket, upload_key_for(filename), content, content_type)

    def load_upload(self, file_key: str) -> bytes:
        return self.get(self.upload_bucket, file_key)

    def save_result(self, file_key: str, content: bytes, content_type: str) -> str:
        """Store the written-back spreadsheet for an upload; returns its key."""
        return self.put(self.result_bucket, result_key_for(file_key), content, content_type)

    def load_result(self, result_file_key: str) -> bytes:
        return self.get(self.result_bucket, result_file_key)

    def save_result_metadata(self, result_file_key: str, payload: str) -> str:
        return self.put(
            self.result_bucket,
            result_metadata_key_for(result_file_key),
            payload.encode("utf-8"),
            JSON_CONTENT_TYPE
        )

    def load_result_metadata(self, result_file_key: str) -> str:
        return self.get(self.result_bucket, result_metadata_key_for(result_file_key)).decode("utf-8")


_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """Get or create StorageService instance."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
