# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles file uploads to Supabase Storage.
#
# Buckets:
#   clinical-programs  - files linked to a program (modules, manuals, ...)
#   resource-library   - handouts, guidelines and billing resources
#
# Writes need the service_role key, so the default client is the service
# client. Tests pass a MagicMock instead.
# =============================================================================

import logging

from supabase import Client

from app.exceptions import StorageUploadError
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class StorageService:
    """
    Service for Supabase Storage operations.

    Example:
        storage = StorageService()
        storage.upload_bytes("resource-library", "patient-handouts/uncategorized/a1c.pdf", data, "application/pdf")
    """

    def __init__(self, client: Client | None = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = SupabaseClient.get_service_client()
        return self._client

    def upload_bytes(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str | None = None,
    ) -> str:
        """
        Upload raw bytes, replacing any existing object at the path.

        Args:
            bucket: Storage bucket name
            path: Object path inside the bucket
            content: File bytes
            content_type: MIME type (defaults to application/octet-stream)

        Returns:
            The object path

        Raises:
            StorageUploadError: If upload fails
        """
        try:
            self.client.storage.from_(bucket).upload(
                path=path,
                file=content,
                file_options={"content-type": content_type or DEFAULT_CONTENT_TYPE, "upsert": "true"},
            )
            logger.info(f"Uploaded {len(content)} bytes to {bucket}/{path}")
            return path

        except Exception as e:
            logger.error(f"Storage upload failed for {bucket}/{path}: {e}")
            raise StorageUploadError(f"{bucket}/{path}", str(e))
