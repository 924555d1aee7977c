"""Supabase Storage client for attachment files."""

from typing import Optional
from urllib.parse import quote
import logging

import httpx

from core.config import Settings, get_cached_settings
from core.exceptions import StorageError

logger = logging.getLogger(__name__)


class StorageClient:
    """Client for the Supabase Storage REST API.

    Talks to one bucket with the service-role key. Failures raise
    ``StorageError``, which the API renders as a generic 500.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or get_cached_settings()
        self.base_url = settings.STORAGE_URL
        self.bucket = settings.STORAGE_BUCKET
        self.signed_url_ttl = settings.SIGNED_URL_TTL_SECONDS
        self.timeout = httpx.Timeout(settings.STORAGE_TIMEOUT_SECONDS)
        self._service_key = settings.SUPABASE_SERVICE_ROLE_KEY
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self._service_key}",
                "apikey": self._service_key,
            },
        )

    def _object_path(self, path: str) -> str:
        return f"{quote(self.bucket)}/{quote(path.lstrip('/'))}"

    def public_url(self, path: str) -> str:
        """Public URL of an object; only reachable if the bucket is public."""
        return f"{self.base_url}/object/public/{self._object_path(path)}"

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Store ``content`` at ``path`` without overwriting. Returns the path."""
        try:
            async with self._client() as client:
                response = await client.post(
                    f"/object/{self._object_path(path)}",
                    content=content,
                    headers={
                        "Content-Type": content_type,
                        "Cache-Control": "max-age=3600",
                        "x-upsert": "false",
                    },
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Storage upload failed for {path}: {e.response.status_code} {e.response.text}")
            raise StorageError("Failed to upload file", {"path": path, "status": e.response.status_code})
        except httpx.HTTPError as e:
            logger.error(f"Storage upload failed for {path}: {e}")
            raise StorageError("Failed to upload file", {"path": path})

        logger.info(f"Uploaded {len(content)} bytes to {self.bucket}/{path}")
        return path

    async def create_signed_url(self, path: str, expires_in: Optional[int] = None) -> str:
        """Issue a time-boxed download URL for an object.

        ``expires_in`` is capped at the configured TTL (at most one hour).
        """
        ttl = min(expires_in or self.signed_url_ttl, self.signed_url_ttl)
        try:
            async with self._client() as client:
                response = await client.post(
                    f"/object/sign/{self._object_path(path)}",
                    json={"expiresIn": ttl},
                )
                response.raise_for_status()
                signed = response.json().get("signedURL")
        except httpx.HTTPStatusError as e:
            logger.error(f"Signing URL failed for {path}: {e.response.status_code} {e.response.text}")
            raise StorageError("Failed to generate download URL", {"path": path, "status": e.response.status_code})
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Signing URL failed for {path}: {e}")
            raise StorageError("Failed to generate download URL", {"path": path})

        if not signed:
            logger.error(f"Storage returned no signed URL for {path}")
            raise StorageError("Failed to generate download URL", {"path": path})

        # Supabase returns the URL relative to the storage root
        if signed.startswith("http"):
            return signed
        return f"{self.base_url}/{signed.lstrip('/')}"


_storage_client: Optional[StorageClient] = None


def get_storage_client() -> StorageClient:
    """Dependency returning the shared storage client."""
    global _storage_client
    if _storage_client is None:
        _storage_client = StorageClient()
    return _storage_client
