from typing import Optional

import httpx

from blob_service.errors import BlobClientError, BlobNotFoundError
from blob_service.logger_config import get_logger
from blob_service.models import FileInfo, HealthResponse, UploadResponse

logger = get_logger()


class BlobClient:
    """Async HTTP client for a running blob service.

    Usage::

        async with BlobClient("http://blob-service:9000") as client:
            info = await client.upload("report.pdf", data)
            data = await client.download(info.id)
    """

    def __init__(self, base_url: str, timeout: float = 60.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip('/')
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> 'BlobClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, url: str, operation: str, blob_id: Optional[str] = None, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Blob service request error for {method} {url}: {str(e)}")
            raise BlobClientError(f"Failed to {operation}: {str(e)}", blob_id=blob_id, operation=operation) from e

    def _decode(self, response: httpx.Response, model, operation: str, blob_id: Optional[str] = None):
        try:
            return model.model_validate(response.json())
        except ValueError as e:
            raise BlobClientError(f"Failed to decode response: {e}", blob_id=blob_id, operation=operation) from e

    async def health(self) -> HealthResponse:
        response = await self._send("GET", "/health", "check health")
        if response.status_code != 200:
            raise BlobClientError(f"Health check failed with status {response.status_code}", operation="health")
        return self._decode(response, HealthResponse, "health")

    async def upload(self, filename: str, data: bytes) -> FileInfo:
        files = {"file": (filename, data, "application/octet-stream")}
        response = await self._send("POST", "/upload", "upload", files=files)

        if response.status_code != 200:
            raise BlobClientError(
                f"Upload failed with status {response.status_code}: {response.text}",
                operation="upload"
            )

        upload_response = self._decode(response, UploadResponse, "upload")
        if not upload_response.success:
            raise BlobClientError("Upload failed: success=false", operation="upload")
        return upload_response.file

    async def download(self, blob_id: str) -> bytes:
        response = await self._send("GET", f"/files/{blob_id}", "download", blob_id)

        if response.status_code == 404:
            raise BlobNotFoundError(f"File not found: {blob_id}", blob_id=blob_id, operation="download")
        if response.status_code != 200:
            raise BlobClientError(
                f"Download failed with status {response.status_code}",
                blob_id=blob_id,
                operation="download"
            )
        return response.content

    async def delete(self, blob_id: str) -> None:
        response = await self._send("DELETE", f"/files/{blob_id}", "delete", blob_id)

        if response.status_code == 404:
            raise BlobNotFoundError(f"File not found: {blob_id}", blob_id=blob_id, operation="delete")
        if response.status_code not in (200, 204):
            raise BlobClientError(
                f"Delete failed with status {response.status_code}",
                blob_id=blob_id,
                operation="delete"
            )

    async def get_info(self, blob_id: str) -> FileInfo:
        response = await self._send("GET", f"/files/{blob_id}/info", "get file info", blob_id)

        if response.status_code == 404:
            raise BlobNotFoundError(f"File not found: {blob_id}", blob_id=blob_id, operation="info")
        if response.status_code != 200:
            raise BlobClientError(
                f"Get info failed with status {response.status_code}",
                blob_id=blob_id,
                operation="info"
            )
        return self._decode(response, FileInfo, "info", blob_id)
