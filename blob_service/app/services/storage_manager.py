import hashlib
import re
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os

from blob_service import config
from blob_service.errors import BlobNotFoundError, StorageIOError
from blob_service.logger_config import get_logger, structured_log
from blob_service.models import FileInfo

logger = get_logger()

# Canonical textual form of a server-generated identifier
BLOB_ID_PATTERN = re.compile(r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$')


def is_valid_id(blob_id: str) -> bool:
    """Check if the blob ID has the shape of a server-generated identifier."""
    return bool(blob_id) and BLOB_ID_PATTERN.fullmatch(blob_id) is not None


def new_blob_id() -> str:
    return str(uuid.uuid4())


def compute_content_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def blob_url_path(blob_id: str) -> str:
    return f"/files/{blob_id}"


class StorageManager:
    """Stores blobs under ``data_dir/<first two chars of id>/<id>``.

    Every operation resolves the path independently; there is no index,
    no cache and no locking. Operations on the same id may race.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = data_dir

    async def initialize(self):
        """Create the store root. Failure here is fatal for the process."""
        logger.info("Initializing storage manager...")
        self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Storage directory created/verified: {self.data_dir}")

    def get_blob_path(self, blob_id: str) -> Path:
        """Get the path where a blob is stored based on its ID.

        Raises:
            BlobNotFoundError: if the ID is not a well-formed identifier
        """
        if not is_valid_id(blob_id):
            raise BlobNotFoundError(f"Invalid blob ID: {blob_id!r}", blob_id=blob_id)
        prefix = blob_id[:config.SHARD_PREFIX_LENGTH]
        return self.data_dir / prefix / blob_id

    async def _require_blob(self, blob_id: str, operation: str) -> Path:
        try:
            blob_path = self.get_blob_path(blob_id)
        except BlobNotFoundError as e:
            e.operation = operation
            raise
        if not await aiofiles.os.path.isfile(blob_path):
            raise BlobNotFoundError(f"Blob {blob_id} not found", blob_id=blob_id, operation=operation)
        return blob_path

    async def _remove_partial(self, blob_path: Path) -> None:
        """Remove a blob file left behind by a failed write."""
        try:
            if await aiofiles.os.path.exists(blob_path):
                await aiofiles.os.remove(blob_path)
        except OSError as e:
            logger.warning(f"Could not remove partial blob {blob_path}: {e}")

    async def store_blob(self, data: bytes, filename: str) -> FileInfo:
        """Write a new blob under a freshly generated ID."""
        blob_id = new_blob_id()
        content_hash = compute_content_hash(data)
        blob_path = self.get_blob_path(blob_id)

        try:
            await aiofiles.os.makedirs(blob_path.parent, exist_ok=True)
            async with aiofiles.open(blob_path, 'wb') as f:
                await f.write(data)
        except OSError as e:
            await self._remove_partial(blob_path)
            raise StorageIOError(f"Error writing blob: {e}", blob_id=blob_id, operation="upload") from e

        logger.info(structured_log(
            "Blob uploaded",
            event="blob_uploaded",
            blob_id=blob_id,
            filename=filename,
            size=len(data),
            operation="upload"
        ))
        return FileInfo(
            id=blob_id,
            filename=filename,
            size=len(data),
            content_hash=content_hash,
            path=blob_url_path(blob_id),
        )

    async def read_blob(self, blob_id: str) -> bytes:
        blob_path = await self._require_blob(blob_id, "download")
        try:
            async with aiofiles.open(blob_path, 'rb') as f:
                return await f.read()
        except OSError as e:
            raise StorageIOError(f"Error reading blob: {e}", blob_id=blob_id, operation="download") from e

    async def delete_blob(self, blob_id: str) -> None:
        """Delete a blob. The shard directory is left in place."""
        blob_path = await self._require_blob(blob_id, "delete")
        try:
            await aiofiles.os.remove(blob_path)
        except OSError as e:
            raise StorageIOError(f"Error deleting blob: {e}", blob_id=blob_id, operation="delete") from e

        logger.info(structured_log(
            "Blob deleted",
            event="blob_deleted",
            blob_id=blob_id,
            operation="delete"
        ))

    async def blob_info(self, blob_id: str) -> FileInfo:
        """Describe a stored blob, re-hashing its full content.

        The original filename is not persisted, so ``filename`` is the ID.
        """
        blob_path = await self._require_blob(blob_id, "info")
        try:
            stat = await aiofiles.os.stat(blob_path)
            async with aiofiles.open(blob_path, 'rb') as f:
                data = await f.read()
        except OSError as e:
            raise StorageIOError(f"Error reading blob info: {e}", blob_id=blob_id, operation="info") from e

        return FileInfo(
            id=blob_id,
            filename=blob_id,
            size=stat.st_size,
            content_hash=compute_content_hash(data),
            path=blob_url_path(blob_id),
        )
