from fastapi import APIRouter, Depends, Request, Response, status
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from blob_service import config
from blob_service.app.services.storage_manager import StorageManager
from blob_service.errors import ClientInputError
from blob_service.logger_config import get_logger, structured_log
from blob_service.models import FileInfo, HealthResponse, UploadResponse

logger = get_logger()

router = APIRouter()


def get_storage_manager(request: Request) -> StorageManager:
    return request.app.state.storage_manager


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="healthy", service=config.SERVICE_NAME)


@router.post("/upload", response_model=UploadResponse)
async def upload_file(request: Request, storage_manager: StorageManager = Depends(get_storage_manager)):
    """Store the multipart ``file`` part under a new blob ID.

    A ``file`` part sent without a filename arrives as a plain form value
    and is stored under the default name.
    """
    try:
        async with request.form() as form:
            part = form.get("file")
            if isinstance(part, UploadFile):
                filename = part.filename or config.DEFAULT_FILENAME
                data = await part.read()
            elif isinstance(part, str):
                filename = config.DEFAULT_FILENAME
                data = part.encode()
            else:
                raise ClientInputError("Missing file part", operation="upload")
    except (StarletteHTTPException, ValueError) as e:
        raise ClientInputError(f"Malformed multipart body: {e}", operation="upload") from e

    if not data:
        raise ClientInputError("Empty file part", operation="upload")

    logger.debug(f"Receiving upload: {filename} ({len(data)} bytes)")

    file_info = await storage_manager.store_blob(data, filename)
    return UploadResponse(success=True, file=file_info)


@router.get("/files/{blob_id}")
async def download_file(blob_id: str, storage_manager: StorageManager = Depends(get_storage_manager)):
    logger.debug(f"Receiving download request for blob_id: {blob_id}")
    data = await storage_manager.read_blob(blob_id)
    return Response(content=data, media_type=config.DOWNLOAD_MEDIA_TYPE)


@router.delete("/files/{blob_id}", status_code=204)
async def delete_file(blob_id: str, storage_manager: StorageManager = Depends(get_storage_manager)):
    logger.debug(f"Receiving delete request for blob_id: {blob_id}")
    await storage_manager.delete_blob(blob_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/files/{blob_id}/info", response_model=FileInfo)
async def file_info(blob_id: str, storage_manager: StorageManager = Depends(get_storage_manager)):
    file_info = await storage_manager.blob_info(blob_id)
    logger.info(structured_log(
        "Blob info retrieved",
        event="blob_info",
        blob_id=blob_id,
        operation="info"
    ))
    return file_info
