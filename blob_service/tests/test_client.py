import httpx
import pytest
import pytest_asyncio

from blob_service.app.services.blob_client import BlobClient
from blob_service.app.services.storage_manager import new_blob_id
from blob_service.errors import BlobClientError, BlobNotFoundError
from blob_service.tests.helpers import generate_random_content, sha256_hex


@pytest_asyncio.fixture
async def blob_client(app, storage_manager):
    # ASGITransport does not run the lifespan, so attach the storage manager directly
    app.state.storage_manager = storage_manager
    transport = httpx.ASGITransport(app=app)
    async with BlobClient("http://testserver", transport=transport) as client:
        yield client


def mock_client(handler):
    return BlobClient("http://testserver", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_client_lifecycle(blob_client):
    content = generate_random_content(2048)

    file_info = await blob_client.upload("photo.jpg", content)
    assert file_info.filename == "photo.jpg"
    assert file_info.size == len(content)
    assert file_info.content_hash == sha256_hex(content)

    assert await blob_client.download(file_info.id) == content

    info = await blob_client.get_info(file_info.id)
    assert info.filename == file_info.id
    assert info.content_hash == file_info.content_hash

    await blob_client.delete(file_info.id)
    with pytest.raises(BlobNotFoundError):
        await blob_client.download(file_info.id)
    with pytest.raises(BlobNotFoundError):
        await blob_client.get_info(file_info.id)
    with pytest.raises(BlobNotFoundError):
        await blob_client.delete(file_info.id)


@pytest.mark.asyncio
async def test_client_health(blob_client):
    health = await blob_client.health()
    assert health.status == "healthy"
    assert health.service == "blob-service"


@pytest.mark.asyncio
async def test_client_upload_empty_is_error(blob_client):
    with pytest.raises(BlobClientError) as exc_info:
        await blob_client.upload("empty.txt", b"")
    assert "400" in exc_info.value.message


@pytest.mark.asyncio
async def test_client_server_error():
    def handler(request):
        return httpx.Response(500)

    async with mock_client(handler) as client:
        with pytest.raises(BlobClientError):
            await client.download(new_blob_id())
        with pytest.raises(BlobClientError):
            await client.get_info(new_blob_id())
        with pytest.raises(BlobClientError):
            await client.delete(new_blob_id())


@pytest.mark.asyncio
async def test_client_delete_accepts_ok():
    def handler(request):
        assert request.method == "DELETE"
        return httpx.Response(200)

    async with mock_client(handler) as client:
        await client.delete(new_blob_id())


@pytest.mark.asyncio
async def test_client_upload_unsuccessful_response():
    blob_id = new_blob_id()

    def handler(request):
        assert request.url.path == "/upload"
        return httpx.Response(200, json={
            "success": False,
            "file": {
                "id": blob_id,
                "filename": "x",
                "size": 1,
                "content_hash": sha256_hex(b"x"),
                "path": f"/files/{blob_id}",
            },
        })

    async with mock_client(handler) as client:
        with pytest.raises(BlobClientError):
            await client.upload("x", b"x")


@pytest.mark.asyncio
async def test_client_invalid_json():
    def handler(request):
        return httpx.Response(200, content=b"not json")

    async with mock_client(handler) as client:
        with pytest.raises(BlobClientError):
            await client.get_info(new_blob_id())


@pytest.mark.asyncio
async def test_client_connection_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with mock_client(handler) as client:
        with pytest.raises(BlobClientError) as exc_info:
            await client.health()
    assert "connection refused" in exc_info.value.message
