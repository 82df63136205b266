import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from blob_service.app.services.storage_manager import StorageManager
from blob_service.config import Settings
from blob_service.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path / "data", log_dir=None, log_level="WARNING")


@pytest.fixture
def data_dir(settings):
    return settings.data_dir


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # Entering the context runs the lifespan, which creates the store root
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def storage_manager(data_dir):
    manager = StorageManager(data_dir)
    await manager.initialize()
    return manager
