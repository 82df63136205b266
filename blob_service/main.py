from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blob_service import config
from blob_service.app.services.storage_manager import StorageManager
from blob_service.config import Settings
from blob_service.errors import register_exception_handlers
from blob_service.logger_config import get_logger, setup_logger
from blob_service.routes.blob_routes import router


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create and initialize storage manager; failure aborts startup
    app.state.storage_manager = StorageManager(app.state.settings.data_dir)
    await app.state.storage_manager.initialize()
    yield


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logger = setup_logger(settings)

    app = FastAPI(title="Blob Service", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(router)

    logger.debug(f"Application created with data directory: {settings.data_dir}")
    return app


def run():
    settings = Settings.from_env()
    app = create_app(settings)
    logger = get_logger()

    logger.info(f"Starting {config.SERVICE_NAME} on port {settings.port}")
    logger.info(f"Data directory: {settings.data_dir}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
