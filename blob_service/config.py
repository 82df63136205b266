"""Configuration settings for the blob service."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

SERVICE_NAME = "blob-service"

# Directory paths
DATA_DIR = "/data"
LOG_DIR = "logs"

# Network
HOST = "0.0.0.0"
PORT = 9000

# Logging
LOG_LEVEL = "INFO"
LOGZIO_URL = "https://listener-eu.logz.io:8071"
APP_ENV = "development"

# Blob constraints
SHARD_PREFIX_LENGTH = 2
DOWNLOAD_MEDIA_TYPE = "application/octet-stream"
DEFAULT_FILENAME = "unnamed"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    host: str = HOST
    port: int = PORT
    log_level: str = LOG_LEVEL
    log_dir: Optional[Path] = Path(LOG_DIR)
    logzio_token: Optional[str] = None
    logzio_url: str = LOGZIO_URL
    app_env: str = APP_ENV

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """Create Settings from environment variables.

        Raises:
            ValueError: if PORT is not a valid TCP port number
        """
        env = os.environ if environ is None else environ

        raw_port = env.get("PORT", str(PORT))
        try:
            port = int(raw_port)
        except ValueError:
            raise ValueError(f"Invalid PORT value: {raw_port!r}")
        if not 0 < port < 65536:
            raise ValueError(f"PORT out of range: {port}")

        log_dir = env.get("LOG_DIR", LOG_DIR)

        return cls(
            data_dir=Path(env.get("DATA_DIR", DATA_DIR)),
            host=env.get("HOST", HOST),
            port=port,
            log_level=env.get("LOG_LEVEL", LOG_LEVEL).upper(),
            log_dir=Path(log_dir) if log_dir else None,
            logzio_token=env.get("LOGZIO_TOKEN") or None,
            logzio_url=env.get("LOGZIO_URL", LOGZIO_URL),
            app_env=env.get("APP_ENV", APP_ENV),
        )
