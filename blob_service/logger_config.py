import json
import logging
import platform
import socket
import sys
from datetime import datetime, timezone

from logzio.handler import LogzioHandler

from blob_service import config
from blob_service.config import Settings

LOGGER_NAME = "blob_service"


class StructuredMessage:
    def __init__(self, message, **kwargs):
        self.message = message
        self.kwargs = kwargs

    def __str__(self):
        if not self.kwargs:
            return self.message
        fields = " ".join(f"{k}={v}" for k, v in self.kwargs.items())
        return f"{self.message} [{fields}]"


class StructuredLogzioFormatter(logging.Formatter):
    def __init__(self, app_env: str = config.APP_ENV):
        super().__init__()
        self.hostname = socket.gethostname()
        self.app_env = app_env

    def format(self, record):
        if isinstance(record.msg, StructuredMessage):
            message = record.msg.message
            extra = record.msg.kwargs
        else:
            message = record.getMessage()
            extra = {}

        log_data = {
            'message': f"[{config.SERVICE_NAME}] {message}",
            'level': record.levelname,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'logger': record.name,
            'environment': self.app_env,
            'application': config.SERVICE_NAME,
            'hostname': self.hostname,
            'platform': platform.platform(),
            'python_version': platform.python_version(),
            'function': record.funcName,
            'line_number': record.lineno,
            'filename': record.filename,
        }
        log_data.update(extra)
        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logger(settings: Settings) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Repeated app creation (tests, reloads) must not stack handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s'
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(settings.log_level)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if settings.log_dir is not None:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
        )
        file_handler = logging.FileHandler(settings.log_dir / "blob_service.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    if settings.logzio_token:
        logzio_handler = LogzioHandler(
            token=settings.logzio_token,
            url=settings.logzio_url,
            logs_drain_timeout=5,
            network_timeout=10.0
        )
        logzio_handler.setLevel(logging.INFO)
        logzio_handler.setFormatter(StructuredLogzioFormatter(settings.app_env))
        logger.addHandler(logzio_handler)

    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def structured_log(message, **kwargs):
    return StructuredMessage(message, **kwargs)
