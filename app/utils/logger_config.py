import logging.config
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.config.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str = "zapshift"):
    """
    Application logger: console plus a rotating file under LOG_DIR.

    Handlers are attached once per logger name, so modules can call this at
    import time without duplicating output.
    """
    logger = logging.getLogger(name)
    logger.setLevel(settings.LOG_LEVEL)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if settings.TEST:
        return logger

    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_dir / f"{name}.log",
        maxBytes=1024 * 1024,  # 1MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


def configure_production_logging(log_dir: str = "/var/log/zapshift"):
    """Split app and error logs with process ids, for deployed instances."""

    Path(log_dir).mkdir(parents=True, exist_ok=True)

    def rotating(filename: str, level: str) -> dict:
        return {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": f"{log_dir}/{filename}",
            "maxBytes": 1024 * 1024 * 10,  # 10MB
            "backupCount": 5,
            "formatter": "verbose",
            "level": level,
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "verbose": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - [%(process)d] - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                }
            },
            "handlers": {
                "file": rotating("app.log", "INFO"),
                "error": rotating("error.log", "ERROR"),
            },
            "loggers": {
                "zapshift": {
                    "handlers": ["file", "error"],
                    "level": settings.LOG_LEVEL,
                    "propagate": True,
                },
            },
        }
    )
