import logging
from logging.config import dictConfig

from src.config import Settings


def setup_logging(settings: Settings):
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "colored",
        },
    }
    if settings.LOG_FILE:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": settings.LOG_FILE,
            "formatter": "default",
        }

    LOGGING_CONFIG = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "colored": {
                "()": "colorlog.ColoredFormatter",
                "format": "%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "log_colors": {
                    "DEBUG": "cyan",
                    "INFO": "green",
                    "WARNING": "yellow",
                    "ERROR": "red",
                    "CRITICAL": "bold_red",
                },
            },
        },
        "handlers": handlers,
        "loggers": {
            "docrelay": {
                "handlers": list(handlers),
                "level": settings.LOG_LEVEL.upper(),
                "propagate": False,
            },
            "uvicorn": {
                "level": "WARNING",
            },
            "watchfiles": {
                "level": "WARNING",
            },
        },
    }

    dictConfig(LOGGING_CONFIG)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("watchfiles").setLevel(logging.WARNING)
