# app/core/logging_config.py

import logging
from logging.config import dictConfig

# Журнал запросов пишется отдельным логгером, чтобы его можно было отключить или перенаправить
ACCESS_LOGGER = "app.access"

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "access": {
            "format": "%(asctime)s - access - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stdout",
        },
        "access_console": {
            "class": "logging.StreamHandler",
            "formatter": "access",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "app": {"handlers": ["console"], "level": "INFO", "propagate": False},
        ACCESS_LOGGER: {"handlers": ["access_console"], "level": "INFO", "propagate": False},
        # Собственный access-лог uvicorn дублирует наш
        "uvicorn.access": {"handlers": [], "level": "WARNING", "propagate": False},
        "uvicorn": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "sqlalchemy.engine": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        "httpx": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        "passlib": {"handlers": ["console"], "level": "ERROR", "propagate": False},
    },
    "root": {
        "level": "WARNING",
        "handlers": ["console"],
    },
}


def setup_logging(level: str | None = None):
    """
    Применяет конфигурацию логирования.
    `level` переопределяет уровень логгеров приложения (например, DEBUG в разработке).
    """
    if level:
        LOGGING_CONFIG["loggers"]["app"]["level"] = level.upper()
    dictConfig(LOGGING_CONFIG)
    logging.getLogger(__name__).debug("Logging configured.")
