"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; this only wires handlers.
"""

import logging.config

from comanda.core.config import settings


def configure_logging() -> None:
    """Install a console handler for the ``comanda`` loggers."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "comanda": {
                    "handlers": ["console"],
                    "level": settings.LOG_LEVEL.upper(),
                    "propagate": False,
                },
            },
        }
    )
