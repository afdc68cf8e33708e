import logging
from logging.config import dictConfig


def configure_logging(level: str = "INFO") -> None:
    """One console handler on the root logger; create_app() calls this with LOG_LEVEL."""
    level = level.upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                }
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                # request lines come from our own middleware
                "uvicorn.access": {"level": "WARNING"},
            },
        }
    )
    logging.getLogger(__name__).info("Logging configured", extra={"level": level})
