import logging
import logging.config

from app.config import settings

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Configure stdlib logging for the API process.

    Idempotent: repeated calls (reloads, test imports) keep a single handler.
    """
    global _configured
    if _configured:
        return

    resolved = (level or settings.log_level or "INFO").upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {"level": resolved, "handlers": ["console"]},
            "loggers": {
                # SQL echo is noisy at INFO
                "sqlalchemy.engine": {"level": "WARNING"},
                "uvicorn.access": {"level": "WARNING"},
            },
        }
    )
    _configured = True
