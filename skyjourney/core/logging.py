import logging

from skyjourney.core.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str | None = None):
    """Configure root logging for the API process."""
    logging.basicConfig(
        level=getattr(logging, level or settings.LOG_LEVEL, logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
