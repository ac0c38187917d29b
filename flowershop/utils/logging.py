# flowershop/utils/logging.py
import logging
import sys

from flowershop.utils.settings import LOG_LEVEL

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_level: str = LOG_LEVEL) -> logging.Logger:
    """
    Configure process-wide logging for the order service.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format=_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("flowershop").setLevel(numeric_level)

    # third-party noise
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("celery").setLevel(logging.WARNING)

    return logging.getLogger("flowershop")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
