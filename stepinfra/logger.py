import logging
from stepinfra.config import LOG_LEVEL

logger = logging.getLogger("stepinfra")
logger.setLevel(LOG_LEVEL)
logger.propagate = False

if not logger.handlers:
    _console = logging.StreamHandler()
    _console.setLevel(LOG_LEVEL)
    _console.setFormatter(logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    ))
    logger.addHandler(_console)


def get_logger(area: str) -> logging.Logger:
    """Child logger sharing the package handler, e.g. ``stepinfra.validation``."""
    return logger.getChild(area)
