# logging_config.py
import logging

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = LOG_LEVEL) -> None:
    """
    Sends every logger of the movie API to stderr in one format.
    Does nothing if the root logger already has a handler (uvicorn, pytest).
    """
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
