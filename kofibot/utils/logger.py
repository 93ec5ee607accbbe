"""Process-wide logger for the SMS assistant.

Everything logs through the ``kofibot`` logger; modules may ask for a child
(``get_logger("ingest")``) so records show which stage emitted them.
"""
import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger("kofibot")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    logger.propagate = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if name:
        return logger.getChild(name)
    return logger
