"""Console logging for the serp_rank package."""

import logging
import os

_ROOT = "serp_rank"
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _level(name: str) -> int:
    return getattr(logging, (name or "INFO").upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the ``serp_rank`` namespace.

    The console handler lives on the namespace logger and is attached once;
    module loggers inherit its level.
    """
    root = logging.getLogger(_ROOT)

    if not root.handlers:
        root.setLevel(_level(os.getenv("LOG_LEVEL", "INFO")))
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)

    return logging.getLogger(f"{_ROOT}.{name}")


def set_level(level: str) -> None:
    logging.getLogger(_ROOT).setLevel(_level(level))
