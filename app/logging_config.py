import logging
import sys

from app.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(level: str | None = None) -> None:
    """
    Configure the root logger once for the whole process.
    Safe to call more than once; existing handlers are replaced.
    """
    root = logging.getLogger()
    root.setLevel((level or LOG_LEVEL).upper())

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
