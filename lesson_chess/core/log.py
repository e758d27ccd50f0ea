"""Logging setup shared by every entrypoint (modules themselves only call logging.getLogger(__name__))."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Install a single stream handler on the package logger. Calling it again only changes the level."""
    package_logger = logging.getLogger("lesson_chess")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
