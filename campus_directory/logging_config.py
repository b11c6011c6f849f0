"""Logging setup shared by the web app and the command line entry point."""

import logging

from .config import LOG_LEVEL

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure the root logger once.

    Calling this again is harmless: ``basicConfig`` leaves an already
    configured root logger untouched.
    """
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=_FORMAT)
