"""Logging setup for the quiz account service."""

import logging

from config import LOG_LEVEL

_configured = False


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure the root logger once.

    Args:
        level: Logging level name, e.g. "INFO".
    """
    global _configured
    if _configured:
        return
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    _configured = True
