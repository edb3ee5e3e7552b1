"""
Logging setup for f1rag entry points.

Library modules log through ``logging.getLogger(__name__)`` and never
attach handlers themselves; the CLI calls ``setup_logging`` once so that
everything under the ``f1rag`` namespace reaches stderr.
"""

import logging
import sys

ROOT_LOGGER = "f1rag"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = "INFO", verbose: bool = False) -> logging.Logger:
    """
    Route f1rag log records to stderr at the requested level.

    Calling it again only changes the level; the handler is attached once.

    Args:
        level: Level name from the config (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        verbose: Force DEBUG regardless of ``level``

    Returns:
        The package root logger
    """
    logger = logging.getLogger(ROOT_LOGGER)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    logger.setLevel(logging.DEBUG if verbose else getattr(logging, level.upper()))
    return logger
