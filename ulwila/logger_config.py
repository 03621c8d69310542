from __future__ import annotations

import logging
import sys

LOGGER_NAME = "ulwila"

logger = logging.getLogger(LOGGER_NAME)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
logger.setLevel(logging.WARNING)


def set_verbosity(verbose: bool) -> None:
    """Switch the package logger between WARNING and DEBUG output."""
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
