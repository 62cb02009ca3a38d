from __future__ import annotations

import logging
import sys

LOGGER_NAME = "relish_notifier"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def level_for_verbosity(verbose: int) -> int:
    """0 (or less) -> WARNING, 1 -> INFO, 2+ -> DEBUG."""
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(verbose: int, stream=None) -> logging.Logger:
    """
    What it does:
    - Configures the package logger to write to stderr at the level implied by -v.

    Behavior:
    - Replaces the handler installed by a previous call, so calling it twice is safe.
    - Does not touch the root logger; records still propagate to it.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level_for_verbosity(verbose))

    for h in list(logger.handlers):
        if getattr(h, "_relish_notifier", False):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._relish_notifier = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
