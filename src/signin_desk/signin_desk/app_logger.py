from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER = "signin_desk"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    level_name = (level or os.getenv("SIGNIN_DESK_LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(resolved)

    # Avoid duplicate console handlers when the app factory runs more than once.
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(ch)
    for h in logger.handlers:
        h.setLevel(resolved)

    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    base = logging.getLogger(ROOT_LOGGER)
    return base.getChild(name) if name else base
