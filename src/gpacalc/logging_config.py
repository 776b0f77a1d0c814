from __future__ import annotations

import logging
from typing import Optional

from gpacalc.config.settings import settings


def init_logging(level: Optional[str] = None) -> None:
    """Attach one stream handler to the package logger."""
    logger = logging.getLogger("gpacalc")
    logger.setLevel(getattr(logging, (level or settings.log_level).upper(), logging.WARNING))
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)
