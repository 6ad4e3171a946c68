from __future__ import annotations

import logging

from photocontest.core.config import get_settings


def configure_logging(level: str | None = None) -> None:
    logger = logging.getLogger('photocontest')
    logger.setLevel((level or get_settings().log_level).upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
    logger.addHandler(handler)
    logger.propagate = False
