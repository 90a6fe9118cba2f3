"""
Logging Setup

Configures loguru sinks from LoggingSettings.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import settings, LoggingSettings


def configure_logging(config: Optional[LoggingSettings] = None) -> None:
    """
    Replace the default loguru sink with the configured ones.

    Always logs to stderr; also logs to a rotating file when a file path
    is configured.
    """
    config = config or settings.logging
    level = config.level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level)

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(str(log_path), level=level, rotation=config.rotation, enqueue=True)

    logger.debug(f"Logging configured at {level}")
