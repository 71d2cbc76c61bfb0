"""Logging setup.

The engine itself only emits through module loggers; applications embedding
it call ``setup_logging()`` once at startup to attach a handler.
"""

import logging
import sys

from tridchess.settings import get_settings


def setup_logging(level: str | None = None) -> None:
    """Configure logging for the engine.

    Args:
        level: Log level name; defaults to the configured ``log_level``
    """
    level = (level or get_settings().log_level).upper()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    engine_logger = logging.getLogger("tridchess")
    engine_logger.setLevel(level)
    if not engine_logger.handlers:
        engine_logger.addHandler(console_handler)
