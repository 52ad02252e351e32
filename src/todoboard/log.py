"""Logging setup."""

import logging

from todoboard.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once for the server and the CLI.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ...). Defaults to the
            ``log_level`` setting.
    """
    level_name = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
