"""
Logging setup for processes that run the status watch client.

Library modules only create module loggers; the entry point calls
configure_logging() once to attach handlers.
"""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(
    level: Optional[str] = None, log_file: Optional[str] = None
) -> None:
    """Configure root logging to stdout and, optionally, a file.

    Args:
        level: Log level name, defaults to STATUS_CLIENT_LOG_LEVEL or INFO
        log_file: Log file path, defaults to STATUS_CLIENT_LOG_FILE (unset = no file)
    """
    level_name = (level or os.getenv("STATUS_CLIENT_LOG_LEVEL", "INFO")).upper()
    log_file = log_file or os.getenv("STATUS_CLIENT_LOG_FILE")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a"))

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    # Keep transport libraries quiet unless debugging
    if level_name != "DEBUG":
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
        logging.getLogger("aiohttp").setLevel(logging.WARNING)
