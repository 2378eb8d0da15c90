"""
Logging configuration for socialauth
"""

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_file: Path | None = None, level: int = logging.INFO):
    """Setup socialauth logging with transport library logs suppressed to WARNING"""
    logging.getLogger("curl_cffi").setLevel(logging.WARNING)

    if log_file is not None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    socialauth_logger = logging.getLogger("socialauth")
    socialauth_logger.setLevel(level)
    socialauth_logger.addHandler(handler)
    return handler
