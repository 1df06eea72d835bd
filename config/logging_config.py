# Path: config/logging_config.py
# Purpose: Configure standard library logging for scripts and the HTTP API.
# Layer: config.
# Details: Installs a single stderr handler on the root logger and quiets chatty third-party loggers.

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Set the root log level and attach a stderr handler if none is present."""

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    if not any(isinstance(h, logging.StreamHandler) and h.stream == sys.stderr
               for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(handler)

    # Pillow logs every plugin import at DEBUG.
    logging.getLogger("PIL").setLevel(logging.WARNING)
    return root_logger
