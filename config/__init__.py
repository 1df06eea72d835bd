# Path: config/__init__.py
# Purpose: Package initializer for configuration module.
# Layer: config.
# Details: Exposes settings models and logging setup for application-wide configuration.

from .logging_config import configure_logging
from .settings import AppSettings, HashSettings, ThumbnailSettings

__all__ = ["AppSettings", "HashSettings", "ThumbnailSettings", "configure_logging"]
