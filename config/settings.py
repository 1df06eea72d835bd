# Path: config/settings.py
# Purpose: Provide typed application configuration models.
# Layer: config.
# Details: Centralizes settings for the clip store, thumbnails, hashing, uploads, and logging.

import os
from pathlib import Path

from pydantic import BaseModel, Field


class ThumbnailSettings(BaseModel):
    """Settings controlling preview bytes stored with image clips."""

    size: int = Field(default=256, gt=0, description="Longest edge of stored thumbnails in pixels.")
    format: str = Field(default="JPEG", description="Pillow format used to encode thumbnails.")
    quality: int = Field(default=85, ge=1, le=100, description="Encoder quality for lossy formats.")


class HashSettings(BaseModel):
    """Settings describing perceptual hashing and similarity matching."""

    hash_size: int = Field(default=8, ge=2, le=8, description="Side of the DCT region; 8 gives a 64-bit hash.")
    default_distance_threshold: int = Field(
        default=15, ge=0, description="Maximum Hamming distance for a clip to match a query image."
    )


class AppSettings(BaseModel):
    """Top-level application settings shared across services and interfaces."""

    database_path: Path = Field(
        default=Path("storage/db/clips.sqlite3"), description="Path to the clip archive database."
    )
    upload_dir: Path = Field(
        default=Path("storage/uploads"), description="Directory used by the default local upload server."
    )
    thumbnail: ThumbnailSettings = Field(default_factory=ThumbnailSettings)
    hashing: HashSettings = Field(default_factory=HashSettings)
    log_level: str = Field(default="INFO", description="Verbosity level for application logs.")

    @classmethod
    def from_env(cls) -> "AppSettings":
        """Instantiate settings, applying CLIPARCHIVE_* environment overrides when present."""

        overrides = {}
        if os.environ.get("CLIPARCHIVE_DB_PATH"):
            overrides["database_path"] = Path(os.environ["CLIPARCHIVE_DB_PATH"])
        if os.environ.get("CLIPARCHIVE_UPLOAD_DIR"):
            overrides["upload_dir"] = Path(os.environ["CLIPARCHIVE_UPLOAD_DIR"])
        if os.environ.get("CLIPARCHIVE_LOG_LEVEL"):
            overrides["log_level"] = os.environ["CLIPARCHIVE_LOG_LEVEL"].upper()
        return cls(**overrides)


__all__ = ["AppSettings", "HashSettings", "ThumbnailSettings"]
