# Path: core/models/__init__.py
# Purpose: Package initializer for domain models.
# Layer: core/models.
# Details: Re-exports dataclasses used throughout the archive.

from .domain import (
    DEFAULT_DISTANCE_THRESHOLD,
    Clip,
    DatedClips,
    FilterCriteria,
    RawClip,
    Server,
    Tag,
    UploadRecord,
)

__all__ = [
    "DEFAULT_DISTANCE_THRESHOLD",
    "Clip",
    "DatedClips",
    "FilterCriteria",
    "RawClip",
    "Server",
    "Tag",
    "UploadRecord",
]
