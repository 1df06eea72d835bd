# Path: core/clips/__init__.py
# Purpose: Package initializer for clip persistence and tagging.
# Layer: core/clips.
# Details: Exposes the repository, association manager, tag directory, and date grouper.

from .associations import AssociationManager
from .grouping import group_by_creation_date
from .repository import ClipRepository, clip_from_row
from .tag_directory import TagDirectory

__all__ = [
    "AssociationManager",
    "ClipRepository",
    "TagDirectory",
    "clip_from_row",
    "group_by_creation_date",
]
