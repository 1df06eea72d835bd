# Path: core/capture/__init__.py
# Purpose: Package initializer for capture sources.
# Layer: core/capture.
# Details: Exposes clipboard and file-drop readers producing RawClip items.

from .sources import SUPPORTED_EXTENSIONS, ClipboardSource, FileDropSource, is_image_path

__all__ = ["SUPPORTED_EXTENSIONS", "ClipboardSource", "FileDropSource", "is_image_path"]
