# Path: core/capture/sources.py
# Purpose: Turn clipboard contents or dropped files into raw clips ready for ingestion.
# Layer: core/capture.
# Details: One-shot reads with no retry; failures from Pillow or the filesystem propagate to the caller.

from __future__ import annotations

import mimetypes
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import pyperclip
from PIL import Image, ImageGrab

from core.models.domain import RawClip

SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp"}


def is_image_path(path: Path) -> bool:
    """Return True when ``path`` looks like an image by MIME type or extension."""

    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type is not None and mime_type.startswith("image/"):
        return True
    return path.suffix.lower() in SUPPORTED_EXTENSIONS


class FileDropSource:
    """Build file-backed raw clips from local paths."""

    def read_path(self, path: Path) -> Optional[RawClip]:
        """Return a raw clip for an existing local file, None for anything else."""

        path = Path(path).expanduser()
        if not path.is_file():
            return None
        return RawClip(name=path.name, is_image=is_image_path(path), is_file=True, path=path.resolve())

    def read(self, paths: Iterable[Path]) -> List[RawClip]:
        clips: List[RawClip] = []
        for path in paths:
            clip = self.read_path(Path(path))
            if clip is not None:
                clips.append(clip)
        return clips


class ClipboardSource:
    """Read the current clipboard through Pillow's ImageGrab.

    An image on the clipboard becomes a single in-memory clip named after the
    capture time; a list of file names becomes one file clip per local file.
    Text such as an upload URL can be put back with :meth:`write_text`.
    """

    def __init__(
        self,
        grab: Callable[[], object] = ImageGrab.grabclipboard,
        clock: Callable[[], datetime] = datetime.now,
        files: Optional[FileDropSource] = None,
        copy: Callable[[str], None] = pyperclip.copy,
    ) -> None:
        self._grab = grab
        self._copy = copy
        self._clock = clock
        self._files = files or FileDropSource()

    def read(self) -> List[RawClip]:
        content = self._grab()
        if isinstance(content, Image.Image):
            name = f"{self._clock().strftime('%Y%m%d%H%M%S')}.png"
            return [RawClip(name=name, is_image=True, is_file=False, image=content)]
        if isinstance(content, list):
            return self._files.read(Path(item) for item in content)
        return []

    def write_text(self, text: str) -> None:
        self._copy(text)
