# Path: core/uploads/local.py
# Purpose: Provide a filesystem upload protocol that copies clips into a directory.
# Layer: core/uploads.
# Details: Useful as a default destination and for exercising provenance filters without a network.

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

from core.errors import UploadFailed
from core.models.domain import Clip, Server

from .base import Uploader, UploadProtocol


class LocalDirectoryUploader(Uploader):
    """Write the clip into the target directory.

    Image clips are written as their thumbnail; file clips are copied from their
    source path under their own name.
    """

    def __init__(self, server: Server, directory: Path) -> None:
        super().__init__(server)
        self.directory = directory

    def upload(self, clip: Clip) -> str:
        if clip.thumbnail:
            suffix = self.server.settings.get("suffix", ".jpg")
            target = self._target(clip, f"{Path(clip.name).stem or 'clip'}{suffix}")
            target.write_bytes(clip.thumbnail)
        elif clip.path is not None and clip.path.is_file():
            target = self._target(clip, Path(clip.name).name or clip.path.name)
            shutil.copyfile(clip.path, target)
        else:
            raise UploadFailed(
                "clip has neither a preview nor a readable source file", operation="upload", target=clip.id
            )
        return target.resolve().as_uri()

    def _target(self, clip: Clip, filename: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        return self.directory / f"{clip.id}-{filename}"


class LocalDirectoryProtocol(UploadProtocol):
    """Protocol storing uploads on the local filesystem.

    Servers pick their directory with ``settings["directory"]``; servers without one
    fall back to ``default_directory`` when it is configured.
    """

    name = "local"
    description = "Copy clips into a local directory."

    def __init__(self, default_directory: Optional[Path] = None) -> None:
        self.default_directory = Path(default_directory) if default_directory is not None else None
        self.required_settings = set() if self.default_directory is not None else {"directory"}

    def create_uploader(self, server: Server) -> Uploader:
        self.validate(server)
        directory = server.settings.get("directory")
        target = Path(directory).expanduser() if directory else self.default_directory
        return LocalDirectoryUploader(server, target)
