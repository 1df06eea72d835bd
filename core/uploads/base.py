# Path: core/uploads/base.py
# Purpose: Define pluggable upload protocol and uploader interfaces.
# Layer: core/uploads.
# Details: A protocol is selected by name from a server record and builds an uploader bound to that server.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Set

from core.errors import UploadFailed
from core.models.domain import Clip, Server


class Uploader(ABC):
    """Transport bound to a single server configuration."""

    def __init__(self, server: Server) -> None:
        self.server = server

    @abstractmethod
    def upload(self, clip: Clip) -> str:
        """Send ``clip`` to the server and return the location it was stored at."""


class UploadProtocol(ABC):
    """Factory for uploaders speaking one transport."""

    name: str
    description: str
    required_settings: Set[str] = set()

    def can_handle(self, protocol_name: str) -> bool:
        return protocol_name == self.name

    def validate(self, server: Server) -> None:
        """Raise UploadFailed when ``server`` lacks settings this protocol needs."""

        missing = sorted(key for key in self.required_settings if not server.settings.get(key))
        if missing:
            raise UploadFailed(
                f"missing settings for {self.name}: {', '.join(missing)}", operation="validate_server", target=server.name
            )

    @abstractmethod
    def create_uploader(self, server: Server) -> Uploader:
        """Return an uploader configured for ``server``."""
