# Path: core/uploads/__init__.py
# Purpose: Provide upload protocols, uploaders, and server management.
# Layer: core/uploads.
# Details: Exposes the protocol interfaces, the local directory protocol, and ServerService.

from .base import Uploader, UploadProtocol
from .local import LocalDirectoryProtocol, LocalDirectoryUploader
from .servers import ServerService

__all__ = [
    "Uploader",
    "UploadProtocol",
    "LocalDirectoryProtocol",
    "LocalDirectoryUploader",
    "ServerService",
]
