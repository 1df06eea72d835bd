# Path: core/models/domain.py
# Purpose: Define domain models shared across ingestion, search, grouping, and uploads.
# Layer: core/models.
# Details: Lightweight dataclasses simplify passing records between the API, scripts, and core services.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from PIL import Image

DEFAULT_DISTANCE_THRESHOLD = 15


@dataclass
class Clip:
    """A persisted captured item (image or file reference) with metadata.

    ``id`` is assigned by the store on insert; ``0`` marks a transient clip.
    ``phash`` is an unsigned 64-bit perceptual hash, ``0`` when no hash was computed.
    ``tags`` is only populated when explicitly requested. ``path`` is the local source
    file for file-backed clips.
    """

    id: int = 0
    name: str = ""
    is_image: bool = False
    is_file: bool = False
    phash: int = 0
    thumbnail: bytes = b""
    description: str = ""
    created_at: Optional[datetime] = None
    tags: Set[str] = field(default_factory=set)
    path: Optional[Path] = None


@dataclass
class RawClip:
    """Candidate item produced by a capture source, not yet persisted."""

    name: str
    is_image: bool
    is_file: bool
    image: Optional[Image.Image] = None
    path: Optional[Path] = None


@dataclass
class Tag:
    """Entry of the tag directory."""

    id: int
    name: str


@dataclass
class FilterCriteria:
    """Sparse retrieval filter; ``None`` on a field means no constraint.

    An empty ``server_ids`` or ``tag_names`` set is a present constraint that matches nothing.
    """

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    server_ids: Optional[Set[int]] = None
    tag_names: Optional[Set[str]] = None
    query_image: Optional[Image.Image] = None
    distance_threshold: int = DEFAULT_DISTANCE_THRESHOLD


@dataclass
class Server:
    """Upload destination configured with a registered protocol."""

    id: int = 0
    name: str = ""
    protocol: str = ""
    settings: Dict[str, str] = field(default_factory=dict)
    upload_enabled: bool = True
    output_format_id: Optional[int] = None


@dataclass
class UploadRecord:
    """Provenance row linking a clip to the server it was uploaded to."""

    id: int
    clip_id: int
    server_id: int
    url: str
    uploaded_at: Optional[datetime] = None


DatedClips = List[Tuple[date, List[Clip]]]
