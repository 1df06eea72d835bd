# Path: api/schemas.py
# Purpose: Define request and response bodies for the HTTP API.
# Layer: api.
# Details: Converts between pydantic payloads and core dataclasses at the API boundary.

from __future__ import annotations

import base64
import binascii
import io
from datetime import date, datetime
from typing import Dict, List, Optional

from PIL import Image
from pydantic import BaseModel, Field

from core.errors import InvalidFilter
from core.models.domain import Clip, DatedClips, Server, UploadRecord


class ClipOut(BaseModel):
    id: int
    name: str
    is_image: bool
    is_file: bool
    phash: int
    description: str
    created_at: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    has_thumbnail: bool = False

    @classmethod
    def from_clip(cls, clip: Clip) -> "ClipOut":
        return cls(
            id=clip.id,
            name=clip.name,
            is_image=clip.is_image,
            is_file=clip.is_file,
            phash=clip.phash,
            description=clip.description,
            created_at=clip.created_at,
            tags=sorted(clip.tags),
            has_thumbnail=bool(clip.thumbnail),
        )


class DateGroupOut(BaseModel):
    day: date
    clips: List[ClipOut]

    @classmethod
    def from_groups(cls, groups: DatedClips) -> List["DateGroupOut"]:
        return [cls(day=day, clips=[ClipOut.from_clip(clip) for clip in clips]) for day, clips in groups]


class SearchRequest(BaseModel):
    """Search body; omitted fields impose no constraint."""

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    tags: Optional[List[str]] = None
    server_ids: Optional[List[int]] = None
    image_base64: Optional[str] = Field(default=None, description="Query image encoded as base64.")
    threshold: Optional[int] = Field(default=None, description="Maximum Hamming distance for image matches.")
    grouped: bool = False


class IngestRequest(BaseModel):
    paths: List[str]
    tags: List[str] = Field(default_factory=list)
    description: str = ""


class ClipUpdate(BaseModel):
    """Partial update; a provided ``tags`` list replaces the whole tag set."""

    description: Optional[str] = None
    tags: Optional[List[str]] = None


class ServerIn(BaseModel):
    name: str
    protocol: str
    settings: Dict[str, str] = Field(default_factory=dict)
    upload_enabled: bool = True
    output_format_id: Optional[int] = None

    def to_server(self) -> Server:
        return Server(
            name=self.name,
            protocol=self.protocol,
            settings=dict(self.settings),
            upload_enabled=self.upload_enabled,
            output_format_id=self.output_format_id,
        )


class ServerOut(ServerIn):
    id: int

    @classmethod
    def from_server(cls, server: Server) -> "ServerOut":
        return cls(
            id=server.id,
            name=server.name,
            protocol=server.protocol,
            settings=server.settings,
            upload_enabled=server.upload_enabled,
            output_format_id=server.output_format_id,
        )


class ProtocolOut(BaseModel):
    name: str
    description: str


class UploadOut(BaseModel):
    id: int
    clip_id: int
    server_id: int
    url: str
    uploaded_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: UploadRecord) -> "UploadOut":
        return cls(
            id=record.id,
            clip_id=record.clip_id,
            server_id=record.server_id,
            url=record.url,
            uploaded_at=record.uploaded_at,
        )


def decode_image(payload: str) -> Image.Image:
    """Decode a base64 image payload, raising InvalidFilter for bad input."""

    try:
        raw = base64.b64decode(payload, validate=True)
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            return img.copy()
    except (binascii.Error, ValueError, OSError) as exc:
        raise InvalidFilter(f"query image could not be decoded: {exc}", operation="search") from exc
