# Path: api/app.py
# Purpose: Expose a FastAPI application for clip ingestion, retrieval, and uploads.
# Layer: api.
# Details: Thin routes delegating to ClipArchive; archive errors map onto HTTP status codes.

import logging
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Union

from config import AppSettings
from core.archive import ClipArchive
from core.capture.sources import FileDropSource
from core.errors import ClipArchiveError, ConstraintViolation, InvalidFilter, NotFound, StoreUnavailable, UploadFailed
from core.models.domain import FilterCriteria

from .schemas import (
    ClipOut,
    ClipUpdate,
    DateGroupOut,
    IngestRequest,
    ProtocolOut,
    SearchRequest,
    ServerIn,
    ServerOut,
    UploadOut,
    decode_image,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFound: 404,
    InvalidFilter: 422,
    UploadFailed: 422,
    ConstraintViolation: 409,
    StoreUnavailable: 503,
}


def status_for(exc: ClipArchiveError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status
    return 500


def create_app(archive: Optional[ClipArchive] = None, settings: Optional[AppSettings] = None):  # type: ignore[override]
    """Create a FastAPI app instance backed by ``archive`` (opened from settings when omitted)."""

    from fastapi import FastAPI, Query, Request, Response
    from fastapi.responses import JSONResponse

    if archive is None:
        archive = ClipArchive.from_settings(settings or AppSettings.from_env())
    files = FileDropSource()

    app = FastAPI(title="Clip Archive API", version="0.1.0")
    app.state.archive = archive

    @app.exception_handler(ClipArchiveError)
    def archive_error(request: Request, exc: ClipArchiveError) -> JSONResponse:
        status = status_for(exc)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"detail": str(exc), "operation": exc.operation})

    @app.get("/health")
    def health() -> Dict[str, str]:
        """Return a simple health status payload."""

        return {"status": "ok"}

    def _respond(criteria: FilterCriteria, grouped: bool) -> Union[List[ClipOut], List[DateGroupOut]]:
        if grouped:
            return DateGroupOut.from_groups(archive.pipeline.search_and_group(criteria))
        return [ClipOut.from_clip(clip) for clip in archive.pipeline.search(criteria)]

    @app.get("/clips")
    def list_clips(
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        tags: Optional[List[str]] = Query(default=None),
        server_ids: Optional[List[int]] = Query(default=None),
        grouped: bool = False,
    ):
        """List clips matching relational filters, newest first."""

        criteria = archive.criteria(
            date_from=date_from,
            date_to=date_to,
            tag_names=set(tags) if tags is not None else None,
            server_ids=set(server_ids) if server_ids is not None else None,
        )
        return _respond(criteria, grouped)

    @app.post("/clips/search")
    def search_clips(payload: SearchRequest):
        """Search with relational filters and an optional query image."""

        fields = {
            "date_from": payload.date_from,
            "date_to": payload.date_to,
            "tag_names": set(payload.tags) if payload.tags is not None else None,
            "server_ids": set(payload.server_ids) if payload.server_ids is not None else None,
        }
        if payload.image_base64:
            fields["query_image"] = decode_image(payload.image_base64)
        if payload.threshold is not None:
            fields["distance_threshold"] = payload.threshold
        return _respond(archive.criteria(**fields), payload.grouped)

    @app.post("/clips", status_code=201)
    def ingest_clips(payload: IngestRequest) -> List[ClipOut]:
        """Ingest local files as clips sharing one description and tag set."""

        raw_clips = files.read(Path(path) for path in payload.paths)
        if not raw_clips:
            raise InvalidFilter("none of the given paths is a readable file", operation="ingest")
        clips = archive.clips.ingest(raw_clips, payload.tags, payload.description)
        return [ClipOut.from_clip(clip) for clip in clips]

    @app.get("/clips/{clip_id}")
    def get_clip(clip_id: int) -> ClipOut:
        return ClipOut.from_clip(archive.clips.find_by_id(clip_id))

    @app.get("/clips/{clip_id}/thumbnail")
    def get_thumbnail(clip_id: int) -> Response:
        clip = archive.clips.find_by_id(clip_id)
        if not clip.thumbnail:
            raise NotFound("clip has no thumbnail", operation="thumbnail", target=clip_id)
        return Response(content=clip.thumbnail, media_type="image/jpeg")

    @app.patch("/clips/{clip_id}")
    def update_clip(clip_id: int, payload: ClipUpdate) -> ClipOut:
        clip = archive.clips.find_by_id(clip_id)
        if payload.description is not None:
            clip.description = payload.description
        if payload.tags is not None:
            clip.tags = set(payload.tags)
        archive.clips.update(clip)
        return ClipOut.from_clip(archive.clips.find_by_id(clip_id))

    @app.delete("/clips/{clip_id}")
    def remove_clip(clip_id: int) -> Dict[str, str]:
        archive.clips.remove(clip_id)
        return {"status": "ok"}

    @app.delete("/clips")
    def clean_clips() -> Dict[str, str]:
        archive.clips.clean()
        return {"status": "ok"}

    @app.post("/clips/{clip_id}/uploads/{server_id}", status_code=201)
    def upload_clip(clip_id: int, server_id: int) -> UploadOut:
        clip = archive.clips.find_by_id(clip_id)
        server = archive.servers.find_by_id(server_id)
        return UploadOut.from_record(archive.servers.upload(clip, server))

    @app.get("/tags")
    def list_tags() -> List[str]:
        return archive.tags.all_names()

    @app.get("/servers")
    def list_servers() -> List[ServerOut]:
        return [ServerOut.from_server(server) for server in archive.servers.get_all()]

    @app.post("/servers", status_code=201)
    def add_server(payload: ServerIn) -> ServerOut:
        return ServerOut.from_server(archive.servers.append(payload.to_server()))

    @app.get("/protocols")
    def list_protocols() -> List[ProtocolOut]:
        return [
            ProtocolOut(name=protocol.name, description=protocol.description)
            for protocol in archive.servers.get_protocols()
        ]

    return app
