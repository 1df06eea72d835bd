# Path: core/clips/repository.py
# Purpose: CRUD over clip records, including batch ingestion and tag replacement.
# Layer: core/clips.
# Details: Multi-statement writes run inside one store transaction so failures leave no partial state.

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from PIL import Image

from core.errors import NotFound
from core.hashing.phash import PerceptualHasher, to_signed64, to_unsigned64
from core.hashing.thumbnails import thumbnailize
from core.models.domain import Clip, RawClip
from core.store.sqlite_store import ClipStore

from .associations import AssociationManager
from .tag_directory import TagDirectory

logger = logging.getLogger(__name__)

INSERT_CLIP_SQL = """
    INSERT INTO clips (name, is_image, is_file, phash, thumbnail, description, created_at, source_path)
    VALUES (:name, :is_image, :is_file, :phash, :thumbnail, :description, :created_at, :source_path)
"""


class ClipRepository:
    """Persist, fetch, mutate, and delete clips.

    Ingestion computes thumbnails and perceptual hashes, stamps ``created_at`` from
    ``clock`` (truncated to whole seconds), and links every clip of the batch to the
    same resolved tag ids.
    """

    def __init__(
        self,
        store: ClipStore,
        tags: TagDirectory,
        associations: AssociationManager,
        hasher: PerceptualHasher,
        thumbnail_size: int = 256,
        thumbnail_format: str = "JPEG",
        thumbnail_quality: int = 85,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._tags = tags
        self._associations = associations
        self._hasher = hasher
        self._thumbnail_size = thumbnail_size
        self._thumbnail_format = thumbnail_format
        self._thumbnail_quality = thumbnail_quality
        self._clock = clock

    # Creation
    def ingest(
        self,
        items: Iterable[RawClip],
        tags: Iterable[str] = (),
        description: str = "",
        create_missing_tags: bool = True,
    ) -> List[Clip]:
        """Persist a batch of raw items and tag each of them.

        Tags are resolved once for the whole batch. Returns the stored clips with
        ids populated; nothing is stored if any item fails.
        """

        items = list(items)
        clips: List[Clip] = []
        statement = self._store.prepare(INSERT_CLIP_SQL)

        with self._store.transaction():
            tag_ids = self._tags.resolve(tags, create_if_missing=create_missing_tags)
            for raw in items:
                clip = self._build_clip(raw, description)
                statement.bind("name", clip.name)
                statement.bind("is_image", int(clip.is_image))
                statement.bind("is_file", int(clip.is_file))
                statement.bind("phash", to_signed64(clip.phash))
                statement.bind("thumbnail", sqlite3.Binary(clip.thumbnail))
                statement.bind("description", clip.description)
                statement.bind("created_at", _format_timestamp(clip.created_at))
                statement.bind("source_path", str(clip.path) if clip.path is not None else None)
                result = self._store.execute(statement, operation="ingest", target=clip.name)
                clip.id = result.last_insert_id

                self._associations.link(clip.id, tag_ids)
                clip.tags = self._associations.tags_of(clip.id)
                clips.append(clip)

        logger.info("Ingested %d clip(s) with %d tag(s)", len(clips), len(set(tag_ids)))
        return clips

    def _build_clip(self, raw: RawClip, description: str) -> Clip:
        clip = Clip(
            name=raw.name,
            is_image=raw.is_image,
            is_file=raw.is_file,
            description=description,
            created_at=self._clock().replace(microsecond=0),
            path=raw.path,
        )
        if not raw.is_image:
            return clip

        image = _load_image(raw)
        if image is None:
            logger.warning("Could not read image for %s; storing without hash", raw.name)
            return clip
        clip.thumbnail = thumbnailize(
            image,
            size=self._thumbnail_size,
            fmt=self._thumbnail_format,
            quality=self._thumbnail_quality,
        )
        clip.phash = self._hasher.hash(image)
        return clip

    # Reads
    def find_by_id(self, clip_id: int) -> Clip:
        """Return the clip with ``clip_id`` and its tags, or raise :class:`NotFound`."""

        rows = self._store.run(
            "SELECT * FROM clips WHERE id = :id",
            {"id": clip_id},
            operation="find_by_id",
            target=clip_id,
        ).rows
        if not rows:
            raise NotFound("no clip with this id", operation="find_by_id", target=clip_id)
        clip = clip_from_row(rows[0])
        self.fill_tags(clip)
        return clip

    def fill_tags(self, clip: Clip) -> Clip:
        clip.tags = self._associations.tags_of(clip.id)
        return clip

    def count(self) -> int:
        rows = self._store.run("SELECT COUNT(*) AS total FROM clips", operation="count").rows
        return int(rows[0]["total"])

    # Mutation
    def update(self, clip: Clip) -> None:
        """Overwrite the description and replace the full tag set of ``clip``."""

        with self._store.transaction():
            result = self._store.run(
                "UPDATE clips SET description = :description WHERE id = :id",
                {"description": clip.description, "id": clip.id},
                operation="update",
                target=clip.id,
            )
            if result.rowcount == 0:
                raise NotFound("no clip with this id", operation="update", target=clip.id)

            self._associations.unlink_all(clip.id)
            tag_ids = self._tags.resolve(sorted(clip.tags), create_if_missing=True)
            self._associations.link(clip.id, tag_ids)

        logger.info("Updated clip %d (%d tag(s))", clip.id, len(set(tag_ids)))

    # Deletion
    def remove(self, clip_id: int) -> None:
        """Delete a clip with its associations and upload records; unknown ids are ignored."""

        params = {"clip_id": clip_id}
        with self._store.transaction():
            self._store.run("DELETE FROM uploads WHERE clip_id = :clip_id", params, "remove", clip_id)
            self._associations.unlink_all(clip_id)
            result = self._store.run("DELETE FROM clips WHERE id = :clip_id", params, "remove", clip_id)

        if result.rowcount:
            logger.info("Removed clip %d", clip_id)

    def clean(self) -> None:
        """Delete every clip, association, and upload record."""

        with self._store.transaction():
            self._store.run("DELETE FROM uploads", operation="clean")
            self._store.run("DELETE FROM clips_tags", operation="clean")
            result = self._store.run("DELETE FROM clips", operation="clean")

        logger.info("Cleaned archive (%d clip(s) removed)", max(result.rowcount, 0))


def clip_from_row(row: sqlite3.Row) -> Clip:
    """Convert a ``clips`` row into a :class:`Clip` without tags."""

    return Clip(
        id=int(row["id"]),
        name=str(row["name"]),
        is_image=bool(row["is_image"]),
        is_file=bool(row["is_file"]),
        phash=to_unsigned64(int(row["phash"] or 0)),
        thumbnail=bytes(row["thumbnail"] or b""),
        description=str(row["description"] or ""),
        created_at=datetime.fromisoformat(row["created_at"]),
        path=Path(row["source_path"]) if row["source_path"] else None,
    )


def _format_timestamp(value: datetime) -> str:
    return value.isoformat(sep=" ", timespec="seconds")


def _load_image(raw: RawClip) -> Optional[Image.Image]:
    """Return the in-memory image or open the backing file, None if unreadable."""

    if raw.image is not None:
        return raw.image
    if raw.path is None:
        return None
    try:
        with Image.open(raw.path) as img:
            img.load()
            return img.copy()
    except OSError:
        return None
