# Path: core/archive.py
# Purpose: Wire the clip store, repositories, search pipeline, and server service into one facade.
# Layer: core.
# Details: API and script layers build a ClipArchive instead of assembling services by hand.

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from core.clips import AssociationManager, ClipRepository, TagDirectory
from core.hashing.phash import ImageHashHasher, PerceptualHasher
from core.models.domain import DEFAULT_DISTANCE_THRESHOLD, FilterCriteria
from core.search import ClipSearchPipeline, FilterCompiler, PerceptualMatchFilter
from core.store.sqlite_store import MEMORY_PATH, ClipStore
from core.uploads import LocalDirectoryProtocol, ServerService, UploadProtocol

if TYPE_CHECKING:
    from config import AppSettings


class ClipArchive:
    """Facade exposing every archive service over a single shared store.

    Attributes:
    - ``tags``: tag directory.
    - ``associations``: clip-tag link set.
    - ``clips``: clip repository (ingest, find, update, remove, clean).
    - ``pipeline``: search and date grouping.
    - ``servers``: upload servers, protocols, and provenance.
    """

    def __init__(
        self,
        store: ClipStore,
        hasher: Optional[PerceptualHasher] = None,
        thumbnail_size: int = 256,
        thumbnail_format: str = "JPEG",
        thumbnail_quality: int = 85,
        default_distance_threshold: int = DEFAULT_DISTANCE_THRESHOLD,
        protocols: Optional[List[UploadProtocol]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.hasher = hasher or ImageHashHasher()
        self.default_distance_threshold = default_distance_threshold

        self.tags = TagDirectory(store)
        self.associations = AssociationManager(store)
        self.clips = ClipRepository(
            store,
            self.tags,
            self.associations,
            self.hasher,
            thumbnail_size=thumbnail_size,
            thumbnail_format=thumbnail_format,
            thumbnail_quality=thumbnail_quality,
            clock=clock,
        )
        self.pipeline = ClipSearchPipeline(
            store,
            FilterCompiler(self.tags),
            PerceptualMatchFilter(self.hasher),
            self.associations,
        )
        self.servers = ServerService(store, protocols or [LocalDirectoryProtocol()], clock=clock)

    @classmethod
    def open(cls, database_path: Path | str = MEMORY_PATH, **kwargs: Any) -> "ClipArchive":
        """Open (or create) the archive database at ``database_path``."""

        return cls(ClipStore(database_path), **kwargs)

    @classmethod
    def from_settings(cls, settings: "AppSettings", **kwargs: Any) -> "ClipArchive":
        """Open the archive described by ``settings``; ``kwargs`` override individual services."""

        kwargs.setdefault("hasher", ImageHashHasher(hash_size=settings.hashing.hash_size))
        kwargs.setdefault("thumbnail_size", settings.thumbnail.size)
        kwargs.setdefault("thumbnail_format", settings.thumbnail.format)
        kwargs.setdefault("thumbnail_quality", settings.thumbnail.quality)
        kwargs.setdefault("default_distance_threshold", settings.hashing.default_distance_threshold)
        kwargs.setdefault("protocols", [LocalDirectoryProtocol(settings.upload_dir)])
        return cls.open(settings.database_path, **kwargs)

    def criteria(self, **fields: Any) -> FilterCriteria:
        """Build filter criteria using the configured default distance threshold."""

        fields.setdefault("distance_threshold", self.default_distance_threshold)
        return FilterCriteria(**fields)

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "ClipArchive":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
