# Path: core/search/pipeline.py
# Purpose: Orchestrate retrieval by combining the filter compiler, perceptual matching, and tag hydration.
# Layer: core/search.
# Details: Results keep the compiler's id-descending order, which the date grouper relies on.

from __future__ import annotations

import logging
from typing import List, Optional

from core.clips.associations import AssociationManager
from core.clips.grouping import group_by_creation_date
from core.clips.repository import clip_from_row
from core.models.domain import Clip, DatedClips, FilterCriteria
from core.store.sqlite_store import ClipStore

from .filters import FilterCompiler
from .matching import PerceptualMatchFilter

logger = logging.getLogger(__name__)


class ClipSearchPipeline:
    """High-level service bridging API/CLI layers with the clip store."""

    def __init__(
        self,
        store: ClipStore,
        compiler: FilterCompiler,
        matcher: PerceptualMatchFilter,
        associations: AssociationManager,
    ) -> None:
        self.store = store
        self.compiler = compiler
        self.matcher = matcher
        self.associations = associations

    def search(self, criteria: Optional[FilterCriteria] = None, with_tags: bool = True) -> List[Clip]:
        """
        Return clips matching ``criteria``, newest id first.

        External calls:
        - core/search/filters.py::FilterCompiler.compile - builds the relational query.
        - core/search/matching.py::PerceptualMatchFilter.filter - narrows by phash distance when a query image is set.
        - core/clips/associations.py::AssociationManager.tags_of - hydrates tag names per clip.
        """

        criteria = criteria or FilterCriteria()
        statement = self.compiler.compile(criteria)

        # Hash the query before touching the store so a bad image fails fast.
        query_hash = None
        if criteria.query_image is not None:
            query_hash = self.matcher.hash_query(criteria.query_image)

        rows = self.store.execute(statement, operation="search").rows
        clips = [clip_from_row(row) for row in rows]
        candidate_count = len(clips)

        if query_hash is not None:
            clips = self.matcher.filter(clips, query_hash, criteria.distance_threshold)

        if with_tags:
            for clip in clips:
                clip.tags = self.associations.tags_of(clip.id)

        logger.debug("Search returned %d of %d candidate(s)", len(clips), candidate_count)
        return clips

    def search_and_group(self, criteria: Optional[FilterCriteria] = None) -> DatedClips:
        """Search, then bucket the ordered result into same-day runs."""

        return group_by_creation_date(self.search(criteria))
